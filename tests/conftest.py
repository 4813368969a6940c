"""Shared test fixtures and helpers."""

import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("REDIS_URL", None)

from datetime import date, timedelta  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from autologic import email_service, storage  # noqa: E402
from autologic.database import Base, SessionLocal, engine  # noqa: E402
from autologic.main import app  # noqa: E402
from autologic.models import Booking, Service, User  # noqa: E402
from autologic.rate_limiter import reset_rate_limits  # noqa: E402
from autologic.security import create_token, hash_password  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    reset_rate_limits()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture outgoing email instead of talking to SMTP/Resend."""
    sent = []

    async def fake_send_email(to, subject, mjml_content, from_address=None):
        sent.append({"to": to, "subject": subject, "body": mjml_content})
        return {"id": f"email-{len(sent)}"}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


class FakeR2:
    def __init__(self):
        self.objects = {}
        self.deleted = []

    def put_object(self, Bucket, Key, Body, ContentType, CacheControl=None):
        self.objects[Key] = {"body": Body, "content_type": ContentType}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        self.deleted.append(Key)

    def delete_objects(self, Bucket, Delete):
        for item in Delete["Objects"]:
            self.delete_object(Bucket, item["Key"])


@pytest.fixture
def r2(monkeypatch):
    fake = FakeR2()
    monkeypatch.setattr(storage, "get_r2_client", lambda: fake)
    return fake


# ----------------------------------------------------------------------
# Factories
# ----------------------------------------------------------------------


def make_user(db, role: str = "customer", email: Optional[str] = None, **overrides) -> User:
    user = User(
        first_name=overrides.pop("first_name", role.capitalize()),
        last_name=overrides.pop("last_name", "Tester"),
        email=email or f"{role}-{db.query(User).count() + 1}@example.com",
        phone=overrides.pop("phone", "+966501234567"),
        password_hash=hash_password(PASSWORD),
        role=role,
        **overrides,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_service(db, **overrides) -> Service:
    values = {
        "name": "Oil Change",
        "name_ar": "تغيير الزيت",
        "description": "Engine oil and filter replacement",
        "description_ar": "تغيير زيت المحرك والفلتر",
        "price": 150.0,
        "duration": 1,
        "category": "oil",
        "images": [],
        "tags": ["oil"],
        "is_active": True,
        "is_popular": False,
    }
    values.update(overrides)
    service = Service(**values)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def future_day(days: int = 3) -> date:
    return date.today() + timedelta(days=days)


def make_booking(db, customer: User, service: Service, **overrides) -> Booking:
    values = {
        "customer_id": customer.id,
        "service_id": service.id,
        "appointment_date": future_day(),
        "appointment_time": "10:00",
        "status": "pending",
        "priority": "medium",
        "car": {"make": "Toyota", "model": "Camry", "year": 2020},
        "issue": {"description": "Strange noise", "descriptionAr": "صوت غريب", "symptoms": [], "urgency": "medium"},
        "estimated_cost": service.price,
        "estimated_duration": service.duration,
        "notes": [],
        "reminders": [],
    }
    values.update(overrides)
    booking = Booking(**values)
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_token(user.id)}"}


def booking_payload(service_id: int, day: Optional[date] = None, time: str = "10:00", **overrides) -> dict:
    payload = {
        "service": service_id,
        "appointmentDate": (day or future_day()).isoformat(),
        "appointmentTime": time,
        "car": {"make": "Toyota", "model": "Camry", "year": 2020, "licensePlate": "ABC 123"},
        "issue": {"description": "Brakes squeal", "descriptionAr": "صرير في الفرامل", "urgency": "high"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def admin(db):
    return make_user(db, "admin", email="admin@example.com")


@pytest.fixture
def technician(db):
    return make_user(db, "technician", email="tech@example.com")


@pytest.fixture
def customer(db):
    return make_user(db, "customer", email="customer@example.com")


@pytest.fixture
def other_customer(db):
    return make_user(db, "customer", email="other@example.com")


@pytest.fixture
def service(db):
    return make_service(db)
