#!/usr/bin/env python3
"""
Script to seed an empty database with staff accounts and the service catalogue
"""

import os

from autologic.database import Base, SessionLocal, engine
from autologic.models import Service, User
from autologic.security import hash_password

ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

ACCOUNTS = [
    {
        "first_name": "Shop",
        "last_name": "Admin",
        "email": "admin@autologic.com",
        "phone": "+966500000001",
        "role": "admin",
        "preferred_language": "en",
    },
    {
        "first_name": "Khalid",
        "last_name": "Mechanic",
        "email": "tech@autologic.com",
        "phone": "+966500000002",
        "role": "technician",
        "preferred_language": "ar",
    },
    {
        "first_name": "Demo",
        "last_name": "Customer",
        "email": "customer@autologic.com",
        "phone": "+966500000003",
        "role": "customer",
        "preferred_language": "ar",
    },
]

SERVICES = [
    {
        "name": "Oil Change",
        "name_ar": "تغيير الزيت",
        "description": "Engine oil and filter replacement with a multi-point inspection.",
        "description_ar": "تغيير زيت المحرك والفلتر مع فحص شامل.",
        "price": 150.0,
        "duration": 1,
        "category": "oil",
        "tags": ["oil", "maintenance"],
        "is_popular": True,
    },
    {
        "name": "Brake Service",
        "name_ar": "صيانة الفرامل",
        "description": "Pad and rotor inspection, replacement and brake fluid top-up.",
        "description_ar": "فحص واستبدال الأقراص والفحمات وتعبئة زيت الفرامل.",
        "price": 400.0,
        "duration": 2,
        "category": "brakes",
        "tags": ["brakes", "safety"],
        "is_popular": True,
    },
    {
        "name": "Computer Diagnostics",
        "name_ar": "فحص كمبيوتر",
        "description": "Full OBD scan with a written report of fault codes.",
        "description_ar": "فحص كامل بالكمبيوتر مع تقرير مكتوب بالأعطال.",
        "price": 200.0,
        "duration": 1,
        "category": "diagnostic",
        "tags": ["diagnostic"],
        "is_popular": False,
    },
    {
        "name": "AC Recharge",
        "name_ar": "تعبئة فريون المكيف",
        "description": "Leak test and refrigerant recharge for the air conditioning system.",
        "description_ar": "فحص التسريب وتعبئة غاز التكييف.",
        "price": 250.0,
        "duration": 2,
        "category": "ac",
        "tags": ["ac", "summer"],
        "is_popular": True,
    },
    {
        "name": "Transmission Service",
        "name_ar": "صيانة ناقل الحركة",
        "description": "Transmission fluid exchange and gearbox inspection.",
        "description_ar": "تغيير زيت ناقل الحركة وفحص القير.",
        "price": 900.0,
        "duration": 4,
        "category": "transmission",
        "tags": ["transmission"],
        "is_popular": False,
    },
]


def seed():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()

    try:
        print("🔍 Checking existing data...\n")

        if db.query(User).count() == 0:
            for account in ACCOUNTS:
                db.add(User(password_hash=hash_password(ADMIN_PASSWORD), **account))
            db.commit()
            print(f"✅ Created {len(ACCOUNTS)} accounts (password from SEED_ADMIN_PASSWORD)")
        else:
            print("⏭️  Users already present, skipping accounts")

        if db.query(Service).count() == 0:
            for service in SERVICES:
                db.add(Service(images=[], **service))
            db.commit()
            print(f"✅ Created {len(SERVICES)} services")
        else:
            print("⏭️  Services already present, skipping catalogue")

        print("\n📋 Service catalogue:")
        for service in db.query(Service).order_by(Service.id).all():
            print(f"   - {service.id}: {service.name} / {service.name_ar} ({service.price})")

    except Exception as e:
        print(f"❌ Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
