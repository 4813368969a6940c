from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

USER_ROLES = ("customer", "technician", "admin")
LANGUAGES = ("ar", "en")

BOOKING_STATUSES = ("pending", "confirmed", "in-progress", "completed", "cancelled", "no-show")
# Statuses that occupy an appointment slot
ACTIVE_BOOKING_STATUSES = ("pending", "confirmed", "in-progress")
PRIORITIES = ("low", "medium", "high", "urgent")
URGENCY_LEVELS = ("low", "medium", "high", "emergency")

SERVICE_CATEGORIES = (
    "engine",
    "transmission",
    "brakes",
    "tires",
    "battery",
    "diagnostic",
    "oil",
    "ac",
    "other",
)

PROJECT_STATUSES = ("pending", "in-progress", "completed", "cancelled")

BLOG_CATEGORIES = ("maintenance", "repair", "tips", "news", "reviews", "guides", "other")
BLOG_STATUSES = ("draft", "published", "archived")

REVIEW_STATUSES = ("pending", "approved", "rejected", "flagged")

CONTACT_TYPES = ("general", "complaint", "suggestion", "support", "business", "partnership")
CONTACT_STATUSES = ("new", "in-progress", "resolved", "closed")
CONTACT_SOURCES = ("website", "phone", "email", "social", "walk-in")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="customer", nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    preferred_language = Column(String(2), default="ar", nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bookings = relationship(
        "Booking", back_populates="customer", foreign_keys="Booking.customer_id"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    name_ar = Column(String(100), nullable=False, default="")
    description = Column(Text, nullable=False)
    description_ar = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False, index=True)
    duration = Column(Integer, nullable=False)  # hours
    category = Column(String(30), nullable=False, default="other", index=True)
    images = Column(JSON, default=list)  # [{"url", "publicId", "alt"}]
    tags = Column(JSON, default=list)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    is_popular = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    name_ar = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    description_ar = Column(Text, nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    client = Column(JSON, nullable=False)  # {"name", "email", "phone"}
    car = Column(JSON, nullable=False)  # {"make", "model", "year", "vin", "licensePlate"}
    status = Column(String(20), default="pending", nullable=False, index=True)
    priority = Column(String(10), default="medium", nullable=False)
    start_date = Column(DateTime, server_default=func.now())
    end_date = Column(DateTime, nullable=True)
    estimated_duration = Column(Integer, nullable=False)  # hours
    actual_duration = Column(Float, nullable=True)
    cost = Column(JSON, nullable=False)  # {"estimated", "actual", "labor", "parts"}
    images = Column(JSON, default=list)  # [{"url", "publicId", "caption", "captionAr", "type"}]
    technician_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(JSON, default=list)
    parts = Column(JSON, default=list)
    is_public = Column(Boolean, default=True, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    tags = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    service = relationship("Service")
    technician = relationship("User", foreign_keys=[technician_id])
    bookings = relationship("Booking", back_populates="project")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    technician_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(String(5), nullable=False)  # "HH:MM", 24-hour
    status = Column(String(20), default="pending", nullable=False, index=True)
    priority = Column(String(10), default="medium", nullable=False)
    car = Column(JSON, nullable=False)  # snapshot: make, model, year, vin, licensePlate, mileage, color
    issue = Column(JSON, nullable=False)  # description, descriptionAr, symptoms, urgency
    estimated_cost = Column(Float, nullable=True)
    actual_cost = Column(Float, nullable=True)
    estimated_duration = Column(Integer, nullable=True)
    actual_duration = Column(Float, nullable=True)
    notes = Column(JSON, default=list)  # append-only
    cancellation = Column(JSON, nullable=True)
    rating = Column(JSON, nullable=True)
    # Reminder shape is stored but nothing dispatches it yet
    reminders = Column(JSON, default=list)
    confirmed_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("User", back_populates="bookings", foreign_keys=[customer_id])
    technician = relationship("User", foreign_keys=[technician_id])
    service = relationship("Service")
    project = relationship("Project", back_populates="bookings")

    __table_args__ = (
        # One active booking per slot; cancelled/completed/no-show rows free the slot
        Index(
            "uq_bookings_active_slot",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=text("status IN ('pending', 'confirmed', 'in-progress')"),
            sqlite_where=text("status IN ('pending', 'confirmed', 'in-progress')"),
        ),
    )


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, unique=True)
    rating_overall = Column(Integer, nullable=False, index=True)
    rating_quality = Column(Integer, nullable=True)
    rating_timeliness = Column(Integer, nullable=True)
    rating_communication = Column(Integer, nullable=True)
    rating_value = Column(Integer, nullable=True)
    comment = Column(Text, nullable=True)
    comment_ar = Column(Text, nullable=True)
    pros = Column(JSON, default=list)
    cons = Column(JSON, default=list)
    images = Column(JSON, default=list)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    helpful_count = Column(Integer, default=0, nullable=False)
    response = Column(JSON, nullable=True)  # {"text", "textAr", "authorId", "respondedAt"}
    status = Column(String(20), default="pending", nullable=False, index=True)
    moderation = Column(JSON, nullable=True)
    tags = Column(JSON, default=list)
    language = Column(String(2), default="ar", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("User", foreign_keys=[customer_id])
    service = relationship("Service")
    booking = relationship("Booking")


class ReviewHelpfulMark(Base):
    __tablename__ = "review_helpful_marks"

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (UniqueConstraint("review_id", "user_id", name="uq_review_helpful_user"),)


class Blog(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    title_ar = Column(String(200), nullable=False)
    slug = Column(String(220), unique=True, index=True, nullable=False)
    excerpt = Column(String(500), nullable=False)
    excerpt_ar = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    content_ar = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String(20), default="other", nullable=False, index=True)
    tags = Column(JSON, default=list)
    featured_image = Column(JSON, nullable=True)
    images = Column(JSON, default=list)
    status = Column(String(20), default="draft", nullable=False, index=True)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)
    published_at = Column(DateTime, nullable=True)
    views = Column(Integer, default=0, nullable=False)
    likes_count = Column(Integer, default=0, nullable=False)
    comments = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    author = relationship("User")


class BlogLike(Base):
    __tablename__ = "blog_likes"

    id = Column(Integer, primary_key=True)
    blog_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (UniqueConstraint("blog_id", "user_id", name="uq_blog_like_user"),)


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    subject = Column(String(200), nullable=False)
    subject_ar = Column(String(200), nullable=True)
    message = Column(Text, nullable=False)
    message_ar = Column(Text, nullable=True)
    type = Column(String(20), default="general", nullable=False, index=True)
    priority = Column(String(10), default="medium", nullable=False, index=True)
    status = Column(String(20), default="new", nullable=False, index=True)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    responses = Column(JSON, default=list)
    attachments = Column(JSON, default=list)
    source = Column(String(20), default="website", nullable=False)
    language = Column(String(2), default="ar", nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    closed_at = Column(DateTime, nullable=True)
    tags = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    assigned_to = relationship("User")
