"""Booking domain schemas - request validation and response shaping"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...i18n import localize_entry
from ...models import BOOKING_STATUSES, PRIORITIES, URGENCY_LEVELS
from ...policy import is_allowed
from ...shared.validators import (
    validate_appointment_time,
    validate_car_year,
    validate_choice,
    validate_vin,
)
from ..services.schemas import service_summary
from ..users.schemas import user_summary
from .rules import appointment_datetime, can_be_cancelled


class CarInfo(BaseModel):
    """Snapshot of the customer's car at booking time"""

    make: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    year: int
    vin: Optional[str] = None
    licensePlate: Optional[str] = Field(None, max_length=20)
    mileage: Optional[int] = Field(None, ge=0)
    color: Optional[str] = Field(None, max_length=30)

    @field_validator("year")
    @classmethod
    def check_year(cls, v):
        return validate_car_year(v)

    @field_validator("vin")
    @classmethod
    def check_vin(cls, v):
        return validate_vin(v)


class IssueInfo(BaseModel):
    description: str = Field(..., min_length=1, max_length=1000)
    descriptionAr: Optional[str] = Field(None, max_length=1000)
    symptoms: list[str] = []
    urgency: str = "medium"

    @field_validator("urgency")
    @classmethod
    def check_urgency(cls, v):
        return validate_choice(v, URGENCY_LEVELS, "urgency")


class BookingCreate(BaseModel):
    service: int
    appointmentDate: date
    appointmentTime: str
    car: CarInfo
    issue: IssueInfo
    priority: str = "medium"
    # Admins may book on a customer's behalf
    customer: Optional[int] = None

    @field_validator("appointmentTime")
    @classmethod
    def check_time(cls, v):
        return validate_appointment_time(v)

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")


class BookingUpdate(BaseModel):
    appointmentDate: Optional[date] = None
    appointmentTime: Optional[str] = None
    car: Optional[CarInfo] = None
    issue: Optional[IssueInfo] = None
    priority: Optional[str] = None

    @field_validator("appointmentTime")
    @classmethod
    def check_time(cls, v):
        if v is None:
            return v
        return validate_appointment_time(v)

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
    reasonAr: Optional[str] = Field(None, max_length=500)
    refundAmount: Optional[float] = Field(None, ge=0)


class AssignRequest(BaseModel):
    technician: int


class StatusUpdate(BaseModel):
    status: str
    actualCost: Optional[float] = Field(None, ge=0)
    actualDuration: Optional[float] = Field(None, ge=0)

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, BOOKING_STATUSES, "status")


class NoteCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)
    textAr: Optional[str] = Field(None, max_length=1000)
    isInternal: bool = False


class RatingCreate(BaseModel):
    score: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    commentAr: Optional[str] = Field(None, max_length=500)


def _issue(issue: Optional[dict], locale: str) -> dict:
    issue = issue or {}
    return {
        "description": localize_entry(issue, "description", locale),
        "symptoms": issue.get("symptoms", []),
        "urgency": issue.get("urgency", "medium"),
    }


def _note(note: dict, locale: str) -> dict:
    return {
        "text": localize_entry(note, "text", locale),
        "author": note.get("author"),
        "createdAt": note.get("createdAt"),
        "isInternal": note.get("isInternal", False),
    }


def _cancellation(cancellation: Optional[dict], locale: str) -> Optional[dict]:
    if not cancellation:
        return None
    return {
        "reason": localize_entry(cancellation, "reason", locale),
        "cancelledBy": cancellation.get("cancelledBy"),
        "cancelledAt": cancellation.get("cancelledAt"),
        "refundAmount": cancellation.get("refundAmount"),
    }


def _rating(rating: Optional[dict], locale: str) -> Optional[dict]:
    if not rating:
        return None
    return {
        "score": rating.get("score"),
        "comment": localize_entry(rating, "comment", locale),
        "ratedAt": rating.get("ratedAt"),
    }


def serialize_booking(booking, locale: str, viewer=None) -> dict:
    """Response view of a booking; internal notes only reach staff viewers"""
    show_internal = is_allowed(viewer, "booking", "view_internal_notes")
    notes = [
        _note(note, locale)
        for note in booking.notes or []
        if show_internal or not note.get("isInternal")
    ]
    return {
        "id": booking.id,
        "customer": user_summary(booking.customer),
        "service": service_summary(booking.service, locale),
        "technician": user_summary(booking.technician),
        "project": booking.project_id,
        "appointmentDate": booking.appointment_date,
        "appointmentTime": booking.appointment_time,
        "appointmentDateTime": appointment_datetime(booking.appointment_date, booking.appointment_time),
        "status": booking.status,
        "priority": booking.priority,
        "car": booking.car,
        "issue": _issue(booking.issue, locale),
        "estimatedCost": booking.estimated_cost,
        "actualCost": booking.actual_cost,
        "estimatedDuration": booking.estimated_duration,
        "actualDuration": booking.actual_duration,
        "notes": notes,
        "cancellation": _cancellation(booking.cancellation, locale),
        "rating": _rating(booking.rating, locale),
        "canBeCancelled": can_be_cancelled(booking),
        "confirmedAt": booking.confirmed_at,
        "completedAt": booking.completed_at,
        "createdAt": booking.created_at,
        "updatedAt": booking.updated_at,
    }
