"""Booking business rules computed from stored fields, never persisted"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from ...models import ACTIVE_BOOKING_STATUSES
from ...shared.timeutils import shop_now

# Fixed hourly appointment slots, 08:00 through 18:00
SLOT_START_HOUR = 8
SLOT_END_HOUR = 18
TIME_SLOTS = tuple(f"{hour:02d}:00" for hour in range(SLOT_START_HOUR, SLOT_END_HOUR + 1))

CANCELLATION_WINDOW = timedelta(hours=2)
CANCELLABLE_STATUSES = ("pending", "confirmed")
EDITABLE_STATUSES = ("pending", "confirmed")

# Admins may set any status; technicians only move their own work forward
TECHNICIAN_TRANSITIONS = {
    "confirmed": {"in-progress"},
    "in-progress": {"completed"},
}

DEFAULT_CANCEL_REASON = "Cancelled by user"
DEFAULT_CANCEL_REASON_AR = "ألغي من قبل المستخدم"


def appointment_datetime(appointment_date: date, appointment_time: str) -> datetime:
    hours, minutes = (int(part) for part in appointment_time.split(":"))
    return datetime.combine(appointment_date, time(hours, minutes))


def is_in_past(appointment_date: date, appointment_time: str, now: Optional[datetime] = None) -> bool:
    now = now or shop_now()
    return appointment_datetime(appointment_date, appointment_time) < now


def can_be_cancelled(booking, now: Optional[datetime] = None) -> bool:
    """pending/confirmed with strictly more than two hours to go"""
    if booking.status not in CANCELLABLE_STATUSES:
        return False
    now = now or shop_now()
    remaining = appointment_datetime(booking.appointment_date, booking.appointment_time) - now
    return remaining > CANCELLATION_WINDOW


def is_active(status: str) -> bool:
    return status in ACTIVE_BOOKING_STATUSES


def can_transition(current: str, target: str, role: str) -> bool:
    if role == "admin":
        return True
    if role == "technician":
        return target in TECHNICIAN_TRANSITIONS.get(current, set())
    return False


def free_slots(booked_times) -> tuple[list[str], list[str]]:
    """Fixed slots minus taken times (slot order kept), plus the taken times sorted"""
    taken = set(booked_times)
    available = [slot for slot in TIME_SLOTS if slot not in taken]
    return available, sorted(taken)
