"""Bookings router - slot lookup, booking lifecycle and per-booking notes/ratings"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...email_service import (
    appointment_details,
    send_booking_cancelled_email,
    send_booking_confirmed_email,
    send_booking_received_email,
)
from ...errors import ValidationFailed
from ...i18n import get_locale
from ...models import User
from ...policy import require
from ...shared.pagination import PageParams
from ...shared.responses import paginated, success
from .schemas import (
    AssignRequest,
    BookingCreate,
    BookingUpdate,
    CancelRequest,
    NoteCreate,
    RatingCreate,
    StatusUpdate,
    serialize_booking,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def _notify(background_tasks: BackgroundTasks, sender, booking, **extra) -> None:
    """Queue a customer email for after the response; delivery failures never surface"""
    customer = booking.customer
    if not customer:
        return
    background_tasks.add_task(
        sender,
        to=customer.email,
        first_name=customer.first_name,
        details=appointment_details(booking),
        **extra,
    )


@router.get("/available-slots")
async def available_slots(
    day: Optional[date] = Query(None, alias="date"),
    service: BookingService = Depends(get_booking_service),
):
    if day is None:
        raise ValidationFailed("Please provide a date (YYYY-MM-DD)")
    return success(service.available_slots(day))


@router.get("")
async def list_bookings(
    status: Optional[str] = Query(None),
    technician: Optional[int] = Query(None),
    day: Optional[date] = Query(None, alias="date"),
    params: PageParams = Depends(),
    current_user: User = Depends(require("booking", "list")),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    bookings, total = service.list_bookings(params, status, technician, day)
    items = [serialize_booking(b, locale, current_user) for b in bookings]
    return paginated("bookings", items, total, params, locale)


@router.get("/my-bookings")
async def my_bookings(
    status: Optional[str] = Query(None),
    params: PageParams = Depends(),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    bookings, total = service.my_bookings(current_user, params, status)
    items = [serialize_booking(b, locale, current_user) for b in bookings]
    return paginated("bookings", items, total, params, locale)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking(booking_id, current_user)
    return success({"booking": serialize_booking(booking, locale, current_user)}, locale)


@router.post("", status_code=201)
async def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.create_booking(data, current_user)
    _notify(background_tasks, send_booking_received_email, booking)
    return success(
        {"booking": serialize_booking(booking, locale, current_user)},
        locale,
        message="Booking created successfully",
    )


@router.put("/{booking_id}")
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_booking(booking_id, data, current_user)
    return success({"booking": serialize_booking(booking, locale, current_user)}, locale)


@router.put("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    data: Optional[CancelRequest] = None,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.cancel_booking(booking_id, data or CancelRequest(), current_user)
    _notify(
        background_tasks,
        send_booking_cancelled_email,
        booking,
        reason=booking.cancellation["reason"],
    )
    return success(
        {"booking": serialize_booking(booking, locale, current_user)},
        locale,
        message="Booking cancelled successfully",
    )


@router.put("/{booking_id}/confirm")
async def confirm_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.confirm_booking(booking_id, current_user)
    _notify(background_tasks, send_booking_confirmed_email, booking)
    return success(
        {"booking": serialize_booking(booking, locale, current_user)},
        locale,
        message="Booking confirmed successfully",
    )


@router.put("/{booking_id}/assign")
async def assign_technician(
    booking_id: int,
    data: AssignRequest,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.assign_technician(booking_id, data.technician, current_user)
    return success({"booking": serialize_booking(booking, locale, current_user)}, locale)


@router.put("/{booking_id}/status")
async def update_status(
    booking_id: int,
    data: StatusUpdate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_status(booking_id, data, current_user)
    return success({"booking": serialize_booking(booking, locale, current_user)}, locale)


@router.post("/{booking_id}/notes", status_code=201)
async def add_note(
    booking_id: int,
    data: NoteCreate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.add_note(booking_id, data, current_user)
    return success({"booking": serialize_booking(booking, locale, current_user)}, locale)


@router.put("/{booking_id}/rating")
async def rate_booking(
    booking_id: int,
    data: RatingCreate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.rate_booking(booking_id, data, current_user)
    return success({"booking": serialize_booking(booking, locale, current_user)}, locale)
