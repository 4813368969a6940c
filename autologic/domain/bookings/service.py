"""Booking service - slot availability, booking creation and the status workflow"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import Conflict, Forbidden, NotFound, ValidationFailed
from ...models import Booking, User
from ...policy import ADMIN, authorize
from ...shared.pagination import PageParams, paginate
from ...shared.timeutils import utcnow
from ...utils.sanitization import sanitize_dict, sanitize_list, sanitize_string
from ..services.repository import ServiceRepository
from ..users.repository import UserRepository
from . import rules
from .repository import BookingRepository
from .schemas import (
    BookingCreate,
    BookingUpdate,
    CancelRequest,
    NoteCreate,
    RatingCreate,
    StatusUpdate,
)

logger = logging.getLogger(__name__)

SLOT_TAKEN = "Time slot is already booked"
PAST_APPOINTMENT = "Appointment date cannot be in the past"


def _car_snapshot(car) -> dict:
    return sanitize_dict(car.model_dump(exclude_none=True))


def _issue_snapshot(issue) -> dict:
    return {
        "description": sanitize_string(issue.description),
        "descriptionAr": sanitize_string(issue.descriptionAr) or "",
        "symptoms": sanitize_list(issue.symptoms),
        "urgency": issue.urgency,
    }


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.services = ServiceRepository()
        self.users = UserRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def available_slots(self, day: date) -> dict:
        available, booked = rules.free_slots(self.repo.booked_times(self.db, day))
        return {"availableSlots": available, "bookedSlots": booked}

    def list_bookings(
        self,
        params: PageParams,
        status: Optional[str] = None,
        technician_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> tuple[list[Booking], int]:
        return paginate(self.repo.query_all(self.db, status, technician_id, day), params)

    def my_bookings(self, user: User, params: PageParams, status: Optional[str] = None) -> tuple[list[Booking], int]:
        return paginate(self.repo.query_for_customer(self.db, user.id, status), params)

    def _load(self, booking_id: int) -> Booking:
        booking = self.repo.get_by_id(self.db, booking_id)
        if not booking:
            raise NotFound("Booking not found")
        return booking

    def get_booking(self, booking_id: int, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "read", booking)
        return booking

    # ------------------------------------------------------------------
    # Slot checks
    # ------------------------------------------------------------------

    def _ensure_slot_free(self, day: date, time: str, exclude_id: Optional[int] = None) -> None:
        if self.repo.find_active_at(self.db, day, time, exclude_id):
            raise Conflict(SLOT_TAKEN)

    def _commit_slot_change(self, booking: Booking) -> Booking:
        """Commit; the partial unique index turns a lost race into a Conflict"""
        try:
            return self.repo.save(self.db, booking)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Slot race lost for booking {booking.id}")
            raise Conflict(SLOT_TAKEN) from e

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_booking(self, data: BookingCreate, user: User) -> Booking:
        authorize(user, "booking", "create")

        service = self.services.get_by_id(self.db, data.service)
        if not service:
            raise NotFound("Service not found")

        if rules.is_in_past(data.appointmentDate, data.appointmentTime):
            raise ValidationFailed(PAST_APPOINTMENT)

        self._ensure_slot_free(data.appointmentDate, data.appointmentTime)

        customer_id = user.id
        if data.customer and data.customer != user.id:
            if user.role != ADMIN:
                raise Forbidden("Only admins can book on behalf of another customer")
            customer = self.users.get_by_id(self.db, data.customer)
            if not customer:
                raise NotFound("Customer not found")
            customer_id = customer.id

        try:
            booking = self.repo.create(
                self.db,
                customer_id=customer_id,
                service_id=service.id,
                appointment_date=data.appointmentDate,
                appointment_time=data.appointmentTime,
                status="pending",
                priority=data.priority,
                car=_car_snapshot(data.car),
                issue=_issue_snapshot(data.issue),
                estimated_cost=service.price,
                estimated_duration=service.duration,
                notes=[],
                reminders=[],
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"⚠️ Concurrent booking for {data.appointmentDate} {data.appointmentTime} rejected"
            )
            raise Conflict(SLOT_TAKEN) from e

        logger.info(
            f"📅 Booking {booking.id} created for {booking.appointment_date} {booking.appointment_time}"
        )
        return self._load(booking.id)

    def update_booking(self, booking_id: int, data: BookingUpdate, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "update", booking)

        if booking.status not in rules.EDITABLE_STATUSES:
            raise ValidationFailed("Only pending or confirmed bookings can be updated")

        new_date = data.appointmentDate or booking.appointment_date
        new_time = data.appointmentTime or booking.appointment_time
        if (new_date, new_time) != (booking.appointment_date, booking.appointment_time):
            if rules.is_in_past(new_date, new_time):
                raise ValidationFailed(PAST_APPOINTMENT)
            self._ensure_slot_free(new_date, new_time, exclude_id=booking.id)
            booking.appointment_date = new_date
            booking.appointment_time = new_time

        if data.car is not None:
            booking.car = _car_snapshot(data.car)
        if data.issue is not None:
            booking.issue = _issue_snapshot(data.issue)
        if data.priority is not None:
            booking.priority = data.priority

        return self._commit_slot_change(booking)

    def cancel_booking(self, booking_id: int, data: CancelRequest, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "cancel", booking)

        if user.role == ADMIN:
            # Admins bypass the two-hour window but not the status rule
            allowed = booking.status in rules.CANCELLABLE_STATUSES
        else:
            allowed = rules.can_be_cancelled(booking)
        if not allowed:
            raise ValidationFailed("Booking cannot be cancelled")

        self._record_cancellation(booking, user, data.reason, data.reasonAr, data.refundAmount)
        booking = self.repo.save(self.db, booking)
        logger.info(f"❌ Booking {booking.id} cancelled by user {user.id}")
        return booking

    def _record_cancellation(
        self,
        booking: Booking,
        user: User,
        reason: Optional[str] = None,
        reason_ar: Optional[str] = None,
        refund_amount: Optional[float] = None,
    ) -> None:
        booking.status = "cancelled"
        booking.cancellation = {
            "reason": sanitize_string(reason) or rules.DEFAULT_CANCEL_REASON,
            "reasonAr": sanitize_string(reason_ar) or rules.DEFAULT_CANCEL_REASON_AR,
            "cancelledBy": user.id,
            "cancelledAt": utcnow().isoformat(),
            "refundAmount": refund_amount if user.role == ADMIN else None,
        }

    def confirm_booking(self, booking_id: int, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "confirm", booking)

        if booking.status != "pending":
            raise ValidationFailed("Only pending bookings can be confirmed")

        booking.status = "confirmed"
        booking.confirmed_at = utcnow()
        booking = self.repo.save(self.db, booking)
        logger.info(f"✅ Booking {booking.id} confirmed")
        return booking

    def assign_technician(self, booking_id: int, technician_id: int, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "assign", booking)

        technician = self.users.get_by_id(self.db, technician_id)
        if not technician or technician.role != "technician":
            raise NotFound("Technician not found")

        booking.technician_id = technician.id
        self.repo.save(self.db, booking)
        logger.info(f"🔧 Technician {technician.id} assigned to booking {booking.id}")
        return self._load(booking.id)

    def update_status(self, booking_id: int, data: StatusUpdate, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "update_status", booking)

        current, target = booking.status, data.status
        if not rules.can_transition(current, target, user.role):
            raise ValidationFailed(f"Cannot change status from {current} to {target}")

        if rules.is_active(target) and not rules.is_active(current):
            # Reopening a booking must not steal a slot someone else now holds
            self._ensure_slot_free(booking.appointment_date, booking.appointment_time, exclude_id=booking.id)

        if target == "cancelled" and current != "cancelled":
            self._record_cancellation(booking, user)
        booking.status = target

        now = utcnow()
        if target == "confirmed" and not booking.confirmed_at:
            booking.confirmed_at = now
        if target == "completed":
            booking.completed_at = now
        if data.actualCost is not None:
            booking.actual_cost = data.actualCost
        if data.actualDuration is not None:
            booking.actual_duration = data.actualDuration

        booking = self._commit_slot_change(booking)
        logger.info(f"🔄 Booking {booking.id} status {current} -> {target}")
        return booking

    def add_note(self, booking_id: int, data: NoteCreate, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "add_note", booking)
        if data.isInternal:
            authorize(user, "booking", "add_internal_note", booking)

        note = {
            "text": sanitize_string(data.text),
            "textAr": sanitize_string(data.textAr) or "",
            "author": user.id,
            "createdAt": utcnow().isoformat(),
            "isInternal": data.isInternal,
        }
        # Reassign so the JSON column is flagged dirty
        booking.notes = [*(booking.notes or []), note]
        return self.repo.save(self.db, booking)

    def rate_booking(self, booking_id: int, data: RatingCreate, user: User) -> Booking:
        booking = self._load(booking_id)
        authorize(user, "booking", "rate", booking)

        if booking.status != "completed":
            raise ValidationFailed("Only completed bookings can be rated")
        if booking.rating:
            raise Conflict("Booking has already been rated")

        booking.rating = {
            "score": data.score,
            "comment": sanitize_string(data.comment) or "",
            "commentAr": sanitize_string(data.commentAr) or "",
            "ratedAt": utcnow().isoformat(),
        }
        return self.repo.save(self.db, booking)
