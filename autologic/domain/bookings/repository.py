"""Booking repository - Database operations for bookings"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Query, Session, joinedload

from ...models import ACTIVE_BOOKING_STATUSES, Booking


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def _with_relations(query: Query) -> Query:
        return query.options(
            joinedload(Booking.customer),
            joinedload(Booking.service),
            joinedload(Booking.technician),
        )

    @staticmethod
    def get_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return BookingRepository._with_relations(db.query(Booking)).filter(Booking.id == booking_id).first()

    @staticmethod
    def booked_times(db: Session, day: date) -> list[str]:
        """Times held by active bookings on a calendar day"""
        rows = (
            db.query(Booking.appointment_time)
            .filter(
                Booking.appointment_date == day,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def find_active_at(
        db: Session, day: date, time: str, exclude_id: Optional[int] = None
    ) -> Optional[Booking]:
        query = db.query(Booking).filter(
            Booking.appointment_date == day,
            Booking.appointment_time == time,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.first()

    @staticmethod
    def query_all(
        db: Session,
        status: Optional[str] = None,
        technician_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> Query:
        query = BookingRepository._with_relations(db.query(Booking))
        if status:
            query = query.filter(Booking.status == status)
        if technician_id:
            query = query.filter(Booking.technician_id == technician_id)
        if day:
            query = query.filter(Booking.appointment_date == day)
        return query.order_by(
            Booking.appointment_date.asc(), Booking.appointment_time.asc(), Booking.id.asc()
        )

    @staticmethod
    def query_for_customer(db: Session, customer_id: int, status: Optional[str] = None) -> Query:
        query = BookingRepository._with_relations(db.query(Booking)).filter(
            Booking.customer_id == customer_id
        )
        if status:
            query = query.filter(Booking.status == status)
        return query.order_by(
            Booking.appointment_date.desc(), Booking.appointment_time.desc(), Booking.id.desc()
        )

    @staticmethod
    def create(db: Session, **booking_data) -> Booking:
        """Insert a booking; a concurrent claim on the same slot raises IntegrityError"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def save(db: Session, booking: Booking) -> Booking:
        db.commit()
        db.refresh(booking)
        return booking
