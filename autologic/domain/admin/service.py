"""Admin service - dashboard aggregates and system health"""

import logging
import time
from datetime import datetime

from sqlalchemy import func, text
from sqlalchemy.orm import Session, joinedload

from ...models import Blog, Booking, Contact, Service, User
from ...rate_limiter import get_redis_client
from ...shared.timeutils import shop_now, utcnow

logger = logging.getLogger(__name__)

STARTED_AT = time.time()
RECENT_LIMIT = 5


class AdminService:
    def __init__(self, db: Session):
        self.db = db

    def _count(self, model, *criteria) -> int:
        return self.db.query(func.count(model.id)).filter(*criteria).scalar() or 0

    def dashboard(self) -> dict:
        today = shop_now().date()
        start_of_month = datetime(today.year, today.month, 1)

        monthly_revenue = (
            self.db.query(func.coalesce(func.sum(Booking.actual_cost), 0))
            .filter(Booking.status == "completed", Booking.created_at >= start_of_month)
            .scalar()
        )
        todays_bookings = (
            self.db.query(Booking)
            .options(joinedload(Booking.customer), joinedload(Booking.service))
            .filter(Booking.appointment_date == today)
            .order_by(Booking.appointment_time.asc(), Booking.id.asc())
            .limit(RECENT_LIMIT)
            .all()
        )
        newest_contacts = (
            self.db.query(Contact)
            .filter(Contact.status == "new")
            .order_by(Contact.created_at.desc(), Contact.id.desc())
            .limit(RECENT_LIMIT)
            .all()
        )

        return {
            "overview": {
                "totalUsers": self._count(User),
                "totalServices": self._count(Service),
                "totalBlogs": self._count(Blog),
                "totalContacts": self._count(Contact),
                "newContacts": self._count(Contact, Contact.status == "new"),
                "totalBookings": self._count(Booking),
                "pendingBookings": self._count(Booking, Booking.status == "pending"),
            },
            "monthly": {
                "bookings": self._count(Booking, Booking.created_at >= start_of_month),
                "revenue": float(monthly_revenue or 0),
                "contacts": self._count(Contact, Contact.created_at >= start_of_month),
            },
            "recent": {
                "bookings": todays_bookings,
                "contacts": newest_contacts,
            },
        }

    def health(self) -> dict:
        started = time.time()
        try:
            self.db.execute(text("SELECT 1"))
            database = {"status": "connected", "responseTime": round((time.time() - started) * 1000, 2)}
        except Exception as e:
            logger.error(f"❌ Database health check failed: {e}")
            database = {"status": "disconnected", "error": str(e)}

        redis_client = get_redis_client()
        cache = {"status": "connected" if redis_client is not None else "memory-only"}

        return {
            "status": "healthy" if database["status"] == "connected" else "unhealthy",
            "database": database,
            "cache": cache,
            "uptime": round(time.time() - STARTED_AT, 2),
            "timestamp": utcnow().isoformat(),
        }
