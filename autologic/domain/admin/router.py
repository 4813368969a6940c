"""Admin router - back-office dashboard"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...i18n import get_locale
from ...models import User
from ...policy import require
from ...shared.responses import success
from ..bookings.schemas import serialize_booking
from ..contacts.schemas import serialize_contact
from .service import AdminService

router = APIRouter(prefix="/admin", tags=["Admin"])

require_dashboard = require("dashboard", "view")


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


@router.get("/dashboard")
async def dashboard(
    current_user: User = Depends(require_dashboard),
    locale: str = Depends(get_locale),
    service: AdminService = Depends(get_admin_service),
):
    data = service.dashboard()
    recent = data["recent"]
    data["recent"] = {
        "bookings": [serialize_booking(b, locale, current_user) for b in recent["bookings"]],
        "contacts": [serialize_contact(c, locale) for c in recent["contacts"]],
    }
    return success(data, locale)


@router.get("/health")
async def system_health(
    _: User = Depends(require_dashboard),
    service: AdminService = Depends(get_admin_service),
):
    return success(service.health())
