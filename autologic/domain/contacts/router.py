"""Contact router - public form submission plus the admin inbox"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from ...database import get_db
from ...email_service import send_contact_notification
from ...i18n import get_locale
from ...models import User
from ...policy import require
from ...rate_limiter import client_ip, create_rate_limiter
from ...shared.pagination import PageParams
from ...shared.responses import paginated, success
from .schemas import (
    ContactCreate,
    ContactResponseCreate,
    ContactStatusUpdate,
    ContactUpdate,
    contact_receipt,
    serialize_contact,
)
from .service import ContactService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["Contact"])

contact_rate_limit = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="contact")
require_admin = require("contact", "manage")


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    """Dependency injection for ContactService"""
    return ContactService(db)


@router.post("", status_code=201, dependencies=[Depends(contact_rate_limit)])
async def submit_contact(
    data: ContactCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    service: ContactService = Depends(get_contact_service),
):
    contact = service.submit(data, client_ip(request), request.headers.get("user-agent"))
    background_tasks.add_task(
        send_contact_notification,
        {
            "name": contact.name,
            "email": contact.email,
            "phone": contact.phone,
            "subject": contact.subject,
            "type": contact.type,
            "priority": contact.priority,
            "message": contact.message,
            "submitted_at": contact.created_at,
        },
    )
    return success({"contact": contact_receipt(contact)}, message="Contact form submitted successfully")


@router.get("")
async def list_contacts(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    contact_type: Optional[str] = Query(None, alias="type"),
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    params: PageParams = Depends(),
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    contacts, total = service.list_contacts(params, status, priority, contact_type, assigned_to)
    return paginated("contacts", [serialize_contact(c, locale) for c in contacts], total, params, locale)


@router.get("/stats/overview")
async def contact_stats(
    _: User = Depends(require_admin),
    service: ContactService = Depends(get_contact_service),
):
    return success({"stats": service.stats()})


@router.get("/unresolved/list")
async def unresolved_contacts(
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    contacts = service.unresolved()
    return success({"contacts": [serialize_contact(c, locale) for c in contacts]}, locale, results=len(contacts))


@router.get("/{contact_id}")
async def get_contact(
    contact_id: int,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    return success({"contact": serialize_contact(service.get_contact(contact_id), locale)}, locale)


@router.put("/{contact_id}")
async def update_contact(
    contact_id: int,
    data: ContactUpdate,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    contact = service.update_contact(contact_id, data)
    return success({"contact": serialize_contact(contact, locale)}, locale)


@router.put("/{contact_id}/status")
async def update_contact_status(
    contact_id: int,
    data: ContactStatusUpdate,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    contact = service.set_status(contact_id, data.status)
    return success({"contact": serialize_contact(contact, locale)}, locale)


@router.put("/{contact_id}/resolve")
async def resolve_contact(
    contact_id: int,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    return success({"contact": serialize_contact(service.resolve(contact_id), locale)}, locale)


@router.put("/{contact_id}/close")
async def close_contact(
    contact_id: int,
    _: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    return success({"contact": serialize_contact(service.close(contact_id), locale)}, locale)


@router.post("/{contact_id}/responses", status_code=201)
async def add_contact_response(
    contact_id: int,
    data: ContactResponseCreate,
    current_user: User = Depends(require_admin),
    locale: str = Depends(get_locale),
    service: ContactService = Depends(get_contact_service),
):
    contact = service.add_response(contact_id, data, current_user)
    return success({"contact": serialize_contact(contact, locale)}, locale)


@router.delete("/{contact_id}", status_code=204)
async def delete_contact(
    contact_id: int,
    _: User = Depends(require_admin),
    service: ContactService = Depends(get_contact_service),
):
    service.delete_contact(contact_id)
    return Response(status_code=204)
