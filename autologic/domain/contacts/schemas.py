"""Contact form schemas"""

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...i18n import localize, localize_entry
from ...models import CONTACT_SOURCES, CONTACT_STATUSES, CONTACT_TYPES, LANGUAGES, PRIORITIES
from ...shared.validators import validate_choice, validate_email, validate_phone
from ..services.schemas import ImageRef
from ..users.schemas import user_summary


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=200)
    subjectAr: Optional[str] = Field(None, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    messageAr: Optional[str] = Field(None, max_length=2000)
    type: str = "general"
    priority: str = "medium"
    source: str = "website"
    language: str = "ar"
    attachments: list[ImageRef] = Field(default=[], max_length=5)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, CONTACT_TYPES, "type")

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")

    @field_validator("source")
    @classmethod
    def check_source(cls, v):
        return validate_choice(v, CONTACT_SOURCES, "source")

    @field_validator("language")
    @classmethod
    def check_language(cls, v):
        return validate_choice(v, LANGUAGES, "language")


class ContactUpdate(BaseModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    type: Optional[str] = None
    assignedTo: Optional[int] = None
    tags: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, CONTACT_STATUSES, "status")

    @field_validator("priority")
    @classmethod
    def check_priority(cls, v):
        return validate_choice(v, PRIORITIES, "priority")

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        return validate_choice(v, CONTACT_TYPES, "type")


class ContactStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, CONTACT_STATUSES, "status")


class ContactResponseCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    messageAr: Optional[str] = Field(None, max_length=2000)
    isInternal: bool = False


def is_urgent(contact) -> bool:
    return contact.priority == "urgent" or contact.type == "complaint"


def response_time(contact) -> Optional[int]:
    """Whole days from submission to the first response"""
    if not contact.responses or not contact.created_at:
        return None
    first = datetime.fromisoformat(contact.responses[0]["createdAt"])
    return math.floor((first - contact.created_at).total_seconds() / 86400)


def contact_receipt(contact) -> dict:
    """What the public submitter gets back"""
    return {
        "id": contact.id,
        "name": contact.name,
        "email": contact.email,
        "type": contact.type,
        "priority": contact.priority,
        "status": contact.status,
        "createdAt": contact.created_at,
    }


def serialize_contact(contact, locale: str) -> dict:
    return {
        **contact_receipt(contact),
        "phone": contact.phone,
        "subject": localize(contact, "subject", locale),
        "message": localize(contact, "message", locale),
        "assignedTo": user_summary(contact.assigned_to),
        "responses": [
            {
                "message": localize_entry(response, "message", locale),
                "author": response.get("author"),
                "createdAt": response.get("createdAt"),
                "isInternal": response.get("isInternal", False),
            }
            for response in contact.responses or []
        ],
        "attachments": contact.attachments or [],
        "source": contact.source,
        "language": contact.language,
        "ipAddress": contact.ip_address,
        "userAgent": contact.user_agent,
        "resolvedAt": contact.resolved_at,
        "closedAt": contact.closed_at,
        "tags": contact.tags or [],
        "isUrgent": is_urgent(contact),
        "responseTime": response_time(contact),
        "updatedAt": contact.updated_at,
    }
