"""Contact service - public submissions and the admin inbox"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ... import storage
from ...errors import NotFound
from ...models import Contact, User
from ...shared.pagination import PageParams, paginate
from ...shared.timeutils import utcnow
from ...utils.sanitization import sanitize_list, sanitize_string
from ..users.repository import UserRepository
from .repository import ContactRepository
from .schemas import ContactCreate, ContactResponseCreate, ContactUpdate

logger = logging.getLogger(__name__)


def effective_priority(contact_type: str, priority: str) -> str:
    """Complaints never sit at the default priority"""
    if contact_type == "complaint" and priority == "medium":
        return "high"
    return priority


class ContactService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ContactRepository()
        self.users = UserRepository()

    def submit(self, data: ContactCreate, ip_address: Optional[str], user_agent: Optional[str]) -> Contact:
        contact = self.repo.create(
            self.db,
            name=sanitize_string(data.name),
            email=data.email,
            phone=data.phone,
            subject=sanitize_string(data.subject),
            subject_ar=sanitize_string(data.subjectAr),
            message=sanitize_string(data.message),
            message_ar=sanitize_string(data.messageAr),
            type=data.type,
            priority=effective_priority(data.type, data.priority),
            status="new",
            source=data.source,
            language=data.language,
            attachments=[attachment.model_dump() for attachment in data.attachments],
            responses=[],
            tags=[],
            ip_address=ip_address,
            user_agent=(user_agent or "")[:500] or None,
        )
        logger.info(f"📨 Contact {contact.id} submitted ({contact.type}, {contact.priority})")
        return contact

    def list_contacts(
        self,
        params: PageParams,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        contact_type: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> tuple[list[Contact], int]:
        query = self.repo.query_contacts(self.db, status, priority, contact_type, assigned_to)
        return paginate(query, params)

    def get_contact(self, contact_id: int) -> Contact:
        contact = self.repo.get_by_id(self.db, contact_id)
        if not contact:
            raise NotFound("Contact submission not found")
        return contact

    def _apply_status(self, contact: Contact, status: str) -> None:
        contact.status = status
        now = utcnow()
        if status == "resolved" and not contact.resolved_at:
            contact.resolved_at = now
        if status == "closed" and not contact.closed_at:
            contact.closed_at = now

    def update_contact(self, contact_id: int, data: ContactUpdate) -> Contact:
        contact = self.get_contact(contact_id)
        if data.assignedTo is not None:
            assignee = self.users.get_by_id(self.db, data.assignedTo)
            if not assignee or assignee.role == "customer":
                raise NotFound("Staff member not found")
            contact.assigned_to_id = assignee.id
        if data.status is not None:
            self._apply_status(contact, data.status)
        if data.priority is not None:
            contact.priority = data.priority
        if data.type is not None:
            contact.type = data.type
        if data.tags is not None:
            contact.tags = sanitize_list(data.tags)
        self.repo.save(self.db, contact)
        return self.get_contact(contact_id)

    def set_status(self, contact_id: int, status: str) -> Contact:
        contact = self.get_contact(contact_id)
        self._apply_status(contact, status)
        return self.repo.save(self.db, contact)

    def resolve(self, contact_id: int) -> Contact:
        contact = self.get_contact(contact_id)
        contact.status = "resolved"
        contact.resolved_at = utcnow()
        return self.repo.save(self.db, contact)

    def close(self, contact_id: int) -> Contact:
        contact = self.get_contact(contact_id)
        contact.status = "closed"
        contact.closed_at = utcnow()
        return self.repo.save(self.db, contact)

    def add_response(self, contact_id: int, data: ContactResponseCreate, user: User) -> Contact:
        contact = self.get_contact(contact_id)
        response = {
            "message": sanitize_string(data.message),
            "messageAr": sanitize_string(data.messageAr) or "",
            "author": user.id,
            "createdAt": utcnow().isoformat(),
            "isInternal": data.isInternal,
        }
        contact.responses = [*(contact.responses or []), response]
        if contact.status == "new":
            contact.status = "in-progress"
        return self.repo.save(self.db, contact)

    def stats(self) -> dict:
        return self.repo.stats(self.db)

    def unresolved(self) -> list[Contact]:
        return self.repo.get_unresolved(self.db)

    def delete_contact(self, contact_id: int) -> None:
        contact = self.get_contact(contact_id)
        public_ids = [attachment.get("publicId") for attachment in contact.attachments or []]
        self.repo.delete(self.db, contact)
        storage.discard_files(public_ids)
        logger.info(f"🗑️ Contact {contact_id} deleted")
