"""Contact repository - Database operations for contact submissions"""

from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session, joinedload

from ...models import Contact

UNRESOLVED_STATUSES = ("new", "in-progress")

# Most pressing first when ordering the unresolved queue
PRIORITY_RANK = case(
    {"urgent": 4, "high": 3, "medium": 2, "low": 1},
    value=Contact.priority,
    else_=0,
)


class ContactRepository:
    @staticmethod
    def _with_assignee(query: Query) -> Query:
        return query.options(joinedload(Contact.assigned_to))

    @staticmethod
    def get_by_id(db: Session, contact_id: int) -> Optional[Contact]:
        return ContactRepository._with_assignee(db.query(Contact)).filter(Contact.id == contact_id).first()

    @staticmethod
    def query_contacts(
        db: Session,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        contact_type: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> Query:
        query = ContactRepository._with_assignee(db.query(Contact))
        if status:
            query = query.filter(Contact.status == status)
        if priority:
            query = query.filter(Contact.priority == priority)
        if contact_type:
            query = query.filter(Contact.type == contact_type)
        if assigned_to:
            query = query.filter(Contact.assigned_to_id == assigned_to)
        return query.order_by(Contact.created_at.desc(), Contact.id.desc())

    @staticmethod
    def get_unresolved(db: Session) -> list[Contact]:
        return (
            ContactRepository._with_assignee(db.query(Contact))
            .filter(Contact.status.in_(UNRESOLVED_STATUSES))
            .order_by(PRIORITY_RANK.desc(), Contact.created_at.desc(), Contact.id.desc())
            .all()
        )

    @staticmethod
    def stats(db: Session) -> dict:
        def count_where(column, value):
            return func.coalesce(func.sum(case((column == value, 1), else_=0)), 0)

        row = db.query(
            func.count(Contact.id),
            count_where(Contact.status, "new"),
            count_where(Contact.status, "in-progress"),
            count_where(Contact.status, "resolved"),
            count_where(Contact.status, "closed"),
            count_where(Contact.priority, "urgent"),
            count_where(Contact.priority, "high"),
            count_where(Contact.priority, "medium"),
            count_where(Contact.priority, "low"),
        ).one()
        keys = ("total", "new", "inProgress", "resolved", "closed", "urgent", "high", "medium", "low")
        return {key: int(value or 0) for key, value in zip(keys, row)}

    @staticmethod
    def create(db: Session, **contact_data) -> Contact:
        contact = Contact(**contact_data)
        db.add(contact)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def save(db: Session, contact: Contact) -> Contact:
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def delete(db: Session, contact: Contact) -> None:
        db.delete(contact)
        db.commit()
