"""Service repository - Database operations for the service catalogue"""

from typing import Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Query, Session

from ...models import Service


class ServiceRepository:
    @staticmethod
    def get_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def query_services(
        db: Session,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        active: Optional[bool] = None,
    ) -> Query:
        query = db.query(Service)
        if category:
            query = query.filter(Service.category == category)
        if featured is not None:
            query = query.filter(Service.is_popular == featured)
        if active is not None:
            query = query.filter(Service.is_active == active)
        return query.order_by(Service.created_at.desc(), Service.id.desc())

    @staticmethod
    def search(db: Session, term: str) -> Query:
        pattern = f"%{term.strip()}%"
        return (
            db.query(Service)
            .filter(
                Service.is_active.is_(True),
                or_(
                    Service.name.ilike(pattern),
                    Service.name_ar.ilike(pattern),
                    Service.description.ilike(pattern),
                    Service.description_ar.ilike(pattern),
                    cast(Service.tags, String).ilike(pattern),
                ),
            )
            .order_by(Service.created_at.desc(), Service.id.desc())
        )

    @staticmethod
    def get_popular(db: Session, limit: int = 6) -> list[Service]:
        return (
            db.query(Service)
            .filter(Service.is_active.is_(True), Service.is_popular.is_(True))
            .order_by(Service.created_at.desc(), Service.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def category_counts(db: Session) -> dict[str, int]:
        """Active service count per category (categories with only inactive services report 0)"""
        active = dict(
            db.query(Service.category, func.count(Service.id))
            .filter(Service.is_active.is_(True))
            .group_by(Service.category)
            .all()
        )
        all_categories = [row[0] for row in db.query(Service.category).distinct().all()]
        return {category: int(active.get(category, 0)) for category in sorted(all_categories)}

    @staticmethod
    def create(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()
