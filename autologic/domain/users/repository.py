"""User repository - Database operations for accounts"""

from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Query, Session

from ...models import User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    @staticmethod
    def query_users(
        db: Session,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Query:
        query = db.query(User)
        if role:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                    User.phone.ilike(pattern),
                )
            )
        return query

    @staticmethod
    def get_active_technicians(db: Session) -> list[User]:
        return (
            db.query(User)
            .filter(User.role == "technician", User.is_active.is_(True))
            .order_by(User.first_name.asc(), User.id.asc())
            .all()
        )

    @staticmethod
    def create(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete(db: Session, user: User) -> None:
        db.delete(user)
        db.commit()

    @staticmethod
    def stats(db: Session) -> dict:
        row = db.query(
            func.count(User.id),
            func.sum(case((User.is_active.is_(True), 1), else_=0)),
            func.sum(case((User.role == "admin", 1), else_=0)),
            func.sum(case((User.role == "technician", 1), else_=0)),
            func.sum(case((User.role == "customer", 1), else_=0)),
        ).one()
        total, active, admins, technicians, customers = (int(v or 0) for v in row)
        return {
            "totalUsers": total,
            "activeUsers": active,
            "inactiveUsers": total - active,
            "adminUsers": admins,
            "technicianUsers": technicians,
            "customerUsers": customers,
        }
