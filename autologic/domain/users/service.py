"""User service - Business logic for back-office account management"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import Conflict, NotFound, ValidationFailed
from ...models import User
from ...security import hash_password
from ...shared.pagination import PageParams, paginate
from .repository import UserRepository
from .schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User already exists with this email"


class UserService:
    """Service layer for user business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def list_users(
        self,
        params: PageParams,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> tuple[list[User], int]:
        query = self.repo.query_users(self.db, role, is_active, search)
        return paginate(query.order_by(User.created_at.desc(), User.id.desc()), params)

    def search_users(self, term: str, params: PageParams) -> tuple[list[User], int]:
        query = self.repo.query_users(self.db, search=term)
        return paginate(query.order_by(User.first_name.asc(), User.id.asc()), params)

    def get_user(self, user_id: int) -> User:
        user = self.repo.get_by_id(self.db, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def ensure_email_available(self, email: str, exclude_id: Optional[int] = None) -> None:
        existing = self.repo.get_by_email(self.db, email)
        if existing and existing.id != exclude_id:
            raise Conflict(DUPLICATE_EMAIL)

    def create_user(self, data: UserCreate) -> User:
        self.ensure_email_available(data.email)
        try:
            user = self.repo.create(
                self.db,
                first_name=data.firstName,
                last_name=data.lastName,
                email=data.email,
                phone=data.phone,
                password_hash=hash_password(data.password),
                role=data.role,
                is_active=data.isActive,
                preferred_language=data.preferredLanguage,
            )
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(DUPLICATE_EMAIL) from e
        logger.info(f"🆕 Created {user.role} account {user.email}")
        return user

    def update_user(self, user_id: int, data: UserUpdate) -> User:
        user = self.get_user(user_id)
        if data.email is not None:
            self.ensure_email_available(data.email, exclude_id=user.id)

        updates = {
            "first_name": data.firstName,
            "last_name": data.lastName,
            "email": data.email,
            "phone": data.phone,
            "role": data.role,
            "is_active": data.isActive,
            "preferred_language": data.preferredLanguage,
        }
        if data.password:
            updates["password_hash"] = hash_password(data.password)

        try:
            return self.repo.update(self.db, user, **updates)
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(DUPLICATE_EMAIL) from e

    def delete_user(self, user_id: int, acting_user: User) -> None:
        user = self.get_user(user_id)
        if user.id == acting_user.id:
            raise ValidationFailed("Cannot delete your own account")
        try:
            self.repo.delete(self.db, user)
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("User has bookings or other records; deactivate the account instead") from e
        logger.info(f"🗑️ Admin {acting_user.id} deleted user {user_id}")

    def set_active(self, user_id: int, active: bool, acting_user: User) -> User:
        user = self.get_user(user_id)
        if not active and user.id == acting_user.id:
            raise ValidationFailed("Cannot deactivate your own account")
        user.is_active = active
        self.db.commit()
        self.db.refresh(user)
        return user

    def change_role(self, user_id: int, role: str, acting_user: User) -> User:
        user = self.get_user(user_id)
        if user.id == acting_user.id:
            raise ValidationFailed("Cannot change your own role")
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"🔑 User {user_id} role changed to {role}")
        return user

    def get_stats(self) -> dict:
        return self.repo.stats(self.db)

    def get_technicians(self) -> list[User]:
        return self.repo.get_active_technicians(self.db)
