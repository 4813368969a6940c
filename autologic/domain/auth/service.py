"""Auth service - registration, login, token refresh and self-service profile"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import Conflict, Unauthorized, ValidationFailed
from ...models import User
from ...security import REFRESH_TOKEN, create_token_pair, decode_token, hash_password, verify_password
from ...shared.timeutils import utcnow
from ..users.repository import UserRepository
from ..users.service import DUPLICATE_EMAIL
from .schemas import ChangePasswordRequest, LoginRequest, ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def register(self, data: RegisterRequest) -> tuple[User, dict]:
        if self.repo.get_by_email(self.db, data.email):
            raise Conflict(DUPLICATE_EMAIL)

        try:
            user = self.repo.create(
                self.db,
                first_name=data.firstName,
                last_name=data.lastName,
                email=data.email,
                phone=data.phone,
                password_hash=hash_password(data.password),
                role="customer",
                preferred_language=data.preferredLanguage,
            )
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict(DUPLICATE_EMAIL) from e

        logger.info(f"🆕 Registered customer {user.email}")
        return user, create_token_pair(user.id)

    def login(self, data: LoginRequest) -> tuple[User, dict]:
        user = self.repo.get_by_email(self.db, data.email)
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning(f"⚠️ Failed login for {data.email}")
            raise Unauthorized(INVALID_CREDENTIALS)
        if not user.is_active:
            raise Unauthorized("Account is deactivated")

        user.last_login = utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user, create_token_pair(user.id)

    def refresh(self, refresh_token: str) -> dict:
        payload = decode_token(refresh_token, REFRESH_TOKEN)
        if not payload:
            raise Unauthorized("Invalid refresh token")
        try:
            user = self.repo.get_by_id(self.db, int(payload.get("sub")))
        except (TypeError, ValueError):
            user = None
        if not user or not user.is_active:
            raise Unauthorized("Invalid refresh token")
        return create_token_pair(user.id)

    def update_profile(self, user: User, data: ProfileUpdate) -> User:
        return self.repo.update(
            self.db,
            user,
            first_name=data.firstName,
            last_name=data.lastName,
            phone=data.phone,
            preferred_language=data.preferredLanguage,
        )

    def change_password(self, user: User, data: ChangePasswordRequest) -> None:
        if not verify_password(data.currentPassword, user.password_hash):
            raise ValidationFailed("Current password is incorrect")
        user.password_hash = hash_password(data.newPassword)
        self.db.commit()
        logger.info(f"🔑 Password changed for user {user.id}")
