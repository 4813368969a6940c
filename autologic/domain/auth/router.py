"""Auth router - public registration/login and the caller's own profile"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...email_service import send_welcome_email
from ...models import User
from ...rate_limiter import create_rate_limiter
from ...shared.responses import success
from ..users.schemas import serialize_user
from .schemas import ChangePasswordRequest, LoginRequest, ProfileUpdate, RefreshRequest, RegisterRequest
from .service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

login_rate_limit = create_rate_limiter(limit=10, window_seconds=900, key_prefix="login")
register_rate_limit = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="register")


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


@router.post("/register", status_code=201, dependencies=[Depends(register_rate_limit)])
async def register(
    data: RegisterRequest,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_service),
):
    user, tokens = service.register(data)
    background_tasks.add_task(send_welcome_email, to=user.email, first_name=user.first_name)
    return success({"user": serialize_user(user)}, **tokens)


@router.post("/login", dependencies=[Depends(login_rate_limit)])
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    user, tokens = service.login(data)
    return success({"user": serialize_user(user)}, **tokens)


@router.post("/refresh")
async def refresh(data: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    return success(**service.refresh(data.refreshToken))


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return success({"user": serialize_user(current_user)})


@router.put("/me")
async def update_me(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return success({"user": serialize_user(service.update_profile(current_user, data))})


@router.put("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    service.change_password(current_user, data)
    return success(message="Password updated successfully")


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    # Tokens are stateless; the client discards them
    logger.info(f"👋 User {current_user.id} logged out")
    return success(message="Logged out successfully")
