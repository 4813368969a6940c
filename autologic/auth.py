import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .errors import Unauthorized
from .models import User
from .security import ACCESS_TOKEN, decode_token

logger = logging.getLogger(__name__)

# auto_error is off so a missing header yields our 401 envelope, not FastAPI's default
security = HTTPBearer(auto_error=False)


def _user_from_token(token: str, db: Session) -> User:
    payload = decode_token(token, ACCESS_TOKEN)
    if not payload:
        raise Unauthorized("Not authorized, token failed")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("⚠️ Token missing a usable subject claim")
        raise Unauthorized("Not authorized, token failed") from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Token subject {user_id} no longer exists")
        raise Unauthorized("Not authorized, user not found")
    if not user.is_active:
        logger.warning(f"⚠️ Deactivated user {user.email} attempted access")
        raise Unauthorized("Account is deactivated")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user or fail with 401"""
    if not credentials or not credentials.credentials:
        raise Unauthorized("Not authorized, no token")

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise Unauthorized("Not authorized, token failed")

    user = _user_from_token(token, db)
    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous or invalid callers get None"""
    if not credentials or not credentials.credentials:
        return None
    try:
        return _user_from_token(credentials.credentials, db)
    except Unauthorized:
        return None
