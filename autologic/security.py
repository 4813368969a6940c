"""
Security utilities: password hashing, JWT issuance and HTML/filename sanitizing
"""

import logging
import os
import re
import secrets
from datetime import timedelta
from typing import Any, Optional

import bleach
from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import (
    BCRYPT_ROUNDS,
    JWT_ALGORITHM,
    JWT_EXPIRE_MINUTES,
    JWT_REFRESH_EXPIRE_MINUTES,
    JWT_REFRESH_SECRET,
    SECRET_KEY,
)
from .shared.timeutils import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# JWT TOKENS
# ============================================================================


def _secret_for(token_type: str) -> str:
    return JWT_REFRESH_SECRET if token_type == REFRESH_TOKEN else SECRET_KEY


def create_token(user_id: int, token_type: str = ACCESS_TOKEN, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT for a user

    Args:
        user_id: Subject of the token
        token_type: "access" or "refresh"; refresh tokens use their own secret
        expires_delta: Lifetime override (defaults from config)
    """
    if expires_delta is None:
        minutes = JWT_REFRESH_EXPIRE_MINUTES if token_type == REFRESH_TOKEN else JWT_EXPIRE_MINUTES
        expires_delta = timedelta(minutes=minutes)

    issued_at = utcnow()
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jose_jwt.encode(payload, _secret_for(token_type), algorithm=JWT_ALGORITHM)


def create_token_pair(user_id: int) -> dict[str, str]:
    return {
        "token": create_token(user_id, ACCESS_TOKEN),
        "refreshToken": create_token(user_id, REFRESH_TOKEN),
    }


def decode_token(token: str, token_type: str = ACCESS_TOKEN) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT

    Returns:
        Decoded payload if valid and of the expected type, None otherwise
    """
    try:
        payload = jose_jwt.decode(token, _secret_for(token_type), algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    if payload.get("type") != token_type:
        logger.warning(f"JWT type mismatch: expected {token_type}, got {payload.get('type')}")
        return None
    return payload


# ============================================================================
# INPUT SANITIZATION
# ============================================================================

ALLOWED_HTML_TAGS = [
    "p",
    "br",
    "strong",
    "em",
    "u",
    "a",
    "ul",
    "ol",
    "li",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "blockquote",
    "code",
    "pre",
    "img",
]

ALLOWED_HTML_ATTRIBUTES = {
    "a": ["href", "title", "target"],
    "img": ["src", "alt", "title"],
    "*": ["class", "dir"],
}


def sanitize_html(html_content: Optional[str], allowed_tags: Optional[list] = None) -> Optional[str]:
    """
    Sanitize rich-text HTML (blog content) to prevent XSS

    Disallowed tags are stripped, not escaped.
    """
    if html_content is None:
        return None
    return bleach.clean(
        html_content,
        tags=allowed_tags or ALLOWED_HTML_TAGS,
        attributes=ALLOWED_HTML_ATTRIBUTES,
        protocols=["http", "https", "mailto"],
        strip=True,
    )


def sanitize_filename(filename: str) -> str:
    """Strip path components and unsafe characters from an uploaded file name"""
    filename = os.path.basename(filename.replace("\\", "/"))
    filename = re.sub(r"[^\w\s\-\.]", "", filename)
    filename = filename.strip(". ")

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[: 255 - len(ext)] + ext

    if not filename:
        filename = f"file_{secrets.token_urlsafe(8)}"

    return filename
