"""User domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import LANGUAGES, USER_ROLES
from ...shared.validators import validate_choice, validate_email, validate_phone


class UserCreate(BaseModel):
    """Schema for an admin creating an account"""

    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: str
    password: str = Field(..., min_length=6, max_length=72)
    role: str = "customer"
    isActive: bool = True
    preferredLanguage: str = "ar"

    @field_validator("firstName", "lastName")
    @classmethod
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return validate_choice(v, USER_ROLES, "role")

    @field_validator("preferredLanguage")
    @classmethod
    def check_language(cls, v):
        return validate_choice(v, LANGUAGES, "language")


class UserUpdate(BaseModel):
    """Schema for an admin updating an account; a password resets it"""

    firstName: Optional[str] = Field(None, min_length=1, max_length=100)
    lastName: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[str] = None
    isActive: Optional[bool] = None
    preferredLanguage: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return validate_choice(v, USER_ROLES, "role")

    @field_validator("preferredLanguage")
    @classmethod
    def check_language(cls, v):
        return validate_choice(v, LANGUAGES, "language")


class RoleUpdate(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def check_role(cls, v):
        return validate_choice(v, USER_ROLES, "role")


def serialize_user(user) -> dict:
    """Full account view (never includes the password hash)"""
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "fullName": user.full_name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
        "isActive": user.is_active,
        "preferredLanguage": user.preferred_language,
        "lastLogin": user.last_login,
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }


def user_summary(user) -> Optional[dict]:
    """Contact card embedded in bookings, projects, reviews and posts"""
    if user is None:
        return None
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "phone": user.phone,
    }
