"""Auth schemas - registration, login and profile payloads"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import LANGUAGES
from ...shared.validators import validate_choice, validate_email, validate_phone


class RegisterRequest(BaseModel):
    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: str
    password: str = Field(..., min_length=6, max_length=72)
    confirmPassword: str
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

    @field_validator("preferredLanguage")
    @classmethod
    def check_language(cls, v):
        return validate_choice(v, LANGUAGES, "language")

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirmPassword:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class RefreshRequest(BaseModel):
    refreshToken: str


class ProfileUpdate(BaseModel):
    firstName: Optional[str] = Field(None, min_length=1, max_length=100)
    lastName: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    preferredLanguage: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("preferredLanguage")
    @classmethod
    def check_language(cls, v):
        return validate_choice(v, LANGUAGES, "language")


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword: str = Field(..., min_length=6, max_length=72)
    confirmPassword: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.newPassword != self.confirmPassword:
            raise ValueError("Passwords do not match")
        return self
