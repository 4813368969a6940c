"""Service catalogue schemas"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...i18n import localize
from ...models import SERVICE_CATEGORIES
from ...shared.validators import validate_choice


class ImageRef(BaseModel):
    url: str
    publicId: str
    alt: Optional[str] = None


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    nameAr: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    descriptionAr: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    duration: int = Field(..., ge=1, description="Hours")
    category: str = "other"
    images: list[ImageRef] = []
    tags: list[str] = []
    isActive: bool = True
    isPopular: bool = False

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return validate_choice(v.lower(), SERVICE_CATEGORIES, "category")


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    nameAr: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    descriptionAr: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, ge=1)
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    isActive: Optional[bool] = None
    isPopular: Optional[bool] = None

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        if v is None:
            return v
        return validate_choice(v.lower(), SERVICE_CATEGORIES, "category")


def serialize_service(service, locale: str) -> dict:
    return {
        "id": service.id,
        "name": localize(service, "name", locale),
        "description": localize(service, "description", locale),
        "price": service.price,
        "duration": service.duration,
        "category": service.category,
        "images": service.images or [],
        "tags": service.tags or [],
        "isActive": service.is_active,
        "isPopular": service.is_popular,
        "createdAt": service.created_at,
        "updatedAt": service.updated_at,
    }


def service_summary(service, locale: str) -> Optional[dict]:
    if service is None:
        return None
    return {
        "id": service.id,
        "name": localize(service, "name", locale),
        "price": service.price,
        "duration": service.duration,
        "category": service.category,
    }
