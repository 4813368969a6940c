"""Review schemas"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...i18n import localize, localize_entry
from ...models import LANGUAGES, REVIEW_STATUSES
from ...shared.validators import validate_choice
from ..services.schemas import ImageRef, service_summary
from ..users.schemas import user_summary

SUB_RATINGS = ("quality", "timeliness", "communication", "value")


class ReviewRating(BaseModel):
    overall: int = Field(..., ge=1, le=5)
    quality: Optional[int] = Field(None, ge=1, le=5)
    timeliness: Optional[int] = Field(None, ge=1, le=5)
    communication: Optional[int] = Field(None, ge=1, le=5)
    value: Optional[int] = Field(None, ge=1, le=5)


class ReviewCreate(BaseModel):
    booking: int
    service: int
    rating: ReviewRating
    comment: Optional[str] = Field(None, max_length=1000)
    commentAr: Optional[str] = Field(None, max_length=1000)
    pros: list[str] = []
    cons: list[str] = []
    images: list[ImageRef] = Field(default=[], max_length=5)
    tags: list[str] = []
    language: str = "ar"

    @field_validator("language")
    @classmethod
    def check_language(cls, v):
        return validate_choice(v, LANGUAGES, "language")


class ReviewUpdate(BaseModel):
    rating: Optional[ReviewRating] = None
    comment: Optional[str] = Field(None, max_length=1000)
    commentAr: Optional[str] = Field(None, max_length=1000)
    pros: Optional[list[str]] = None
    cons: Optional[list[str]] = None
    isPublic: Optional[bool] = None


class ReviewResponseCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)
    textAr: str = Field(..., min_length=1, max_length=1000)


class ModerationUpdate(BaseModel):
    status: str
    reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)
    isFeatured: Optional[bool] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return validate_choice(v, REVIEW_STATUSES, "status")


def ratings_of(review) -> dict:
    return {
        "overall": review.rating_overall,
        **{name: getattr(review, f"rating_{name}") for name in SUB_RATINGS},
    }


def average_rating(review) -> float:
    """Mean of the overall rating and whichever sub-ratings were given"""
    given = [value for value in ratings_of(review).values() if value is not None]
    if not given:
        return 0
    return sum(given) / len(given)


def stars(overall: int) -> str:
    return "★" * overall + "☆" * (5 - overall)


def _response(response: Optional[dict], locale: str) -> Optional[dict]:
    if not response:
        return None
    return {
        "text": localize_entry(response, "text", locale),
        "author": response.get("author"),
        "respondedAt": response.get("respondedAt"),
    }


def serialize_review(review, locale: str) -> dict:
    customer = user_summary(review.customer)
    if customer:
        # Public listings never expose a reviewer's contact details
        customer = {key: customer[key] for key in ("id", "firstName", "lastName")}
    return {
        "id": review.id,
        "customer": customer,
        "service": service_summary(review.service, locale),
        "booking": review.booking_id,
        "rating": ratings_of(review),
        "averageRating": average_rating(review),
        "stars": stars(review.rating_overall),
        "comment": localize(review, "comment", locale),
        "pros": review.pros or [],
        "cons": review.cons or [],
        "images": review.images or [],
        "isVerified": review.is_verified,
        "isPublic": review.is_public,
        "isFeatured": review.is_featured,
        "helpfulCount": review.helpful_count,
        "response": _response(review.response, locale),
        "status": review.status,
        "moderation": review.moderation,
        "tags": review.tags or [],
        "language": review.language,
        "createdAt": review.created_at,
        "updatedAt": review.updated_at,
    }
