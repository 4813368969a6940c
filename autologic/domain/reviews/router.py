"""Reviews router"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...i18n import get_locale
from ...models import User
from ...shared.pagination import PageParams
from ...shared.responses import paginated, success
from .schemas import ModerationUpdate, ReviewCreate, ReviewResponseCreate, ReviewUpdate, serialize_review
from .service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    """Dependency injection for ReviewService"""
    return ReviewService(db)


@router.get("")
async def list_reviews(
    service_id: Optional[int] = Query(None, alias="service"),
    rating: Optional[int] = Query(None, ge=1, le=5),
    verified: Optional[bool] = Query(None),
    featured: Optional[bool] = Query(None),
    params: PageParams = Depends(),
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    reviews, total = service.list_reviews(params, service_id, rating, verified, featured)
    return paginated("reviews", [serialize_review(r, locale) for r in reviews], total, params, locale)


@router.get("/featured/list")
async def featured_reviews(
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    reviews = service.featured()
    return success({"reviews": [serialize_review(r, locale) for r in reviews]}, locale, results=len(reviews))


@router.get("/service/{service_id}")
async def reviews_for_service(
    service_id: int,
    rating: Optional[int] = Query(None, ge=1, le=5),
    params: PageParams = Depends(),
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    reviews, total = service.list_reviews(params, service_id, rating)
    return paginated("reviews", [serialize_review(r, locale) for r in reviews], total, params, locale)


@router.get("/service/{service_id}/stats")
async def service_review_stats(service_id: int, service: ReviewService = Depends(get_review_service)):
    return success({"stats": service.service_stats(service_id)})


@router.get("/{review_id}")
async def get_review(
    review_id: int,
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    return success({"review": serialize_review(service.get_review(review_id), locale)}, locale)


@router.post("", status_code=201)
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    review = service.create_review(data, current_user)
    return success({"review": serialize_review(review, locale)}, locale)


@router.put("/{review_id}")
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    review = service.update_review(review_id, data, current_user)
    return success({"review": serialize_review(review, locale)}, locale)


@router.delete("/{review_id}", status_code=204)
async def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    service.delete_review(review_id, current_user)
    return Response(status_code=204)


@router.delete("/{review_id}/images/{public_id:path}")
async def delete_review_image(
    review_id: int,
    public_id: str,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    review = service.remove_image(review_id, public_id, current_user)
    return success({"review": serialize_review(review, locale)}, locale, message="Image deleted successfully")


@router.post("/{review_id}/helpful")
async def mark_helpful(
    review_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return success(service.toggle_helpful(review_id, current_user))


@router.post("/{review_id}/respond")
async def respond_to_review(
    review_id: int,
    data: ReviewResponseCreate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    review = service.respond(review_id, data, current_user)
    return success({"review": serialize_review(review, locale)}, locale)


@router.put("/{review_id}/moderate")
async def moderate_review(
    review_id: int,
    data: ModerationUpdate,
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
    service: ReviewService = Depends(get_review_service),
):
    review = service.moderate(review_id, data, current_user)
    return success({"review": serialize_review(review, locale)}, locale)
