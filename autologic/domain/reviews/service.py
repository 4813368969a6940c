"""Review service - eligibility gate, moderation and helpful marks"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ... import storage
from ...errors import Conflict, NotFound, ValidationFailed
from ...models import Review, User
from ...policy import authorize
from ...shared.pagination import PageParams, paginate
from ...shared.timeutils import utcnow
from ...utils.sanitization import sanitize_list, sanitize_string
from ..bookings.repository import BookingRepository
from ..services.repository import ServiceRepository
from .repository import ReviewRepository
from .schemas import ModerationUpdate, ReviewCreate, ReviewResponseCreate, ReviewUpdate

logger = logging.getLogger(__name__)

AUTO_APPROVE_RATING = 4
DUPLICATE_REVIEW = "Review already exists for this booking"


def initial_status(overall: int, current: str = "pending") -> str:
    """High ratings skip the moderation queue"""
    if current == "pending" and overall >= AUTO_APPROVE_RATING:
        return "approved"
    return current


class ReviewService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepository()
        self.bookings = BookingRepository()
        self.services = ServiceRepository()

    def list_reviews(
        self,
        params: PageParams,
        service_id: Optional[int] = None,
        rating: Optional[int] = None,
        verified: Optional[bool] = None,
        featured: Optional[bool] = None,
    ) -> tuple[list[Review], int]:
        return paginate(self.repo.query_public(self.db, service_id, rating, verified, featured), params)

    def get_review(self, review_id: int) -> Review:
        review = self.repo.get_by_id(self.db, review_id)
        if not review:
            raise NotFound("Review not found")
        return review

    def featured(self) -> list[Review]:
        return self.repo.get_featured(self.db)

    def service_stats(self, service_id: int) -> dict:
        counts = self.repo.rating_counts(self.db, service_id)
        total = sum(counts.values())
        average = round(sum(r * n for r, n in counts.items()) / total, 1) if total else 0
        return {
            "totalReviews": total,
            "averageRating": average,
            "ratingDistribution": {str(r): counts.get(r, 0) for r in range(1, 6)},
        }

    def create_review(self, data: ReviewCreate, user: User) -> Review:
        """Only the customer of a completed booking may review it, once"""
        authorize(user, "review", "create")

        booking = self.bookings.get_by_id(self.db, data.booking)
        if not booking:
            raise NotFound("Booking not found")
        # Ownership is checked against the booking, not the review
        authorize(user, "booking", "rate", booking)
        if booking.status != "completed":
            raise ValidationFailed("Can only review completed bookings")
        if self.repo.get_by_booking(self.db, booking.id):
            raise ValidationFailed(DUPLICATE_REVIEW)
        if not self.services.get_by_id(self.db, data.service):
            raise NotFound("Service not found")
        if data.service != booking.service_id:
            raise ValidationFailed("Review must be for the booked service")

        try:
            review = self.repo.create(
                self.db,
                customer_id=user.id,
                service_id=data.service,
                booking_id=booking.id,
                rating_overall=data.rating.overall,
                rating_quality=data.rating.quality,
                rating_timeliness=data.rating.timeliness,
                rating_communication=data.rating.communication,
                rating_value=data.rating.value,
                comment=sanitize_string(data.comment),
                comment_ar=sanitize_string(data.commentAr),
                pros=sanitize_list(data.pros),
                cons=sanitize_list(data.cons),
                images=[image.model_dump() for image in data.images],
                tags=sanitize_list(data.tags),
                language=data.language,
                is_verified=True,
                status=initial_status(data.rating.overall),
            )
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationFailed(DUPLICATE_REVIEW) from e

        logger.info(f"⭐ Review {review.id} ({review.rating_overall}/5) created for booking {booking.id}")
        return self.get_review(review.id)

    def update_review(self, review_id: int, data: ReviewUpdate, user: User) -> Review:
        review = self.get_review(review_id)
        authorize(user, "review", "update", review)

        if data.rating is not None:
            review.rating_overall = data.rating.overall
            review.rating_quality = data.rating.quality
            review.rating_timeliness = data.rating.timeliness
            review.rating_communication = data.rating.communication
            review.rating_value = data.rating.value
            review.status = initial_status(review.rating_overall, review.status)
        if data.comment is not None:
            review.comment = sanitize_string(data.comment)
        if data.commentAr is not None:
            review.comment_ar = sanitize_string(data.commentAr)
        if data.pros is not None:
            review.pros = sanitize_list(data.pros)
        if data.cons is not None:
            review.cons = sanitize_list(data.cons)
        if data.isPublic is not None:
            review.is_public = data.isPublic
        return self.repo.save(self.db, review)

    def delete_review(self, review_id: int, user: User) -> None:
        review = self.get_review(review_id)
        authorize(user, "review", "delete", review)
        public_ids = [image.get("publicId") for image in review.images or []]
        self.repo.delete(self.db, review)
        storage.discard_files(public_ids)
        logger.info(f"🗑️ Review {review_id} deleted by user {user.id}")

    def remove_image(self, review_id: int, public_id: str, user: User) -> Review:
        review = self.get_review(review_id)
        authorize(user, "review", "delete", review)
        images = review.images or []
        remaining = [image for image in images if image.get("publicId") != public_id]
        if len(remaining) == len(images):
            raise NotFound("Image not found")
        storage.discard_files([public_id])
        review.images = remaining
        return self.repo.save(self.db, review)

    def toggle_helpful(self, review_id: int, user: User) -> dict:
        self.get_review(review_id)
        authorize(user, "review", "mark_helpful")

        mark = self.repo.find_helpful_mark(self.db, review_id, user.id)
        if mark:
            self.repo.remove_helpful_mark(self.db, mark)
            marked = False
        else:
            try:
                self.repo.add_helpful_mark(self.db, review_id, user.id)
            except IntegrityError as e:
                # A concurrent request from the same user already inserted the mark
                self.db.rollback()
                raise Conflict("Review already marked as helpful") from e
            marked = True
        return {"helpful": self.repo.helpful_count(self.db, review_id), "userMarkedHelpful": marked}

    def respond(self, review_id: int, data: ReviewResponseCreate, user: User) -> Review:
        review = self.get_review(review_id)
        authorize(user, "review", "respond", review)
        review.response = {
            "text": sanitize_string(data.text),
            "textAr": sanitize_string(data.textAr),
            "author": user.id,
            "respondedAt": utcnow().isoformat(),
        }
        return self.repo.save(self.db, review)

    def moderate(self, review_id: int, data: ModerationUpdate, user: User) -> Review:
        review = self.get_review(review_id)
        authorize(user, "review", "moderate", review)
        review.status = data.status
        if data.isFeatured is not None:
            review.is_featured = data.isFeatured
        review.moderation = {
            "moderatedBy": user.id,
            "moderatedAt": utcnow().isoformat(),
            "reason": sanitize_string(data.reason),
            "notes": sanitize_string(data.notes),
        }
        logger.info(f"🛡️ Review {review.id} moderated to {data.status} by user {user.id}")
        return self.repo.save(self.db, review)
