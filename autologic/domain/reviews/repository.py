"""Review repository - Database operations for reviews and helpful marks"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from ...models import Review, ReviewHelpfulMark


class ReviewRepository:
    @staticmethod
    def _with_relations(query: Query) -> Query:
        return query.options(joinedload(Review.customer), joinedload(Review.service))

    @staticmethod
    def _published(db: Session) -> Query:
        return ReviewRepository._with_relations(db.query(Review)).filter(
            Review.is_public.is_(True), Review.status == "approved"
        )

    @staticmethod
    def get_by_id(db: Session, review_id: int) -> Optional[Review]:
        return ReviewRepository._with_relations(db.query(Review)).filter(Review.id == review_id).first()

    @staticmethod
    def get_by_booking(db: Session, booking_id: int) -> Optional[Review]:
        return db.query(Review).filter(Review.booking_id == booking_id).first()

    @staticmethod
    def query_public(
        db: Session,
        service_id: Optional[int] = None,
        rating: Optional[int] = None,
        verified: Optional[bool] = None,
        featured: Optional[bool] = None,
    ) -> Query:
        query = ReviewRepository._published(db)
        if service_id:
            query = query.filter(Review.service_id == service_id)
        if rating:
            query = query.filter(Review.rating_overall == rating)
        if verified is not None:
            query = query.filter(Review.is_verified == verified)
        if featured is not None:
            query = query.filter(Review.is_featured == featured)
        return query.order_by(Review.created_at.desc(), Review.id.desc())

    @staticmethod
    def get_featured(db: Session, limit: int = 10) -> list[Review]:
        return (
            ReviewRepository._published(db)
            .filter(Review.is_featured.is_(True))
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def rating_counts(db: Session, service_id: int) -> dict[int, int]:
        """Published review count per overall rating for one service"""
        rows = (
            db.query(Review.rating_overall, func.count(Review.id))
            .filter(
                Review.service_id == service_id,
                Review.is_public.is_(True),
                Review.status == "approved",
            )
            .group_by(Review.rating_overall)
            .all()
        )
        return {int(rating): int(count) for rating, count in rows}

    @staticmethod
    def create(db: Session, **review_data) -> Review:
        review = Review(**review_data)
        db.add(review)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def save(db: Session, review: Review) -> Review:
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    def delete(db: Session, review: Review) -> None:
        db.query(ReviewHelpfulMark).filter(ReviewHelpfulMark.review_id == review.id).delete(
            synchronize_session=False
        )
        db.delete(review)
        db.commit()

    # ------------------------------------------------------------------
    # Helpful marks
    # ------------------------------------------------------------------

    @staticmethod
    def find_helpful_mark(db: Session, review_id: int, user_id: int) -> Optional[ReviewHelpfulMark]:
        return (
            db.query(ReviewHelpfulMark)
            .filter(ReviewHelpfulMark.review_id == review_id, ReviewHelpfulMark.user_id == user_id)
            .first()
        )

    @staticmethod
    def add_helpful_mark(db: Session, review_id: int, user_id: int) -> None:
        """Insert the mark and bump the counter in one transaction (IntegrityError on a duplicate mark)"""
        db.add(ReviewHelpfulMark(review_id=review_id, user_id=user_id))
        db.flush()
        db.query(Review).filter(Review.id == review_id).update(
            {Review.helpful_count: Review.helpful_count + 1}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def remove_helpful_mark(db: Session, mark: ReviewHelpfulMark) -> None:
        review_id = mark.review_id
        db.delete(mark)
        db.query(Review).filter(Review.id == review_id, Review.helpful_count > 0).update(
            {Review.helpful_count: Review.helpful_count - 1}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def helpful_count(db: Session, review_id: int) -> int:
        return db.query(Review.helpful_count).filter(Review.id == review_id).scalar() or 0
