"""Review service - Business logic for reviews and their moderation"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import RequestContext
from ...errors import NotFound, PermissionDenied, StateConflict
from ...models import Booking, Review
from ...shared.access import get_business_or_404, is_business_owner, require_business_owner
from .schemas import ReviewCreate

logger = logging.getLogger(__name__)


class ReviewService:
    """Service layer for review business logic"""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, review_id: int) -> Review:
        review = self.db.query(Review).filter(Review.id == review_id).first()
        if not review:
            raise NotFound("Review not found")
        return review

    def create_review(self, ctx: RequestContext, data: ReviewCreate) -> Review:
        booking = self.db.query(Booking).filter(Booking.id == data.booking_id).first()
        if not booking:
            raise NotFound("Booking not found")
        if booking.customer_id != ctx.user_id:
            raise PermissionDenied("Only the customer can review this booking")
        if booking.booking_status != "completed":
            raise StateConflict("Only completed bookings can be reviewed")
        if self.db.query(Review.id).filter(Review.booking_id == booking.id).first():
            raise StateConflict("This booking has already been reviewed")

        review = Review(
            booking_id=booking.id,
            business_id=booking.business_id,
            reviewer_id=ctx.user_id,
            rating=data.rating,
            body=data.body,
        )
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise StateConflict("This booking has already been reviewed") from None
        self.db.refresh(review)
        logger.info(f"⭐ Review {review.id} ({review.rating}/5) for business {review.business_id}")
        return review

    def list_reviews(self, ctx: Optional[RequestContext], business_id: int) -> dict:
        """Reviews for a business; hidden ones only for its owner or an admin"""
        business = get_business_or_404(self.db, business_id)
        query = self.db.query(Review).filter(Review.business_id == business_id)
        moderator = ctx is not None and (ctx.is_admin or is_business_owner(ctx, business))
        if not moderator:
            query = query.filter(Review.is_hidden.is_(False))
        reviews = query.order_by(Review.created_at.desc(), Review.id.desc()).all()

        visible = [r.rating for r in reviews if not r.is_hidden]
        average = round(sum(visible) / len(visible), 2) if visible else None
        return {
            "business_id": business_id,
            "review_count": len(visible),
            "average_rating": average,
            "reviews": reviews,
        }

    def set_hidden(
        self, ctx: RequestContext, review_id: int, hidden: bool, reason: Optional[str] = None
    ) -> Review:
        review = self._get(review_id)
        require_business_owner(self.db, ctx, review.business_id)
        review.is_hidden = hidden
        review.hidden_reason = reason if hidden else None
        self.db.commit()
        self.db.refresh(review)
        logger.info(f"👁️ Review {review.id} {'hidden' if hidden else 'unhidden'} by user {ctx.user_id}")
        return review

    def respond(self, ctx: RequestContext, review_id: int, response: str) -> Review:
        review = self._get(review_id)
        require_business_owner(self.db, ctx, review.business_id, allow_admin=False)
        review.owner_response = response
        review.owner_responded_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(review)
        return review

    def delete_review(self, ctx: RequestContext, review_id: int) -> dict:
        if not ctx.is_admin:
            raise PermissionDenied("Only admins can delete reviews")
        review = self._get(review_id)
        self.db.delete(review)
        self.db.commit()
        logger.info(f"🗑️ Review {review_id} deleted by admin {ctx.user_id}")
        return {"message": "Review deleted"}
