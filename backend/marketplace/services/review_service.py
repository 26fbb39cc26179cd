"""
GoEveryWork Marketplace — Review Service
==========================================

What:  Paginated review listing, rating statistics and review submission.
Who:   Called by the review routes.

Pagination Strategy (Cursor-Based):
    Reviews are shown newest first with "load more", ordered by
    (created_at, id) so reviews sharing a timestamp keep a stable order.
    The cursor is "<ISO created_at>_<id>" of the last review returned; the
    next page is WHERE (created_at, id) < (:created_at, :id). A bare ISO
    timestamp is also accepted. One extra row is fetched to compute has_more
    without a second round trip.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.exceptions import DatabaseError, NotFoundError
from marketplace.models.listing import ServiceListing
from marketplace.models.review import Review
from marketplace.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewStats,
)

logger = logging.getLogger(__name__)

STAR_VALUES = (5, 4, 3, 2, 1)

CURSOR_SEPARATOR = "_"


def encode_cursor(review: Review) -> str:
    return f"{review.created_at.isoformat()}{CURSOR_SEPARATOR}{review.id}"


def decode_cursor(cursor: str) -> Tuple[Optional[datetime], Optional[UUID]]:
    """
    Split a cursor into (created_at, id). Either part is None when it does
    not parse; a timestamp without an id is a valid cursor.
    """
    timestamp, _, review_id = cursor.partition(CURSOR_SEPARATOR)
    try:
        created_at = datetime.fromisoformat(timestamp)
    except ValueError:
        return None, None
    try:
        return created_at, UUID(review_id) if review_id else None
    except ValueError:
        return created_at, None


class ReviewService:

    async def list_reviews(
        self,
        db: AsyncSession,
        service_id: UUID,
        limit: int = 10,
        cursor: Optional[str] = None,
    ) -> ReviewListResponse:
        """
        One page of reviews for a listing, newest first.

        An unparseable cursor is ignored and the first page is returned.
        """
        try:
            query = select(Review).where(Review.service_id == service_id)

            cursor_dt, cursor_id = decode_cursor(cursor) if cursor else (None, None)
            if cursor_dt and cursor_id:
                query = query.where(
                    or_(
                        Review.created_at < cursor_dt,
                        and_(Review.created_at == cursor_dt, Review.id < cursor_id),
                    )
                )
            elif cursor_dt:
                query = query.where(Review.created_at < cursor_dt)

            query = query.order_by(desc(Review.created_at), desc(Review.id)).limit(limit + 1)
            result = await db.execute(query)
            reviews = list(result.scalars().all())

            count_result = await db.execute(
                select(func.count(Review.id)).where(Review.service_id == service_id)
            )
            total_count = count_result.scalar() or 0
        except Exception as e:
            logger.error("Database error listing reviews for %s: %s", service_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve reviews. Please try again.",
                context={"service_id": str(service_id)},
            )

        has_more = len(reviews) > limit
        if has_more:
            reviews = reviews[:limit]

        next_cursor = None
        if has_more and reviews:
            next_cursor = encode_cursor(reviews[-1])

        return ReviewListResponse(
            reviews=[ReviewResponse.model_validate(review) for review in reviews],
            total_count=total_count,
            has_more=has_more,
            next_cursor=next_cursor,
        )

    async def get_stats(self, db: AsyncSession, service_id: UUID) -> ReviewStats:
        """Total, average and per-star distribution of a listing's ratings."""
        try:
            result = await db.execute(
                select(Review.rating, func.count(Review.id))
                .where(Review.service_id == service_id)
                .group_by(Review.rating)
            )
            rows = result.all()
        except Exception as e:
            logger.error("Database error computing review stats for %s: %s", service_id, str(e))
            raise DatabaseError(
                message="Could not retrieve review statistics. Please try again.",
                context={"service_id": str(service_id)},
            )

        distribution = {stars: 0 for stars in STAR_VALUES}
        for rating, count in rows:
            if rating in distribution:
                distribution[rating] = count

        total = sum(distribution.values())
        average = 0.0
        if total:
            average = round(sum(stars * count for stars, count in distribution.items()) / total, 2)

        return ReviewStats(
            total_reviews=total,
            average_rating=average,
            rating_distribution=distribution,
        )

    async def create_review(
        self,
        db: AsyncSession,
        service_id: UUID,
        reviewer_id: str,
        data: ReviewCreate,
    ) -> ReviewResponse:
        """
        Attach a new review to an existing listing.

        Raises:
            NotFoundError: the listing does not exist.
            DatabaseError: the insert failed.
        """
        try:
            result = await db.execute(
                select(ServiceListing.id).where(ServiceListing.id == service_id)
            )
            exists = result.scalar_one_or_none() is not None
        except Exception as e:
            logger.error("Database error checking service %s: %s", service_id, str(e))
            raise DatabaseError(context={"service_id": str(service_id)})

        if not exists:
            raise NotFoundError(resource="service", resource_id=str(service_id))

        now = datetime.now(timezone.utc)
        review = Review(
            id=uuid.uuid4(),
            service_id=service_id,
            reviewer_id=reviewer_id,
            rating=data.rating,
            title=data.title,
            comment=data.comment,
            images=list(data.images),
            verified=False,
            helpful_count=0,
            created_at=now,
            updated_at=now,
        )
        db.add(review)
        try:
            await db.flush()
        except Exception as e:
            logger.error("Database error saving review for %s: %s", service_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your review. Please try again.",
                context={"service_id": str(service_id), "error_type": type(e).__name__},
            )

        logger.info("Review %s (%d stars) added to service %s", review.id, review.rating, service_id)
        return ReviewResponse.model_validate(review)


review_service = ReviewService()
