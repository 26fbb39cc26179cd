"""
GoEveryWork Marketplace — Review Route Handlers
=================================================

What:  Reviews of a listing: paginated list, rating stats and submission.
Who:   Called by the review section of the listing detail page.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import settings
from marketplace.database import get_db_session
from marketplace.dependencies import get_current_user_id
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewStats,
)
from marketplace.services.review_service import review_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services/{service_id}/reviews", tags=["Reviews"])


@router.get(
    "",
    response_model=ReviewListResponse,
    summary="List reviews of a listing",
    description=(
        "Newest first, cursor-paginated. Pass `next_cursor` from the previous page "
        "as `cursor` to load more."
    ),
)
async def list_reviews(
    service_id: UUID,
    response: Response,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    cursor: Optional[str] = Query(default=None, description="next_cursor of the previous page"),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewListResponse:
    result = await review_service.list_reviews(
        db,
        service_id,
        limit=limit or settings.reviews_page_size,
        cursor=cursor,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/stats",
    response_model=ReviewStats,
    summary="Rating statistics of a listing",
)
async def review_stats(
    service_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ReviewStats:
    return await review_service.get_stats(db, service_id)


@router.post(
    "",
    status_code=201,
    response_model=ReviewResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        404: {"description": "Service not found", "model": ErrorResponse},
    },
    summary="Review a listing",
)
async def create_review(
    service_id: UUID,
    payload: ReviewCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewResponse:
    return await review_service.create_review(db, service_id, user_id, payload)
