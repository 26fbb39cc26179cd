"""
GoEveryWork Marketplace — Review Schemas
==========================================

What:  Request/response models for listing reviews and their aggregate stats.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5, description="1-5 stars")
    title: str = Field(min_length=1, max_length=200)
    comment: Optional[str] = Field(default=None, max_length=5000)
    images: List[str] = Field(default_factory=list, max_length=10)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped


class ReviewResponse(BaseModel):
    id: uuid.UUID
    service_id: uuid.UUID
    reviewer_id: str
    rating: int
    title: str
    comment: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    verified: bool
    helpful_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReviewListResponse(BaseModel):
    """
    One page of reviews, newest first.

    next_cursor identifies the last review in the page ("<ISO created_at>_<id>");
    send it back as `cursor` to fetch the following page.
    """
    reviews: List[ReviewResponse]
    total_count: int
    has_more: bool
    next_cursor: Optional[str] = None


class ReviewStats(BaseModel):
    total_reviews: int
    average_rating: float = Field(description="Mean rating rounded to 2 decimals, 0 when unrated")
    rating_distribution: Dict[int, int] = Field(
        description="Count of reviews per star value, keys 5 down to 1"
    )
