"""
GoEveryWork Marketplace — Listing Schemas
===========================================

What:  Pydantic models for listing requests and responses, plus ServiceRecord,
       the minimal shape the slug codec reads.
Why:   The API contract (computed slug, price label, SEO block) differs from
       the table layout, and write payloads group location fields together.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


# ══════════════════════════════════════════════════════════════════════════
# Slug codec input
# ══════════════════════════════════════════════════════════════════════════


class ServiceRecord(BaseModel):
    """
    The subset of a listing the slug codec needs.

    Built straight from an ORM row with `ServiceRecord.model_validate(listing)`:
    `identifier` is read from the row's `id` and rendered as its canonical
    hyphenated string.
    """
    identifier: str = Field(validation_alias=AliasChoices("identifier", "id"))
    title: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("identifier", mode="before")
    @classmethod
    def stringify_identifier(cls, v: Any) -> Any:
        if isinstance(v, uuid.UUID):
            return str(v)
        return v

    @field_validator("title", mode="before")
    @classmethod
    def none_title_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class LocationInput(BaseModel):
    """Location picked on the map (coordinates plus reverse-geocoded address parts)."""
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    address: Optional[str] = Field(default=None, max_length=300)
    city: Optional[str] = Field(default=None, max_length=120)
    state: Optional[str] = Field(default=None, max_length=120)
    country: Optional[str] = Field(default=None, max_length=120)
    postal_code: Optional[str] = Field(default=None, max_length=20)


class ListingCreate(BaseModel):
    """
    Payload for publishing a new listing.

    provider_id is never accepted from the body; it comes from the
    authenticated user forwarded by the identity provider.
    """
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    main_image: Optional[str] = Field(default=None, max_length=500)
    gallery: List[str] = Field(default_factory=list)
    category: Optional[str] = Field(default=None, max_length=100)
    min_price: float = Field(default=0, ge=0)
    max_price: float = Field(default=0, ge=0)
    location: Optional[LocationInput] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped

    @model_validator(mode="after")
    def check_price_range(self) -> "ListingCreate":
        if self.max_price < self.min_price:
            raise ValueError("max_price must be greater than or equal to min_price")
        return self


class ListingUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied.

    When `location` is sent, every location column is replaced with its
    contents (missing parts become NULL, country falls back to the default).
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    main_image: Optional[str] = Field(default=None, max_length=500)
    gallery: Optional[List[str]] = None
    category: Optional[str] = Field(default=None, max_length=100)
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    status: Optional[bool] = None
    location: Optional[LocationInput] = None

    @model_validator(mode="after")
    def check_price_range(self) -> "ListingUpdate":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.max_price < self.min_price
        ):
            raise ValueError("max_price must be greater than or equal to min_price")
        return self


class MapBounds(BaseModel):
    """Visible map rectangle, in decimal degrees."""
    north: float = Field(ge=-90, le=90)
    south: float = Field(ge=-90, le=90)
    east: float = Field(ge=-180, le=180)
    west: float = Field(ge=-180, le=180)

    @model_validator(mode="after")
    def check_latitudes(self) -> "MapBounds":
        if self.south > self.north:
            raise ValueError("south must not be greater than north")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ListingResponse(BaseModel):
    """
    A listing as rendered in cards, lists and map popups.

    slug is recomputed on every response from the current title and location,
    so it changes when those are edited; any earlier slug still resolves.
    """
    id: uuid.UUID
    slug: str = Field(description="URL path segment: /services/{slug}")
    title: str
    description: Optional[str] = None
    main_image: Optional[str] = None
    gallery: List[str] = Field(default_factory=list)
    min_price: float
    max_price: float
    price_range: str = Field(description="Display label, e.g. '$50,000 - $120,000'")
    category: Optional[str] = None
    provider_id: str
    status: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    location: str = Field(description="Display label, e.g. 'Cali, Valle del Cauca, Colombia'")
    distance_km: Optional[float] = Field(
        default=None,
        description="Distance from the searcher's position (location-aware search only)",
    )
    created_at: datetime
    updated_at: datetime


class SeoMetadata(BaseModel):
    """Head metadata for the listing detail page."""
    title: str
    description: str
    keywords: str
    structured_data: Dict[str, Any] = Field(description="schema.org Service as JSON-LD")


class ListingDetailResponse(ListingResponse):
    """
    Full listing detail, returned by id and slug lookups.

    requested_slug echoes the slug the client asked for (slug lookups only);
    when it differs from `slug` the frontend should redirect to the canonical one.
    """
    canonical_url: str
    requested_slug: Optional[str] = None
    seo: SeoMetadata


class ListingListResponse(BaseModel):
    services: List[ListingResponse]
    total_count: int
