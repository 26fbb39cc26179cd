"""
GoEveryWork Marketplace — Listing Route Handlers
==================================================

What:  Browse, search, map and slug endpoints plus provider writes for
       service listings.
Who:   Called by the frontend home, search, map, detail and dashboard pages.

Route order matters: the fixed paths (/search, /map, /slug/...) are declared
before /services/{service_id}.
"""

import logging
from typing import Optional
from uuid import UUID

import pydantic
from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database import get_db_session
from marketplace.dependencies import get_current_user_id
from marketplace.exceptions import ValidationError
from marketplace.schemas.common import ErrorResponse
from marketplace.schemas.listing import (
    ListingCreate,
    ListingDetailResponse,
    ListingListResponse,
    ListingUpdate,
    MapBounds,
)
from marketplace.services.listing_service import listing_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Services"])


def _set_total_count(response: Response, result: ListingListResponse) -> None:
    response.headers["X-Total-Count"] = str(result.total_count)


@router.get(
    "/services",
    response_model=ListingListResponse,
    summary="Browse service listings",
    description=(
        "Active listings, newest first. Filter by `category`, or pass `provider_id` "
        "to get every listing of one provider (inactive ones included)."
    ),
)
async def list_services(
    response: Response,
    category: Optional[str] = Query(default=None, max_length=100),
    provider_id: Optional[str] = Query(default=None, max_length=64),
    db: AsyncSession = Depends(get_db_session),
) -> ListingListResponse:
    if provider_id:
        result = await listing_service.list_by_provider(db, provider_id)
    elif category:
        result = await listing_service.list_by_category(db, category)
    else:
        result = await listing_service.list_active(db)
    _set_total_count(response, result)
    return result


@router.get(
    "/services/search",
    response_model=ListingListResponse,
    summary="Search service listings",
    description=(
        "Case-insensitive text search over title, description and category, with an "
        "optional exact category filter. When `lat` and `lng` are given, only listings "
        "within `radius_km` are returned, nearest first, with `distance_km` set."
    ),
)
async def search_services(
    response: Response,
    q: str = Query(default="", max_length=200, description="Free-text search term"),
    category: str = Query(default="", max_length=100),
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lng: Optional[float] = Query(default=None, ge=-180, le=180),
    radius_km: Optional[float] = Query(default=None, gt=0, le=20000),
    db: AsyncSession = Depends(get_db_session),
) -> ListingListResponse:
    if (lat is None) != (lng is None):
        raise ValidationError(message="lat and lng must be provided together", field="lat")
    result = await listing_service.search(
        db,
        query=q,
        category=category,
        latitude=lat,
        longitude=lng,
        radius_km=radius_km,
    )
    _set_total_count(response, result)
    return result


@router.get(
    "/services/map",
    response_model=ListingListResponse,
    summary="Listings to plot on the map",
    description="Active listings with coordinates, optionally limited to the visible bounds.",
)
async def map_services(
    response: Response,
    north: Optional[float] = Query(default=None),
    south: Optional[float] = Query(default=None),
    east: Optional[float] = Query(default=None),
    west: Optional[float] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ListingListResponse:
    edges = {"north": north, "south": south, "east": east, "west": west}
    bounds = None
    if any(value is not None for value in edges.values()):
        if any(value is None for value in edges.values()):
            raise ValidationError(
                message="Map bounds need all of north, south, east and west",
                field="bounds",
            )
        try:
            bounds = MapBounds(**edges)
        except pydantic.ValidationError as e:
            raise ValidationError(
                message="Invalid map bounds",
                field="bounds",
                context={"errors": [err["msg"] for err in e.errors()]},
            )

    result = await listing_service.list_for_map(db, bounds)
    _set_total_count(response, result)
    return result


@router.get(
    "/services/slug/{slug}",
    response_model=ListingDetailResponse,
    responses={404: {"description": "No listing for this slug", "model": ErrorResponse}},
    summary="Resolve a listing slug",
    description=(
        "Resolves a `/services/{slug}` path segment. Only the trailing short id is "
        "used; `slug` in the response is the current canonical slug."
    ),
)
async def get_service_by_slug(
    response: Response,
    slug: str = Path(max_length=300),
    db: AsyncSession = Depends(get_db_session),
) -> ListingDetailResponse:
    result = await listing_service.resolve_slug(db, slug)
    response.headers["Link"] = f'<{result.canonical_url}>; rel="canonical"'
    return result


@router.get(
    "/services/{service_id}",
    response_model=ListingDetailResponse,
    responses={404: {"description": "Service not found", "model": ErrorResponse}},
    summary="Get a listing by id",
)
async def get_service(
    service_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ListingDetailResponse:
    return await listing_service.get_listing(db, service_id)


@router.post(
    "/services",
    status_code=201,
    response_model=ListingDetailResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Publish a listing",
)
async def create_service(
    payload: ListingCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ListingDetailResponse:
    return await listing_service.create_listing(db, user_id, payload)


@router.patch(
    "/services/{service_id}",
    response_model=ListingDetailResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Service not found", "model": ErrorResponse},
    },
    summary="Update a listing",
)
async def update_service(
    service_id: UUID,
    payload: ListingUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ListingDetailResponse:
    return await listing_service.update_listing(db, service_id, user_id, payload)


@router.delete(
    "/services/{service_id}",
    response_model=ListingDetailResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Service not found", "model": ErrorResponse},
    },
    summary="Deactivate a listing",
    description="Soft delete: the listing is hidden from browse, search, map and sitemap.",
)
async def delete_service(
    service_id: UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ListingDetailResponse:
    return await listing_service.deactivate_listing(db, service_id, user_id)
