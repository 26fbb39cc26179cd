"""
GoEveryWork Marketplace — Listing Service
===========================================

What:  Business logic for service listings: browse, search, map, slug
       resolution and owner-only writes.
Who:   Called by the listing routes and the sitemap service.

Slug resolution (GET /api/services/slug/{slug}):
    ┌──────────┐    ┌──────────────────┐    ┌──────────────────┐    ┌──────────┐
    │  Route   │───▶│ extract_short_id │───▶│ get_by_short_id  │───▶│ Present  │
    │  (slug)  │    │  (slug codec)    │    │ (prefix lookup)  │    │ (detail) │
    └──────────┘    └──────────────────┘    └──────────────────┘    └──────────┘

    A short id is only the first group of a UUID, so in principle two
    listings can share it. Such a lookup is refused as not found (and logged)
    instead of picking one arbitrarily.

Error Handling Strategy:
    Our own exceptions propagate unchanged; anything else raised while talking
    to the database is logged and wrapped in DatabaseError.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import Text, cast, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from marketplace.config import settings
from marketplace.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from marketplace.models.listing import ServiceListing
from marketplace.schemas.listing import (
    ListingCreate,
    ListingDetailResponse,
    ListingListResponse,
    ListingUpdate,
    LocationInput,
    MapBounds,
)
from marketplace.services.geo import haversine_km
from marketplace.services.listing_presenter import to_listing_detail, to_listing_response
from marketplace.services.slug_service import extract_short_id

logger = logging.getLogger(__name__)

# A short id is a leading run of UUID hex digits. Anything else (empty, '%',
# '_', letters past 'f') can never match and must not reach a LIKE pattern.
_SHORT_ID_PATTERN = re.compile(r"^[0-9a-f]{1,32}$")

_LOCATION_FIELDS = ("latitude", "longitude", "address", "city", "state", "postal_code")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ListingService:
    """
    Stateless; the session is passed into every call.

    Responsibilities:
        - list_active / list_by_provider / list_by_category: browse views
        - get_listing / get_by_short_id / resolve_slug: single-listing lookups
        - search / list_for_map: discovery
        - create_listing / update_listing / deactivate_listing: provider writes
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def _fetch_all(self, db: AsyncSession, query: Select, action: str) -> List[ServiceListing]:
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error("Database error while %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve services. Please try again.",
                context={"error_type": type(e).__name__},
            )

    @staticmethod
    def _as_list_response(
        rows: Sequence[Tuple[ServiceListing, Optional[float]]],
    ) -> ListingListResponse:
        services = [to_listing_response(listing, distance) for listing, distance in rows]
        return ListingListResponse(services=services, total_count=len(services))

    async def list_active(self, db: AsyncSession) -> ListingListResponse:
        """Active listings, newest first."""
        query = (
            select(ServiceListing)
            .where(ServiceListing.status.is_(True))
            .order_by(desc(ServiceListing.created_at))
        )
        listings = await self._fetch_all(db, query, "listing active services")
        return self._as_list_response([(listing, None) for listing in listings])

    async def list_by_provider(self, db: AsyncSession, provider_id: str) -> ListingListResponse:
        """
        Every listing of one provider, including deactivated ones.

        Backs the provider dashboard, where inactive listings can be re-enabled.
        """
        query = (
            select(ServiceListing)
            .where(ServiceListing.provider_id == provider_id)
            .order_by(desc(ServiceListing.created_at))
        )
        listings = await self._fetch_all(db, query, "listing provider services")
        return self._as_list_response([(listing, None) for listing in listings])

    async def list_by_category(self, db: AsyncSession, category: str) -> ListingListResponse:
        query = (
            select(ServiceListing)
            .where(ServiceListing.status.is_(True))
            .where(ServiceListing.category == category)
            .order_by(desc(ServiceListing.created_at))
        )
        listings = await self._fetch_all(db, query, "listing services by category")
        return self._as_list_response([(listing, None) for listing in listings])

    async def _get_row(self, db: AsyncSession, listing_id: UUID) -> ServiceListing:
        try:
            result = await db.execute(
                select(ServiceListing).where(ServiceListing.id == listing_id)
            )
            listing = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching service %s: %s", listing_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the service. Please try again.",
                context={"service_id": str(listing_id)},
            )
        if listing is None:
            raise NotFoundError(resource="service", resource_id=str(listing_id))
        return listing

    async def get_listing(self, db: AsyncSession, listing_id: UUID) -> ListingDetailResponse:
        listing = await self._get_row(db, listing_id)
        return to_listing_detail(listing)

    async def get_by_short_id(self, db: AsyncSession, fragment: str) -> ServiceListing:
        """
        Find the single listing whose id starts with `fragment`.

        Raises:
            NotFoundError: fragment is empty or not hexadecimal, nothing
                matches, or more than one listing matches.
            DatabaseError: query execution failed.
        """
        normalized = fragment.lower()
        if not _SHORT_ID_PATTERN.match(normalized):
            raise NotFoundError(resource="service", resource_id=fragment or None)

        query = (
            select(ServiceListing)
            .where(cast(ServiceListing.id, Text).like(f"{normalized}%"))
            .limit(2)
        )
        matches = await self._fetch_all(db, query, "looking up service by short id")

        if not matches:
            raise NotFoundError(resource="service", resource_id=fragment)
        if len(matches) > 1:
            logger.warning(
                "Short id '%s' is ambiguous: matches %s and %s",
                normalized,
                matches[0].id,
                matches[1].id,
            )
            raise NotFoundError(
                resource="service",
                resource_id=fragment,
                context={"ambiguous": True},
            )
        return matches[0]

    async def resolve_slug(self, db: AsyncSession, slug: str) -> ListingDetailResponse:
        """
        Resolve an inbound /services/{slug} path segment to a listing.

        Only the trailing short id is used, so stale slugs (from before a
        title or location edit) resolve too; the response carries the current
        slug for canonical redirects.
        """
        listing = await self.get_by_short_id(db, extract_short_id(slug))
        return to_listing_detail(listing, requested_slug=slug)

    # ── Discovery ─────────────────────────────────────────────────────────

    async def search(
        self,
        db: AsyncSession,
        query: str = "",
        category: str = "",
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius_km: Optional[float] = None,
    ) -> ListingListResponse:
        """
        Text, category and proximity search over active listings.

        How:
            - query: case-insensitive substring of title, description or category
            - category: exact category name
            - latitude + longitude: keep listings within radius_km (default from
              settings), nearest first. Listings without coordinates are dropped.
              Distance is computed here, not in SQL, so no PostGIS is needed.
        """
        stmt = select(ServiceListing).where(ServiceListing.status.is_(True))

        term = (query or "").strip()
        if term:
            pattern = f"%{_escape_like(term)}%"
            stmt = stmt.where(
                or_(
                    ServiceListing.title.ilike(pattern, escape="\\"),
                    ServiceListing.description.ilike(pattern, escape="\\"),
                    ServiceListing.category.ilike(pattern, escape="\\"),
                )
            )

        category = (category or "").strip()
        if category:
            stmt = stmt.where(ServiceListing.category == category)

        stmt = stmt.order_by(desc(ServiceListing.created_at))
        listings = await self._fetch_all(db, stmt, "searching services")

        if latitude is None or longitude is None:
            return self._as_list_response([(listing, None) for listing in listings])

        radius = radius_km if radius_km is not None else settings.search_radius_km
        nearby = []
        for listing in listings:
            if listing.latitude is None or listing.longitude is None:
                continue
            distance = haversine_km(latitude, longitude, listing.latitude, listing.longitude)
            if distance <= radius:
                nearby.append((listing, distance))
        nearby.sort(key=lambda row: row[1])

        logger.debug(
            "Proximity search (%.4f, %.4f) r=%.1fkm: %d of %d listings in range",
            latitude, longitude, radius, len(nearby), len(listings),
        )
        return self._as_list_response(nearby)

    async def list_for_map(
        self, db: AsyncSession, bounds: Optional[MapBounds] = None
    ) -> ListingListResponse:
        """Active listings that have coordinates, optionally restricted to the visible map area."""
        stmt = (
            select(ServiceListing)
            .where(ServiceListing.status.is_(True))
            .where(ServiceListing.latitude.is_not(None))
            .where(ServiceListing.longitude.is_not(None))
        )
        if bounds is not None:
            stmt = stmt.where(
                ServiceListing.latitude >= bounds.south,
                ServiceListing.latitude <= bounds.north,
                ServiceListing.longitude >= bounds.west,
                ServiceListing.longitude <= bounds.east,
            )
        stmt = stmt.order_by(desc(ServiceListing.created_at))
        listings = await self._fetch_all(db, stmt, "listing services for map")
        return self._as_list_response([(listing, None) for listing in listings])

    # ── Writes ────────────────────────────────────────────────────────────

    @staticmethod
    def _apply_location(listing: ServiceListing, location: Optional[LocationInput]) -> None:
        for field in _LOCATION_FIELDS:
            setattr(listing, field, getattr(location, field) if location else None)
        listing.country = (location.country if location else None) or settings.default_country

    async def _flush(self, db: AsyncSession, action: str, listing: ServiceListing) -> None:
        try:
            await db.flush()
        except Exception as e:
            logger.error("Database error while %s %s: %s", action, listing.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the service. Please try again.",
                context={"service_id": str(listing.id), "error_type": type(e).__name__},
            )

    async def create_listing(
        self, db: AsyncSession, provider_id: str, data: ListingCreate
    ) -> ListingDetailResponse:
        """Publish a new, active listing owned by `provider_id`."""
        now = datetime.now(timezone.utc)
        listing = ServiceListing(
            id=uuid.uuid4(),
            title=data.title,
            description=data.description,
            main_image=data.main_image,
            gallery=list(data.gallery),
            category=data.category,
            min_price=data.min_price,
            max_price=data.max_price,
            provider_id=provider_id,
            status=True,
            created_at=now,
            updated_at=now,
        )
        self._apply_location(listing, data.location)

        db.add(listing)
        await self._flush(db, "creating service", listing)

        logger.info("Service %s created by provider %s", listing.id, provider_id)
        return to_listing_detail(listing)

    async def _get_owned(
        self, db: AsyncSession, listing_id: UUID, provider_id: str
    ) -> ServiceListing:
        listing = await self._get_row(db, listing_id)
        if listing.provider_id != provider_id:
            logger.warning(
                "Provider %s attempted to modify service %s owned by %s",
                provider_id, listing_id, listing.provider_id,
            )
            raise PermissionDeniedError(context={"service_id": str(listing_id)})
        return listing

    async def update_listing(
        self,
        db: AsyncSession,
        listing_id: UUID,
        provider_id: str,
        data: ListingUpdate,
    ) -> ListingDetailResponse:
        """
        Apply a partial update to a listing owned by `provider_id`.

        Raises:
            NotFoundError, PermissionDeniedError,
            ValidationError: the resulting price range would be inverted.
        """
        listing = await self._get_owned(db, listing_id, provider_id)

        changes = data.model_dump(exclude_unset=True, exclude={"location"})
        # An explicit null leaves the stored price in place
        new_min = changes.get("min_price")
        if new_min is None:
            new_min = listing.min_price or 0
        new_max = changes.get("max_price")
        if new_max is None:
            new_max = listing.max_price or 0
        if new_max < new_min:
            raise ValidationError(
                message="max_price must be greater than or equal to min_price",
                field="max_price",
            )

        for field, value in changes.items():
            if field in ("title", "gallery", "min_price", "max_price", "status") and value is None:
                continue
            setattr(listing, field, value)

        if "location" in data.model_fields_set and data.location is not None:
            self._apply_location(listing, data.location)

        listing.updated_at = datetime.now(timezone.utc)
        await self._flush(db, "updating service", listing)

        logger.info("Service %s updated (%s)", listing.id, ", ".join(sorted(data.model_fields_set)))
        return to_listing_detail(listing)

    async def deactivate_listing(
        self, db: AsyncSession, listing_id: UUID, provider_id: str
    ) -> ListingDetailResponse:
        """Soft delete: the listing disappears from browse views but keeps its reviews."""
        listing = await self._get_owned(db, listing_id, provider_id)
        listing.status = False
        listing.updated_at = datetime.now(timezone.utc)
        await self._flush(db, "deactivating service", listing)
        logger.info("Service %s deactivated by provider %s", listing.id, provider_id)
        return to_listing_detail(listing)


listing_service = ListingService()
