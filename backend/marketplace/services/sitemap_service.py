"""
GoEveryWork Marketplace — Sitemap Service
===========================================

What:  Builds the entries of the public sitemap: the fixed site pages plus one
       URL per active listing.
Who:   GET /api/sitemap, consumed by the frontend's sitemap.xml renderer.

Listing URLs use the slug computed from the listing's current title and
location, so the sitemap always advertises canonical slugs.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import settings
from marketplace.exceptions import DatabaseError
from marketplace.models.listing import ServiceListing
from marketplace.schemas.common import SitemapEntry
from marketplace.schemas.listing import ServiceRecord
from marketplace.services.listing_presenter import service_url
from marketplace.services.slug_service import generate_service_slug

logger = logging.getLogger(__name__)

# (path, change frequency, priority)
STATIC_PAGES = (
    ("", "daily", 1.0),
    ("/search", "daily", 0.9),
    ("/map", "daily", 0.9),
    ("/about", "monthly", 0.5),
)

LISTING_CHANGE_FREQUENCY = "weekly"
LISTING_PRIORITY = 0.8


class SitemapService:

    def static_entries(self, now: Optional[datetime] = None) -> List[SitemapEntry]:
        now = now or datetime.now(timezone.utc)
        return [
            SitemapEntry(
                url=f"{settings.site_base_url}{path}",
                last_modified=now,
                change_frequency=frequency,
                priority=priority,
            )
            for path, frequency, priority in STATIC_PAGES
        ]

    def listing_entry(self, listing: ServiceListing) -> SitemapEntry:
        slug = generate_service_slug(ServiceRecord.model_validate(listing))
        return SitemapEntry(
            url=service_url(slug),
            last_modified=listing.updated_at or listing.created_at,
            change_frequency=LISTING_CHANGE_FREQUENCY,
            priority=LISTING_PRIORITY,
        )

    async def build_sitemap(self, db: AsyncSession) -> List[SitemapEntry]:
        try:
            result = await db.execute(
                select(ServiceListing)
                .where(ServiceListing.status.is_(True))
                .order_by(desc(ServiceListing.created_at))
            )
            listings = result.scalars().all()
        except Exception as e:
            logger.error("Database error building sitemap: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not build the sitemap. Please try again.")

        entries = self.static_entries()
        entries.extend(self.listing_entry(listing) for listing in listings)
        logger.info("Sitemap built with %d service URLs", len(listings))
        return entries


sitemap_service = SitemapService()
