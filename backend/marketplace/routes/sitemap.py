"""
GoEveryWork Marketplace — Sitemap Route Handler
=================================================

GET /api/sitemap returns the sitemap entries as JSON; the frontend renders
them as sitemap.xml.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database import get_db_session
from marketplace.schemas.common import SitemapEntry
from marketplace.services.sitemap_service import sitemap_service

router = APIRouter(prefix="/api", tags=["Sitemap"])


@router.get(
    "/sitemap",
    response_model=List[SitemapEntry],
    summary="Public sitemap entries",
    description="Static pages followed by one canonical URL per active listing.",
)
async def get_sitemap(db: AsyncSession = Depends(get_db_session)) -> List[SitemapEntry]:
    return await sitemap_service.build_sitemap(db)
