"""
GoEveryWork Marketplace — Category Route Handler
==================================================

GET /api/categories feeds the category dropdown of the listing form and the
search filters. Categories change rarely, so responses may be cached briefly.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database import get_db_session
from marketplace.schemas.common import CategoryResponse
from marketplace.services.category_service import category_service

router = APIRouter(prefix="/api", tags=["Categories"])


@router.get(
    "/categories",
    response_model=List[CategoryResponse],
    summary="List categories",
)
async def list_categories(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> List[CategoryResponse]:
    categories = await category_service.list_categories(db)
    response.headers["Cache-Control"] = "public, max-age=300"
    return categories
