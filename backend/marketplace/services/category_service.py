"""Category lookups for the listing form and search filters."""

import logging
from typing import List

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.exceptions import DatabaseError
from marketplace.models.category import Category
from marketplace.schemas.common import CategoryResponse

logger = logging.getLogger(__name__)


class CategoryService:

    async def list_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        """All categories, alphabetically."""
        try:
            result = await db.execute(select(Category).order_by(asc(Category.name)))
            categories = result.scalars().all()
        except Exception as e:
            logger.error("Database error listing categories: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve categories. Please try again.")
        return [CategoryResponse.model_validate(category) for category in categories]


category_service = CategoryService()
