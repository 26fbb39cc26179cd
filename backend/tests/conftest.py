"""
GoEveryWork Marketplace — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the whole suite.
How:   Services are tested against a mocked AsyncSession; routes through an
       HTTPX AsyncClient with the session dependency overridden, so no
       database is needed.

Fixtures (function-scoped):
    ├── mock_db_session:  AsyncMock standing in for AsyncSession
    ├── make_listing:     factory for fully populated ServiceListing rows
    ├── make_review:      factory for Review rows
    ├── query_result:     factory for objects returned by session.execute()
    └── test_client:      HTTPX AsyncClient bound to the FastAPI app
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

# Must be set before anything imports marketplace.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEFAULT_COUNTRY"] = "Colombia"
os.environ["SITE_BASE_URL"] = "https://www.goeverywork.com"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from marketplace.models.listing import ServiceListing
from marketplace.models.review import Review


FIXED_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.execute.return_value = query_result(scalars=[listing])
        result = await listing_service.list_active(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def query_result():
    """
    Builds the object `await session.execute(...)` returns.

    scalars → result.scalars().all(); scalar_one → result.scalar_one_or_none()
    and result.scalar(); rows → result.all().
    """

    def _build(scalars=None, scalar_one=None, rows=None):
        result = MagicMock()
        result.scalars.return_value.all.return_value = list(scalars or [])
        result.scalar_one_or_none.return_value = scalar_one
        result.scalar.return_value = scalar_one
        result.all.return_value = list(rows or [])
        return result

    return _build


@pytest.fixture
def make_listing():
    """Factory for ServiceListing rows with every column populated."""

    def _make(**overrides) -> ServiceListing:
        fields = {
            "id": UUID("a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d"),
            "title": "Diseño Web",
            "description": "Sitios web a la medida para pequeñas empresas.",
            "main_image": "https://cdn.goeverywork.com/img/web.jpg",
            "gallery": ["https://cdn.goeverywork.com/img/web-2.jpg"],
            "min_price": 500000.0,
            "max_price": 2500000.0,
            "category": "Tecnología",
            "provider_id": "user_provider_1",
            "status": True,
            "latitude": 3.4516,
            "longitude": -76.5320,
            "address": "Calle 5 # 38-25",
            "city": "Cali",
            "state": "Valle del Cauca",
            "country": "Colombia",
            "postal_code": "760042",
            "created_at": FIXED_TIME,
            "updated_at": FIXED_TIME,
        }
        fields.update(overrides)
        return ServiceListing(**fields)

    return _make


@pytest.fixture
def make_review():
    def _make(**overrides) -> Review:
        fields = {
            "id": uuid4(),
            "service_id": UUID("a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d"),
            "reviewer_id": "user_consumer_1",
            "rating": 5,
            "title": "Excelente",
            "comment": "Muy profesionales.",
            "images": [],
            "verified": False,
            "helpful_count": 0,
            "created_at": FIXED_TIME,
            "updated_at": FIXED_TIME,
        }
        fields.update(overrides)
        return Review(**fields)

    return _make


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient talking to the app in-process.

    The database dependency yields mock_db_session; patch the service
    singletons in each route test to control results.
    """
    from marketplace.database import get_db_session
    from marketplace.main import app

    async def _override_session():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
