"""
GoEveryWork Marketplace — Listing Service Unit Tests
======================================================

What we test:
    ✅ Short-id lookup: match, no match, ambiguous match, unusable fragments
    ✅ Slug resolution with current and stale slugs
    ✅ Proximity search filters by radius and sorts nearest first
    ✅ Create / update / deactivate with ownership checks
    ✅ Database failures surface as DatabaseError
"""

from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from sqlalchemy.dialects import postgresql

from marketplace.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from marketplace.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    LocationInput,
    MapBounds,
)
from marketplace.services.listing_service import ListingService

LISTING_ID = UUID("a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d")


class TestShortIdLookup:

    def setup_method(self):
        self.service = ListingService()

    @pytest.mark.asyncio
    async def test_single_match(self, mock_db_session, query_result, make_listing):
        listing = make_listing()
        mock_db_session.execute.return_value = query_result(scalars=[listing])

        found = await self.service.get_by_short_id(mock_db_session, "a1b2c3d4")

        assert found is listing
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_uppercase_fragment_is_normalized(self, mock_db_session, query_result, make_listing):
        listing = make_listing()
        mock_db_session.execute.return_value = query_result(scalars=[listing])

        assert await self.service.get_by_short_id(mock_db_session, "A1B2C3D4") is listing

    @pytest.mark.asyncio
    async def test_no_match_raises_not_found(self, mock_db_session, query_result):
        mock_db_session.execute.return_value = query_result(scalars=[])

        with pytest.raises(NotFoundError):
            await self.service.get_by_short_id(mock_db_session, "ffffffff")

    @pytest.mark.asyncio
    async def test_ambiguous_match_raises_not_found(self, mock_db_session, query_result, make_listing):
        first = make_listing()
        second = make_listing(id=UUID("a1b2c3d4-0000-4000-8000-000000000000"))
        mock_db_session.execute.return_value = query_result(scalars=[first, second])

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_by_short_id(mock_db_session, "a1b2c3d4")

        assert exc_info.value.context["ambiguous"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fragment", ["", "abc%", "a_b", "xyz", "a1b2c3d4-e5f6"])
    async def test_unusable_fragment_skips_query(self, mock_db_session, fragment):
        with pytest.raises(NotFoundError):
            await self.service.get_by_short_id(mock_db_session, fragment)

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_prefix_match_uses_text_cast(self, mock_db_session, query_result, make_listing):
        # Must match the (id::text) expression index from migration 001
        mock_db_session.execute.return_value = query_result(scalars=[make_listing()])

        await self.service.get_by_short_id(mock_db_session, "a1b2c3d4")

        statement = mock_db_session.execute.await_args.args[0]
        sql = str(statement.compile(dialect=postgresql.dialect()))
        assert "CAST(services.id AS TEXT) LIKE" in sql

    @pytest.mark.asyncio
    async def test_query_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("connection reset"))

        with pytest.raises(DatabaseError):
            await self.service.get_by_short_id(mock_db_session, "a1b2c3d4")


class TestResolveSlug:

    def setup_method(self):
        self.service = ListingService()

    @pytest.mark.asyncio
    async def test_current_slug(self, mock_db_session, query_result, make_listing):
        mock_db_session.execute.return_value = query_result(scalars=[make_listing()])
        slug = "diseno-web-cali-valle-del-cauca-colombia-a1b2c3d4"

        detail = await self.service.resolve_slug(mock_db_session, slug)

        assert detail.id == LISTING_ID
        assert detail.slug == slug
        assert detail.requested_slug == slug
        assert detail.canonical_url == f"https://www.goeverywork.com/services/{slug}"

    @pytest.mark.asyncio
    async def test_stale_slug_resolves_to_current_one(self, mock_db_session, query_result, make_listing):
        mock_db_session.execute.return_value = query_result(scalars=[make_listing()])

        detail = await self.service.resolve_slug(mock_db_session, "old-title-bogota-a1b2c3d4")

        assert detail.requested_slug == "old-title-bogota-a1b2c3d4"
        assert detail.slug == "diseno-web-cali-valle-del-cauca-colombia-a1b2c3d4"

    @pytest.mark.asyncio
    async def test_slug_without_short_id(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.resolve_slug(mock_db_session, "plomeria-colombia-")


class TestBrowseAndSearch:

    def setup_method(self):
        self.service = ListingService()

    @pytest.mark.asyncio
    async def test_list_active_counts_results(self, mock_db_session, query_result, make_listing):
        listings = [make_listing(), make_listing(id=UUID("0f9e8d7c-1111-4222-8333-444455556666"))]
        mock_db_session.execute.return_value = query_result(scalars=listings)

        result = await self.service.list_active(mock_db_session)

        assert result.total_count == 2
        assert [s.slug.rsplit("-", 1)[-1] for s in result.services] == ["a1b2c3d4", "0f9e8d7c"]
        assert all(s.distance_km is None for s in result.services)

    @pytest.mark.asyncio
    async def test_proximity_search_filters_and_sorts(self, mock_db_session, query_result, make_listing):
        cali = make_listing()
        palmira = make_listing(
            id=UUID("0f9e8d7c-1111-4222-8333-444455556666"),
            city="Palmira",
            latitude=3.5394,
            longitude=-76.3036,
        )
        bogota = make_listing(
            id=UUID("12345678-1111-4222-8333-444455556666"),
            city="Bogotá",
            state="Cundinamarca",
            latitude=4.7110,
            longitude=-74.0721,
        )
        no_coordinates = make_listing(
            id=UUID("99999999-1111-4222-8333-444455556666"),
            latitude=None,
            longitude=None,
        )
        mock_db_session.execute.return_value = query_result(
            scalars=[bogota, palmira, no_coordinates, cali]
        )

        # Searcher stands next to Palmira
        result = await self.service.search(
            mock_db_session, latitude=3.53, longitude=-76.30, radius_km=50
        )

        assert [s.city for s in result.services] == ["Palmira", "Cali"]
        assert result.total_count == 2
        assert result.services[0].distance_km < result.services[1].distance_km
        assert result.services[1].distance_km < 50

    @pytest.mark.asyncio
    async def test_text_search_without_coordinates(self, mock_db_session, query_result, make_listing):
        mock_db_session.execute.return_value = query_result(scalars=[make_listing()])

        result = await self.service.search(mock_db_session, query="diseño")

        assert result.total_count == 1
        assert result.services[0].distance_km is None

    @pytest.mark.asyncio
    async def test_map_listing(self, mock_db_session, query_result, make_listing):
        mock_db_session.execute.return_value = query_result(scalars=[make_listing()])
        bounds = MapBounds(north=5, south=2, east=-74, west=-77)

        result = await self.service.list_for_map(mock_db_session, bounds)

        assert result.total_count == 1
        mock_db_session.execute.assert_awaited_once()


class TestWrites:

    def setup_method(self):
        self.service = ListingService()

    @pytest.mark.asyncio
    async def test_create_listing(self, mock_db_session):
        data = ListingCreate(
            title="  Plomería  ",
            min_price=80000,
            max_price=80000,
            location=LocationInput(city="Cali", state="Valle del Cauca"),
        )

        detail = await self.service.create_listing(mock_db_session, "user_provider_1", data)

        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()
        assert detail.title == "Plomería"
        assert detail.provider_id == "user_provider_1"
        assert detail.status is True
        assert detail.country == "Colombia"
        assert detail.price_range == "$80,000"
        assert detail.slug.startswith("plomeria-cali-valle-del-cauca-colombia-")
        assert detail.slug.endswith(str(detail.id).split("-")[0])

    @pytest.mark.asyncio
    async def test_create_listing_flush_failure(self, mock_db_session):
        mock_db_session.flush = AsyncMock(side_effect=RuntimeError("disk full"))

        with pytest.raises(DatabaseError):
            await self.service.create_listing(
                mock_db_session, "user_provider_1", ListingCreate(title="Plomería")
            )

    @pytest.mark.asyncio
    async def test_update_by_owner(self, mock_db_session, query_result, make_listing):
        listing = make_listing()
        mock_db_session.execute.return_value = query_result(scalar_one=listing)

        detail = await self.service.update_listing(
            mock_db_session,
            LISTING_ID,
            "user_provider_1",
            ListingUpdate(title="Desarrollo Web"),
        )

        assert detail.title == "Desarrollo Web"
        assert detail.slug == "desarrollo-web-cali-valle-del-cauca-colombia-a1b2c3d4"
        assert listing.updated_at > listing.created_at
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_replaces_location(self, mock_db_session, query_result, make_listing):
        listing = make_listing()
        mock_db_session.execute.return_value = query_result(scalar_one=listing)

        await self.service.update_listing(
            mock_db_session,
            LISTING_ID,
            "user_provider_1",
            ListingUpdate(location=LocationInput(city="Pasto")),
        )

        assert listing.city == "Pasto"
        assert listing.state is None
        assert listing.latitude is None
        assert listing.country == "Colombia"

    @pytest.mark.asyncio
    async def test_update_by_other_user_is_denied(self, mock_db_session, query_result, make_listing):
        mock_db_session.execute.return_value = query_result(scalar_one=make_listing())

        with pytest.raises(PermissionDeniedError):
            await self.service.update_listing(
                mock_db_session, LISTING_ID, "someone_else", ListingUpdate(title="Mío")
            )

        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_rejects_inverted_price_range(self, mock_db_session, query_result, make_listing):
        # Existing range is 500,000 - 2,500,000
        mock_db_session.execute.return_value = query_result(scalar_one=make_listing())

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_listing(
                mock_db_session, LISTING_ID, "user_provider_1", ListingUpdate(max_price=100000)
            )

        assert exc_info.value.field == "max_price"

    @pytest.mark.asyncio
    async def test_null_min_price_keeps_stored_minimum_in_range_check(
        self, mock_db_session, query_result, make_listing
    ):
        listing = make_listing()
        mock_db_session.execute.return_value = query_result(scalar_one=listing)
        data = ListingUpdate.model_validate({"min_price": None, "max_price": 100000})

        with pytest.raises(ValidationError):
            await self.service.update_listing(mock_db_session, LISTING_ID, "user_provider_1", data)

        assert listing.min_price == 500000.0
        assert listing.max_price == 2500000.0
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_null_max_price_is_ignored(self, mock_db_session, query_result, make_listing):
        listing = make_listing()
        mock_db_session.execute.return_value = query_result(scalar_one=listing)
        data = ListingUpdate.model_validate({"min_price": 600000, "max_price": None})

        detail = await self.service.update_listing(
            mock_db_session, LISTING_ID, "user_provider_1", data
        )

        assert detail.min_price == 600000.0
        assert detail.max_price == 2500000.0

    @pytest.mark.asyncio
    async def test_update_missing_listing(self, mock_db_session, query_result):
        mock_db_session.execute.return_value = query_result(scalar_one=None)

        with pytest.raises(NotFoundError):
            await self.service.update_listing(
                mock_db_session, LISTING_ID, "user_provider_1", ListingUpdate(title="X")
            )

    @pytest.mark.asyncio
    async def test_deactivate(self, mock_db_session, query_result, make_listing):
        listing = make_listing()
        mock_db_session.execute.return_value = query_result(scalar_one=listing)

        detail = await self.service.deactivate_listing(mock_db_session, LISTING_ID, "user_provider_1")

        assert detail.status is False
        assert listing.status is False
