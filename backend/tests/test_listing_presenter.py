"""
GoEveryWork Marketplace — Listing Presentation Tests
======================================================

What we test:
    ✅ Price labels for single prices, ranges and fractional amounts
    ✅ Canonical URL and SEO metadata on listing detail
    ✅ schema.org structured data leaves out absent values
"""

import pytest

from marketplace.services.listing_presenter import (
    build_structured_data,
    format_price,
    format_price_range,
    to_listing_detail,
    to_listing_response,
)


class TestPriceLabels:

    @pytest.mark.parametrize(
        "value, expected",
        [(0, "$0"), (120000, "$120,000"), (49.9, "$49.90"), (1500000.0, "$1,500,000")],
    )
    def test_format_price(self, value, expected):
        assert format_price(value) == expected

    def test_single_price(self):
        assert format_price_range(80000, 80000) == "$80,000"

    def test_range(self):
        assert format_price_range(50000, 120000) == "$50,000 - $120,000"


class TestListingResponse:

    def test_computed_fields(self, make_listing):
        response = to_listing_response(make_listing(), distance_km=12.3456)

        assert response.slug == "diseno-web-cali-valle-del-cauca-colombia-a1b2c3d4"
        assert response.location == "Cali, Valle del Cauca, Colombia"
        assert response.price_range == "$500,000 - $2,500,000"
        assert response.distance_km == 12.35

    def test_listing_without_location(self, make_listing):
        listing = make_listing(city=None, state=None, country=None, latitude=None, longitude=None)

        response = to_listing_response(listing)

        assert response.location == "Colombia"
        assert response.slug == "diseno-web-colombia-a1b2c3d4"


class TestListingDetail:

    def test_canonical_url_and_seo(self, make_listing):
        detail = to_listing_detail(make_listing())

        assert detail.canonical_url == (
            "https://www.goeverywork.com/services/diseno-web-cali-valle-del-cauca-colombia-a1b2c3d4"
        )
        assert detail.requested_slug is None
        assert detail.seo.title == "Diseño Web en Cali, Valle del Cauca, Colombia | GoEveryWork"
        assert detail.seo.description.startswith("Sitios web a la medida")
        assert detail.seo.description.endswith("...")
        assert "Cali" in detail.seo.keywords

    def test_description_fallback(self, make_listing):
        detail = to_listing_detail(make_listing(description=None, min_price=80000, max_price=80000))

        assert detail.seo.description == (
            "Encuentra Diseño Web en Cali, Valle del Cauca, Colombia. "
            "Precios desde $80,000. Contacta directamente con el proveedor."
        )

    def test_long_description_is_truncated(self, make_listing):
        detail = to_listing_detail(make_listing(description="x" * 400))

        assert detail.seo.description == "x" * 155 + "..."


class TestStructuredData:

    def test_full_listing(self, make_listing):
        data = build_structured_data(make_listing(), "https://example.test/services/x")

        assert data["@type"] == "Service"
        assert data["offers"] == {
            "@type": "AggregateOffer",
            "priceCurrency": "COP",
            "lowPrice": 500000.0,
            "highPrice": 2500000.0,
        }
        assert data["areaServed"]["geo"]["latitude"] == 3.4516
        assert data["serviceType"] == "Tecnología"
        assert data["image"].endswith("web.jpg")

    def test_missing_values_are_omitted(self, make_listing):
        listing = make_listing(
            main_image=None,
            category=None,
            address=None,
            postal_code=None,
            latitude=None,
            longitude=None,
        )

        data = build_structured_data(listing, "https://example.test/services/x")

        assert "image" not in data
        assert "serviceType" not in data
        assert "geo" not in data["areaServed"]
        assert "streetAddress" not in data["areaServed"]["address"]
        assert "postalCode" not in data["areaServed"]["address"]
