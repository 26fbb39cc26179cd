"""
GoEveryWork Marketplace — Listing Presentation
================================================

What:  Turns ServiceListing rows into API response models: computed slug,
       location and price labels, canonical URL and SEO metadata.
Who:   ListingService, for every listing it returns.

The slug is recomputed here on every call; nothing about it is stored.
"""

from typing import Any, Dict, Optional

from marketplace.config import settings
from marketplace.models.listing import ServiceListing
from marketplace.schemas.listing import (
    ListingDetailResponse,
    ListingResponse,
    SeoMetadata,
    ServiceRecord,
)
from marketplace.services.slug_service import generate_service_slug, location_label

# Search engines truncate meta descriptions around this length
SEO_DESCRIPTION_LENGTH = 155


def format_price(value: float) -> str:
    """'$120,000' for whole amounts, '$49.90' otherwise."""
    if float(value).is_integer():
        return f"${value:,.0f}"
    return f"${value:,.2f}"


def format_price_range(min_price: float, max_price: float) -> str:
    if min_price == max_price:
        return format_price(min_price)
    return f"{format_price(min_price)} - {format_price(max_price)}"


def service_url(slug: str) -> str:
    return f"{settings.site_base_url}/services/{slug}"


def _listing_fields(listing: ServiceListing) -> Dict[str, Any]:
    return {
        "id": listing.id,
        "title": listing.title,
        "description": listing.description,
        "main_image": listing.main_image,
        "gallery": list(listing.gallery or []),
        "min_price": listing.min_price or 0,
        "max_price": listing.max_price or 0,
        "category": listing.category,
        "provider_id": listing.provider_id,
        "status": listing.status,
        "latitude": listing.latitude,
        "longitude": listing.longitude,
        "address": listing.address,
        "city": listing.city,
        "state": listing.state,
        "country": listing.country,
        "postal_code": listing.postal_code,
        "created_at": listing.created_at,
        "updated_at": listing.updated_at,
    }


def _computed_fields(listing: ServiceListing) -> Dict[str, Any]:
    record = ServiceRecord.model_validate(listing)
    return {
        "slug": generate_service_slug(record),
        "location": location_label(record),
        "price_range": format_price_range(listing.min_price or 0, listing.max_price or 0),
    }


def to_listing_response(
    listing: ServiceListing, distance_km: Optional[float] = None
) -> ListingResponse:
    return ListingResponse(
        **_listing_fields(listing),
        **_computed_fields(listing),
        distance_km=round(distance_km, 2) if distance_km is not None else None,
    )


def build_structured_data(listing: ServiceListing, url: str) -> Dict[str, Any]:
    """
    schema.org `Service` description of a listing, ready to embed as JSON-LD.

    Absent optional values are left out rather than emitted as null.
    """
    address = {
        "@type": "PostalAddress",
        "streetAddress": listing.address,
        "addressLocality": listing.city,
        "addressRegion": listing.state,
        "addressCountry": listing.country or settings.default_country,
        "postalCode": listing.postal_code,
    }
    area_served: Dict[str, Any] = {
        "@type": "Place",
        "address": {k: v for k, v in address.items() if v is not None},
    }
    if listing.latitude is not None and listing.longitude is not None:
        area_served["geo"] = {
            "@type": "GeoCoordinates",
            "latitude": listing.latitude,
            "longitude": listing.longitude,
        }

    data: Dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "Service",
        "name": listing.title,
        "description": listing.description or listing.title,
        "provider": {"@type": "Organization", "name": settings.site_name},
        "offers": {
            "@type": "AggregateOffer",
            "priceCurrency": settings.currency,
            "lowPrice": listing.min_price or 0,
            "highPrice": listing.max_price or 0,
        },
        "areaServed": area_served,
        "url": url,
    }
    if listing.main_image:
        data["image"] = listing.main_image
    if listing.category:
        data["serviceType"] = listing.category
    return data


def build_seo_metadata(
    listing: ServiceListing, location: str, price_range: str, url: str
) -> SeoMetadata:
    if listing.description:
        description = f"{listing.description[:SEO_DESCRIPTION_LENGTH]}..."
    else:
        description = (
            f"Encuentra {listing.title} en {location}. Precios desde {price_range}. "
            f"Contacta directamente con el proveedor."
        )
    keywords = [listing.title, listing.category or "servicios"]
    keywords.extend(part for part in (listing.city, listing.state, listing.country) if part)
    if not any((listing.city, listing.state, listing.country)):
        keywords.append(settings.default_country)

    return SeoMetadata(
        title=f"{listing.title} en {location} | {settings.site_name}",
        description=description,
        keywords=", ".join(keywords),
        structured_data=build_structured_data(listing, url),
    )


def to_listing_detail(
    listing: ServiceListing, requested_slug: Optional[str] = None
) -> ListingDetailResponse:
    computed = _computed_fields(listing)
    url = service_url(computed["slug"])
    return ListingDetailResponse(
        **_listing_fields(listing),
        **computed,
        canonical_url=url,
        requested_slug=requested_slug,
        seo=build_seo_metadata(listing, computed["location"], computed["price_range"], url),
    )
