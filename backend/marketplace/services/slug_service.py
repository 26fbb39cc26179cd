"""
GoEveryWork Marketplace — Listing Slug Codec
==============================================

What:  Builds readable, URL-safe path segments for listings and recovers the
       short id needed to look them up again.
Who:   ListingService (every listing response), SitemapService (every URL),
       and the slug route (inbound resolution).

Slug anatomy:
    "Diseño Web" in Cali, Valle del Cauca, Colombia, id a1b2c3d4-e5f6-...

        diseno-web-cali-valle-del-cauca-colombia-a1b2c3d4
        └──────────── descriptive part ────────┘ └ short id ┘

    Only the short id (first hyphen group of the UUID) is ever read back.
    The descriptive part follows the current title/location, so slugs change
    when a listing is edited and old links keep resolving.

All functions here are pure and total: any input produces a string.
"""

import re
import unicodedata
from typing import List, Optional

from marketplace.config import settings
from marketplace.schemas.listing import ServiceRecord

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUNS = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-+")


def short_id(identifier: str) -> str:
    """First hyphen-delimited group of an identifier (the whole string if it has no hyphen)."""
    return identifier.split("-", 1)[0]


def _location_parts(record: ServiceRecord) -> List[str]:
    return [part for part in (record.city, record.state, record.country) if part]


def location_phrase(record: ServiceRecord, default_country: Optional[str] = None) -> str:
    """City, state and country joined by spaces, or the default country when all are missing."""
    return " ".join(_location_parts(record)) or (default_country or settings.default_country)


def location_label(record: ServiceRecord, default_country: Optional[str] = None) -> str:
    """Display form of the location: 'Cali, Valle del Cauca, Colombia'."""
    return ", ".join(_location_parts(record)) or (default_country or settings.default_country)


def normalize_slug_text(text: str) -> str:
    """
    Reduce free text to lowercase ASCII words joined by single hyphens.

    >>> normalize_slug_text("  Café & Té -- Bogotá ")
    'cafe-te-bogota'
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _DISALLOWED_CHARS.sub("", stripped.lower())
    slug = _WHITESPACE_RUNS.sub("-", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")


def generate_service_slug(record: ServiceRecord, default_country: Optional[str] = None) -> str:
    """
    Encode a listing as `<title>-<location>-<short id>`.

    The short id is appended exactly as it appears in the identifier.

    >>> generate_service_slug(ServiceRecord(identifier="a1b2c3d4-e5f6", title="Plomería"))
    'plomeria-colombia-a1b2c3d4'
    """
    descriptive = f"{record.title}-{location_phrase(record, default_country)}"
    return f"{normalize_slug_text(descriptive)}-{short_id(record.identifier)}"


def extract_short_id(slug: str) -> str:
    """
    Recover the short id from a slug: the text after the last hyphen.

    A string without hyphens comes back unchanged and an empty string stays
    empty; the listing lookup treats unusable values as not found.
    """
    return slug.split("-")[-1]
