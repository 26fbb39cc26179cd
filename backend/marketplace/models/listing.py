"""
GoEveryWork Marketplace — Service Listing Model
=================================================

What:  ORM model for the `services` table: one row per listing a business publishes.
Who:   Queried by ListingService; read by the slug codec through ServiceRecord.

Table Design:
    - UUID primary key: its first hyphen group is the short id embedded in slugs.
      Lookups by that prefix go through idx_services_id_text (expression
      index, created in migration 001).
    - gallery: JSONB array of image URLs (order matters for the carousel).
    - status: soft-delete flag. Deactivated listings stay resolvable by id/slug
      but drop out of browse, search, map and the sitemap.
    - Location columns are all optional; country defaults to the configured
      default country at creation time.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, Float, Index, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.database import Base


class ServiceListing(Base):
    """
    A service published by a provider.

    Query Patterns:
        - Browse: WHERE status ORDER BY created_at DESC
        - Slug resolution: WHERE CAST(id AS TEXT) LIKE '<fragment>%'
        - Map: WHERE status AND latitude/longitude BETWEEN bounds
    """

    __tablename__ = "services"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    main_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    gallery: Mapped[List[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )

    # COP amounts; asdecimal=False so the API layer works with plain floats
    min_price: Mapped[float] = mapped_column(
        Numeric(14, 2, asdecimal=False), nullable=False, default=0, server_default=text("0")
    )
    max_price: Mapped[float] = mapped_column(
        Numeric(14, 2, asdecimal=False), nullable=False, default=0, server_default=text("0")
    )

    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    provider_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    # ── Location ──────────────────────────────────────────────────────────
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_services_created_at", created_at.desc()),
        Index("idx_services_provider_id", provider_id),
        Index("idx_services_category", category),
        Index("idx_services_coordinates", latitude, longitude),
    )

    def __repr__(self) -> str:
        return f"<ServiceListing(id={self.id}, title='{self.title}', status={self.status})>"
