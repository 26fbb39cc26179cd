"""Create marketplace tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates `services`, `categories` and `reviews`.
How:   PostgreSQL UUID keys, JSONB image arrays, TIMESTAMP WITH TIME ZONE.
       idx_services_id_text indexes the text form of the id so that short-id
       prefix lookups (slug resolution) avoid a sequential scan.

Rollback: downgrade() drops all three tables.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "services",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("main_image", sa.String(500), nullable=True),
        sa.Column(
            "gallery",
            postgresql.JSONB(),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("min_price", sa.Numeric(14, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("max_price", sa.Numeric(14, 2), server_default=sa.text("0"), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("provider_id", sa.String(64), nullable=False),
        sa.Column("status", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("address", sa.String(300), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state", sa.String(120), nullable=True),
        sa.Column("country", sa.String(120), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_services_created_at", "services", [sa.text("created_at DESC")])
    op.create_index("idx_services_provider_id", "services", ["provider_id"])
    op.create_index("idx_services_category", "services", ["category"])
    op.create_index("idx_services_coordinates", "services", ["latitude", "longitude"])
    # text_pattern_ops lets LIKE 'prefix%' use the index under any collation
    op.execute(
        "CREATE INDEX idx_services_id_text ON services ((id::text) text_pattern_ops)"
    )

    op.create_table(
        "categories",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "reviews",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("service_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("reviewer_id", sa.String(64), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column(
            "images",
            postgresql.JSONB(),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("verified", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("helpful_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["service_id"], ["services.id"], ondelete="CASCADE"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )
    op.create_index(
        "idx_reviews_service_created",
        "reviews",
        ["service_id", sa.text("created_at DESC"), sa.text("id DESC")],
    )


def downgrade() -> None:
    """Drop all marketplace tables. Destructive: every listing and review is lost."""
    op.drop_index("idx_reviews_service_created", table_name="reviews")
    op.drop_table("reviews")
    op.drop_table("categories")
    op.execute("DROP INDEX IF EXISTS idx_services_id_text")
    op.drop_index("idx_services_coordinates", table_name="services")
    op.drop_index("idx_services_category", table_name="services")
    op.drop_index("idx_services_provider_id", table_name="services")
    op.drop_index("idx_services_created_at", table_name="services")
    op.drop_table("services")
