"""
GoEveryWork Marketplace Backend — Application Package
======================================================

What: Local-services marketplace API. Businesses publish service listings
      (title, price range, category, images, location) and consumers browse,
      search and review them.
Who:  Imported by uvicorn (`marketplace.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← listings, reviews, slugs, sitemap
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Authentication is not handled here: the identity provider sits in front of
the API and forwards the user id (see marketplace.dependencies).
"""

__version__ = "1.0.0"
