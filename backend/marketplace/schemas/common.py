"""
GoEveryWork Marketplace — Shared Schemas
==========================================

What:  Response models that are not tied to listings or reviews: errors,
       health, categories and sitemap entries.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error body returned by every global exception handler.

    Example:
        {
            "error": "not_found",
            "message": "service with ID 'a1b2c3d4' was not found",
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SitemapEntry(BaseModel):
    url: str
    last_modified: datetime
    change_frequency: str = Field(description="always, hourly, daily, weekly, monthly, yearly, never")
    priority: float = Field(ge=0, le=1)
