"""Pydantic schemas for API responses."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    original_url: str = Field(..., description="The original long URL")
    short_url: str = Field(..., description="The complete short URL")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "original_url": "https://example.com/very/long/path",
                    "short_url": "https://sho.rt/aZ3kQ9xB",
                }
            ]
        }
    }


class URLInfoResponse(BaseModel):
    """Response with mapping information."""

    slug: str
    original_url: str
    short_url: str
    created_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
