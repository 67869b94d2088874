"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LinkCreateRequest(CamelModel):
    """Request to create a link."""

    name: str = Field(..., description="Display name", min_length=1, max_length=100)
    original_url: str = Field(..., description="The URL to redirect to", min_length=1, max_length=2048)
    description: Optional[str] = Field(None, description="Optional description", max_length=500)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "Docs",
                    "originalUrl": "https://example.com/very/long/path/to/resource",
                    "description": "Team handbook",
                }
            ]
        },
    )


class LinkUpdateRequest(CamelModel):
    """Request to update a link.

    Omitted fields are left unchanged; an explicit null description clears it.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    original_url: Optional[str] = Field(None, min_length=1, max_length=2048)
    description: Optional[str] = Field(None, max_length=500)


class LinkOut(CamelModel):
    """A link as returned to its owner."""

    id: str
    name: str
    original_url: str
    short_code: str = Field(..., description="The allocated short code")
    short_url: str = Field(..., description="The complete short URL")
    description: Optional[str] = None
    clicks: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LinkResponse(CamelModel):
    """Single link response."""

    link: LinkOut


class LinkMessageResponse(CamelModel):
    """Single link response with a status message."""

    message: str
    link: LinkOut


class LinkListResponse(CamelModel):
    """Owner's links, newest first."""

    links: List[LinkOut]


class MessageResponse(CamelModel):
    """Plain status message."""

    message: str


class StatisticsResponse(CamelModel):
    """Owner statistics response."""

    total_links: int
    total_clicks: int


class HealthResponse(CamelModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class FieldError(CamelModel):
    """A single field validation failure."""

    field: Optional[str] = None
    message: str


class ErrorResponse(CamelModel):
    """Error response."""

    message: str = Field(..., description="Error message")
    errors: Optional[List[FieldError]] = Field(None, description="Field validation failures")
