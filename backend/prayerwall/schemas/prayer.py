"""
Prayer Wall Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between the memorial page
       and the backend.
How:   FastAPI uses these models to parse request bodies, serialize
       responses, and generate the OpenAPI document.

Schemas are separate from the SQLAlchemy model: the API exposes `id` as a
string and replaces the stored instant with a display string.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PrayerCreate(BaseModel):
    """
    What:  Body of POST /api/prayers.

    `text` is optional at the schema level on purpose: a missing or blank
    text is a business-rule failure answered with
    400 {"error": "Prayer text is required"}, checked in PrayerService.
    """
    text: Optional[str] = Field(default=None, description="The prayer text")
    name: Optional[str] = Field(
        default=None,
        description="Display name of the visitor (omit to stay anonymous)",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PrayerResponse(BaseModel):
    """
    What:  One prayer as shown on the page.
    Who:   Items of GET /api/prayers; body of POST /api/prayers (201).

    `name` is omitted from the JSON when the prayer is anonymous
    (routes serialize with response_model_exclude_none).
    """
    id: str = Field(description="Store-assigned identifier, as a string")
    text: str = Field(description="The prayer text")
    name: Optional[str] = Field(default=None, description="Display name, if given")
    timestamp: str = Field(description='Display timestamp, e.g. "5 minutes ago"')


class DeleteResponse(BaseModel):
    """Body of a successful DELETE /api/prayers."""
    success: bool = True


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every endpoint.

    Example:
        {"error": "Failed to fetch prayers", "details": "connection refused"}
    """
    error: str = Field(description="Human-readable error message")
    details: Optional[str] = Field(default=None, description="Underlying error detail")


class ApiTestResponse(BaseModel):
    """Body of GET /api/test, the routing smoke test."""
    status: str
    timestamp: str = Field(description="Current server time (UTC ISO 8601)")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /health for monitoring and load balancer checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
