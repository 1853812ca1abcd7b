"""
ReqCheck — Pydantic Movie and API Schemas
=========================================

What:  Pydantic models for the movie payloads, error bodies, and health check.
How:   Handlers validate request JSON with MovieCreate and return
       MovieResponse payloads; the encoder serializes them to JSON.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Movie Payloads
# ══════════════════════════════════════════════════════════════════════════


class MovieCreate(BaseModel):
    """
    What:  Fields accepted by POST /movies.
    Example body: {"title": "", "year": 2021}
    """
    title: str = Field(default="", max_length=255, description="Movie title (may be empty)")
    year: Optional[int] = Field(default=None, ge=1870, le=2200, description="Release year")

    model_config = {"extra": "ignore"}


class MovieResponse(BaseModel):
    """
    What:  A stored movie.
    Who:   Returned by GET /movies, GET /movies/{movie_id}, POST /movies.
    """
    id: int = Field(description="Movie identifier")
    title: str = Field(description="Movie title")
    year: Optional[int] = Field(default=None, description="Release year")
    created_at: datetime = Field(description="When the movie was created (UTC ISO 8601)")

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Error and Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every 4xx/5xx with content.

    Example:
        {
            "error": "validation_error",
            "message": "Request body is not valid JSON",
            "details": {"field": "body"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    routes: int = Field(description="Number of routes registered on the router")
    diagnostics_recorded: int = Field(description="Diagnostic records collected so far")
    uptime_seconds: float = Field(description="Seconds since service started")
