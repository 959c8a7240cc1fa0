"""
Notebox Backend — Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the notes API contract, plus the shared error
       and health payloads.
How:   FastAPI validates request bodies against these models, serializes
       responses through them and renders them into the OpenAPI document.

Schemas are kept apart from the SQLAlchemy models so the API exposes exactly
the fields listed here (user password hashes never appear).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreateRequest(BaseModel):
    """Body of POST /api/notes. Both fields must be non-blank."""
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")


class NoteUpdateRequest(BaseModel):
    """Body of PUT /api/notes/{id}. Title must be non-blank; content replaces the stored body."""
    title: str = Field(description="New title")
    content: str = Field(description="New body")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Full representation of a note.
    Who:   Returned by GET/PUT /api/notes/{id} and as items of GET /api/notes.
    """
    id: int = Field(description="Note id")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")
    user_id: int = Field(description="Owning user id")
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last update time (UTC ISO 8601)")

    model_config = {"from_attributes": True}


class NoteCreatedResponse(BaseModel):
    """Returned with HTTP 201 by POST /api/notes."""
    id: int = Field(description="Id of the created note")


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable confirmation")


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Error body returned by every failing endpoint.

    Fields:
        error: Human-readable description for display to users
        code: Machine-readable error code (e.g., "not_found", "unauthorized")
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "Note not found",
            "code": "not_found",
            "request_id": "1f0c2a9e"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
