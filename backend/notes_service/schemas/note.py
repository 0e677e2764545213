"""
Notes Service — Pydantic Request/Response Schemas
=================================================

What:  Pydantic models defining the API contract between client and server.
How:   The service validates raw request bodies against NotePayload; responses
       serialize ORM rows through NoteRead; Envelope documents the response
       wrapper for OpenAPI.
Who:   Used by the service layer, the envelope builder, the error normalizer
       and the client adapter tests.

Schemas are separate from SQLAlchemy models so the API controls exactly which
fields are exposed and how timestamps are rendered.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

TITLE_MAX_LENGTH = 255


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NotePayload(BaseModel):
    """
    What:  Body of POST /api/notes and PUT /api/notes/{id}.
    How:   Validated inside NoteService (not by the route signature) so that
           validation always runs before any store access.

    Whitespace is stripped first, so "   " counts as missing.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(min_length=1)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class NoteRead(BaseModel):
    """
    What:  Public representation of a note.
    Who:   Returned as `data` by every note endpoint.

    Timestamps are aware UTC datetimes whether the row was just written or
    reloaded (SQLite drops the offset), and render as ISO 8601 with an
    explicit UTC offset, or null.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Note identifier assigned by the store")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")
    created_at: Optional[datetime] = Field(default=None, description="Creation time (UTC ISO 8601)")
    updated_at: Optional[datetime] = Field(default=None, description="Last modification (UTC ISO 8601)")

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        value = as_utc(value)
        return value.isoformat() if value is not None else None


class Envelope(BaseModel):
    """
    What:  The fixed wrapper used for every /api response.

    Example:
        {"success": true, "message": "Note created successfully", "data": {...}}
        {"success": false, "message": "Validation failed", "errors": {"title": [...]}}
    """

    success: bool = Field(description="Whether the operation succeeded")
    message: Optional[str] = Field(default=None, description="Human-readable outcome")
    data: Optional[Union[NoteRead, List[NoteRead]]] = Field(default=None, description="Note payload")
    errors: Optional[Dict[str, List[str]]] = Field(default=None, description="Field → messages map")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


# ══════════════════════════════════════════════════════════════════════════
# Validation message mapping
# ══════════════════════════════════════════════════════════════════════════

_REQUIRED_TYPES = {"missing", "string_too_short"}
_BODY_LOCATIONS = {"body", "query"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in _BODY_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts) if parts else "body"


def _message_for(field: str, error: Mapping[str, Any]) -> str:
    error_type = error.get("type", "")
    if field == "body" and error_type in {"model_type", "dict_type", "model_attributes_type", "json_invalid"}:
        return "The request body must be a JSON object."
    if error_type in _REQUIRED_TYPES:
        return f"The {field} field is required."
    if error_type == "string_type":
        if error.get("input") is None:
            return f"The {field} field is required."
        return f"The {field} field must be a string."
    if error_type == "string_too_long":
        limit = (error.get("ctx") or {}).get("max_length", TITLE_MAX_LENGTH)
        return f"The {field} field must not be greater than {limit} characters."
    return str(error.get("msg", "Invalid value"))


def collect_field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """
    Convert pydantic error dicts into a field → messages map.

    Used both for service-level validation and for FastAPI's
    RequestValidationError, so clients see one message vocabulary.
    """
    field_errors: Dict[str, List[str]] = {}
    for error in errors:
        if error.get("type") == "json_invalid":
            field = "body"
        else:
            field = _field_name(error.get("loc", ()))
        message = _message_for(field, error)
        messages = field_errors.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return field_errors
