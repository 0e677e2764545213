"""
Notes Service — Client Package
==============================

What:  Python consumer of the notes API.

Modules:
    - api:        NotesApiClient, adaptive timeouts and error classification
    - resilience: retry with exponential backoff on tenacity
    - errors:     ClientError hierarchy surfaced to callers
    - state:      NotesState, reducer, store and NotesController
"""

from notes_service.client.api import NotesApiClient, classify_error
from notes_service.client.errors import (
    ApiError,
    ClientError,
    NetworkError,
    ServerError,
    ValidationFailed,
)
from notes_service.client.resilience import CallResult, RetryPolicy, call_with_resilience
from notes_service.client.state import ActionResult, NotesController, NotesState, NotesStore

__all__ = [
    "ActionResult",
    "ApiError",
    "CallResult",
    "ClientError",
    "NetworkError",
    "NotesApiClient",
    "NotesController",
    "NotesState",
    "NotesStore",
    "RetryPolicy",
    "ServerError",
    "ValidationFailed",
    "call_with_resilience",
    "classify_error",
]
