"""
Notes Service Client — Error Classification Types
=================================================

What:  The failures the client adapter surfaces to its callers.
How:   Every failure leaving NotesApiClient is one of these, already carrying
       a human-readable message. Raw httpx errors are kept as __cause__.

Hierarchy:
    ClientError (base)        → message only ("anything else")
    ├── ApiError              → server responded; status + decoded payload
    │   ├── ValidationFailed  → response carried a field → messages map
    │   └── ServerError       → 5xx after retries were exhausted
    └── NetworkError          → no response at all (connection refused, timeout)

NetworkError and ServerError stay separate: the UI tells the
user "is the backend running?" for the first and "try again later" for the
second.
"""

from typing import Any, Dict, List, Optional


class ClientError(Exception):
    """Base class for all failures surfaced by the client adapter."""

    is_network_error = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ApiError(ClientError):
    """The server answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status: int,
        payload: Optional[Any] = None,
    ):
        super().__init__(message)
        self.status = status
        self.payload = payload


class ValidationFailed(ApiError):
    """The server rejected the input; `errors` maps field → messages."""

    def __init__(
        self,
        message: str,
        status: int,
        errors: Dict[str, List[str]],
        payload: Optional[Any] = None,
    ):
        super().__init__(message, status, payload)
        self.errors = errors


class ServerError(ApiError):
    """The server failed (5xx) on every attempt."""


class NetworkError(ClientError):
    """No response was received from the configured API endpoint."""

    is_network_error = True

    def __init__(self, message: str, endpoint: str):
        super().__init__(message)
        self.endpoint = endpoint
