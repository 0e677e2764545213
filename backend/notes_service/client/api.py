"""
Notes Service Client — HTTP Client Adapter
==========================================

What:  Async client for the /api/notes endpoints used by the view layer.
How:   httpx.AsyncClient for transport, wrapped per call by
       call_with_resilience(); failures are classified into the
       notes_service.client.errors hierarchy before they reach the caller.

Behaviour per call:
    1. Timeout chosen by verb (GET 30s, POST/PUT 20s, DELETE 15s) unless the
       caller passes one explicitly
    2. Dispatch; 4xx/5xx become httpx.HTTPStatusError via raise_for_status()
    3. Network failures, timeouts and 5xx are retried (1s, 2s, 4s backoff)
    4. Final failure → classify_error() → ClientError subclass

Example:
    async with NotesApiClient() as api:
        envelope = await api.create_note({"title": "Groceries", "content": "Milk"})
        note = envelope["data"]
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from notes_service.client.errors import (
    ApiError,
    ClientError,
    NetworkError,
    ServerError,
    ValidationFailed,
)
from notes_service.client.resilience import CallResult, RetryPolicy, call_with_resilience
from notes_service.config import ClientSettings, client_settings

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Resource not found"
SERVER_ERROR_MESSAGE = "Server error. Please try again later."
GENERIC_MESSAGE = "An error occurred"


def timeout_for(method: str, config: ClientSettings = client_settings) -> float:
    """Adaptive timeout: reads wait longest, deletes shortest."""
    verb = method.upper()
    if verb == "GET":
        return config.read_timeout
    if verb in ("POST", "PUT", "PATCH"):
        return config.write_timeout
    return config.delete_timeout


def network_error_message(api_url: str) -> str:
    return f"Cannot connect to server. Please check if the backend is running on {api_url}"


def _decode(response: httpx.Response) -> Optional[Any]:
    try:
        return response.json()
    except ValueError:
        return None


def _flatten(errors: Dict[str, Any]) -> List[str]:
    messages: List[str] = []
    for value in errors.values():
        if isinstance(value, (list, tuple)):
            messages.extend(str(item) for item in value)
        else:
            messages.append(str(value))
    return messages


def classify_error(exc: BaseException, api_url: str) -> ClientError:
    """
    Turn a final transport/HTTP failure into a user-facing ClientError.

    Order:
        response with field errors  → ValidationFailed, messages joined by ", "
        response with a message     → that message verbatim
        response with status only   → 404 / 5xx fixed messages
        no response                 → NetworkError naming the endpoint
        anything else               → the failure's own message
    """
    if isinstance(exc, ClientError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        payload = _decode(exc.response)
        body = payload if isinstance(payload, dict) else {}
        server_fault = status >= 500

        errors = body.get("errors")
        if isinstance(errors, dict) and errors:
            field_errors = {
                str(name): [str(m) for m in (msgs if isinstance(msgs, (list, tuple)) else [msgs])]
                for name, msgs in errors.items()
            }
            return ValidationFailed(", ".join(_flatten(errors)), status, field_errors, payload)

        message = body.get("message")
        if message:
            error_class = ServerError if server_fault else ApiError
            return error_class(str(message), status, payload)

        if status == 404:
            return ApiError(NOT_FOUND_MESSAGE, status, payload)
        if server_fault:
            return ServerError(SERVER_ERROR_MESSAGE, status, payload)
        return ApiError(GENERIC_MESSAGE, status, payload)

    if isinstance(exc, httpx.TransportError):
        return NetworkError(network_error_message(api_url), endpoint=api_url)

    return ClientError(str(exc) or GENERIC_MESSAGE)


class NotesApiClient:
    """
    Resilient client for the notes API.

    Args:
        config:    ClientSettings (base URL, timeouts, retry policy)
        transport: Optional httpx transport (tests pass httpx.MockTransport)
        sleep:     Backoff sleep function (tests pass a recorder)
    """

    def __init__(
        self,
        config: ClientSettings = client_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Any = None,
    ):
        self.config = config
        self.api_url = config.api_url.rstrip("/")
        policy_kwargs: Dict[str, Any] = {
            "max_retries": config.max_retries,
            "base_delay": config.retry_base_delay,
        }
        if sleep is not None:
            policy_kwargs["sleep"] = sleep
        self.policy = RetryPolicy(**policy_kwargs)
        self.last_call: Optional[CallResult] = None
        self._http = httpx.AsyncClient(
            base_url=self.api_url + "/",
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "NotesApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Perform one resilient call and return the decoded JSON envelope.

        Raises:
            ClientError: classified failure after retries (see classify_error)
        """
        effective_timeout = timeout if timeout is not None else timeout_for(method, self.config)
        url = path.lstrip("/")

        async def send() -> httpx.Response:
            response = await self._http.request(method, url, json=json, timeout=effective_timeout)
            response.raise_for_status()
            return response

        try:
            result = await call_with_resilience(send, self.policy)
        except Exception as exc:
            error = classify_error(exc, self.api_url)
            logger.error(
                "API call %s /%s failed: %s",
                method.upper(),
                url,
                error.message,
            )
            raise error from exc

        self.last_call = result
        if result.retries:
            logger.info("API call %s /%s succeeded after %d retries", method.upper(), url, result.retries)
        return _decode(result.value)

    # ── Note operations ───────────────────────────────────────────────────

    async def list_notes(self) -> Dict[str, Any]:
        return await self.request("GET", "/notes")

    async def get_note(self, note_id: int) -> Dict[str, Any]:
        return await self.request("GET", f"/notes/{note_id}")

    async def create_note(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("POST", "/notes", json=data)

    async def update_note(self, note_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("PUT", f"/notes/{note_id}", json=data)

    async def delete_note(self, note_id: int) -> Dict[str, Any]:
        return await self.request("DELETE", f"/notes/{note_id}")
