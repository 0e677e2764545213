"""
Notes Service — Client Adapter Tests
====================================

What:  Tests for NotesApiClient, call_with_resilience and classify_error.
How:   httpx.MockTransport stands in for the server; an injected recording
       sleep captures backoff delays so no test actually waits.

What we test:
    ✅ Adaptive timeouts per verb, explicit timeout wins
    ✅ Transport failures exhaust 3 retries with 1s/2s/4s backoff
    ✅ 500 then success → one retry after 1s
    ✅ 4xx never retried
    ✅ Error classification order
"""

import httpx
import pytest

from notes_service.client.api import NotesApiClient, classify_error, timeout_for
from notes_service.client.errors import (
    ApiError,
    ClientError,
    NetworkError,
    ServerError,
    ValidationFailed,
)
from notes_service.client.resilience import RetryPolicy, call_with_resilience, is_retryable
from notes_service.config import ClientSettings

API_URL = "http://notes.test/api"


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def make_client(handler, sleep=None, **overrides):
    config = ClientSettings(api_url=API_URL, **overrides)
    return NotesApiClient(
        config=config,
        transport=httpx.MockTransport(handler),
        sleep=sleep or RecordingSleep(),
    )


def _status_error(status, json=None):
    request = httpx.Request("GET", f"{API_URL}/notes")
    response = httpx.Response(status, json=json, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestTimeouts:

    @pytest.mark.parametrize(
        "method, expected",
        [("GET", 30.0), ("POST", 20.0), ("PUT", 20.0), ("DELETE", 15.0)],
    )
    def test_timeout_by_verb(self, method, expected):
        assert timeout_for(method, ClientSettings()) == expected

    @pytest.mark.asyncio
    async def test_request_uses_verb_timeout(self):
        seen = {}

        def handler(request):
            seen[request.method] = request.extensions["timeout"]["read"]
            return httpx.Response(200, json={"success": True})

        async with make_client(handler) as api:
            await api.list_notes()
            await api.create_note({"title": "a", "content": "b"})
            await api.delete_note(1)

        assert seen == {"GET": 30.0, "POST": 20.0, "DELETE": 15.0}

    @pytest.mark.asyncio
    async def test_explicit_timeout_wins(self):
        seen = []

        def handler(request):
            seen.append(request.extensions["timeout"]["read"])
            return httpx.Response(200, json={"success": True})

        async with make_client(handler) as api:
            await api.request("GET", "/notes", timeout=2.5)

        assert seen == [2.5]


class TestRetries:

    @pytest.mark.asyncio
    async def test_network_failure_exhausts_retries(self):
        calls = []
        sleep = RecordingSleep()

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler, sleep=sleep) as api:
            with pytest.raises(NetworkError) as exc_info:
                await api.list_notes()

        assert len(calls) == 4
        assert sleep.delays == [1.0, 2.0, 4.0]
        assert exc_info.value.is_network_error is True
        assert exc_info.value.endpoint == API_URL
        assert exc_info.value.message == (
            "Cannot connect to server. Please check if the backend is running on " + API_URL
        )

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={"success": True, "data": []})

        async with make_client(handler) as api:
            envelope = await api.list_notes()

        assert envelope == {"success": True, "data": []}
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_server_error_then_success(self):
        responses = [
            httpx.Response(500, json={"success": False, "message": "Internal server error"}),
            httpx.Response(201, json={"success": True, "data": {"id": 1}}),
        ]
        bodies = []
        sleep = RecordingSleep()

        def handler(request):
            bodies.append(request.content)
            return responses.pop(0)

        async with make_client(handler, sleep=sleep) as api:
            envelope = await api.create_note({"title": "a", "content": "b"})

        assert envelope["data"] == {"id": 1}
        assert api.last_call.retries == 1
        assert sleep.delays == [1.0]
        assert bodies[0] == bodies[1]

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        calls = []
        sleep = RecordingSleep()

        def handler(request):
            calls.append(request)
            return httpx.Response(
                422,
                json={
                    "success": False,
                    "message": "Validation failed",
                    "errors": {
                        "title": ["The title field is required."],
                        "content": ["The content field is required."],
                    },
                },
            )

        async with make_client(handler, sleep=sleep) as api:
            with pytest.raises(ValidationFailed) as exc_info:
                await api.create_note({})

        assert len(calls) == 1
        assert sleep.delays == []
        assert exc_info.value.status == 422
        assert exc_info.value.message == (
            "The title field is required., The content field is required."
        )
        assert exc_info.value.errors["title"] == ["The title field is required."]

    @pytest.mark.asyncio
    async def test_persistent_server_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        async with make_client(handler) as api:
            with pytest.raises(ServerError) as exc_info:
                await api.get_note(1)

        assert len(calls) == 4
        assert exc_info.value.message == "Server error. Please try again later."

    @pytest.mark.asyncio
    async def test_attempts_do_not_leak_between_calls(self):
        state = {"fail_next": True}

        def handler(request):
            if state["fail_next"]:
                state["fail_next"] = False
                return httpx.Response(502)
            return httpx.Response(200, json={"success": True})

        async with make_client(handler) as api:
            await api.list_notes()
            assert api.last_call.attempts == 2
            await api.list_notes()
            assert api.last_call.attempts == 1


class TestCallWithResilience:

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        sleep = RecordingSleep()
        attempts = []

        async def send():
            attempts.append(1)
            raise httpx.ConnectError("down")

        with pytest.raises(httpx.ConnectError):
            await call_with_resilience(send, RetryPolicy(max_retries=0, sleep=sleep))

        assert len(attempts) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_non_retryable_reraised_unchanged(self):
        async def send():
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            await call_with_resilience(send, RetryPolicy(sleep=RecordingSleep()))

    @pytest.mark.asyncio
    async def test_custom_base_delay(self):
        sleep = RecordingSleep()
        outcomes = [httpx.ConnectError("down"), httpx.ConnectError("down"), "ok"]

        async def send():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        result = await call_with_resilience(send, RetryPolicy(base_delay=0.5, sleep=sleep))

        assert result.value == "ok"
        assert result.attempts == 3
        assert result.delays == [0.5, 1.0]
        assert sleep.delays == [0.5, 1.0]

    def test_is_retryable(self):
        assert is_retryable(httpx.ConnectError("down"))
        assert is_retryable(httpx.ReadTimeout("slow"))
        assert is_retryable(_status_error(500))
        assert not is_retryable(_status_error(404))
        assert not is_retryable(_status_error(422))
        assert not is_retryable(RuntimeError("other"))


class TestClassifyError:

    def test_field_errors_joined(self):
        exc = _status_error(422, {"errors": {"title": ["A."], "content": ["B.", "C."]}})

        error = classify_error(exc, API_URL)

        assert isinstance(error, ValidationFailed)
        assert error.message == "A., B., C."

    def test_message_verbatim(self):
        error = classify_error(_status_error(404, {"message": "Resource not found"}), API_URL)

        assert type(error) is ApiError
        assert error.message == "Resource not found"
        assert error.status == 404

    def test_server_message_verbatim(self):
        error = classify_error(_status_error(500, {"message": "Internal server error"}), API_URL)

        assert isinstance(error, ServerError)
        assert error.message == "Internal server error"

    @pytest.mark.parametrize(
        "status, expected",
        [
            (404, "Resource not found"),
            (500, "Server error. Please try again later."),
            (502, "Server error. Please try again later."),
            (409, "An error occurred"),
        ],
    )
    def test_status_only(self, status, expected):
        assert classify_error(_status_error(status), API_URL).message == expected

    def test_non_json_body_uses_status(self):
        request = httpx.Request("GET", API_URL)
        response = httpx.Response(404, text="<html>nope</html>", request=request)
        exc = httpx.HTTPStatusError("error", request=request, response=response)

        assert classify_error(exc, API_URL).message == "Resource not found"

    def test_no_response_is_network_error(self):
        error = classify_error(httpx.ConnectError("refused"), API_URL)

        assert isinstance(error, NetworkError)
        assert API_URL in error.message

    def test_anything_else_keeps_message(self):
        error = classify_error(RuntimeError("decoder exploded"), API_URL)

        assert type(error) is ClientError
        assert error.message == "decoder exploded"
        assert error.is_network_error is False
