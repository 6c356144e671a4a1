# ABOUTME: Unit tests for the HTTP client abstraction.
# ABOUTME: Tests LibrariumHttpClient throttling, bounded retry, and auth failures without real sleeps.

import httpx
import pytest

from librarium.metadata.http import (
    HttpClient,
    LibrariumHttpClient,
    MetadataAuthError,
    MetadataFetchError,
)
from tests.fixtures.fakes import FakeTransport, RecordingSleep


def make_client(
    responses: list[httpx.Response | Exception] | None = None, **kwargs
) -> tuple[LibrariumHttpClient, FakeTransport, RecordingSleep]:
    transport = FakeTransport(responses)
    sleep = RecordingSleep()
    client = LibrariumHttpClient(transport=transport, sleep=sleep, **kwargs)
    return client, transport, sleep


class TestHttpClientProtocol:
    """Tests for HttpClient protocol compliance."""

    def test_librarium_client_satisfies_protocol(self) -> None:
        client = LibrariumHttpClient(request_delay=0.0)
        assert isinstance(client, HttpClient)


class TestLibrariumHttpClient:
    """Tests for LibrariumHttpClient."""

    def test_get_returns_json(self) -> None:
        client, _, _ = make_client(request_delay=0.0)
        assert client.get("https://example.com/api", params={"q": "test"}) == {"ok": True}

    def test_params_are_sent(self) -> None:
        client, transport, _ = make_client(request_delay=0.0)
        client.get("https://example.com/api", params={"q": "dune"})
        assert transport.requests[0].url.params["q"] == "dune"

    def test_user_agent_header(self) -> None:
        client, _, _ = make_client()
        assert "librarium/" in client._client.headers["user-agent"]

    def test_throttle_sleeps_before_each_request(self) -> None:
        client, transport, sleep = make_client(request_delay=0.5)
        client.get("https://example.com/1")
        client.get("https://example.com/2")
        assert sleep.calls == [0.5, 0.5]
        assert transport.call_count == 2

    def test_no_throttle_when_delay_is_zero(self) -> None:
        client, _, sleep = make_client(request_delay=0.0)
        client.get("https://example.com/1")
        assert sleep.calls == []

    def test_retry_on_429_then_success(self) -> None:
        """Two throttled responses then success: three attempts, two backoff waits."""
        responses = [
            httpx.Response(429, json={"error": "rate limited"}),
            httpx.Response(429, json={"error": "rate limited"}),
            httpx.Response(200, json={"items": []}),
        ]
        client, transport, sleep = make_client(responses, request_delay=0.5, retry_delay=5.0)

        assert client.get("https://example.com/api") == {"items": []}
        assert transport.call_count == 3
        assert client.attempts == 3
        assert sleep.calls == [0.5, 5.0, 5.0]

    def test_retry_exhausted_raises(self) -> None:
        responses = [httpx.Response(429)] * 4
        client, transport, _ = make_client(responses, request_delay=0.0, max_retries=3)

        with pytest.raises(MetadataFetchError, match="429"):
            client.get("https://example.com/api")
        assert transport.call_count == 4  # 1 initial + 3 retries

    def test_timeout_is_retried(self) -> None:
        responses = [
            httpx.ReadTimeout("timed out"),
            httpx.Response(200, json={"ok": True}),
        ]
        client, transport, sleep = make_client(responses, request_delay=0.0, retry_delay=5.0)

        assert client.get("https://example.com/api") == {"ok": True}
        assert transport.call_count == 2
        assert sleep.calls == [5.0]

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors_are_not_retried(self, status: int) -> None:
        responses = [httpx.Response(status), httpx.Response(200, json={"ok": True})]
        client, transport, sleep = make_client(responses, request_delay=0.0)

        with pytest.raises(MetadataAuthError, match=str(status)):
            client.get("https://example.com/api")
        assert transport.call_count == 1
        assert sleep.calls == []

    def test_auth_error_is_a_fetch_error(self) -> None:
        assert issubclass(MetadataAuthError, MetadataFetchError)

    def test_other_status_raises_without_retry(self) -> None:
        responses = [httpx.Response(404, json={"error": "not found"})]
        client, transport, _ = make_client(responses, request_delay=0.0)

        with pytest.raises(MetadataFetchError, match="404"):
            client.get("https://example.com/missing")
        assert transport.call_count == 1

    def test_connection_error_raises_fetch_error(self) -> None:
        responses = [httpx.ConnectError("connection refused")]
        client, _, _ = make_client(responses, request_delay=0.0)

        with pytest.raises(MetadataFetchError, match="Request failed"):
            client.get("https://example.com/api")

    def test_invalid_json_raises_fetch_error(self) -> None:
        responses = [httpx.Response(200, content=b"<html>oops</html>")]
        client, _, _ = make_client(responses, request_delay=0.0)

        with pytest.raises(MetadataFetchError, match="Invalid JSON"):
            client.get("https://example.com/api")

    def test_get_bytes_returns_content(self) -> None:
        responses = [httpx.Response(200, content=b"\x89PNG")]
        client, _, _ = make_client(responses, request_delay=0.0)
        assert client.get_bytes("https://example.com/cover.png") == b"\x89PNG"
