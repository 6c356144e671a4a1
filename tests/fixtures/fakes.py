# ABOUTME: Test doubles shared across unit, integration, and e2e tests.
# ABOUTME: Fake HTTP clients, transports, providers, and a recording sleep.

from typing import Any

import httpx

from librarium.metadata.types import ProviderMetadata


class FakeHttpClient:
    """Fake HTTP client that returns canned responses based on URL patterns."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self._responses = responses or {}
        self.request_log: list[tuple[str, dict[str, str] | None]] = []

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        self.request_log.append((url, params))
        for pattern, response in self._responses.items():
            if pattern in url:
                if isinstance(response, Exception):
                    raise response
                return response
        return {}

    @property
    def call_count(self) -> int:
        return len(self.request_log)


class FakeTransport(httpx.BaseTransport):
    """Fake transport for httpx that returns canned responses in order."""

    def __init__(self, responses: list[httpx.Response | Exception] | None = None) -> None:
        self._responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            response = self._responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return httpx.Response(200, json={"ok": True})

    @property
    def call_count(self) -> int:
        return len(self.requests)


class RecordingSleep:
    """Stands in for time.sleep and remembers every requested delay."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeProvider:
    """Provider returning canned metadata keyed by title."""

    def __init__(
        self,
        name: str = "fake",
        results: dict[str, ProviderMetadata] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._name = name
        self._results = results or {}
        self._error = error
        self.calls: list[tuple[str, str | None]] = []

    @property
    def name(self) -> str:
        return self._name

    def lookup(self, title: str, author: str | None = None) -> ProviderMetadata | None:
        self.calls.append((title, author))
        if self._error is not None:
            raise self._error
        return self._results.get(title)
