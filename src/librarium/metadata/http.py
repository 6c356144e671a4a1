# ABOUTME: HTTP client abstraction for metadata provider API calls.
# ABOUTME: Provides a fixed throttle, bounded retry on 429/timeouts, and injectable transport/sleep.

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx

from librarium import __version__

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429}
_AUTH_STATUS_CODES = {401, 403}

DEFAULT_REQUEST_DELAY = 0.5
DEFAULT_RETRY_DELAY = 5.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 10.0


class MetadataFetchError(Exception):
    """Raised when an HTTP request to a metadata provider fails."""


class MetadataAuthError(MetadataFetchError):
    """Raised on authorization or quota errors (401/403); never retried."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata APIs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class LibrariumHttpClient:
    """HTTP client with throttling and retry for metadata API calls.

    Waits ``request_delay`` seconds before every request to stay under the
    providers' rate limits. A 429 response or a timeout is retried up to
    ``max_retries`` times, waiting a fixed ``retry_delay`` between attempts.
    """

    def __init__(
        self,
        *,
        request_delay: float = DEFAULT_REQUEST_DELAY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": f"librarium/{__version__}"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._request_delay = request_delay
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._sleep = sleep
        self.attempts = 0

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Send a throttled GET request, retrying on throttling and timeouts.

        Args:
            url: The URL to request.
            params: Optional query parameters.

        Returns:
            Parsed JSON response body.

        Raises:
            MetadataAuthError: On 401/403, without retrying.
            MetadataFetchError: On other HTTP errors or exhausted retries.
        """
        response = self._send(url, params)
        try:
            return response.json()
        except ValueError as exc:
            raise MetadataFetchError(f"Invalid JSON from {url}: {exc}") from exc

    def get_bytes(self, url: str) -> bytes:
        """Download a binary resource such as a cover image."""
        return self._send(url, None).content

    def _send(self, url: str, params: dict[str, str] | None) -> httpx.Response:
        if self._request_delay > 0:
            self._sleep(self._request_delay)

        attempts = 1 + self._max_retries
        last_problem = ""
        for attempt in range(attempts):
            self.attempts += 1
            try:
                response = self._client.get(url, params=params)
            except httpx.TimeoutException as exc:
                last_problem = f"timeout ({exc})"
            except httpx.HTTPError as exc:
                raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc
            else:
                if response.status_code == 200:
                    return response
                if response.status_code in _AUTH_STATUS_CODES:
                    raise MetadataAuthError(
                        f"HTTP {response.status_code} from {url}: "
                        "invalid API key or quota exceeded"
                    )
                if response.status_code not in _RETRYABLE_STATUS_CODES:
                    raise MetadataFetchError(f"HTTP {response.status_code} from {url}")
                last_problem = f"HTTP {response.status_code}"

            if attempt < attempts - 1:
                logger.warning(
                    "%s from %s, retrying in %.1fs (attempt %d/%d)",
                    last_problem,
                    url,
                    self._retry_delay,
                    attempt + 1,
                    self._max_retries,
                )
                self._sleep(self._retry_delay)

        raise MetadataFetchError(f"{last_problem} from {url} after {attempts} attempts")

    def close(self) -> None:
        self._client.close()
