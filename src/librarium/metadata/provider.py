# ABOUTME: MetadataProvider protocol and the shared cache-first lookup used by providers.
# ABOUTME: Providers are queried in order; the first one with a candidate wins.

import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from librarium.metadata.cache import CACHE_MISS, MetadataCache, make_cache_key
from librarium.metadata.http import HttpClient, MetadataAuthError, MetadataFetchError
from librarium.metadata.types import ProviderMetadata

logger = logging.getLogger(__name__)

# Number of candidate volumes requested per search.
MAX_RESULTS = 10


@runtime_checkable
class MetadataProvider(Protocol):
    """Protocol for metadata lookup services.

    Implementations look a book up by title and optional author and return
    the preferred candidate, or None when the source has nothing usable.
    """

    @property
    def name(self) -> str: ...

    def lookup(self, title: str, author: str | None = None) -> ProviderMetadata | None: ...


class CachedProvider:
    """Base class for providers whose raw answers are kept in a MetadataCache.

    Subclasses set ``name`` (also the cache namespace) and implement
    ``_search`` (one HTTP query returning raw candidates), ``_choose`` (edition
    preference), and ``parse`` (raw candidate to ProviderMetadata).
    """

    name: str = ""

    def __init__(self, http_client: HttpClient, cache: MetadataCache) -> None:
        self._http = http_client
        self._cache = cache

    def lookup(self, title: str, author: str | None = None) -> ProviderMetadata | None:
        """Return the preferred candidate for a title, using the cache first.

        A cached None is a confirmed miss and is returned without a request.
        Fetch errors are logged and yield None without touching the cache, so
        the title is retried on the next run.
        """
        key = make_cache_key(title, author)
        cached = self._cache.get(self.name, key)
        if cached is not CACHE_MISS:
            logger.info("Using cached %s result for %r", self.name, title)
            return self.parse(cached) if cached is not None else None

        logger.info("Querying %s for %r", self.name, title)
        try:
            candidates = self._search(title, author)
        except MetadataAuthError as exc:
            logger.error("%s rejected the request: %s", self.name, exc)
            return None
        except MetadataFetchError as exc:
            logger.warning("%s search failed for %r: %s", self.name, title, exc)
            return None

        chosen = self._choose(candidates) if candidates else None
        self._cache.put(self.name, key, chosen)
        return self.parse(chosen) if chosen is not None else None

    def _search(self, title: str, author: str | None) -> list[dict[str, Any]]:
        raise NotImplementedError

    def _choose(self, candidates: list[dict[str, Any]]) -> dict[str, Any]:
        raise NotImplementedError

    def parse(self, raw: dict[str, Any]) -> ProviderMetadata:
        raise NotImplementedError


def lookup_metadata(
    providers: Iterable[MetadataProvider], title: str, author: str | None = None
) -> ProviderMetadata | None:
    """Query providers in order and return the first candidate found."""
    for provider in providers:
        result = provider.lookup(title, author)
        if result is not None:
            return result
    return None


def strip_quotes(text: str) -> str:
    """Remove double quotes so a value can be embedded in a quoted query."""
    return text.replace('"', "")
