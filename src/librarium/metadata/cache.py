# ABOUTME: Persistent JSON cache of provider lookups keyed by normalized title/author.
# ABOUTME: Stores confirmed empty results as null so absent titles are never re-queried.

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from librarium.core.storage import CatalogueWriteError, write_json_atomic
from librarium.metadata.filename import strip_diacritics

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACES = ("googleBooks", "openLibrary")
DEFAULT_FLUSH_EVERY = 50


class _CacheMiss:
    """Sentinel type for keys that were never stored."""

    def __repr__(self) -> str:
        return "CACHE_MISS"


CACHE_MISS = _CacheMiss()


def _normalize_key_part(text: str) -> str:
    return "".join(ch for ch in strip_diacritics(text.lower()) if ch.isalnum())


def make_cache_key(title: str, author: str | None = None) -> str:
    """Build the cache key for a title and optional author.

    Both parts are lowercased, stripped of accents and of anything that is not a
    letter or digit in any script. A title with nothing left falls back to its
    lowercased raw text. The author part is appended after an underscore only
    when it survives normalization.
    """
    key = _normalize_key_part(title) or title.strip().lower()
    normalized_author = _normalize_key_part(author or "")
    if normalized_author:
        return f"{key}_{normalized_author}"
    return key


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MetadataCache:
    """Provider lookup cache backed by a single JSON file.

    The file holds one object per provider namespace plus a ``lastUpdated``
    timestamp. Entries added during a run are kept in memory and written out
    every ``flush_every`` new entries per provider, and by an explicit flush().
    """

    def __init__(
        self,
        path: Path,
        *,
        namespaces: tuple[str, ...] = DEFAULT_NAMESPACES,
        flush_every: int = DEFAULT_FLUSH_EVERY,
    ) -> None:
        self._path = path
        self._namespaces = namespaces
        self._flush_every = flush_every
        self._data: dict[str, dict[str, Any]] = {ns: {} for ns in namespaces}
        self._new_entries: dict[str, int] = {ns: 0 for ns in namespaces}
        self.last_updated: str | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        """Read the cache file, falling back to empty namespaces.

        A missing file is normal on a first run. An unreadable or malformed
        file is logged and discarded rather than failing the run.
        """
        self._data = {ns: {} for ns in self._namespaces}
        self._new_entries = {ns: 0 for ns in self._namespaces}

        if not self._path.exists():
            logger.info("No cache file at %s, starting with an empty cache", self._path)
            return

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read cache file %s: %s", self._path, exc)
            return

        if not isinstance(raw, dict):
            logger.warning("Ignoring cache file %s: top level is not an object", self._path)
            return

        for name, entries in raw.items():
            if name == "lastUpdated":
                self.last_updated = entries
            elif isinstance(entries, dict):
                self._data[name] = dict(entries)
                self._new_entries.setdefault(name, 0)

        logger.info(
            "Loaded cache with %s",
            ", ".join(f"{len(v)} {k} entries" for k, v in self._data.items()),
        )

    def get(self, provider: str, key: str) -> Any:
        """Return the stored value, which may be None, or CACHE_MISS."""
        return self._data.get(provider, {}).get(key, CACHE_MISS)

    def __contains__(self, item: tuple[str, str]) -> bool:
        provider, key = item
        return key in self._data.get(provider, {})

    def count(self, provider: str) -> int:
        """Number of entries stored for a provider."""
        return len(self._data.get(provider, {}))

    def put(self, provider: str, key: str, value: Any) -> None:
        """Store a value (None records a confirmed empty result)."""
        namespace = self._data.setdefault(provider, {})
        is_new = key not in namespace
        namespace[key] = value
        if not is_new:
            return
        self._new_entries[provider] = self._new_entries.get(provider, 0) + 1
        if self._flush_every > 0 and self._new_entries[provider] % self._flush_every == 0:
            self.flush()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {name: entries for name, entries in self._data.items()}
        data["lastUpdated"] = self.last_updated
        return data

    def flush(self) -> bool:
        """Rewrite the whole cache file with a fresh timestamp.

        Returns:
            True if the file was written. Write errors are logged, not raised,
            so a failing flush never takes the scan down with it.
        """
        self.last_updated = _now_iso()
        try:
            write_json_atomic(self._path, self.to_dict())
        except CatalogueWriteError as exc:
            logger.error("Could not save cache to %s: %s", self._path, exc)
            return False
        logger.debug("Cache saved to %s", self._path)
        return True
