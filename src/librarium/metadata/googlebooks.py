# ABOUTME: Google Books metadata provider, the primary source for lookups.
# ABOUTME: Searches volumes by title/author, prefers French editions, and parses volumeInfo.

import logging
import re
from typing import Any

from librarium.metadata.cache import MetadataCache
from librarium.metadata.editions import is_french_publisher, prefer
from librarium.metadata.http import HttpClient
from librarium.metadata.provider import MAX_RESULTS, CachedProvider, strip_quotes
from librarium.metadata.types import ProviderMetadata, SeriesInfo

logger = logging.getLogger(__name__)

_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"

# "Tome 3 de la série XYZ", "Volume 2 of the series XYZ"
_SUBTITLE_NUMBER_FIRST_RE = re.compile(
    r"(?:Tome|Livre|Volume|Vol\.?)\s*(\d+)\s*(?:de|of|from)?\s*(?:la|the)?\s*"
    r"(?:série|series)?\s*([^,.]+)",
    re.IGNORECASE,
)
# "XYZ, tome 3"
_SUBTITLE_NAME_FIRST_RE = re.compile(
    r"([^,.]+)\s*,\s*(?:tome|livre|volume|vol\.?)\s*(\d+)", re.IGNORECASE
)
# "Le Trône de Fer, Tome 1" or "Harry Potter (Tome 2)"
_TITLE_SERIES_RE = re.compile(
    r"^([^,()]+)(?:\s*[,(]\s*(?:Tome|Livre|Volume|Vol\.?)\s*(\d+)(?:[),]|$))", re.IGNORECASE
)


def _positive_int(value: Any) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _series(name: Any, number: Any) -> SeriesInfo | None:
    """Build a SeriesInfo, defaulting the position to 1; None without a name."""
    if not isinstance(name, str) or not name.strip():
        return None
    return SeriesInfo(name=name.strip(), number=_positive_int(number) or 1)


def is_french_volume(item: dict[str, Any]) -> bool:
    """Whether a Google Books item is a French-language or French-published edition."""
    info = item.get("volumeInfo") or {}
    return info.get("language") == "fr" or is_french_publisher(info.get("publisher"))


def parse_series(info: dict[str, Any]) -> SeriesInfo | None:
    """Extract series information from a volumeInfo object.

    Checks structured series fields first, then the subtitle, then the title.
    """
    series_info = info.get("seriesInfo")
    if isinstance(series_info, dict):
        found = _series(
            series_info.get("title") or series_info.get("name"),
            series_info.get("bookOrderInSeries")
            or series_info.get("volumeNumber")
            or series_info.get("bookDisplayNumber"),
        )
        if found:
            return found

    series_list = info.get("series")
    if isinstance(series_list, list) and series_list:
        found = _series(series_list[0], info.get("seriesPosition") or info.get("volumeNumber"))
        if found:
            return found

    subtitle = info.get("subtitle")
    if subtitle:
        m = _SUBTITLE_NUMBER_FIRST_RE.search(subtitle)
        if m and _positive_int(m.group(1)) and m.group(2).strip():
            return SeriesInfo(name=m.group(2).strip(), number=int(m.group(1)))
        m = _SUBTITLE_NAME_FIRST_RE.search(subtitle)
        if m and _positive_int(m.group(2)) and m.group(1).strip():
            return SeriesInfo(name=m.group(1).strip(), number=int(m.group(2)))

    title = info.get("title")
    if title:
        m = _TITLE_SERIES_RE.match(title)
        if m and _positive_int(m.group(2)) and m.group(1).strip():
            return SeriesInfo(name=m.group(1).strip(), number=int(m.group(2)))

    return None


def parse_volume(item: dict[str, Any]) -> ProviderMetadata:
    """Parse a Google Books volume item into ProviderMetadata."""
    info = item.get("volumeInfo") or {}

    categories = info.get("categories") or []
    image_links = info.get("imageLinks") or {}
    cover_url = image_links.get("thumbnail") or image_links.get("smallThumbnail")
    if cover_url and cover_url.startswith("http://"):
        cover_url = "https://" + cover_url[len("http://"):]

    return ProviderMetadata(
        source=GoogleBooksProvider.name,
        title=info.get("title") or None,
        authors=[a for a in info.get("authors") or [] if a],
        category=categories[0] if categories else None,
        language=info.get("language") or None,
        publisher=info.get("publisher") or None,
        published_date=info.get("publishedDate") or None,
        description=info.get("description") or None,
        series=parse_series(info),
        cover_url=cover_url or None,
    )


class GoogleBooksProvider(CachedProvider):
    """Metadata provider backed by the Google Books volumes API.

    Restricts results to French and, among the returned volumes, prefers one
    whose language is French or whose publisher is a known French house.
    """

    name = "googleBooks"

    def __init__(
        self,
        http_client: HttpClient,
        cache: MetadataCache,
        *,
        api_key: str | None = None,
    ) -> None:
        super().__init__(http_client, cache)
        self._api_key = api_key
        if not api_key:
            logger.warning("No Google Books API key set; results may be rate limited.")

    def _search(self, title: str, author: str | None) -> list[dict[str, Any]]:
        query = f'intitle:"{strip_quotes(title)}"'
        if author:
            query += f' inauthor:"{strip_quotes(author)}"'
        params = {
            "q": query,
            "langRestrict": "fr",
            "maxResults": str(MAX_RESULTS),
        }
        if self._api_key:
            params["key"] = self._api_key
        data = self._http.get(_VOLUMES_URL, params=params)
        return list(data.get("items") or [])

    def _choose(self, candidates: list[dict[str, Any]]) -> dict[str, Any]:
        return prefer(candidates, is_french_volume)

    def parse(self, raw: dict[str, Any]) -> ProviderMetadata:
        return parse_volume(raw)
