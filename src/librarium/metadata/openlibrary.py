# ABOUTME: Open Library metadata provider, the fallback source for lookups.
# ABOUTME: Searches openlibrary.org by title/author and prefers French-language editions.

import re
from typing import Any

from librarium.metadata.editions import prefer
from librarium.metadata.provider import MAX_RESULTS, CachedProvider, strip_quotes
from librarium.metadata.types import ProviderMetadata, SeriesInfo

_OL_SEARCH_URL = "https://openlibrary.org/search.json"
_COVERS_URL = "https://covers.openlibrary.org/b/id/{cover_id}-L.jpg"

# Open Library uses MARC language codes.
_FRENCH_CODE = "fre"

_VOLUME_NUMBER_RE = re.compile(r"(?:tome|livre|volume|vol\.?)\s*(\d+)", re.IGNORECASE)
# "Series - Tome N" or "Series, Tome N"
_TITLE_SERIES_RE = re.compile(
    r"^([^-,]+)\s*[-,]\s*(?:Tome|Livre|Volume|Vol\.?)\s*(\d+)", re.IGNORECASE
)
# "Title (Series N)" or "Title [Series N]"
_BRACKETED_SERIES_RE = re.compile(r"^.+\s*[(\[]\s*([^\d()\[\]]+)\s*(\d+)\s*[)\]]$")


def is_french_doc(doc: dict[str, Any]) -> bool:
    """Whether an Open Library search doc lists French among its languages."""
    return _FRENCH_CODE in (doc.get("language") or [])


def parse_series(doc: dict[str, Any]) -> SeriesInfo | None:
    """Extract series information from a search doc.

    An explicit ``series`` field wins, with its position read from a
    "tome N" mention in the title (default 1). Otherwise the title itself is
    searched for "Series - Tome N" or "Title (Series N)".
    """
    title = doc.get("title") or ""

    series = doc.get("series") or []
    if series and isinstance(series[0], str) and series[0].strip():
        number = 1
        m = _VOLUME_NUMBER_RE.search(title)
        if m and int(m.group(1)) > 0:
            number = int(m.group(1))
        return SeriesInfo(name=series[0].strip(), number=number)

    for pattern in (_TITLE_SERIES_RE, _BRACKETED_SERIES_RE):
        m = pattern.match(title)
        if m and m.group(1).strip() and int(m.group(2)) > 0:
            return SeriesInfo(name=m.group(1).strip(), number=int(m.group(2)))

    return None


def _first(values: Any) -> str | None:
    if isinstance(values, list) and values:
        return str(values[0])
    return None


def parse_doc(doc: dict[str, Any]) -> ProviderMetadata:
    """Parse an Open Library search doc into ProviderMetadata."""
    cover_id = doc.get("cover_i")
    return ProviderMetadata(
        source=OpenLibraryProvider.name,
        title=doc.get("title") or None,
        authors=[a for a in doc.get("author_name") or [] if a],
        category=_first(doc.get("subject")),
        language="fr" if is_french_doc(doc) else None,
        publisher=_first(doc.get("publisher")),
        published_date=_first(doc.get("publish_date")),
        description=None,
        series=parse_series(doc),
        cover_url=_COVERS_URL.format(cover_id=cover_id) if cover_id else None,
    )


class OpenLibraryProvider(CachedProvider):
    """Metadata provider backed by the Open Library search API.

    Asks for French editions and, among the returned docs, prefers the first
    one that actually lists French.
    """

    name = "openLibrary"

    def _search(self, title: str, author: str | None) -> list[dict[str, Any]]:
        params = {
            "title": f'"{strip_quotes(title)}"',
            "limit": str(MAX_RESULTS),
            "language": _FRENCH_CODE,
        }
        if author:
            params["author"] = f'"{strip_quotes(author)}"'
        data = self._http.get(_OL_SEARCH_URL, params=params)
        return list(data.get("docs") or [])

    def _choose(self, candidates: list[dict[str, Any]]) -> dict[str, Any]:
        return prefer(candidates, is_french_doc)

    def parse(self, raw: dict[str, Any]) -> ProviderMetadata:
        return parse_doc(raw)
