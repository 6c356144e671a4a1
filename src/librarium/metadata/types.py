# ABOUTME: Core data structures for the catalogue pipeline.
# ABOUTME: BookRecord is the unit written to the catalogue; the rest feed into it.

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

EBOOK_EXTENSIONS: frozenset[str] = frozenset({".epub", ".pdf", ".cbz", ".cbr"})

UNKNOWN_AUTHOR = "Auteur inconnu"
UNCATEGORIZED = "Non classé"


@dataclass(frozen=True)
class SeriesInfo:
    """A series name with the book's 1-based position in it."""

    name: str
    number: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "number": self.number}


@dataclass
class ScannedFile:
    """A single ebook file found while walking a library root."""

    path: Path
    name: str
    extension: str
    size: int
    mtime: datetime
    to_read: bool = False
    root: Path | None = None

    @property
    def stem(self) -> str:
        """Filename without its extension."""
        return self.name[: -len(self.extension)] if self.extension else self.name

    @property
    def file_type(self) -> str:
        """Extension without the leading dot, e.g. 'epub'."""
        return self.extension.lstrip(".")


@dataclass
class FilenameHints:
    """Metadata guessed from a file's name and location."""

    title: str
    author: str | None = None
    series: SeriesInfo | None = None
    genre: str | None = None


@dataclass
class ProviderMetadata:
    """One candidate volume from an external provider, in provider-neutral form."""

    source: str
    title: str | None = None
    authors: list[str] = field(default_factory=list)
    category: str | None = None
    language: str | None = None
    publisher: str | None = None
    published_date: str | None = None
    description: str | None = None
    series: SeriesInfo | None = None
    cover_url: str | None = None

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""


@dataclass
class BookRecord:
    """Canonical catalogue entry for one ebook file.

    Serialized with the camelCase keys the library UI reads. ``cover`` stays
    None until the cover resolver runs, and is None again only if even the
    placeholder could not be rendered.
    """

    id: str
    title: str
    file_path: str
    file_type: str
    file_size: int
    added_date: str
    author: str = UNKNOWN_AUTHOR
    genre: str = UNCATEGORIZED
    language: str = ""
    publisher: str = ""
    published_date: str = ""
    summary: str = ""
    series: SeriesInfo | None = None
    cover: str | None = None
    to_read: bool = False

    @property
    def has_known_author(self) -> bool:
        return bool(self.author) and self.author != UNKNOWN_AUTHOR

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "cover": self.cover,
            "summary": self.summary,
            "language": self.language,
            "publisher": self.publisher,
            "publishedDate": self.published_date,
            "filePath": self.file_path,
            "fileType": self.file_type,
            "fileSize": self.file_size,
            "toRead": self.to_read,
            "addedDate": self.added_date,
            "genre": self.genre,
        }
        if self.series is not None:
            data["serie"] = self.series.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BookRecord":
        serie = data.get("serie")
        series = None
        if serie and serie.get("name"):
            series = SeriesInfo(name=serie["name"], number=int(serie.get("number") or 1))
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            file_path=data.get("filePath", ""),
            file_type=data.get("fileType", ""),
            file_size=int(data.get("fileSize") or 0),
            added_date=data.get("addedDate", ""),
            author=data.get("author") or UNKNOWN_AUTHOR,
            genre=data.get("genre") or UNCATEGORIZED,
            language=data.get("language") or "",
            publisher=data.get("publisher") or "",
            published_date=data.get("publishedDate") or "",
            summary=data.get("summary") or "",
            series=series,
            cover=data.get("cover") or None,
            to_read=bool(data.get("toRead", False)),
        )


@dataclass
class Catalogue:
    """The full, unsharded book list produced by one scan."""

    last_updated: str
    books: list[BookRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastUpdated": self.last_updated,
            "books": [book.to_dict() for book in self.books],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Catalogue":
        return cls(
            last_updated=data.get("lastUpdated", ""),
            books=[BookRecord.from_dict(b) for b in data.get("books", [])],
        )
