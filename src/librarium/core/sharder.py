# ABOUTME: Splits a full catalogue into an index, genre shards, pages, and a to-read shard.
# ABOUTME: Every run regenerates all files; the same catalogue always yields the same bytes.

import json
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path

from librarium.core.storage import write_json_atomic
from librarium.metadata.types import UNCATEGORIZED, BookRecord, Catalogue

logger = logging.getLogger(__name__)

BOOKS_PER_PAGE = 24
INDEX_FILE = "index.json"
PAGINATION_FILE = "pagination.json"
TO_READ_FILE = "to-read.json"

_SEPARATOR_RE = re.compile(r"[\s/\\]+")


@dataclass
class GenreEntry:
    """One genre line of the catalogue index."""

    id: str
    name: str
    count: int
    file: str

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "count": self.count, "file": self.file}


@dataclass
class ShardResult:
    """Files written by one sharding pass."""

    target_dir: Path
    genres: list[GenreEntry] = field(default_factory=list)
    total_pages: int = 0
    to_read_count: int = 0
    files: list[Path] = field(default_factory=list)


def genre_id(name: str) -> str:
    """Lowercase a genre name and replace whitespace (and path separators) with hyphens."""
    return _SEPARATOR_RE.sub("-", name.lower())


def page_file(page: int) -> str:
    return f"page-{page}.json"


def group_by_genre(books: list[BookRecord]) -> dict[str, list[BookRecord]]:
    """Group books by genre, keeping first-seen genre order and book order."""
    groups: dict[str, list[BookRecord]] = {}
    for book in books:
        groups.setdefault(book.genre or UNCATEGORIZED, []).append(book)
    return groups


def build_index(catalogue: Catalogue) -> tuple[dict[str, object], list[GenreEntry]]:
    """Build the index document and its genre entries, largest genre first."""
    groups = group_by_genre(catalogue.books)
    entries: list[GenreEntry] = []
    used = {Path(name).stem for name in (INDEX_FILE, PAGINATION_FILE, TO_READ_FILE)}
    for name, books in groups.items():
        base = gid = genre_id(name)
        suffix = 2
        while gid in used:
            gid = f"{base}-{suffix}"
            suffix += 1
        used.add(gid)
        entries.append(GenreEntry(id=gid, name=name, count=len(books), file=f"{gid}.json"))
    entries.sort(key=lambda entry: entry.count, reverse=True)
    index = {
        "lastUpdated": catalogue.last_updated,
        "totalBooks": len(catalogue.books),
        "genres": [entry.to_dict() for entry in entries],
    }
    return index, entries


def paginate(books: list[BookRecord], page_size: int = BOOKS_PER_PAGE) -> list[list[BookRecord]]:
    """Split books into consecutive pages in their existing order."""
    total_pages = math.ceil(len(books) / page_size)
    return [books[i * page_size : (i + 1) * page_size] for i in range(total_pages)]


def _previous_shard_files(target_dir: Path) -> set[str]:
    """Names of shard files a previous run left in target_dir."""
    names = {p.name for p in target_dir.glob("page-*.json")}
    names.add(TO_READ_FILE)
    try:
        previous = json.loads((target_dir / INDEX_FILE).read_text(encoding="utf-8"))
        names.update(g["file"] for g in previous.get("genres", []) if g.get("file"))
    except (OSError, ValueError, AttributeError, TypeError):
        pass
    return {name for name in names if _is_plain_name(name)}


def _is_plain_name(name: object) -> bool:
    """A bare file name that stays inside the shard directory."""
    return (
        isinstance(name, str)
        and name not in ("", ".", "..")
        and "/" not in name
        and "\\" not in name
    )


def _remove_stale(target_dir: Path, previous: set[str], written: list[Path]) -> None:
    keep = {path.name for path in written}
    for name in sorted(previous - keep):
        stale = target_dir / name
        if stale.is_file():
            stale.unlink()
            logger.info("Removed stale shard %s", stale)


def shard_catalogue(
    catalogue: Catalogue, target_dir: Path, *, page_size: int = BOOKS_PER_PAGE
) -> ShardResult:
    """Write every shard file for a catalogue into target_dir.

    Args:
        catalogue: The complete catalogue from a scan.
        target_dir: Directory receiving index.json, one file per genre,
            pagination.json, page-N.json, and to-read.json when any book is
            flagged to-read.
        page_size: Books per page file.

    Returns:
        A ShardResult listing the genres and files written.

    Raises:
        CatalogueWriteError: If any file cannot be written.
    """
    result = ShardResult(target_dir=target_dir)
    previous = _previous_shard_files(target_dir)

    def write(name: str, data: object) -> None:
        result.files.append(write_json_atomic(target_dir / name, data))

    index, entries = build_index(catalogue)
    result.genres = entries
    write(INDEX_FILE, index)

    groups = group_by_genre(catalogue.books)
    for entry in entries:
        books = groups[entry.name]
        write(entry.file, {
            "genre": entry.name,
            "count": len(books),
            "books": [book.to_dict() for book in books],
        })
        logger.info("Genre shard written: %s (%d books)", entry.name, len(books))

    pages = paginate(catalogue.books, page_size)
    result.total_pages = len(pages)
    write(PAGINATION_FILE, {
        "totalBooks": len(catalogue.books),
        "booksPerPage": page_size,
        "totalPages": len(pages),
        "pages": [{"page": n, "file": page_file(n)} for n in range(1, len(pages) + 1)],
    })
    for number, books in enumerate(pages, start=1):
        write(page_file(number), {
            "page": number,
            "totalPages": len(pages),
            "count": len(books),
            "books": [book.to_dict() for book in books],
        })

    to_read = [book for book in catalogue.books if book.to_read]
    result.to_read_count = len(to_read)
    if to_read:
        write(TO_READ_FILE, {
            "count": len(to_read),
            "books": [book.to_dict() for book in to_read],
        })

    _remove_stale(target_dir, previous, result.files)

    logger.info(
        "Catalogue split into %d genre(s) and %d page(s) in %s",
        len(entries),
        len(pages),
        target_dir,
    )
    return result


def load_catalogue(path: Path) -> Catalogue:
    """Read a catalogue file written by the builder."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return Catalogue.from_dict(data)
