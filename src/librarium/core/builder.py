# ABOUTME: Catalogue builder that drives scan -> parse -> lookup -> merge -> cover per file.
# ABOUTME: Writes the full catalogue atomically and always flushes the API cache on exit.

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from librarium.core.covers import CoverResolver
from librarium.core.merger import merge_record
from librarium.core.scanner import scan_library
from librarium.core.storage import write_json_atomic
from librarium.metadata.cache import MetadataCache
from librarium.metadata.filename import parse_filename
from librarium.metadata.provider import MetadataProvider, lookup_metadata
from librarium.metadata.types import BookRecord, Catalogue, ScannedFile

logger = logging.getLogger(__name__)


class BuildState(Enum):
    INIT = "init"
    SCANNING = "scanning"
    PROCESSING = "processing"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BuildResult:
    """Summary of one catalogue build."""

    catalogue: Catalogue
    output_path: Path
    scanned: int = 0
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def added(self) -> int:
        return len(self.catalogue.books)


# Called after each file with (index, total, file).
ProgressFn = Callable[[int, int, ScannedFile], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CatalogueBuilder:
    """Builds the full catalogue for one run.

    Owns the metadata cache for the duration of the run: it is loaded before
    scanning and flushed after writing, or after a failure before the error
    propagates.
    """

    def __init__(
        self,
        *,
        library_path: Path | None,
        to_read_path: Path | None,
        output_path: Path,
        providers: Sequence[MetadataProvider],
        cache: MetadataCache,
        covers: CoverResolver,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._library_path = library_path
        self._to_read_path = to_read_path
        self._output_path = output_path
        self._providers = list(providers)
        self._cache = cache
        self._covers = covers
        self._clock = clock
        self._id_factory = id_factory
        self.state = BuildState.INIT

    def _genre_path(self, scanned: ScannedFile) -> Path:
        """Path searched for genre keywords: the part below the scan root."""
        if scanned.root is not None:
            try:
                return scanned.path.relative_to(scanned.root)
            except ValueError:
                pass
        return scanned.path

    def process_file(self, scanned: ScannedFile) -> BookRecord:
        """Turn one scanned file into a finished record with a cover."""
        hints = parse_filename(scanned.name, self._genre_path(scanned))
        author = hints.author or None
        metadata = lookup_metadata(self._providers, hints.title, author)

        record = merge_record(
            scanned,
            hints,
            metadata,
            book_id=self._id_factory(),
            added_at=self._clock().isoformat(),
        )
        record.cover = self._covers.resolve(record, metadata.cover_url if metadata else None)
        return record

    def run(self, progress: ProgressFn | None = None) -> BuildResult:
        """Scan, process every file, and write the catalogue.

        Per-file failures are logged and the file is left out. Any other
        failure marks the build FAILED and is re-raised once the cache has
        been flushed.
        """
        self._cache.load()
        try:
            self.state = BuildState.SCANNING
            files = scan_library(self._library_path, self._to_read_path)

            self.state = BuildState.PROCESSING
            catalogue = Catalogue(last_updated="")
            result = BuildResult(
                catalogue=catalogue, output_path=self._output_path, scanned=len(files)
            )
            for index, scanned in enumerate(files, start=1):
                logger.info("Processing %d/%d: %s", index, len(files), scanned.name)
                try:
                    catalogue.books.append(self.process_file(scanned))
                except Exception as exc:
                    logger.exception("Could not process %s", scanned.path)
                    result.errors += 1
                    result.error_details.append((scanned.path, str(exc)))
                if progress is not None:
                    progress(index, len(files), scanned)

            self.state = BuildState.WRITING
            catalogue.last_updated = self._clock().isoformat()
            write_json_atomic(self._output_path, catalogue.to_dict())
            logger.info(
                "Catalogue written to %s with %d book(s)", self._output_path, len(catalogue.books)
            )
            self.state = BuildState.DONE
            return result
        except BaseException:
            self.state = BuildState.FAILED
            raise
        finally:
            self._cache.flush()
