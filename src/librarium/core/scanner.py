# ABOUTME: Directory scanner that finds ebook files under the library and to-read roots.
# ABOUTME: Skips hidden and dependency folders and records size, mtime, and to-read origin.

import logging
from datetime import datetime, timezone
from pathlib import Path

from librarium.metadata.types import EBOOK_EXTENSIONS, ScannedFile

logger = logging.getLogger(__name__)

_EXCLUDED_DIRS: frozenset[str] = frozenset({"node_modules"})


def _is_excluded(relative: Path) -> bool:
    """Whether a root-relative path is hidden (file or folder) or under a dependency folder."""
    if any(part.startswith(".") for part in relative.parts):
        return True
    return any(part in _EXCLUDED_DIRS for part in relative.parts[:-1])


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def scan_root(
    root: Path, *, to_read: bool = False, skip: Path | None = None
) -> list[ScannedFile]:
    """Recursively collect ebook files under one root.

    Args:
        root: Directory to walk.
        to_read: Flag stored on every file found under this root.
        skip: A directory under root whose files are left out, used when the
            to-read folder lives inside the library folder.

    Returns:
        ScannedFile entries sorted by path.
    """
    files: list[ScannedFile] = []
    for path in sorted(root.rglob("*")):
        if path.suffix.lower() not in EBOOK_EXTENSIONS:
            continue
        if _is_excluded(path.relative_to(root)):
            continue
        if skip is not None and _is_within(path, skip):
            continue
        if not path.is_file():
            continue

        stat = path.stat()
        files.append(
            ScannedFile(
                path=path,
                name=path.name,
                extension=path.suffix.lower(),
                size=stat.st_size,
                mtime=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                to_read=to_read,
                root=root,
            )
        )
    return files


def scan_library(library_root: Path | None, to_read_root: Path | None) -> list[ScannedFile]:
    """Scan the main library and the to-read folder.

    Missing roots are logged and skipped. Library files come first, then
    to-read files. If the to-read folder sits inside the library folder, its
    files are reported once, flagged as to-read.
    """
    files: list[ScannedFile] = []

    library = library_root.resolve() if library_root else None
    to_read = to_read_root.resolve() if to_read_root else None

    if library is not None and library.is_dir():
        nested = to_read if to_read is not None and _is_within(to_read, library) else None
        files.extend(scan_root(library, skip=nested))
    elif library is not None:
        logger.warning("Library folder does not exist: %s", library)

    if to_read is not None and to_read.is_dir():
        files.extend(scan_root(to_read, to_read=True))
    elif to_read is not None:
        logger.warning("To-read folder does not exist: %s", to_read)

    logger.info("Found %d ebook file(s)", len(files))
    return files
