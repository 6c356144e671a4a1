# ABOUTME: Atomic JSON file writes for the catalogue, its shards, and the API cache.
# ABOUTME: Writes to a temp file in the target directory, then renames over the target.

import json
import os
import tempfile
from pathlib import Path
from typing import Any


class CatalogueWriteError(Exception):
    """Raised when an output file cannot be written."""


def dump_json(data: Any) -> str:
    """Serialize data the way every output file is written: UTF-8, 2-space indent."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _default_file_mode() -> int:
    """Mode a plain open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_json_atomic(path: Path, data: Any) -> Path:
    """Write data as JSON to path so readers never see a half-written file.

    The parent directory is created if needed. The content goes to a temp
    file next to the target and is moved into place with os.replace, so a
    crash leaves either the previous file or the new one. The file gets the
    usual umask-based permissions rather than the private mode of a temp file.

    Raises:
        CatalogueWriteError: If the directory or file cannot be written.
    """
    payload = dump_json(data)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise CatalogueWriteError(f"Could not write {path}: {exc}") from exc
    return path
