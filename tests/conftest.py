# ABOUTME: Shared pytest fixtures for Librarium tests.
# ABOUTME: Provides a small ebook library tree, a metadata cache, and a placeholder-only cover resolver.

import logging
from pathlib import Path

import pytest

from librarium.core.covers import CoverResolver
from librarium.metadata.cache import MetadataCache


def make_book(path: Path, size: int = 128) -> Path:
    """Create a fake ebook file; only the name and size matter to the scanner."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """A library root with genre folders, a hidden folder, and a nested to-read folder.

    Layout:
        Fantasy/Le Trône de Fer - George R.R. Martin.epub
        Policier/Harry Potter 2 - La Chambre des Secrets.pdf
        Divers/Notes.txt                      (ignored: not an ebook)
        .trash/Old Book.epub                  (ignored: hidden folder)
        livre a lire/Dune.EPUB                (to-read)
    """
    root = tmp_path / "books"
    make_book(root / "Fantasy" / "Le Trône de Fer - George R.R. Martin.epub", size=2048)
    make_book(root / "Policier" / "Harry Potter 2 - La Chambre des Secrets.pdf", size=512)
    make_book(root / "Divers" / "Notes.txt")
    make_book(root / ".trash" / "Old Book.epub")
    make_book(root / "livre a lire" / "Dune.EPUB", size=64)
    return root


@pytest.fixture
def cache(tmp_path: Path) -> MetadataCache:
    """An empty, loaded metadata cache stored under tmp_path."""
    metadata_cache = MetadataCache(tmp_path / "cache" / "cache_api.json")
    metadata_cache.load()
    return metadata_cache


@pytest.fixture
def covers(tmp_path: Path) -> CoverResolver:
    """A cover resolver writing into tmp_path/covers."""
    return CoverResolver(tmp_path / "covers")


@pytest.fixture(autouse=True)
def reset_package_logging():
    """Undo the handler and level a CLI invocation installs on the package logger."""
    package_logger = logging.getLogger("librarium")
    handlers, level = list(package_logger.handlers), package_logger.level
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
