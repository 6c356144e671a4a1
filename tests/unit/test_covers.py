# ABOUTME: Unit tests for cover resolution and placeholder rendering.
# ABOUTME: Uses a fake httpx transport serving generated images so no network is touched.

import io
import logging
from pathlib import Path

import httpx
import pytest
from PIL import Image

from librarium.core.covers import (
    COVER_SIZE,
    CoverResolver,
    render_placeholder,
    wrap_text,
)
from librarium.metadata.http import LibrariumHttpClient
from librarium.metadata.types import UNKNOWN_AUTHOR, BookRecord
from tests.fixtures.fakes import FakeTransport


def make_record(book_id: str = "book1", author: str = "Frank Herbert") -> BookRecord:
    return BookRecord(
        id=book_id,
        title="Dune",
        author=author,
        file_path="/library/Dune.epub",
        file_type="epub",
        file_size=10,
        added_date="2026-01-01T00:00:00+00:00",
    )


def png_bytes(size: tuple[int, int] = (200, 200)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, "red").save(buffer, "PNG")
    return buffer.getvalue()


def resolver_with(tmp_path: Path, responses: list[httpx.Response]) -> CoverResolver:
    client = LibrariumHttpClient(
        request_delay=0.0, max_retries=0, transport=FakeTransport(responses)
    )
    return CoverResolver(tmp_path / "covers", http_client=client)


class TestWrapText:
    """Tests for title wrapping on placeholders."""

    def test_short_text_single_line(self) -> None:
        assert wrap_text("Dune") == ["Dune"]

    def test_wraps_at_width(self) -> None:
        assert wrap_text("Le Seigneur des Anneaux", width=20) == ["Le Seigneur des", "Anneaux"]

    def test_limits_line_count(self) -> None:
        lines = wrap_text("un deux trois quatre cinq six", width=5, max_lines=3)
        assert lines == ["un", "deux", "trois"]

    def test_long_word_kept_whole(self) -> None:
        assert wrap_text("Anticonstitutionnellement", width=10) == ["Anticonstitutionnellement"]

    def test_empty_text(self) -> None:
        assert wrap_text("") == []


class TestRenderPlaceholder:
    """Tests for the drawn placeholder image."""

    def test_size_and_mode(self) -> None:
        image = render_placeholder("Dune", "Frank Herbert", "epub")
        assert image.size == COVER_SIZE
        assert image.mode == "RGB"

    def test_without_author(self) -> None:
        image = render_placeholder("Un titre assez long pour tenir sur trois lignes", "", "pdf")
        assert image.size == COVER_SIZE


class TestCoverResolver:
    """Tests for remote fetch and placeholder fallback."""

    def test_remote_cover_saved_and_cropped(self, tmp_path: Path) -> None:
        resolver = resolver_with(tmp_path, [httpx.Response(200, content=png_bytes())])

        path = resolver.resolve(make_record(), "https://example.com/cover.png")

        assert path == "/data/covers/book1.jpg"
        saved = tmp_path / "covers" / "book1.jpg"
        with Image.open(saved) as image:
            assert image.format == "JPEG"
            assert image.size == COVER_SIZE

    def test_failed_download_falls_back_to_placeholder(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        resolver = resolver_with(tmp_path, [httpx.Response(404)])

        with caplog.at_level(logging.WARNING):
            path = resolver.resolve(make_record(), "https://example.com/missing.jpg")

        assert path == "/data/covers/book1.jpg"
        assert (tmp_path / "covers" / "book1.jpg").is_file()
        assert "Could not download cover" in caplog.text

    def test_invalid_image_falls_back_to_placeholder(self, tmp_path: Path) -> None:
        resolver = resolver_with(tmp_path, [httpx.Response(200, content=b"not an image")])

        path = resolver.resolve(make_record(), "https://example.com/cover.jpg")

        assert path == "/data/covers/book1.jpg"
        with Image.open(tmp_path / "covers" / "book1.jpg") as image:
            assert image.size == COVER_SIZE

    def test_no_url_draws_placeholder(self, tmp_path: Path) -> None:
        resolver = CoverResolver(tmp_path / "covers")

        path = resolver.resolve(make_record(author=UNKNOWN_AUTHOR), None)

        assert path == "/data/covers/book1.jpg"
        assert (tmp_path / "covers" / "book1.jpg").is_file()

    def test_custom_web_prefix(self, tmp_path: Path) -> None:
        resolver = CoverResolver(tmp_path / "covers", web_prefix="/static/covers/")
        assert resolver.resolve(make_record("xyz")) == "/static/covers/xyz.jpg"

    def test_unwritable_directory_returns_none(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        resolver = CoverResolver(blocker / "covers")

        with caplog.at_level(logging.ERROR):
            assert resolver.resolve(make_record()) is None

        assert "Could not create placeholder cover" in caplog.text

    def test_close_without_downloads(self, tmp_path: Path) -> None:
        resolver = CoverResolver(tmp_path / "covers")
        resolver.resolve(make_record())
        resolver.close()

    def test_close_releases_created_client(self, tmp_path: Path) -> None:
        resolver = CoverResolver(tmp_path / "covers")
        client = resolver._client()

        resolver.close()

        assert client._client.is_closed

    def test_close_leaves_injected_client_open(self, tmp_path: Path) -> None:
        client = LibrariumHttpClient(request_delay=0.0, transport=FakeTransport([]))
        resolver = CoverResolver(tmp_path / "covers", http_client=client)

        resolver.close()

        assert not client._client.is_closed
        client.close()
