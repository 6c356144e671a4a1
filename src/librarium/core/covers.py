# ABOUTME: Cover resolution: download and crop a remote cover, or draw a placeholder.
# ABOUTME: Always yields a web path for the record's cover, or None if even drawing fails.

import io
import logging
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from librarium.metadata.http import LibrariumHttpClient, MetadataFetchError
from librarium.metadata.types import BookRecord

logger = logging.getLogger(__name__)

COVER_SIZE = (500, 750)
JPEG_QUALITY = 80
DEFAULT_WEB_PREFIX = "/data/covers"

_TITLE_CHARS_PER_LINE = 20
_TITLE_MAX_LINES = 4

_BACKGROUND = "#2a2a2a"
_PANEL = "#3a3a3a"
_TITLE_COLOR = "white"
_AUTHOR_COLOR = "#cccccc"
_TYPE_COLOR = "#999999"


def wrap_text(
    text: str, width: int = _TITLE_CHARS_PER_LINE, max_lines: int = _TITLE_MAX_LINES
) -> list[str]:
    """Greedy word wrap to at most ``max_lines`` lines of about ``width`` chars.

    A single word longer than ``width`` gets a line of its own rather than
    being split.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines[:max_lines]


def _font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default(size)


def _draw_centered(
    draw: ImageDraw.ImageDraw, y: float, text: str, font, fill: str
) -> float:
    """Draw one line centered horizontally; returns the line height."""
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = (COVER_SIZE[0] - (right - left)) / 2
    draw.text((x, y), text, font=font, fill=fill)
    return bottom - top


def render_placeholder(title: str, author: str, file_type: str) -> Image.Image:
    """Draw a placeholder cover with the title, author, and file type."""
    width, height = COVER_SIZE
    image = Image.new("RGB", COVER_SIZE, _BACKGROUND)
    draw = ImageDraw.Draw(image)
    draw.rounded_rectangle((10, 10, width - 10, height - 10), radius=5, fill=_PANEL)

    title_font = _font(32)
    y = height / 2 - 40
    for line in wrap_text(title):
        _draw_centered(draw, y, line, title_font, _TITLE_COLOR)
        y += 40

    if author:
        _draw_centered(draw, max(y + 20, 500), author, _font(24), _AUTHOR_COLOR)

    if file_type:
        _draw_centered(draw, 680, file_type.upper(), _font(18), _TYPE_COLOR)

    return image


class CoverResolver:
    """Produces a local cover image for each record.

    Covers are written as ``<output_dir>/<record id>.jpg`` and referenced by
    the web path ``<web_prefix>/<record id>.jpg``.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        web_prefix: str = DEFAULT_WEB_PREFIX,
        http_client: LibrariumHttpClient | None = None,
    ) -> None:
        self._output_dir = output_dir
        self._web_prefix = web_prefix.rstrip("/")
        self._http = http_client
        self._owns_http = False

    def _client(self) -> LibrariumHttpClient:
        if self._http is None:
            self._http = LibrariumHttpClient(request_delay=0.0, max_retries=1)
            self._owns_http = True
        return self._http

    def close(self) -> None:
        """Close the download client if this resolver created it."""
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None
            self._owns_http = False

    def _save(self, image: Image.Image, record: BookRecord) -> str:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{record.id}.jpg"
        image.convert("RGB").save(self._output_dir / filename, "JPEG", quality=JPEG_QUALITY)
        return f"{self._web_prefix}/{filename}"

    def fetch_remote(self, record: BookRecord, url: str) -> str | None:
        """Download, crop to the cover aspect ratio, and save a remote image."""
        try:
            data = self._client().get_bytes(url)
            with Image.open(io.BytesIO(data)) as source:
                fitted = ImageOps.fit(source.convert("RGB"), COVER_SIZE, Image.Resampling.LANCZOS)
            return self._save(fitted, record)
        except (MetadataFetchError, UnidentifiedImageError, OSError, ValueError) as exc:
            logger.warning("Could not download cover for %r from %s: %s", record.title, url, exc)
            return None

    def placeholder(self, record: BookRecord) -> str | None:
        """Draw and save a placeholder cover; None if that fails too."""
        author = record.author if record.has_known_author else ""
        try:
            image = render_placeholder(record.title, author, record.file_type)
            return self._save(image, record)
        except (OSError, ValueError) as exc:
            logger.error("Could not create placeholder cover for %r: %s", record.title, exc)
            return None

    def resolve(self, record: BookRecord, cover_url: str | None = None) -> str | None:
        """Return the cover path for a record, trying the remote image first."""
        if cover_url:
            path = self.fetch_remote(record, cover_url)
            if path:
                return path
        return self.placeholder(record)
