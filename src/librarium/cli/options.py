# ABOUTME: Shared Click options and setup helpers for Librarium CLI commands.
# ABOUTME: Provides the --cache and -v flags, logging setup, and provider wiring.

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from librarium.config import DEFAULT_CACHE_PATH
from librarium.metadata.cache import MetadataCache
from librarium.metadata.googlebooks import GoogleBooksProvider
from librarium.metadata.http import HttpClient
from librarium.metadata.openlibrary import OpenLibraryProvider
from librarium.metadata.provider import MetadataProvider

cache_option = click.option(
    "--cache",
    "cache_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to the API cache file (default: $CACHE_PATH or {DEFAULT_CACHE_PATH})",
)

verbose_option = click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Log each file and provider request.",
)


def configure_logging(verbose: bool, console: Console | None = None) -> None:
    """Send librarium log records to a Rich handler: WARNING by default, INFO with -v."""
    package_logger = logging.getLogger("librarium")
    for existing in list(package_logger.handlers):
        if isinstance(existing, RichHandler):
            package_logger.removeHandler(existing)
    handler = RichHandler(console=console or Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.INFO if verbose else logging.WARNING)


def create_providers(
    http_client: HttpClient, cache: MetadataCache, api_key: str | None
) -> list[MetadataProvider]:
    """The providers in lookup order: Google Books first, Open Library as fallback."""
    return [
        GoogleBooksProvider(http_client, cache, api_key=api_key),
        OpenLibraryProvider(http_client, cache),
    ]
