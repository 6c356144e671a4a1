# ABOUTME: The `librarium lookup` command for checking what the providers return.
# ABOUTME: Runs one title through Google Books then Open Library, using the API cache.

import os
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from librarium.cli.options import cache_option, configure_logging, create_providers, verbose_option
from librarium.config import Settings
from librarium.metadata.cache import MetadataCache
from librarium.metadata.http import LibrariumHttpClient
from librarium.metadata.provider import lookup_metadata


@click.command("lookup")
@click.argument("title")
@click.option("-a", "--author", default=None, help="Author name to narrow the search.")
@cache_option
@verbose_option
def lookup(title: str, author: str | None, cache_path: Path | None, verbose: bool) -> None:
    """Look up one title and show the metadata that would be merged."""
    console = Console()
    configure_logging(verbose)

    settings = Settings.from_env(os.environ)
    cache = MetadataCache(cache_path or settings.cache_path)
    cache.load()

    http_client = LibrariumHttpClient()
    try:
        providers = create_providers(http_client, cache, settings.google_books_api_key)
        metadata = lookup_metadata(providers, title, author)
    finally:
        http_client.close()
        cache.flush()

    if metadata is None:
        console.print(f"[yellow]No metadata found for {title!r}.[/yellow]")
        return

    table = Table(title=f"Source: {metadata.source}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Title", metadata.title or "")
    table.add_row("Author", metadata.author or "[dim]unknown[/dim]")
    table.add_row("Genre", metadata.category or "")
    table.add_row("Language", metadata.language or "")
    table.add_row("Publisher", metadata.publisher or "")
    table.add_row("Published", metadata.published_date or "")
    if metadata.series is not None:
        table.add_row("Series", f"{metadata.series.name} #{metadata.series.number}")
    table.add_row("Cover", metadata.cover_url or "[dim]none[/dim]")
    console.print(table)

    if metadata.description:
        console.print(f"\n{metadata.description}")
