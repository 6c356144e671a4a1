# ABOUTME: The `librarium scan` command that builds the full catalogue.
# ABOUTME: Scans the library, enriches each book, writes catalogue.json, then shards it.

import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)

from librarium.cli.options import cache_option, configure_logging, create_providers, verbose_option
from librarium.config import Settings
from librarium.core.builder import BuildResult, CatalogueBuilder
from librarium.core.covers import CoverResolver
from librarium.core.sharder import shard_catalogue
from librarium.core.storage import CatalogueWriteError
from librarium.metadata.cache import MetadataCache
from librarium.metadata.http import LibrariumHttpClient
from librarium.metadata.types import ScannedFile

logger = logging.getLogger(__name__)


def _make_progress(console: Console) -> Progress:
    """Create a Rich progress bar for the per-file pass."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def _print_summary(console: Console, result: BuildResult) -> None:
    books = result.catalogue.books
    to_read = sum(1 for book in books if book.to_read)
    console.print(f"\n[bold]Scanned:[/bold] {result.scanned} file(s)")
    console.print(f"[green]Catalogued:[/green] {result.added} book(s)")
    if to_read:
        console.print(f"[cyan]To read:[/cyan] {to_read}")
    if result.errors:
        console.print(f"[red]Errors:[/red] {result.errors}")
        for path, message in result.error_details:
            console.print(f"  [red]{path.name}[/red]: {message}")
    console.print(f"[dim]Catalogue written to {result.output_path}[/dim]")


@click.command("scan")
@click.option(
    "--library",
    "library_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Library root to scan (default: $LIBRARY_PATH).",
)
@click.option(
    "--to-read",
    "to_read_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Folder of books to read (default: $TO_READ_PATH or <library>/livre a lire).",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Catalogue file to write (default: $OUTPUT_PATH).",
)
@click.option(
    "--covers",
    "cover_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for cover images (default: $COVER_OUTPUT_DIR).",
)
@click.option(
    "--target",
    "catalogue_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the split catalogue (default: $CATALOGUE_DIR).",
)
@cache_option
@click.option(
    "--split/--no-split",
    default=True,
    help="Split the catalogue into genre and page files afterwards (default: --split).",
)
@verbose_option
def scan(
    library_path: Path | None,
    to_read_path: Path | None,
    output_path: Path | None,
    cover_dir: Path | None,
    catalogue_dir: Path | None,
    cache_path: Path | None,
    split: bool,
    verbose: bool,
) -> None:
    """Scan the library and write the book catalogue."""
    console = Console()
    configure_logging(verbose)

    overrides = {
        "LIBRARY_PATH": library_path,
        "TO_READ_PATH": to_read_path,
        "OUTPUT_PATH": output_path,
        "COVER_OUTPUT_DIR": cover_dir,
        "CATALOGUE_DIR": catalogue_dir,
        "CACHE_PATH": cache_path,
    }
    environ = dict(os.environ)
    environ.update({name: str(value) for name, value in overrides.items() if value is not None})
    settings = Settings.from_env(environ)

    console.print(f"[bold]Library:[/bold] {settings.library_path}")
    console.print(f"[bold]To read:[/bold] {settings.to_read_path}")

    http_client = LibrariumHttpClient()
    cache = MetadataCache(settings.cache_path)
    covers = CoverResolver(settings.cover_dir)
    builder = CatalogueBuilder(
        library_path=settings.library_path,
        to_read_path=settings.to_read_path,
        output_path=settings.output_path,
        providers=create_providers(http_client, cache, settings.google_books_api_key),
        cache=cache,
        covers=covers,
    )

    try:
        with _make_progress(console) as progress:
            task = progress.add_task("Cataloguing", total=None)

            def advance(index: int, total: int, scanned: ScannedFile) -> None:
                progress.update(task, total=total, completed=index, description=scanned.name[:40])

            result = builder.run(progress=advance)
    except CatalogueWriteError as exc:
        console.print(f"[red]Error writing catalogue: {exc}[/red]")
        raise SystemExit(1) from exc
    except Exception as exc:
        logger.exception("Scan failed")
        console.print(f"[red]Scan failed: {exc}[/red]")
        raise SystemExit(1) from exc
    finally:
        covers.close()
        http_client.close()

    _print_summary(console, result)

    if not split:
        return

    try:
        shards = shard_catalogue(result.catalogue, settings.catalogue_dir)
    except CatalogueWriteError as exc:
        console.print(f"[red]Error splitting catalogue: {exc}[/red]")
        raise SystemExit(1) from exc
    console.print(
        f"[green]Split into {len(shards.genres)} genre(s) and {shards.total_pages} page(s)"
        f" in {shards.target_dir}[/green]"
    )
