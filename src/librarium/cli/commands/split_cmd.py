# ABOUTME: The `librarium split` command that shards an existing catalogue file.
# ABOUTME: Writes the index, genre, page, and to-read files and lists the genres.

import os
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from librarium.cli.options import configure_logging, verbose_option
from librarium.config import Settings
from librarium.core.sharder import load_catalogue, shard_catalogue
from librarium.core.storage import CatalogueWriteError


@click.command("split")
@click.option(
    "--catalogue",
    "catalogue_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Catalogue file to split (default: $OUTPUT_PATH).",
)
@click.option(
    "--target",
    "target_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the split files (default: $CATALOGUE_DIR).",
)
@verbose_option
def split(catalogue_path: Path | None, target_dir: Path | None, verbose: bool) -> None:
    """Split a catalogue into an index, genre files, pages, and a to-read list."""
    console = Console()
    configure_logging(verbose)

    settings = Settings.from_env(os.environ)
    catalogue_path = catalogue_path or settings.output_path
    target_dir = target_dir or settings.catalogue_dir

    if not catalogue_path.is_file():
        console.print(f"[red]Catalogue not found: {catalogue_path}[/red]")
        raise SystemExit(1)

    try:
        catalogue = load_catalogue(catalogue_path)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        console.print(f"[red]Could not read catalogue {catalogue_path}: {exc}[/red]")
        raise SystemExit(1) from exc

    try:
        result = shard_catalogue(catalogue, target_dir)
    except CatalogueWriteError as exc:
        console.print(f"[red]Error splitting catalogue: {exc}[/red]")
        raise SystemExit(1) from exc

    table = Table(title=f"{len(catalogue.books)} book(s)")
    table.add_column("Genre", style="bold")
    table.add_column("Books", justify="right")
    table.add_column("File", style="dim")
    for entry in result.genres:
        table.add_row(entry.name, str(entry.count), entry.file)
    console.print(table)

    console.print(f"\n[dim]{result.total_pages} page(s) written to {result.target_dir}[/dim]")
    if result.to_read_count:
        console.print(f"[cyan]{result.to_read_count} book(s) to read[/cyan]")
