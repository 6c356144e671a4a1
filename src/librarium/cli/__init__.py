# ABOUTME: CLI package for Librarium, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import click

from librarium.cli.commands import lookup_cmd, scan_cmd, split_cmd


@click.group()
@click.version_option(package_name="librarium")
def cli() -> None:
    """Librarium - builds the JSON catalogue of a personal ebook library."""


cli.add_command(scan_cmd.scan)
cli.add_command(split_cmd.split)
cli.add_command(lookup_cmd.lookup)
