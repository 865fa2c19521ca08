"""Command-line interface for dirmirror.

This module provides the main CLI entry point and assembles all commands.

Commands:
- run: Mirror remote directories described by a configuration file
- check: Validate a configuration file
"""

from __future__ import annotations

import click

from dirmirror.client.cli.run import check, run, setup_logging


@click.group()
@click.version_option(package_name="dirmirror")
def cli() -> None:
    """dirmirror - Incremental backups of remote directory indexes."""


cli.add_command(run)
cli.add_command(check)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "check",
    "cli",
    "main",
    "run",
    "setup_logging",
]
