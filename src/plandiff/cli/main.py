"""Main CLI entry point for plandiff."""

import click
from .. import __version__
from .commands.analyze import analyze
from .commands.version import version


@click.group()
@click.version_option(version=__version__, prog_name="plandiff", message="%(prog)s version %(version)s")
def cli():
    """plandiff - Terraform plan diff and risk analysis."""
    pass


cli.add_command(analyze)
cli.add_command(version)
