"""Version command - show plandiff version."""

import click
from ... import __version__


@click.command()
def version():
    """Show plandiff version."""
    click.echo(f"plandiff version {__version__}")
