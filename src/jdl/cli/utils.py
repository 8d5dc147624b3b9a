"""
JDL CLI Utilities.

Shared helpers for the command modules.
"""

import logging
import platform

import typer

from jdl._version import DISTRIBUTION, get_version
from jdl.core.errors import JdlError

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"{DISTRIBUTION} {get_version()}")
        typer.echo(f"  Python: {platform.python_implementation()} {platform.python_version()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging to stderr; debug level when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        force=True,
    )


def fail(error: JdlError | str) -> typer.Exit:
    """Print an error to stderr and build the exit to raise."""
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=1)
