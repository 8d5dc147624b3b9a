"""
JDL CLI Package.

- project.py: entities, ast and inspect commands
- utils.py: Shared utilities
"""

import sys

import typer

from jdl.cli.utils import configure_logging, version_callback

app = typer.Typer(
    help="""jdl – JHipster Domain Language compiler

Commands:
  • entities: resolve the entities of JDL files and print them as JSON
  • ast: print the parsed document of JDL files
  • inspect: summarize the resolved entities in a table
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """jdl CLI main callback for global options."""
    configure_logging(verbose)


# =============================================================================
# Project Commands (imported from cli.project)
# =============================================================================
from jdl.cli.project import (  # noqa: E402
    ast_command,
    entities_command,
    inspect_command,
)

app.command(name="entities")(entities_command)
app.command(name="ast")(ast_command)
app.command(name="inspect")(inspect_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["app", "main"]


if __name__ == "__main__":
    main(sys.argv[1:])
