"""
Project commands: entities, ast, inspect.

Input files come from the command line or, when none are given, from the
``[jdl] files`` of a ``jdl.toml`` manifest. Command-line flags override the
manifest settings.
"""

import json
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from jdl.cli.utils import fail
from jdl.core.api import convert_to_entities
from jdl.core.errors import JdlError
from jdl.core.ir.entities import ResolvedEntity
from jdl.core.manifest import MANIFEST_NAME, discover_jdl_files, load_manifest
from jdl.core.reader import parse_from_files

console = Console()


@dataclass
class _Inputs:
    files: list[Path]
    database_type: str
    application_type: str | None


def _collect_inputs(
    files: list[Path] | None,
    manifest: Path | None,
    database_type: str | None,
    application_type: str | None,
) -> _Inputs:
    """Merge command-line arguments with the manifest, flags taking precedence."""
    if manifest is None and not files and Path(MANIFEST_NAME).is_file():
        manifest = Path(MANIFEST_NAME)

    if manifest is None:
        if not files:
            raise fail(f"No JDL files given and no {MANIFEST_NAME} found")
        return _Inputs(list(files), database_type or "sql", application_type)

    mf = load_manifest(manifest.resolve())
    return _Inputs(
        files=list(files) if files else discover_jdl_files(mf),
        database_type=database_type or mf.database_type,
        application_type=application_type or mf.application_type,
    )


def _entities_json(entities: dict[str, ResolvedEntity]) -> str:
    return json.dumps(
        {name: entity.to_json_dict() for name, entity in entities.items()},
        indent=2,
    )


def entities_command(
    files: list[Path] = typer.Argument(None, help="JDL files (.jh or .jdl)"),  # noqa: B008
    database_type: str | None = typer.Option(
        None, "--db", "-d", help="Database type (sql, mysql, postgresql, mongodb, ...)"
    ),
    application_type: str | None = typer.Option(
        None, "--app-type", "-a", help="Application type (monolith, microservice, gateway, uaa)"
    ),
    manifest: Path | None = typer.Option(None, "--manifest", "-m", help="Path to jdl.toml"),  # noqa: B008
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON to a file"),  # noqa: B008
) -> None:
    """
    Resolve the entities of JDL files and print them as JSON.
    """
    try:
        inputs = _collect_inputs(files, manifest, database_type, application_type)
        entities = convert_to_entities(
            inputs.files, inputs.database_type, inputs.application_type
        )
    except JdlError as e:
        raise fail(e) from e

    text = _entities_json(entities)
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Wrote {len(entities)} entities to {output}")
    else:
        typer.echo(text)


def ast_command(
    files: list[Path] = typer.Argument(None, help="JDL files (.jh or .jdl)"),  # noqa: B008
    manifest: Path | None = typer.Option(None, "--manifest", "-m", help="Path to jdl.toml"),  # noqa: B008
) -> None:
    """
    Print the parsed document of JDL files as JSON.
    """
    try:
        inputs = _collect_inputs(files, manifest, None, None)
        document = parse_from_files(inputs.files)
    except JdlError as e:
        raise fail(e) from e

    typer.echo(json.dumps(document.model_dump(mode="json", by_alias=True), indent=2))


def inspect_command(
    files: list[Path] = typer.Argument(None, help="JDL files (.jh or .jdl)"),  # noqa: B008
    database_type: str | None = typer.Option(None, "--db", "-d", help="Database type"),
    application_type: str | None = typer.Option(
        None, "--app-type", "-a", help="Application type"
    ),
    manifest: Path | None = typer.Option(None, "--manifest", "-m", help="Path to jdl.toml"),  # noqa: B008
) -> None:
    """
    Summarize the resolved entities in a table.
    """
    try:
        inputs = _collect_inputs(files, manifest, database_type, application_type)
        entities = convert_to_entities(
            inputs.files, inputs.database_type, inputs.application_type
        )
    except JdlError as e:
        raise fail(e) from e

    if not entities:
        console.print("[dim]No entities found.[/dim]")
        return

    table = Table(title="Entities")
    table.add_column("Entity")
    table.add_column("Table", style="dim")
    table.add_column("Fields", justify="right")
    table.add_column("Relationships", justify="right")
    table.add_column("Applications")

    for entity in entities.values():
        applications = entity.applications
        if isinstance(applications, list):
            applications = ", ".join(applications)
        table.add_row(
            entity.entity_name,
            entity.table_name,
            str(len(entity.fields)),
            str(len(entity.relationships)),
            applications,
        )

    console.print(table)
    console.print(f"\n[dim]{len(entities)} entit{'y' if len(entities) == 1 else 'ies'} resolved[/dim]")
