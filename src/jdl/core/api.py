"""
Public entry points chaining the pipeline stages.

    text -> reader -> JdlDocument -> linker -> JdlObject -> resolver -> records
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from .entity_resolver import resolve_entities
from .ir.catalog import ApplicationType, DatabaseType
from .ir.document import JdlDocument
from .ir.entities import ResolvedEntity
from .linker import build_object_model
from .reader import parse, parse_from_files


def parse_document(text: str, file: Path | None = None) -> JdlDocument:
    """Parse JDL text into its normalized document."""
    return parse(text, file)


def convert_to_entities(
    files: list[Path] | list[str],
    database_type: DatabaseType | str,
    application_type: ApplicationType | str | None = None,
    *,
    creation_time: datetime | None = None,
) -> dict[str, ResolvedEntity]:
    """
    Read JDL files and resolve their entities.

    Args:
        files: ``.jh``/``.jdl`` files, parsed as one document
        database_type: Storage kind the entities target
        application_type: Kind of application, optional
        creation_time: Base of the change-log timestamps, now when unset

    Returns:
        Resolved records keyed by entity name

    Raises:
        JdlInputError: If the files cannot be read
        JdlSyntaxError: If the text cannot be parsed
        LinkError: If the document is inconsistent
        ResolutionError: If the entities cannot be resolved
    """
    document = parse_from_files(files)
    jdl_object = build_object_model(document)
    return resolve_entities(
        jdl_object, database_type, application_type, creation_time=creation_time
    )


def convert_text_to_entities(
    text: str,
    database_type: DatabaseType | str,
    application_type: ApplicationType | str | None = None,
    *,
    creation_time: datetime | None = None,
) -> dict[str, ResolvedEntity]:
    """Resolve the entities of in-memory JDL text. See ``convert_to_entities``."""
    jdl_object = build_object_model(parse(text))
    return resolve_entities(
        jdl_object, database_type, application_type, creation_time=creation_time
    )
