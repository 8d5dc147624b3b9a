"""
Project manifest loading.

A ``jdl.toml`` file names the JDL sources of a project and its default
resolution settings::

    [project]
    name = "shop"
    version = "1.0.0"

    [jdl]
    files = ["model/*.jdl", "extra.jh"]
    database_type = "postgresql"
    application_type = "monolith"
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import JdlInputError

MANIFEST_NAME = "jdl.toml"


@dataclass
class ProjectManifest:
    """
    Project manifest loaded from jdl.toml.

    File entries are paths or glob patterns relative to ``root``.
    """

    name: str
    root: Path
    version: str = "0.1.0"
    files: list[str] = field(default_factory=list)
    database_type: str = "sql"
    application_type: str | None = None


def load_manifest(path: Path) -> ProjectManifest:
    """
    Load a ``jdl.toml`` manifest.

    Args:
        path: Manifest file, or a directory holding ``jdl.toml``

    Raises:
        JdlInputError: If the manifest is missing or not valid TOML
    """
    if path.is_dir():
        path = path / MANIFEST_NAME
    if not path.is_file():
        raise JdlInputError(f"Manifest '{path}' couldn't be found.")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise JdlInputError(f"Invalid manifest '{path}': {e}") from e

    project = data.get("project", {})
    jdl = data.get("jdl", {})

    return ProjectManifest(
        name=project.get("name", path.parent.name),
        root=path.parent,
        version=project.get("version", "0.1.0"),
        files=list(jdl.get("files", [])),
        database_type=jdl.get("database_type", "sql"),
        application_type=jdl.get("application_type"),
    )


def discover_jdl_files(manifest: ProjectManifest) -> list[Path]:
    """
    Expand the manifest file entries into existing paths.

    Entries keep their declared order; glob matches are sorted within an
    entry and duplicates are dropped.
    """
    files: list[Path] = []
    for entry in manifest.files:
        if any(ch in entry for ch in "*?["):
            matches = sorted(manifest.root.glob(entry))
        else:
            matches = [manifest.root / entry]
        for match in matches:
            if match not in files:
                files.append(match)
    return files
