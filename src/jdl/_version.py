"""Version lookup for the jdl-core distribution."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "jdl-core"

# Source checkout: src/jdl/_version.py -> pyproject.toml at the repository root
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _source_version(pyproject: Path) -> str | None:
    """The version declared by a jdl-core pyproject.toml, if there is one."""
    if not pyproject.is_file():
        return None
    try:
        project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("project", {})
    except tomllib.TOMLDecodeError:
        return None
    if project.get("name") != DISTRIBUTION:
        return None
    return project.get("version")


def get_version(pyproject: Path = _PYPROJECT) -> str:
    """
    Version of the running code.

    An editable checkout reports its pyproject.toml version; an installed
    package reports its metadata; anything else reports ``0.0.0``.
    """
    declared = _source_version(pyproject)
    if declared:
        return declared
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"
