"""
jdl - JHipster Domain Language compiler core.

Reads JDL documents, links them into a validated object model, and resolves
the per-entity records a code generator consumes.
"""

from __future__ import annotations

# Re-export commonly used types for convenience
from ._version import get_version
from .core import ir
from .core.api import convert_text_to_entities, convert_to_entities, parse_document
from .core.errors import (
    JdlError,
    JdlInputError,
    JdlSyntaxError,
    LinkError,
    ResolutionError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "JdlError",
    "JdlInputError",
    "JdlSyntaxError",
    "LinkError",
    "ResolutionError",
    "parse_document",
    "convert_to_entities",
    "convert_text_to_entities",
]
