"""
JDL reader.

Reads ``.jh``/``.jdl`` files and turns their text into a ``JdlDocument``.
Internal ``//`` comments and ``#`` directive lines are blanked before
tokenizing; no line is ever removed so reported positions match the file.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .ast_builder import build_ast
from .cst import parse_cst
from .errors import JdlInputError, JdlSyntaxError
from .ir.document import JdlDocument
from .lexer import tokenize

logger = logging.getLogger(__name__)

JDL_EXTENSIONS = (".jh", ".jdl")

_INTERNAL_COMMENT_RE = re.compile(r"//[^\n\r]*")
_DIRECTIVE_RE = re.compile(r"^#.*", re.MULTILINE)


def check_file_is_jdl_file(path: Path | str) -> None:
    """
    Check a file name against the accepted JDL extensions.

    Raises:
        JdlInputError: If the name does not end with ``.jh`` or ``.jdl``
    """
    if not str(path).endswith(JDL_EXTENSIONS):
        raise JdlInputError(f"The passed file '{path}' must end with '.jh' or '.jdl' to be valid.")


def read_file(path: Path) -> str:
    if not path.is_file():
        raise JdlInputError(f"The passed file '{path}' couldn't be found.")
    return path.read_text(encoding="utf-8")


def parse_from_files(paths: list[Path] | list[str]) -> JdlDocument:
    """
    Parse one or more JDL files into a single document.

    Several files are joined with a newline and parsed once, so entities in
    one file may refer to entities in another.

    Args:
        paths: JDL files to parse

    Returns:
        The document built from all files

    Raises:
        JdlInputError: If no file is given, a file has the wrong extension or
            cannot be found
        JdlSyntaxError: If the text cannot be parsed
    """
    if not paths:
        raise JdlInputError("The files must be passed.")

    files = [Path(path) for path in paths]
    for file in files:
        check_file_is_jdl_file(file)

    if len(files) == 1:
        return parse(read_file(files[0]), files[0])
    return parse("\n".join(read_file(file) for file in files))


def remove_internal_comments(content: str) -> str:
    """Strip ``//`` comments, keeping the line breaks."""
    return _INTERNAL_COMMENT_RE.sub("", content)


def filter_directives(content: str) -> str:
    """Blank lines starting with ``#``, keeping the line breaks."""
    return _DIRECTIVE_RE.sub("", content)


def parse(content: str, file: Path | None = None) -> JdlDocument:
    """
    Parse JDL text into a document.

    Args:
        content: JDL source text
        file: Source file path (for error reporting)

    Returns:
        The normalized document

    Raises:
        JdlInputError: If the content is empty
        JdlSyntaxError: If the text cannot be tokenized or parsed
    """
    if not content:
        raise JdlInputError(
            "File content must be passed in order to be parsed, it is currently empty."
        )

    text = filter_directives(remove_internal_comments(content))
    try:
        tokens = tokenize(text, file)
        cst = parse_cst(tokens, file, text)
    except JdlSyntaxError as e:
        logger.error(f"Error message:\n\t{e.message}")
        raise

    return build_ast(cst)
