"""
Error types for JDL reading, parsing, linking, and entity resolution.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class JdlError(Exception):
    """Base exception for all JDL errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class JdlInputError(JdlError):
    """
    Raised before any parsing when the input itself is unusable.

    Examples:
    - No files passed
    - File extension other than .jh or .jdl
    - Missing file or empty content
    """

    pass


class JdlSyntaxError(JdlError):
    """
    Raised when JDL text cannot be tokenized or parsed.

    Wraps every lexer and parser failure, keeping the underlying message and
    the source location.
    """

    pass


class LinkError(JdlError):
    """
    Raised when the AST cannot be turned into a consistent object model.

    Examples:
    - Duplicate entity or enum names
    - Relationship toward an undeclared entity
    - Validation referencing an undeclared constant
    - Application without a base name
    """

    pass


class ResolutionError(JdlError):
    """
    Raised when entity resolution fails.

    Examples:
    - Missing object model or database type
    - NoSQL database with declared relationships
    - Field type that cannot be resolved for the database type
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file, None for in-memory text
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source lines around the error location
    """

    file: Path | None
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "model.jdl:10:5"
        """
        location = f"{self.file or '<text>'}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippet starts at most 2 lines before the error
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def extract_snippet(text: str, line: int, radius: int = 2) -> str:
    """Return the source lines around ``line`` (1-indexed)."""
    lines = text.split("\n")
    start = max(0, line - 1 - radius)
    end = min(len(lines), line + radius)
    return "\n".join(lines[start:end])


def make_syntax_error(
    message: str,
    file: Path | None,
    line: int,
    column: int,
    snippet: str | None = None,
) -> JdlSyntaxError:
    """
    Helper to create a JdlSyntaxError with context.

    Args:
        message: Error description
        file: Source file path, None for in-memory text
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet

    Returns:
        JdlSyntaxError with context attached
    """
    context = ErrorContext(file=file, line=line, column=column, snippet=snippet)
    return JdlSyntaxError(message, context)
