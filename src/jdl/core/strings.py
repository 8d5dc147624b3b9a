"""
String utility functions for JDL.

Case conversions used to derive identifiers, plus comment formatting and the
change-log timestamp format.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

_CAMEL_SPLIT_RE = re.compile(r"[ \-_]")
_COMMENT_START_RE = re.compile(r"^/\*+")
_COMMENT_END_RE = re.compile(r"\*+/$")
_COMMENT_LINE_PREFIX_RE = re.compile(r"^\**\s*")

CHANGELOG_DATE_FORMAT = "%Y%m%d%H%M%S"


def words(text: str) -> list[str]:
    """
    Split an identifier into its words.

    Examples:
        >>> words("OneToMany")
        ['One', 'To', 'Many']
        >>> words("tableA")
        ['table', 'A']
        >>> words("XMLHttpCafé")
        ['XML', 'Http', 'Café']
    """
    result: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        j = i + 1
        if ch.isdigit():
            while j < n and text[j].isdigit():
                j += 1
        elif ch.isupper():
            while j < n and text[j].isupper():
                j += 1
            if j < n and _is_lower(text[j]):
                if j - i > 1:
                    # acronym ends where the capitalized word starts
                    j -= 1
                else:
                    while j < n and _is_lower(text[j]):
                        j += 1
        elif _is_lower(ch):
            while j < n and _is_lower(text[j]):
                j += 1
        else:
            i = j
            continue
        result.append(text[i:j])
        i = j
    return result


def _is_lower(ch: str) -> bool:
    """Letters without an upper case form count as lower case."""
    return ch.isalpha() and not ch.isupper()


def camel_case(text: str) -> str:
    """
    Convert an identifier to camelCase, keeping the inner casing of each chunk.

    Examples:
        >>> camel_case("MyEntity")
        'myEntity'
        >>> camel_case("my_field")
        'myField'
    """
    if not text:
        return text
    chunks = [chunk for chunk in _CAMEL_SPLIT_RE.split(text) if chunk]
    if not chunks:
        return ""
    head, *tail = chunks
    return lower_first(head) + "".join(chunk[0].upper() + chunk[1:] for chunk in tail)


def lower_first(text: str) -> str:
    """Lower-case the first character only."""
    if not text:
        return text
    return text[0].lower() + text[1:]


def kebab_case(text: str) -> str:
    """
    Examples:
        >>> kebab_case("OneToMany")
        'one-to-many'
    """
    return "-".join(word.lower() for word in words(text))


def snake_case(text: str) -> str:
    """
    Examples:
        >>> snake_case("MyEntity")
        'my_entity'
        >>> snake_case("tableA")
        'table_a'
    """
    return "_".join(word.lower() for word in words(text))


def trim_comment(image: str) -> str:
    """Strip the ``/**`` and ``*/`` markers of a comment token."""
    return _COMMENT_END_RE.sub("", _COMMENT_START_RE.sub("", image))


def format_comment(comment: str | None) -> str | None:
    """
    Normalize a javadoc comment body.

    A single line not starting with ``*`` is returned as-is. Otherwise the
    leading ``*`` of every line is removed and the lines are re-joined with
    newlines, so multi-line comments survive unchanged in meaning.
    """
    if not comment:
        return None
    parts = comment.strip().split("\n")
    if len(parts) == 1 and not parts[0].startswith("*"):
        return parts[0]
    formatted = ""
    for part in parts:
        line = _COMMENT_LINE_PREFIX_RE.sub("", part.strip(), count=1)
        # no delimiter until some text has been kept
        formatted = f"{formatted}\n{line}" if formatted else line
    return formatted or None


def changelog_date(base: datetime | None = None, increment: int = 0) -> str:
    """
    Format a change-log timestamp, ``increment`` seconds after ``base``.

    Args:
        base: Reference time, defaults to now (UTC)
        increment: Offset in seconds

    Returns:
        Timestamp like ``20180101120000``
    """
    moment = base or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return (moment + timedelta(seconds=increment)).strftime(CHANGELOG_DATE_FORMAT)
