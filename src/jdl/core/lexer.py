"""
Lexer/Tokenizer for JDL.

Converts raw JDL text into a stream of tokens with source location tracking.
Whitespace and line comments are skipped; javadoc-style block comments are
kept as COMMENT tokens because entities, fields and relationship sides carry
them as documentation.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import extract_snippet, make_syntax_error


class TokenType(Enum):
    """Token types in JDL."""

    # Literals
    NAME = "NAME"
    INTEGER = "INTEGER"
    STRING = "STRING"
    REGEX = "REGEX"
    COMMENT = "COMMENT"

    # Declaration keywords
    ENTITY = "entity"
    RELATIONSHIP = "relationship"
    ENUM = "enum"
    APPLICATION = "application"
    CONFIG = "config"
    ENTITIES = "entities"

    # Option keywords
    DTO = "dto"
    PAGINATE = "paginate"
    SERVICE = "service"
    MICROSERVICE = "microservice"
    SEARCH = "search"
    SKIP_CLIENT = "skipClient"
    SKIP_SERVER = "skipServer"
    NO_FLUENT_METHOD = "noFluentMethod"
    FILTER = "filter"
    CLIENT_ROOT_FOLDER = "clientRootFolder"
    ANGULAR_SUFFIX = "angularSuffix"
    WITH = "with"
    EXCEPT = "except"
    FOR = "for"
    ALL = "all"

    # Relationship keywords
    TO = "to"
    ONE_TO_ONE = "OneToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_ONE = "ManyToOne"
    MANY_TO_MANY = "ManyToMany"

    # Validation keywords
    REQUIRED = "required"
    PATTERN = "pattern"
    MINLENGTH = "minlength"
    MAXLENGTH = "maxlength"
    MIN = "min"
    MAX = "max"
    MINBYTES = "minbytes"
    MAXBYTES = "maxbytes"

    # Booleans
    TRUE = "true"
    FALSE = "false"

    # Punctuation
    LCURLY = "{"
    RCURLY = "}"
    LPAREN = "("
    RPAREN = ")"
    LSQUARE = "["
    RSQUARE = "]"
    COMMA = ","
    EQUALS = "="
    DOT = "."
    STAR = "*"

    EOF = "EOF"


_NON_KEYWORD_TYPES = frozenset(
    {
        TokenType.NAME,
        TokenType.INTEGER,
        TokenType.STRING,
        TokenType.REGEX,
        TokenType.COMMENT,
        TokenType.EOF,
    }
)

# Keywords mapping
KEYWORDS = {
    token_type.value: token_type
    for token_type in TokenType
    if token_type not in _NON_KEYWORD_TYPES and token_type.value.isidentifier()
}

# Keywords that may stand where a plain name is expected (field names,
# enum values, config keys and values)
KEYWORD_TYPES = frozenset(KEYWORDS.values())

MIN_MAX_TYPES = frozenset(
    {
        TokenType.MINLENGTH,
        TokenType.MAXLENGTH,
        TokenType.MIN,
        TokenType.MAX,
        TokenType.MINBYTES,
        TokenType.MAXBYTES,
    }
)

CARDINALITY_TYPES = frozenset(
    {
        TokenType.ONE_TO_ONE,
        TokenType.ONE_TO_MANY,
        TokenType.MANY_TO_ONE,
        TokenType.MANY_TO_MANY,
    }
)

_PUNCTUATION = {
    "{": TokenType.LCURLY,
    "}": TokenType.RCURLY,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LSQUARE,
    "]": TokenType.RSQUARE,
    ",": TokenType.COMMA,
    "=": TokenType.EQUALS,
    ".": TokenType.DOT,
    "*": TokenType.STAR,
}

_REGEX_LITERAL = re.compile(r"/(?:\\.|[^\\/\n\r])*/")


@dataclass
class Token:
    """
    A single token of JDL.

    Attributes:
        type: Type of token
        value: Source image of the token
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    line: int
    column: int

    @property
    def image(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """
    Lexer for JDL.

    Converts source text into a stream of tokens.
    """

    def __init__(self, text: str, file: Path | None = None):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
        """
        self.text = text
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self, count: int = 1) -> None:
        """Move forward, updating line/column."""
        for _ in range(count):
            if self.pos >= len(self.text):
                return
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def error(self, message: str, line: int, column: int) -> Exception:
        return make_syntax_error(
            message, self.file, line, column, extract_snippet(self.text, line)
        )

    def skip_line_comment(self) -> None:
        """Skip a ``//`` comment up to the end of line."""
        while self.current_char() is not None and self.current_char() != "\n":
            self.advance()

    def read_block_comment(self) -> str:
        """Read a ``/* ... */`` comment, markers included."""
        end = self.text.find("*/", self.pos + 2)
        if end == -1:
            raise self.error("Unterminated comment", self.line, self.column)
        image = self.text[self.pos : end + 2]
        self.advance(len(image))
        return image

    def read_string(self) -> str:
        """Read a double-quoted string, quotes included."""
        start_line = self.line
        start_col = self.column
        chars = ['"']
        self.advance()

        while True:
            current = self.current_char()
            if current is None or current == "\n":
                raise self.error("Unterminated string literal", start_line, start_col)
            chars.append(current)
            self.advance()
            if current == '"':
                return "".join(chars)

    def read_regex(self) -> str:
        """Read a ``/.../`` regular expression literal, delimiters included."""
        match = _REGEX_LITERAL.match(self.text, self.pos)
        if not match:
            raise self.error("Unterminated regular expression", self.line, self.column)
        image = match.group(0)
        self.advance(len(image))
        return image

    def read_integer(self) -> str:
        chars = []
        if self.current_char() == "-":
            chars.append("-")
            self.advance()
        while (current := self.current_char()) is not None and current.isdigit():
            chars.append(current)
            self.advance()
        return "".join(chars)

    def read_name(self) -> str:
        """Read a name or keyword. Names may contain digits and hyphens."""
        chars = []
        while (current := self.current_char()) is not None and (
            current.isalnum() or current in "_-"
        ):
            chars.append(current)
            self.advance()
        return "".join(chars)

    def _expects_regex(self) -> bool:
        """A ``/`` starts a regex only right after ``pattern (``."""
        return (
            len(self.tokens) >= 2
            and self.tokens[-1].type == TokenType.LPAREN
            and self.tokens[-2].type == TokenType.PATTERN
        )

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF

        Raises:
            JdlSyntaxError: If an unexpected character is encountered
        """
        while self.pos < len(self.text):
            ch = self.current_char()
            if ch is None:
                break

            if ch.isspace():
                self.advance()
                continue

            token_line = self.line
            token_col = self.column

            if ch == "/" and self.peek_char() == "/":
                self.skip_line_comment()

            elif ch == "/" and self.peek_char() == "*":
                image = self.read_block_comment()
                self.tokens.append(Token(TokenType.COMMENT, image, token_line, token_col))

            elif ch == "/" and self._expects_regex():
                image = self.read_regex()
                self.tokens.append(Token(TokenType.REGEX, image, token_line, token_col))

            elif ch == '"':
                image = self.read_string()
                self.tokens.append(Token(TokenType.STRING, image, token_line, token_col))

            elif ch.isdigit() or (ch == "-" and (self.peek_char() or "").isdigit()):
                image = self.read_integer()
                self.tokens.append(Token(TokenType.INTEGER, image, token_line, token_col))

            elif ch.isalpha() or ch == "_":
                image = self.read_name()
                token_type = KEYWORDS.get(image, TokenType.NAME)
                self.tokens.append(Token(token_type, image, token_line, token_col))

            elif ch in _PUNCTUATION:
                self.advance()
                self.tokens.append(Token(_PUNCTUATION[ch], ch, token_line, token_col))

            else:
                raise self.error(f"Unexpected character: {ch!r}", token_line, token_col)

        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column))
        return self.tokens


def tokenize(text: str, file: Path | None = None) -> list[Token]:
    """
    Convenience function to tokenize JDL text.

    Args:
        text: JDL source text
        file: Source file path (for error reporting)

    Returns:
        List of tokens
    """
    lexer = Lexer(text, file)
    return lexer.tokenize()
