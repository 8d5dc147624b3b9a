"""Tests for the JDL lexer."""

import pytest

from jdl.core.errors import JdlSyntaxError
from jdl.core.lexer import TokenType, tokenize


def _types(text: str) -> list[TokenType]:
    return [token.type for token in tokenize(text)]


def test_entity_tokens():
    assert _types("entity Foo { name String }") == [
        TokenType.ENTITY,
        TokenType.NAME,
        TokenType.LCURLY,
        TokenType.NAME,
        TokenType.NAME,
        TokenType.RCURLY,
        TokenType.EOF,
    ]


def test_locations_are_one_indexed():
    tokens = tokenize("entity A\n  entity B")
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    assert (tokens[2].line, tokens[2].column) == (2, 3)
    assert tokens[3].image == "B"


def test_block_comment_is_a_token():
    tokens = tokenize("/** doc */ entity A")
    assert tokens[0].type == TokenType.COMMENT
    assert tokens[0].image == "/** doc */"


def test_line_comment_is_skipped():
    assert _types("entity A // trailing\nentity B") == [
        TokenType.ENTITY,
        TokenType.NAME,
        TokenType.ENTITY,
        TokenType.NAME,
        TokenType.EOF,
    ]


def test_regex_only_after_pattern():
    tokens = tokenize("name String pattern(/a\\/b*/)")
    regex = [token for token in tokens if token.type == TokenType.REGEX]
    assert len(regex) == 1
    assert regex[0].image == "/a\\/b*/"


def test_keywords_and_cardinalities():
    assert _types("relationship OneToMany ManyToOne required")[:4] == [
        TokenType.RELATIONSHIP,
        TokenType.ONE_TO_MANY,
        TokenType.MANY_TO_ONE,
        TokenType.REQUIRED,
    ]


def test_negative_integer_and_string():
    tokens = tokenize('x = -5 "quoted value"')
    assert tokens[2].type == TokenType.INTEGER
    assert tokens[2].image == "-5"
    assert tokens[3].type == TokenType.STRING
    assert tokens[3].image == '"quoted value"'


def test_names_may_contain_hyphens():
    tokens = tokenize("paginate A with infinite-scroll")
    assert tokens[-2].type == TokenType.NAME
    assert tokens[-2].image == "infinite-scroll"


def test_unexpected_character_reports_location():
    with pytest.raises(JdlSyntaxError) as exc_info:
        tokenize("entity A\nentity B @")
    context = exc_info.value.context
    assert context is not None
    assert (context.line, context.column) == (2, 10)


def test_unterminated_comment():
    with pytest.raises(JdlSyntaxError, match="Unterminated comment"):
        tokenize("/** never closed")
