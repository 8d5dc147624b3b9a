"""
Concrete syntax tree for JDL.

A recursive descent parser over the token stream. Every grammar production
yields a ``CstNode`` tagged with its ``CstKind``; children are grouped by
label (a token type name such as ``NAME``, or a sub-production label such as
``from``), in source order within each label.

The tree is grammar-shaped on purpose: folding it into the normalized
document is the AST builder's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import JdlSyntaxError, extract_snippet, make_syntax_error
from .lexer import CARDINALITY_TYPES, KEYWORD_TYPES, MIN_MAX_TYPES, Token, TokenType


class CstKind(str, Enum):
    """Grammar productions, one per CST node kind."""

    PROG = "prog"
    CONSTANT_DECLARATION = "constantDeclaration"
    ENTITY_DECLARATION = "entityDeclaration"
    ENTITY_TABLE_NAME_DECLARATION = "entityTableNameDeclaration"
    ENTITY_BODY = "entityBody"
    FIELD_DECLARATION = "fieldDeclaration"
    TYPE = "type"
    VALIDATION = "validation"
    MIN_MAX_VALIDATION = "minMaxValidation"
    PATTERN = "pattern"
    RELATION_DECLARATION = "relationDeclaration"
    RELATIONSHIP_TYPE = "relationshipType"
    RELATIONSHIP_BODY = "relationshipBody"
    RELATIONSHIP_SIDE = "relationshipSide"
    COMMENT = "comment"
    ENUM_DECLARATION = "enumDeclaration"
    ENUM_PROP_LIST = "enumPropList"
    DTO_DECLARATION = "dtoDeclaration"
    PAGINATION_DECLARATION = "paginationDeclaration"
    SERVICE_DECLARATION = "serviceDeclaration"
    MICROSERVICE_DECLARATION = "microserviceDeclaration"
    SEARCH_ENGINE_DECLARATION = "searchEngineDeclaration"
    ANGULAR_SUFFIX_DECLARATION = "angularSuffixDeclaration"
    CLIENT_ROOT_FOLDER_DECLARATION = "clientRootFolderDeclaration"
    NO_CLIENT_DECLARATION = "noClientDeclaration"
    NO_SERVER_DECLARATION = "noServerDeclaration"
    NO_FLUENT_METHOD = "noFluentMethod"
    FILTER_DECLARATION = "filterDeclaration"
    ENTITY_LIST = "entityList"
    FILTER_DEF = "filterDef"
    EXCLUSION = "exclusion"
    APPLICATION_DECLARATION = "applicationDeclaration"
    APPLICATION_SUB_DECLARATION = "applicationSubDeclaration"
    APPLICATION_SUB_CONFIG = "applicationSubConfig"
    APPLICATION_SUB_ENTITIES = "applicationSubEntities"
    APPLICATION_CONFIG_DECLARATION = "applicationConfigDeclaration"
    CONFIG_VALUE = "configValue"
    QUALIFIED_NAME = "qualifiedName"
    LIST = "list"


@dataclass
class CstNode:
    """
    A node of the concrete syntax tree.

    Attributes:
        kind: Production that produced the node
        children: Child nodes and tokens grouped by label
    """

    kind: CstKind
    children: dict[str, list[CstNode | Token]] = field(default_factory=dict)

    def add(self, label: str | TokenType | CstKind, child: CstNode | Token) -> None:
        key = label.name if isinstance(label, TokenType) else str(getattr(label, "value", label))
        self.children.setdefault(key, []).append(child)

    def has(self, label: str) -> bool:
        return bool(self.children.get(label))

    def tokens(self, label: str) -> list[Token]:
        """Tokens recorded under a label."""
        return [child for child in self.children.get(label, []) if isinstance(child, Token)]

    def nodes(self, label: str) -> list[CstNode]:
        """Sub-nodes recorded under a label."""
        return [child for child in self.children.get(label, []) if isinstance(child, CstNode)]

    def token(self, label: str) -> Token:
        """First token under a label; the label must be present."""
        return self.tokens(label)[0]

    def image(self, label: str) -> str:
        return self.token(label).image

    def node(self, label: str) -> CstNode:
        """First sub-node under a label; the label must be present."""
        return self.nodes(label)[0]


# Declarations keyed by option value, by leading keyword
_KEYED_OPTION_KINDS = {
    TokenType.DTO: CstKind.DTO_DECLARATION,
    TokenType.PAGINATE: CstKind.PAGINATION_DECLARATION,
    TokenType.SERVICE: CstKind.SERVICE_DECLARATION,
    TokenType.MICROSERVICE: CstKind.MICROSERVICE_DECLARATION,
    TokenType.SEARCH: CstKind.SEARCH_ENGINE_DECLARATION,
    TokenType.ANGULAR_SUFFIX: CstKind.ANGULAR_SUFFIX_DECLARATION,
    TokenType.CLIENT_ROOT_FOLDER: CstKind.CLIENT_ROOT_FOLDER_DECLARATION,
}

# Unary declarations, by leading keyword
_UNARY_OPTION_KINDS = {
    TokenType.SKIP_CLIENT: CstKind.NO_CLIENT_DECLARATION,
    TokenType.SKIP_SERVER: CstKind.NO_SERVER_DECLARATION,
    TokenType.NO_FLUENT_METHOD: CstKind.NO_FLUENT_METHOD,
    TokenType.FILTER: CstKind.FILTER_DECLARATION,
}


class CstParser:
    """
    Recursive descent parser producing the JDL concrete syntax tree.

    One method per production; each returns the node it built.
    """

    def __init__(self, tokens: list[Token], file: Path | None = None, text: str = ""):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer
            file: Source file path (for error reporting)
            text: Source text (for error snippets)
        """
        self.tokens = tokens
        self.file = file
        self.text = text
        self.pos = 0

    # -------------------------------------------------------------------------
    # Token navigation
    # -------------------------------------------------------------------------

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def error(self, message: str, token: Token | None = None) -> JdlSyntaxError:
        token = token or self.current_token()
        snippet = extract_snippet(self.text, token.line) if self.text else None
        return make_syntax_error(message, self.file, token.line, token.column, snippet)

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            JdlSyntaxError: If token doesn't match
        """
        token = self.current_token()
        if token.type != token_type:
            found = token.value or token.type.value
            raise self.error(f"Expected '{token_type.value}', got '{found}'")
        return self.advance()

    def expect_name_or_keyword(self) -> Token:
        """
        Expect a name, accepting keywords in places where only a name fits.

        Field names, enum values, config keys and config values use this.
        """
        token = self.current_token()
        if token.type == TokenType.NAME or token.type in KEYWORD_TYPES:
            return self.advance()
        found = token.value or token.type.value
        raise self.error(f"Expected a name, got '{found}'")

    def is_name_or_keyword(self) -> bool:
        token = self.current_token()
        return token.type == TokenType.NAME or token.type in KEYWORD_TYPES

    # -------------------------------------------------------------------------
    # Top level
    # -------------------------------------------------------------------------

    def parse(self) -> CstNode:
        """Parse the whole token stream into a ``prog`` node."""
        prog = CstNode(CstKind.PROG)

        while not self.match(TokenType.EOF):
            token = self.current_token()

            if token.type == TokenType.COMMENT:
                if self._comment_precedes(TokenType.ENTITY):
                    prog.add(CstKind.ENTITY_DECLARATION, self.parse_entity_declaration())
                else:
                    prog.add(TokenType.COMMENT, self.advance())
            elif token.type == TokenType.NAME and self.peek_token().type == TokenType.EQUALS:
                prog.add(CstKind.CONSTANT_DECLARATION, self.parse_constant_declaration())
            elif token.type == TokenType.ENTITY:
                prog.add(CstKind.ENTITY_DECLARATION, self.parse_entity_declaration())
            elif token.type == TokenType.RELATIONSHIP:
                prog.add(CstKind.RELATION_DECLARATION, self.parse_relation_declaration())
            elif token.type == TokenType.ENUM:
                prog.add(CstKind.ENUM_DECLARATION, self.parse_enum_declaration())
            elif token.type == TokenType.APPLICATION:
                prog.add(CstKind.APPLICATION_DECLARATION, self.parse_application_declaration())
            elif token.type in _KEYED_OPTION_KINDS:
                kind = _KEYED_OPTION_KINDS[token.type]
                prog.add(kind, self.parse_keyed_option(kind))
            elif token.type in _UNARY_OPTION_KINDS:
                kind = _UNARY_OPTION_KINDS[token.type]
                prog.add(kind, self.parse_unary_option(kind))
            else:
                raise self.error(f"Unexpected '{token.value}' at top level")

        return prog

    def _comment_precedes(self, token_type: TokenType) -> bool:
        """True when the current comment is directly followed by ``token_type``."""
        return self.peek_token().type == token_type

    def parse_constant_declaration(self) -> CstNode:
        node = CstNode(CstKind.CONSTANT_DECLARATION)
        node.add(TokenType.NAME, self.expect(TokenType.NAME))
        self.expect(TokenType.EQUALS)
        node.add(TokenType.INTEGER, self.expect(TokenType.INTEGER))
        return node

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def parse_entity_declaration(self) -> CstNode:
        node = CstNode(CstKind.ENTITY_DECLARATION)
        if self.match(TokenType.COMMENT):
            node.add(TokenType.COMMENT, self.advance())
        self.expect(TokenType.ENTITY)
        node.add(TokenType.NAME, self.expect(TokenType.NAME))

        if self.match(TokenType.LPAREN):
            table = CstNode(CstKind.ENTITY_TABLE_NAME_DECLARATION)
            self.advance()
            table.add(TokenType.NAME, self.expect(TokenType.NAME))
            self.expect(TokenType.RPAREN)
            node.add(CstKind.ENTITY_TABLE_NAME_DECLARATION, table)

        if self.match(TokenType.LCURLY):
            node.add(CstKind.ENTITY_BODY, self.parse_entity_body())
        return node

    def parse_entity_body(self) -> CstNode:
        node = CstNode(CstKind.ENTITY_BODY)
        self.expect(TokenType.LCURLY)
        while not self.match(TokenType.RCURLY):
            if self.match(TokenType.EOF):
                raise self.error("Unterminated entity body")
            node.add(CstKind.FIELD_DECLARATION, self.parse_field_declaration())
        self.expect(TokenType.RCURLY)
        return node

    def parse_field_declaration(self) -> CstNode:
        node = CstNode(CstKind.FIELD_DECLARATION)
        if self.match(TokenType.COMMENT):
            node.add(TokenType.COMMENT, self.advance())

        node.add(TokenType.NAME, self.expect_name_or_keyword())
        type_node = CstNode(CstKind.TYPE)
        type_token = self.expect(TokenType.NAME)
        type_node.add(TokenType.NAME, type_token)
        node.add(CstKind.TYPE, type_node)

        last_line = type_token.line
        while self.match(TokenType.REQUIRED, TokenType.PATTERN, *MIN_MAX_TYPES):
            node.add(CstKind.VALIDATION, self.parse_validation())
            last_line = self.peek_token(-1).line

        if self.match(TokenType.COMMA):
            last_line = self.advance().line

        # A comment on the same line trails this field
        if self.match(TokenType.COMMENT) and self.current_token().line == last_line:
            node.add(TokenType.COMMENT, self.advance())
        return node

    def parse_validation(self) -> CstNode:
        node = CstNode(CstKind.VALIDATION)
        if self.match(TokenType.REQUIRED):
            node.add(TokenType.REQUIRED, self.advance())
        elif self.match(TokenType.PATTERN):
            pattern = CstNode(CstKind.PATTERN)
            self.advance()
            self.expect(TokenType.LPAREN)
            pattern.add(TokenType.REGEX, self.expect(TokenType.REGEX))
            self.expect(TokenType.RPAREN)
            node.add(CstKind.PATTERN, pattern)
        else:
            min_max = CstNode(CstKind.MIN_MAX_VALIDATION)
            min_max.add("MIN_MAX_KEYWORD", self.advance())
            self.expect(TokenType.LPAREN)
            if self.match(TokenType.INTEGER):
                min_max.add(TokenType.INTEGER, self.advance())
            else:
                min_max.add(TokenType.NAME, self.expect(TokenType.NAME))
            self.expect(TokenType.RPAREN)
            node.add(CstKind.MIN_MAX_VALIDATION, min_max)
        return node

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------

    def parse_relation_declaration(self) -> CstNode:
        node = CstNode(CstKind.RELATION_DECLARATION)
        self.expect(TokenType.RELATIONSHIP)

        cardinality = CstNode(CstKind.RELATIONSHIP_TYPE)
        token = self.current_token()
        if token.type not in CARDINALITY_TYPES:
            raise self.error(f"Expected a relationship type, got '{token.value}'")
        cardinality.add(token.type, self.advance())
        node.add(CstKind.RELATIONSHIP_TYPE, cardinality)

        self.expect(TokenType.LCURLY)
        node.add(CstKind.RELATIONSHIP_BODY, self.parse_relationship_body())
        while not self.match(TokenType.RCURLY):
            if self.match(TokenType.COMMA):
                self.advance()
            if self.match(TokenType.EOF):
                raise self.error("Unterminated relationship block")
            node.add(CstKind.RELATIONSHIP_BODY, self.parse_relationship_body())
        self.expect(TokenType.RCURLY)
        return node

    def parse_relationship_body(self) -> CstNode:
        node = CstNode(CstKind.RELATIONSHIP_BODY)
        node.add("from", self.parse_relationship_side())
        self.expect(TokenType.TO)
        node.add("to", self.parse_relationship_side())
        return node

    def parse_relationship_side(self) -> CstNode:
        node = CstNode(CstKind.RELATIONSHIP_SIDE)
        comment = CstNode(CstKind.COMMENT)
        if self.match(TokenType.COMMENT):
            comment.add(TokenType.COMMENT, self.advance())
        node.add(CstKind.COMMENT, comment)

        node.add(TokenType.NAME, self.expect(TokenType.NAME))
        if self.match(TokenType.LCURLY):
            self.advance()
            # A lone `required` carries no injected field
            if not self.match(TokenType.REQUIRED):
                node.add("InjectedField", self.expect_name_or_keyword())
                if self.match(TokenType.LPAREN):
                    self.advance()
                    node.add("InjectedFieldParam", self.expect_name_or_keyword())
                    self.expect(TokenType.RPAREN)
            if self.match(TokenType.REQUIRED):
                node.add(TokenType.REQUIRED, self.advance())
            self.expect(TokenType.RCURLY)
        return node

    # -------------------------------------------------------------------------
    # Enums
    # -------------------------------------------------------------------------

    def parse_enum_declaration(self) -> CstNode:
        node = CstNode(CstKind.ENUM_DECLARATION)
        self.expect(TokenType.ENUM)
        node.add(TokenType.NAME, self.expect(TokenType.NAME))
        self.expect(TokenType.LCURLY)

        props = CstNode(CstKind.ENUM_PROP_LIST)
        props.add(TokenType.NAME, self.expect_name_or_keyword())
        while self.match(TokenType.COMMA):
            self.advance()
            props.add(TokenType.NAME, self.expect_name_or_keyword())
        node.add(CstKind.ENUM_PROP_LIST, props)

        self.expect(TokenType.RCURLY)
        return node

    # -------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------

    def parse_keyed_option(self, kind: CstKind) -> CstNode:
        """``<keyword> A, B with value except C``"""
        node = CstNode(kind)
        self.advance()
        node.add(CstKind.ENTITY_LIST, self.parse_entity_list())
        if self.match(TokenType.EXCEPT):
            node.add(CstKind.EXCLUSION, self.parse_exclusion())
        return node

    def parse_unary_option(self, kind: CstKind) -> CstNode:
        """``<keyword> for? A, B except C``"""
        node = CstNode(kind)
        self.advance()
        if self.match(TokenType.FOR):
            self.advance()
        node.add(CstKind.FILTER_DEF, self.parse_filter_def())
        if self.match(TokenType.EXCEPT):
            node.add(CstKind.EXCLUSION, self.parse_exclusion())
        return node

    def _parse_targets(self, node: CstNode) -> None:
        """``(NAME ',')* (NAME | '*' | 'all')``"""
        while True:
            if self.match(TokenType.STAR, TokenType.ALL):
                token = self.advance()
                node.add(token.type, token)
                return
            node.add(TokenType.NAME, self.expect(TokenType.NAME))
            if not self.match(TokenType.COMMA):
                return
            self.advance()

    def parse_entity_list(self) -> CstNode:
        node = CstNode(CstKind.ENTITY_LIST)
        self._parse_targets(node)
        self.expect(TokenType.WITH)
        node.add("Method", self.expect_name_or_keyword())
        return node

    def parse_filter_def(self) -> CstNode:
        node = CstNode(CstKind.FILTER_DEF)
        self._parse_targets(node)
        return node

    def parse_exclusion(self) -> CstNode:
        node = CstNode(CstKind.EXCLUSION)
        self.expect(TokenType.EXCEPT)
        node.add(TokenType.NAME, self.expect(TokenType.NAME))
        while self.match(TokenType.COMMA):
            self.advance()
            node.add(TokenType.NAME, self.expect(TokenType.NAME))
        return node

    # -------------------------------------------------------------------------
    # Applications
    # -------------------------------------------------------------------------

    def parse_application_declaration(self) -> CstNode:
        node = CstNode(CstKind.APPLICATION_DECLARATION)
        self.expect(TokenType.APPLICATION)
        self.expect(TokenType.LCURLY)

        sub = CstNode(CstKind.APPLICATION_SUB_DECLARATION)
        while not self.match(TokenType.RCURLY):
            if self.match(TokenType.CONFIG):
                sub.add(CstKind.APPLICATION_SUB_CONFIG, self.parse_application_sub_config())
            elif self.match(TokenType.ENTITIES):
                sub.add(CstKind.APPLICATION_SUB_ENTITIES, self.parse_application_sub_entities())
            elif self.match(TokenType.COMMENT):
                self.advance()
            else:
                token = self.current_token()
                raise self.error(
                    f"Expected 'config' or 'entities' in application, got '{token.value}'"
                )
        node.add(CstKind.APPLICATION_SUB_DECLARATION, sub)

        self.expect(TokenType.RCURLY)
        return node

    def parse_application_sub_config(self) -> CstNode:
        node = CstNode(CstKind.APPLICATION_SUB_CONFIG)
        self.expect(TokenType.CONFIG)
        self.expect(TokenType.LCURLY)
        while not self.match(TokenType.RCURLY):
            if self.match(TokenType.COMMENT, TokenType.COMMA):
                self.advance()
                continue
            declaration = CstNode(CstKind.APPLICATION_CONFIG_DECLARATION)
            declaration.add("CONFIG_KEY", self.expect_name_or_keyword())
            declaration.add(CstKind.CONFIG_VALUE, self.parse_config_value())
            node.add(CstKind.APPLICATION_CONFIG_DECLARATION, declaration)
        self.expect(TokenType.RCURLY)
        return node

    def parse_config_value(self) -> CstNode:
        node = CstNode(CstKind.CONFIG_VALUE)
        if self.match(TokenType.INTEGER, TokenType.STRING):
            token = self.advance()
            node.add(token.type, token)
        elif self.match(TokenType.TRUE, TokenType.FALSE):
            node.add("BOOLEAN", self.advance())
        elif self.match(TokenType.LSQUARE):
            node.add(CstKind.LIST, self.parse_list())
        elif self.is_name_or_keyword():
            node.add(CstKind.QUALIFIED_NAME, self.parse_qualified_name())
        else:
            token = self.current_token()
            raise self.error(f"Expected a configuration value, got '{token.value}'")
        return node

    def parse_qualified_name(self) -> CstNode:
        node = CstNode(CstKind.QUALIFIED_NAME)
        node.add(TokenType.NAME, self.expect_name_or_keyword())
        while self.match(TokenType.DOT):
            self.advance()
            node.add(TokenType.NAME, self.expect_name_or_keyword())
        return node

    def parse_list(self) -> CstNode:
        node = CstNode(CstKind.LIST)
        self.expect(TokenType.LSQUARE)
        node.add(TokenType.NAME, self.expect_name_or_keyword())
        while self.match(TokenType.COMMA):
            self.advance()
            node.add(TokenType.NAME, self.expect_name_or_keyword())
        self.expect(TokenType.RSQUARE)
        return node

    def parse_application_sub_entities(self) -> CstNode:
        node = CstNode(CstKind.APPLICATION_SUB_ENTITIES)
        self.expect(TokenType.ENTITIES)
        node.add(CstKind.FILTER_DEF, self.parse_filter_def())
        if self.match(TokenType.EXCEPT):
            node.add(CstKind.EXCLUSION, self.parse_exclusion())
        return node


def parse_cst(tokens: list[Token], file: Path | None = None, text: str = "") -> CstNode:
    """
    Parse a token stream into a concrete syntax tree.

    Args:
        tokens: Tokens ending with EOF
        file: Source file path (for error reporting)
        text: Source text (for error snippets)

    Returns:
        The ``prog`` root node
    """
    return CstParser(tokens, file, text).parse()
