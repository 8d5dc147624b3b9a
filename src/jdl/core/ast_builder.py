"""
AST builder for JDL.

Folds the concrete syntax tree into a ``JdlDocument``. Repeated option
declarations are merged per option value with order-preserving
de-duplication; repeated ``config`` and ``entities`` blocks inside one
application are not merged, the last one wins.

The builder assumes a well-formed tree as produced by ``parse_cst``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .cst import CstKind, CstNode
from .ir.catalog import WILDCARD, RelationshipType
from .ir.document import (
    KEYED_OPTION_SECTIONS,
    ApplicationEntities,
    ApplicationNode,
    ConfigValue,
    EntityNode,
    EnumNode,
    FieldNode,
    JdlDocument,
    OptionEntry,
    RelationshipNode,
    RelationshipSideNode,
    ValidationNode,
)
from .lexer import TokenType
from .strings import kebab_case, trim_comment

logger = logging.getLogger(__name__)

# Option declarations and the document section they accumulate into
OPTION_SECTIONS: dict[CstKind, str] = {
    CstKind.DTO_DECLARATION: "dto",
    CstKind.PAGINATION_DECLARATION: "pagination",
    CstKind.SERVICE_DECLARATION: "service",
    CstKind.MICROSERVICE_DECLARATION: "microservice",
    CstKind.SEARCH_ENGINE_DECLARATION: "search_engine",
    CstKind.ANGULAR_SUFFIX_DECLARATION: "angular_suffix",
    CstKind.CLIENT_ROOT_FOLDER_DECLARATION: "client_root_folder",
    CstKind.NO_CLIENT_DECLARATION: "no_client",
    CstKind.NO_SERVER_DECLARATION: "no_server",
    CstKind.NO_FLUENT_METHOD: "no_fluent_method",
    CstKind.FILTER_DECLARATION: "filter",
}

_CARDINALITY_LABELS = (
    TokenType.ONE_TO_ONE.name,
    TokenType.ONE_TO_MANY.name,
    TokenType.MANY_TO_ONE.name,
    TokenType.MANY_TO_MANY.name,
)

# Config keys renamed for compatibility
_CONFIG_KEY_ALIASES = {"frontEndBuilder": "frontendBuilder"}


def unique(items: list[Any], context: str = "") -> list[Any]:
    """
    De-duplicate a list, keeping the first occurrence of each member.

    Members are compared by equality, which is only meaningful for strings
    and numbers.
    """
    seen: list[Any] = []
    where = f" in {context}" if context else ""
    for item in items:
        if item in seen:
            logger.debug(f"Ignoring duplicate '{item}'{where}")
            continue
        seen.append(item)
    return seen


class OptionDeclaration:
    """One parsed option declaration, before merging."""

    def __init__(self, names: list[str], excluded: list[str], value: str | None = None):
        self.value = value
        self.names = names
        self.excluded = excluded


class AstBuilder:
    """
    Visitor turning a CST into a ``JdlDocument``.

    Dispatch goes through one ``visit_<kind>`` method per ``CstKind``. The
    handler table is checked when the builder is created so that a grammar
    production without a handler fails immediately rather than on the first
    document using it.
    """

    def __init__(self) -> None:
        self._handlers: dict[CstKind, Callable[[CstNode], Any]] = {}
        missing = []
        for kind in CstKind:
            handler = getattr(self, f"visit_{kind.name.lower()}", None)
            if handler is None:
                missing.append(kind.value)
            else:
                self._handlers[kind] = handler
        if missing:
            raise TypeError(f"No AST handler for CST node kinds: {', '.join(missing)}")

    def visit(self, node: CstNode) -> Any:
        return self._handlers[node.kind](node)

    # -------------------------------------------------------------------------
    # Document
    # -------------------------------------------------------------------------

    def visit_prog(self, node: CstNode) -> JdlDocument:
        document = JdlDocument()

        for constant in node.nodes(CstKind.CONSTANT_DECLARATION.value):
            name, value = self.visit(constant)
            document.constants[name] = value

        document.applications = [
            self.visit(app) for app in node.nodes(CstKind.APPLICATION_DECLARATION.value)
        ]
        document.entities = [
            self.visit(entity) for entity in node.nodes(CstKind.ENTITY_DECLARATION.value)
        ]
        document.relationships = [
            relationship
            for block in node.nodes(CstKind.RELATION_DECLARATION.value)
            for relationship in self.visit(block)
        ]
        document.enums = [self.visit(enum) for enum in node.nodes(CstKind.ENUM_DECLARATION.value)]

        for kind, section in OPTION_SECTIONS.items():
            for declaration_node in node.nodes(kind.value):
                self._merge_option(document, section, self.visit(declaration_node))

        return document

    def _merge_option(
        self, document: JdlDocument, section: str, declaration: OptionDeclaration
    ) -> None:
        """Accumulate a declaration into its section, per option value for keyed sections."""
        if section in KEYED_OPTION_SECTIONS:
            entries: dict[str, OptionEntry] = getattr(document, section)
            if declaration.value is None:
                return
            entry = entries.setdefault(declaration.value, OptionEntry())
        else:
            entry = getattr(document, section)

        context = f"{section} {declaration.value}" if declaration.value else section
        entry.names = unique(entry.names + declaration.names, context)
        entry.excluded = unique(entry.excluded + declaration.excluded, f"{context} exclusions")

    def visit_constant_declaration(self, node: CstNode) -> tuple[str, int]:
        return node.image("NAME"), int(node.image("INTEGER"))

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def visit_entity_declaration(self, node: CstNode) -> EntityNode:
        name = node.image("NAME")
        javadoc = trim_comment(node.image("COMMENT")) if node.has("COMMENT") else None

        table_name = name
        if node.has(CstKind.ENTITY_TABLE_NAME_DECLARATION.value):
            table_name = self.visit(node.node(CstKind.ENTITY_TABLE_NAME_DECLARATION.value))

        fields: list[FieldNode] = []
        if node.has(CstKind.ENTITY_BODY.value):
            fields = self.visit(node.node(CstKind.ENTITY_BODY.value))

        return EntityNode(name=name, table_name=table_name, fields=fields, javadoc=javadoc)

    def visit_entity_table_name_declaration(self, node: CstNode) -> str:
        return node.image("NAME")

    def visit_entity_body(self, node: CstNode) -> list[FieldNode]:
        return [self.visit(field) for field in node.nodes(CstKind.FIELD_DECLARATION.value)]

    def visit_field_declaration(self, node: CstNode) -> FieldNode:
        # A field may carry a leading and a trailing comment; the first one wins
        javadoc = trim_comment(node.image("COMMENT")) if node.has("COMMENT") else None
        return FieldNode(
            name=node.image("NAME"),
            type=self.visit(node.node(CstKind.TYPE.value)),
            validations=[self.visit(v) for v in node.nodes(CstKind.VALIDATION.value)],
            javadoc=javadoc,
        )

    def visit_type(self, node: CstNode) -> str:
        return node.image("NAME")

    def visit_validation(self, node: CstNode) -> ValidationNode:
        if node.has(TokenType.REQUIRED.name):
            return ValidationNode(key="required", value="")
        if node.has(CstKind.MIN_MAX_VALIDATION.value):
            return self.visit(node.node(CstKind.MIN_MAX_VALIDATION.value))
        return self.visit(node.node(CstKind.PATTERN.value))

    def visit_min_max_validation(self, node: CstNode) -> ValidationNode:
        key = node.image("MIN_MAX_KEYWORD")
        if node.has("NAME"):
            return ValidationNode(key=key, value=node.image("NAME"), constant=True)
        return ValidationNode(key=key, value=int(node.image("INTEGER")))

    def visit_pattern(self, node: CstNode) -> ValidationNode:
        image = node.image("REGEX")
        return ValidationNode(key="pattern", value=image[1:-1])

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------

    def visit_relation_declaration(self, node: CstNode) -> list[RelationshipNode]:
        cardinality = self.visit(node.node(CstKind.RELATIONSHIP_TYPE.value))
        return [
            RelationshipNode(cardinality=cardinality, from_side=from_side, to_side=to_side)
            for from_side, to_side in (
                self.visit(body) for body in node.nodes(CstKind.RELATIONSHIP_BODY.value)
            )
        ]

    def visit_relationship_type(self, node: CstNode) -> RelationshipType:
        for label in _CARDINALITY_LABELS:
            if node.has(label):
                # OneToMany -> one-to-many
                return RelationshipType(kebab_case(node.image(label)))
        raise TypeError("Relationship type node without a cardinality")

    def visit_relationship_body(
        self, node: CstNode
    ) -> tuple[RelationshipSideNode, RelationshipSideNode]:
        return self.visit(node.node("from")), self.visit(node.node("to"))

    def visit_relationship_side(self, node: CstNode) -> RelationshipSideNode:
        javadoc = self.visit(node.node(CstKind.COMMENT.value))
        injected_field = None
        if node.has("InjectedField"):
            injected_field = node.image("InjectedField")
            if node.has("InjectedFieldParam"):
                injected_field += f"({node.image('InjectedFieldParam')})"

        # ``required`` means nothing without an injected field
        required = node.has(TokenType.REQUIRED.name) if injected_field else None
        return RelationshipSideNode(
            name=node.image("NAME"),
            injected_field=injected_field,
            javadoc=javadoc,
            required=required,
        )

    def visit_comment(self, node: CstNode) -> str | None:
        if node.has("COMMENT"):
            return trim_comment(node.image("COMMENT"))
        return None

    # -------------------------------------------------------------------------
    # Enums
    # -------------------------------------------------------------------------

    def visit_enum_declaration(self, node: CstNode) -> EnumNode:
        name = node.image("NAME")
        values = self.visit(node.node(CstKind.ENUM_PROP_LIST.value))
        return EnumNode(name=name, values=unique(values, f"enum {name}"))

    def visit_enum_prop_list(self, node: CstNode) -> list[str]:
        return [token.image for token in node.tokens("NAME")]

    # -------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------

    def _keyed_option(self, node: CstNode) -> OptionDeclaration:
        """The last entity-list element is the option value, the rest its targets."""
        entity_list = self.visit(node.node(CstKind.ENTITY_LIST.value))
        excluded = self._exclusion(node)
        return OptionDeclaration(entity_list[:-1], excluded, value=entity_list[-1])

    def _unary_option(self, node: CstNode) -> OptionDeclaration:
        names = self.visit(node.node(CstKind.FILTER_DEF.value))
        return OptionDeclaration(names, self._exclusion(node))

    def _exclusion(self, node: CstNode) -> list[str]:
        if node.has(CstKind.EXCLUSION.value):
            return self.visit(node.node(CstKind.EXCLUSION.value))
        return []

    visit_dto_declaration = _keyed_option
    visit_pagination_declaration = _keyed_option
    visit_service_declaration = _keyed_option
    visit_microservice_declaration = _keyed_option
    visit_search_engine_declaration = _keyed_option
    visit_angular_suffix_declaration = _keyed_option
    visit_client_root_folder_declaration = _keyed_option

    visit_no_client_declaration = _unary_option
    visit_no_server_declaration = _unary_option
    visit_no_fluent_method = _unary_option
    visit_filter_declaration = _unary_option

    def _targets(self, node: CstNode) -> list[str]:
        names = [token.image for token in node.tokens("NAME")]
        if node.has(TokenType.STAR.name) or node.has(TokenType.ALL.name):
            names.append(WILDCARD)
        return names

    def visit_entity_list(self, node: CstNode) -> list[str]:
        names = self._targets(node)
        names.append(node.image("Method"))
        return unique(names, "entity list")

    def visit_filter_def(self, node: CstNode) -> list[str]:
        return unique(self._targets(node), "entity list")

    def visit_exclusion(self, node: CstNode) -> list[str]:
        return [token.image for token in node.tokens("NAME")]

    # -------------------------------------------------------------------------
    # Applications
    # -------------------------------------------------------------------------

    def visit_application_declaration(self, node: CstNode) -> ApplicationNode:
        return self.visit(node.node(CstKind.APPLICATION_SUB_DECLARATION.value))

    def visit_application_sub_declaration(self, node: CstNode) -> ApplicationNode:
        config: dict[str, ConfigValue] = {}
        entities = ApplicationEntities()

        config_blocks = node.nodes(CstKind.APPLICATION_SUB_CONFIG.value)
        if config_blocks:
            config = self.visit(config_blocks[-1])

        entity_blocks = node.nodes(CstKind.APPLICATION_SUB_ENTITIES.value)
        if entity_blocks:
            entities = self.visit(entity_blocks[-1])

        return ApplicationNode(config=config, entities=entities)

    def visit_application_sub_config(self, node: CstNode) -> dict[str, ConfigValue]:
        config: dict[str, ConfigValue] = {}
        for declaration in node.nodes(CstKind.APPLICATION_CONFIG_DECLARATION.value):
            key, value = self.visit(declaration)
            config[key] = value

            if key == "packageName" and isinstance(value, str):
                config["packageFolder"] = value.replace(".", "/")

            if key == "serviceDiscoveryType" and value in ("true", "false"):
                config[key] = value == "true"
        return config

    def visit_application_sub_entities(self, node: CstNode) -> ApplicationEntities:
        return ApplicationEntities(
            entity_list=self.visit(node.node(CstKind.FILTER_DEF.value)),
            excluded=self._exclusion(node),
        )

    def visit_application_config_declaration(self, node: CstNode) -> tuple[str, ConfigValue]:
        key = node.image("CONFIG_KEY")
        key = _CONFIG_KEY_ALIASES.get(key, key)
        return key, self.visit(node.node(CstKind.CONFIG_VALUE.value))

    def visit_config_value(self, node: CstNode) -> ConfigValue:
        if node.has(CstKind.QUALIFIED_NAME.value):
            return self.visit(node.node(CstKind.QUALIFIED_NAME.value))
        if node.has(CstKind.LIST.value):
            return self.visit(node.node(CstKind.LIST.value))
        if node.has("INTEGER"):
            return int(node.image("INTEGER"))
        if node.has("STRING"):
            return node.image("STRING")[1:-1]
        if node.has("BOOLEAN"):
            return node.image("BOOLEAN") == "true"
        raise TypeError("Config value node without a value")

    def visit_qualified_name(self, node: CstNode) -> str:
        return ".".join(token.image for token in node.tokens("NAME"))

    def visit_list(self, node: CstNode) -> list[str]:
        return [token.image for token in node.tokens("NAME")]


def build_ast(cst: CstNode) -> JdlDocument:
    """
    Build the normalized document from a ``prog`` CST node.

    Args:
        cst: Root node returned by ``parse_cst``

    Returns:
        The merged ``JdlDocument``
    """
    return AstBuilder().visit(cst)
