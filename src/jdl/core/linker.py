"""
Object model linker for JDL.

Turns a ``JdlDocument`` into the validated ``JdlObject`` the entity resolver
consumes: duplicate names are rejected, cross references checked, constants
substituted into validations, and application entity lists resolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .errors import LinkError
from .ir.catalog import (
    BINARY_OPTION_VALUES,
    WILDCARD,
    BinaryOption,
    UnaryOption,
    is_reserved_user,
)
from .ir.document import (
    KEYED_OPTION_SECTIONS,
    UNARY_OPTION_SECTIONS,
    ApplicationNode,
    EntityNode,
    FieldNode,
    JdlDocument,
    OptionEntry,
    RelationshipSideNode,
)
from .ir.objects import (
    JdlApplication,
    JdlEntity,
    JdlEnum,
    JdlField,
    JdlObject,
    JdlOption,
    JdlRelationship,
    JdlValidation,
    RelationshipSide,
)

logger = logging.getLogger(__name__)

# Document sections and the option they declare
KEYED_SECTION_OPTIONS: dict[str, BinaryOption] = {
    "dto": BinaryOption.DTO,
    "pagination": BinaryOption.PAGINATION,
    "service": BinaryOption.SERVICE,
    "microservice": BinaryOption.MICROSERVICE,
    "search_engine": BinaryOption.SEARCH_ENGINE,
    "angular_suffix": BinaryOption.ANGULAR_SUFFIX,
    "client_root_folder": BinaryOption.CLIENT_ROOT_FOLDER,
}

UNARY_SECTION_OPTIONS: dict[str, UnaryOption] = {
    "no_client": UnaryOption.SKIP_CLIENT,
    "no_server": UnaryOption.SKIP_SERVER,
    "filter": UnaryOption.FILTER,
    "no_fluent_method": UnaryOption.NO_FLUENT_METHOD,
}


@dataclass
class SymbolTable:
    """
    Names declared in a document.

    Entity names are compared case-insensitively, as they end up as class and
    table names on case-insensitive systems.
    """

    entities: dict[str, EntityNode] = field(default_factory=dict)
    enums: dict[str, list[str]] = field(default_factory=dict)
    constants: dict[str, int] = field(default_factory=dict)

    # Lower-cased entity name -> declared name
    entity_keys: dict[str, str] = field(default_factory=dict)

    def add_entity(self, entity: EntityNode) -> None:
        """Add entity to symbol table, checking for duplicates."""
        existing = self.entity_keys.get(entity.name.lower())
        if existing is not None:
            raise LinkError(f"Duplicate entity '{entity.name}' (already declared as '{existing}')")
        if entity.name in self.enums:
            raise LinkError(f"Entity '{entity.name}' has the same name as an enum")
        self.entities[entity.name] = entity
        self.entity_keys[entity.name.lower()] = entity.name

    def add_enum(self, name: str, values: list[str]) -> None:
        """Add enum to symbol table, checking for duplicates."""
        if name in self.enums:
            raise LinkError(f"Duplicate enum '{name}'")
        if name in self.entities:
            raise LinkError(f"Enum '{name}' has the same name as an entity")
        self.enums[name] = values

    def has_entity(self, name: str) -> bool:
        return name in self.entities


def build_symbol_table(document: JdlDocument) -> SymbolTable:
    """
    Collect declared names, rejecting duplicates.

    Raises:
        LinkError: On duplicate entity or enum names, or entity/enum collisions
    """
    symbols = SymbolTable(constants=dict(document.constants))
    for enum in document.enums:
        symbols.add_enum(enum.name, enum.values)
    for entity in document.entities:
        symbols.add_entity(entity)
    return symbols


def _check_side(side: RelationshipSideNode, symbols: SymbolTable) -> str | None:
    if symbols.has_entity(side.name) or is_reserved_user(side.name):
        return None
    return f"Relationship references undeclared entity '{side.name}'"


def _check_targets(names: list[str], owner: str, symbols: SymbolTable) -> list[str]:
    return [
        f"{owner} references undeclared entity '{name}'"
        for name in names
        if name != WILDCARD and not symbols.has_entity(name)
    ]


def validate_references(document: JdlDocument, symbols: SymbolTable) -> list[str]:
    """
    Check every cross reference of the document.

    Returns:
        List of error messages, empty when every reference resolves
    """
    errors: list[str] = []

    for entity in document.entities:
        seen_fields: set[str] = set()
        for field_node in entity.fields:
            if field_node.name in seen_fields:
                errors.append(f"Duplicate field '{field_node.name}' in entity '{entity.name}'")
            seen_fields.add(field_node.name)
            for validation in field_node.validations:
                if validation.constant and validation.value not in symbols.constants:
                    errors.append(
                        f"Unknown constant '{validation.value}' in field "
                        f"'{field_node.name}' of entity '{entity.name}'"
                    )

    for relationship in document.relationships:
        for side in (relationship.from_side, relationship.to_side):
            error = _check_side(side, symbols)
            if error:
                errors.append(error)

    for section in KEYED_OPTION_SECTIONS:
        option = KEYED_SECTION_OPTIONS[section]
        entries: dict[str, OptionEntry] = getattr(document, section)
        for value, entry in entries.items():
            allowed = BINARY_OPTION_VALUES.get(option)
            if allowed is not None and value not in allowed:
                errors.append(
                    f"Unknown value '{value}' for option '{option.value}', "
                    f"expected one of: {', '.join(sorted(allowed))}"
                )
            errors.extend(_check_targets(entry.names, f"Option '{option.value}'", symbols))

    for section in UNARY_OPTION_SECTIONS:
        option = UNARY_SECTION_OPTIONS[section]
        entry = getattr(document, section)
        errors.extend(_check_targets(entry.names, f"Option '{option.value}'", symbols))

    for application in document.applications:
        owner = f"Application '{application.config.get('baseName', '?')}'"
        errors.extend(_check_targets(application.entities.entity_list, owner, symbols))

    return errors


def _link_field(field_node: FieldNode, symbols: SymbolTable) -> JdlField:
    validations: dict[str, JdlValidation] = {}
    for validation in field_node.validations:
        value = validation.value
        if validation.constant:
            value = symbols.constants[str(value)]
        validations[validation.key] = JdlValidation(name=validation.key, value=value)
    return JdlField(
        name=field_node.name,
        type=field_node.type,
        validations=validations,
        comment=field_node.javadoc,
    )


def _link_entity(entity: EntityNode, symbols: SymbolTable) -> JdlEntity:
    return JdlEntity(
        name=entity.name,
        table_name=entity.table_name,
        fields={f.name: _link_field(f, symbols) for f in entity.fields},
        comment=entity.javadoc,
    )


def _link_side(side: RelationshipSideNode) -> RelationshipSide:
    return RelationshipSide(
        name=side.name,
        injected_field=side.injected_field,
        comment=side.javadoc,
        required=bool(side.required),
    )


def _link_options(document: JdlDocument, symbols: SymbolTable) -> list[JdlOption]:
    options: list[JdlOption] = []

    def excluded_names(entry: OptionEntry, option_name: str) -> list[str]:
        for name in entry.excluded:
            if not symbols.has_entity(name):
                logger.warning(f"Option '{option_name}' excludes undeclared entity '{name}'")
        return list(entry.excluded)

    for section in KEYED_OPTION_SECTIONS:
        binary = KEYED_SECTION_OPTIONS[section]
        entries: dict[str, OptionEntry] = getattr(document, section)
        for value, entry in entries.items():
            options.append(
                JdlOption(
                    name=binary,
                    value=value,
                    entity_names=list(entry.names),
                    excluded_names=excluded_names(entry, binary.value),
                )
            )

    for section in UNARY_OPTION_SECTIONS:
        unary = UNARY_SECTION_OPTIONS[section]
        entry = getattr(document, section)
        if not entry.names:
            continue
        options.append(
            JdlOption(
                name=unary,
                entity_names=list(entry.names),
                excluded_names=excluded_names(entry, unary.value),
            )
        )

    return options


def _link_application(application: ApplicationNode, symbols: SymbolTable) -> JdlApplication:
    selection = application.entities
    if WILDCARD in selection.entity_list:
        names = list(symbols.entities)
    else:
        names = list(selection.entity_list)
    entities = [name for name in names if name not in selection.excluded]
    return JdlApplication(config=dict(application.config), entities=entities)


def _link_applications(
    document: JdlDocument, symbols: SymbolTable
) -> dict[str, JdlApplication]:
    applications: dict[str, JdlApplication] = {}
    for application in document.applications:
        base_name = application.config.get("baseName")
        if not base_name:
            raise LinkError("Application declared without a 'baseName' in its config")
        if str(base_name) in applications:
            raise LinkError(f"Duplicate application '{base_name}'")
        applications[str(base_name)] = _link_application(application, symbols)
    return applications


def build_object_model(document: JdlDocument) -> JdlObject:
    """
    Link a document into a validated object model.

    Performs:
    1. Symbol table building (duplicate detection)
    2. Reference validation
    3. Constant substitution
    4. Option and application resolution

    Args:
        document: Document returned by the AST builder

    Returns:
        The validated ``JdlObject``

    Raises:
        LinkError: If names collide or a reference cannot be resolved
    """
    symbols = build_symbol_table(document)

    errors = validate_references(document, symbols)
    if errors:
        error_msg = "Reference validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise LinkError(error_msg)

    return JdlObject(
        entities={entity.name: _link_entity(entity, symbols) for entity in document.entities},
        relationships=[
            JdlRelationship(
                type=relationship.cardinality,
                from_side=_link_side(relationship.from_side),
                to_side=_link_side(relationship.to_side),
            )
            for relationship in document.relationships
        ],
        enums={enum.name: JdlEnum(name=enum.name, values=enum.values) for enum in document.enums},
        applications=_link_applications(document, symbols),
        options=_link_options(document, symbols),
        constants=dict(document.constants),
    )
