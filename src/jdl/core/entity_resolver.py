"""
Entity resolver for JDL.

Turns a validated ``JdlObject`` into one ``ResolvedEntity`` per declared
entity, in five ordered steps:

1. Initialize a record per entity (``User`` excepted)
2. Apply options (wildcards expanded)
3. Resolve fields: types, enum values, blob content, validations
4. Resolve relationships from both sides, synthesizing missing inverses
5. Scope entities to applications

All working state lives in a ``_ResolutionContext`` created for one call.
The object model is only read, never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import ResolutionError
from .ir.catalog import (
    BLOB_CONTENT,
    BYTE_ARRAY_TYPE,
    DEFAULT_OTHER_ENTITY_FIELD,
    NO_VALUE,
    SERVICE_CLASS,
    WILDCARD,
    ApplicationType,
    BinaryOption,
    DatabaseType,
    RelationshipType,
    UnaryOption,
    ValidationKind,
    is_reserved_user,
    type_checker_for,
)
from .ir.entities import ResolvedEntity, ResolvedField, ResolvedRelationship
from .ir.objects import JdlField, JdlObject, JdlOption, JdlRelationship
from .strings import camel_case, changelog_date, format_comment, lower_first, snake_case

logger = logging.getLogger(__name__)


class ResolverSettings(BaseModel):
    """
    Settings of one resolution.

    Attributes:
        database_type: Storage kind the entities target
        application_type: Kind of application; ``gateway`` accepts every
            field type and allows relationships on any storage kind
        creation_time: Base of the change-log timestamps, now when unset
    """

    database_type: DatabaseType
    application_type: ApplicationType | None = None
    creation_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @property
    def is_gateway(self) -> bool:
        return self.application_type == ApplicationType.GATEWAY


@dataclass
class InjectedField:
    """An injected field split into relationship name and referenced field."""

    relationship_name: str = ""
    other_entity_field: str = DEFAULT_OTHER_ENTITY_FIELD


def extract_field(injected_field: str | None) -> InjectedField:
    """
    Split ``name(otherField)`` into its parts.

    Examples:
        >>> extract_field("owner(login)")
        InjectedField(relationship_name='owner', other_entity_field='login')
        >>> extract_field(None)
        InjectedField(relationship_name='', other_entity_field='id')
    """
    if not injected_field:
        return InjectedField()
    name, _, rest = injected_field.partition("(")
    if not rest:
        return InjectedField(relationship_name=name)
    return InjectedField(relationship_name=name, other_entity_field=rest.rstrip(")"))


@dataclass
class _ResolutionContext:
    """
    Working state of one resolution.

    ``records`` is the only table written to. Resolving an entity may append
    a synthesized relationship to another entity's record; ``synthesized``
    holds the indices of the relationships already mirrored that way.
    """

    jdl_object: JdlObject
    settings: ResolverSettings
    is_type: Callable[[str], bool]
    records: dict[str, ResolvedEntity] = field(default_factory=dict)
    synthesized: set[int] = field(default_factory=set)

    def record(self, entity_name: str) -> ResolvedEntity | None:
        return self.records.get(entity_name)


def check_no_sql_modeling(jdl_object: JdlObject, database_type: DatabaseType) -> None:
    """
    Reject relationships on non-relational storage.

    Raises:
        ResolutionError: If relationships are declared for a NoSQL database
    """
    if database_type == DatabaseType.NO:
        return
    if jdl_object.get_relationship_quantity() != 0 and not database_type.is_sql():
        raise ResolutionError("NoSQL entities don't have relationships.")


# -----------------------------------------------------------------------------
# Step 1: records
# -----------------------------------------------------------------------------


def _initialize_entities(context: _ResolutionContext) -> None:
    for index, (entity_name, entity) in enumerate(context.jdl_object.entities.items()):
        if is_reserved_user(entity_name):
            logger.warning(
                "An Entity name 'User' was used: 'User' is an entity created by default. "
                "All relationships toward it will be kept but any attributes and "
                "relationships from it will be disregarded."
            )
            continue
        context.records[entity_name] = ResolvedEntity(
            entity_name=entity_name,
            table_name=snake_case(entity.table_name),
            changelog_date=changelog_date(context.settings.creation_time, index),
            javadoc=format_comment(entity.comment),
        )


# -----------------------------------------------------------------------------
# Step 2: options
# -----------------------------------------------------------------------------


def _option_targets(context: _ResolutionContext, option: JdlOption) -> list[str]:
    """Entity names an option applies to, with the wildcard expanded."""
    if option.is_wildcard:
        return [
            name
            for name in context.jdl_object.entities
            if name not in option.excluded_names and not is_reserved_user(name)
        ]
    return list(option.entity_names)


def _apply_option(record: ResolvedEntity, option: JdlOption) -> None:
    if option.name in (UnaryOption.SKIP_CLIENT, UnaryOption.SKIP_SERVER):
        setattr(record, snake_case(option.name.value), True)
    elif option.name == BinaryOption.MICROSERVICE:
        record.microservice_name = option.value
    elif option.name == UnaryOption.NO_FLUENT_METHOD:
        record.fluent_methods = False
    elif option.name == BinaryOption.ANGULAR_SUFFIX:
        record.angular_js_suffix = option.value
    elif option.name == UnaryOption.FILTER:
        record.jpa_metamodel_filtering = True
        _add_service_if_needed(record)
    else:
        setattr(record, snake_case(option.name.value), option.value)


def _add_service_if_needed(record: ResolvedEntity) -> None:
    logger.info(
        f"JPAMetaModelFiltering has been detected for {record.entity_name}, the "
        f"'{SERVICE_CLASS}' value for the 'service' is gonna be set for this entity "
        "if no other value has been set."
    )
    if record.service == NO_VALUE:
        record.service = SERVICE_CLASS


def _set_options(context: _ResolutionContext) -> None:
    for option in context.jdl_object.get_options():
        for entity_name in _option_targets(context, option):
            record = context.record(entity_name)
            if record is None:
                logger.debug(f"Option '{option.name.value}' skipped for '{entity_name}'")
                continue
            _apply_option(record, option)

        if option.name != BinaryOption.SEARCH_ENGINE:
            continue
        for entity_name in option.excluded_names:
            record = context.record(entity_name)
            if record is not None:
                record.search_engine = False


# -----------------------------------------------------------------------------
# Step 3: fields
# -----------------------------------------------------------------------------


def _resolve_field_type(
    context: _ResolutionContext, entity_name: str, jdl_field: JdlField
) -> tuple[str | None, str | None]:
    """Resolve a declared type into ``(fieldType, fieldValues)``."""
    field_type = None
    field_values = None
    if context.jdl_object.is_entity_in_microservice(entity_name) or context.is_type(
        jdl_field.type
    ):
        field_type = jdl_field.type
    enum = context.jdl_object.enums.get(jdl_field.type)
    if enum is not None:
        field_type = jdl_field.type
        field_values = ",".join(enum.values)
    return field_type, field_values


def _resolve_field(context: _ResolutionContext, entity_name: str, jdl_field: JdlField) -> ResolvedField:
    field_name = camel_case(jdl_field.name)
    field_type, field_values = _resolve_field_type(context, entity_name, jdl_field)
    if not field_type:
        raise ResolutionError(
            f"No valable field type could be resolved for field '{field_name}' of "
            f"entity '{entity_name}', got '{jdl_field.type}'."
        )

    data: dict[str, Any] = {
        "field_name": field_name,
        "field_type": field_type,
        "field_values": field_values,
        "javadoc": format_comment(jdl_field.comment),
    }
    if "Blob" in field_type:
        data["field_type_blob_content"] = BLOB_CONTENT.get(field_type)
        data["field_type"] = BYTE_ARRAY_TYPE

    if jdl_field.validations:
        data["field_validate_rules"] = []
        for validation in jdl_field.validations.values():
            data["field_validate_rules"].append(validation.name)
            if validation.name != ValidationKind.REQUIRED.value:
                # fieldValidateRules<Kind>
                data[f"field_validate_rules_{validation.name}"] = validation.value
    return ResolvedField(**data)


def _set_fields(context: _ResolutionContext, entity_name: str) -> None:
    record = context.records[entity_name]
    for jdl_field in context.jdl_object.entities[entity_name].fields.values():
        record.add_field(_resolve_field(context, entity_name, jdl_field))


# -----------------------------------------------------------------------------
# Step 4: relationships
# -----------------------------------------------------------------------------


def _related_relationships(
    context: _ResolutionContext, entity_name: str
) -> tuple[list[tuple[int, JdlRelationship]], list[JdlRelationship]]:
    """
    Partition relationships into those declared from the entity, and those
    toward it with an explicitly injected inverse field.
    """
    sources: list[tuple[int, JdlRelationship]] = []
    destinations: list[JdlRelationship] = []
    for index, relationship in enumerate(context.jdl_object.relationships):
        if relationship.from_side.name == entity_name:
            sources.append((index, relationship))
        if relationship.to_side.name == entity_name and relationship.injected_field_in_to:
            destinations.append(relationship)
    return sources, destinations


def _synthesize_inverse(
    context: _ResolutionContext, index: int, relationship: JdlRelationship
) -> None:
    """Give the other entity the many-to-one side of an undeclared inverse, once."""
    if index in context.synthesized:
        return
    context.synthesized.add(index)

    target = context.record(relationship.to_side.name)
    if target is None:
        return
    other = extract_field(relationship.injected_field_in_to)
    target.add_relationship(
        ResolvedRelationship(
            relationship_name=camel_case(relationship.from_side.name),
            other_entity_name=camel_case(relationship.from_side.name),
            relationship_type=RelationshipType.MANY_TO_ONE.value,
            other_entity_field=lower_first(other.other_entity_field),
        )
    )


def _source_relationship(
    context: _ResolutionContext, index: int, relationship: JdlRelationship
) -> ResolvedRelationship:
    resolved = ResolvedRelationship(relationship_type=relationship.type.value)
    if relationship.is_injected_field_in_from_required:
        resolved.relationship_validate_rules = ValidationKind.REQUIRED.value
    if relationship.comment_in_from:
        resolved.javadoc = relationship.comment_in_from

    split = extract_field(relationship.injected_field_in_from)
    other_split = extract_field(relationship.injected_field_in_to)
    from_name = relationship.from_side.name
    to_name = relationship.to_side.name

    if relationship.type == RelationshipType.ONE_TO_ONE:
        resolved.relationship_name = camel_case(split.relationship_name) or camel_case(to_name)
        resolved.other_entity_name = camel_case(to_name)
        resolved.other_entity_field = lower_first(split.other_entity_field)
        resolved.owner_side = True
        resolved.other_entity_relationship_name = lower_first(
            other_split.relationship_name or from_name
        )

    elif relationship.type == RelationshipType.ONE_TO_MANY:
        resolved.relationship_name = camel_case(split.relationship_name or to_name)
        resolved.other_entity_name = camel_case(to_name)
        resolved.other_entity_relationship_name = lower_first(other_split.relationship_name)
        if not relationship.injected_field_in_to:
            resolved.other_entity_relationship_name = lower_first(from_name)
            _synthesize_inverse(context, index, relationship)

    elif relationship.type == RelationshipType.MANY_TO_ONE and relationship.injected_field_in_from:
        resolved.relationship_name = camel_case(split.relationship_name)
        resolved.other_entity_name = camel_case(to_name)
        resolved.other_entity_field = lower_first(split.other_entity_field)

    elif relationship.type == RelationshipType.MANY_TO_MANY:
        resolved.other_entity_relationship_name = lower_first(other_split.relationship_name)
        resolved.relationship_name = camel_case(split.relationship_name)
        resolved.other_entity_name = camel_case(to_name)
        resolved.other_entity_field = lower_first(split.other_entity_field)
        resolved.owner_side = True

    return resolved


def _destination_relationship(relationship: JdlRelationship) -> ResolvedRelationship:
    """The relationship seen from its ``to`` side, whose injected field is set."""
    relationship_type = relationship.type
    if relationship_type == RelationshipType.ONE_TO_MANY:
        relationship_type = RelationshipType.MANY_TO_ONE
    resolved = ResolvedRelationship(relationship_type=relationship_type.value)
    if relationship.is_injected_field_in_to_required:
        resolved.relationship_validate_rules = ValidationKind.REQUIRED.value
    if relationship.comment_in_to:
        resolved.javadoc = relationship.comment_in_to

    split = extract_field(relationship.injected_field_in_to)
    other_split = extract_field(relationship.injected_field_in_from)
    from_name = relationship.from_side.name

    if relationship.type == RelationshipType.ONE_TO_ONE:
        resolved.relationship_name = camel_case(split.relationship_name)
        resolved.other_entity_name = camel_case(from_name)
        resolved.owner_side = False
        resolved.other_entity_relationship_name = lower_first(
            other_split.relationship_name
        ) or camel_case(from_name)

    elif relationship.type == RelationshipType.ONE_TO_MANY:
        resolved.relationship_name = camel_case(split.relationship_name or from_name)
        resolved.other_entity_name = camel_case(from_name)
        resolved.other_entity_field = lower_first(split.other_entity_field)

    elif relationship.type == RelationshipType.MANY_TO_ONE:
        resolved.relationship_name = camel_case(split.relationship_name)
        resolved.other_entity_name = camel_case(from_name)
        resolved.relationship_type = RelationshipType.ONE_TO_MANY.value
        resolved.other_entity_relationship_name = lower_first(other_split.relationship_name)

    elif relationship.type == RelationshipType.MANY_TO_MANY:
        resolved.relationship_name = camel_case(split.relationship_name)
        resolved.other_entity_name = camel_case(from_name)
        resolved.owner_side = False
        resolved.other_entity_relationship_name = lower_first(other_split.relationship_name)

    return resolved


def _set_relationships(context: _ResolutionContext, entity_name: str) -> None:
    record = context.records[entity_name]
    sources, destinations = _related_relationships(context, entity_name)
    for index, relationship in sources:
        record.add_relationship(_source_relationship(context, index, relationship))
    for relationship in destinations:
        record.add_relationship(_destination_relationship(relationship))


def _fill_entities(context: _ResolutionContext) -> None:
    for entity_name in context.jdl_object.entities:
        if is_reserved_user(entity_name):
            continue
        _set_fields(context, entity_name)
        _set_relationships(context, entity_name)


# -----------------------------------------------------------------------------
# Step 5: applications
# -----------------------------------------------------------------------------


def _set_applications(context: _ResolutionContext) -> None:
    applications = context.jdl_object.applications
    if not applications:
        for record in context.records.values():
            record.applications = WILDCARD
        return

    for record in context.records.values():
        record.applications = []
    for application in applications.values():
        for entity_name in application.entities:
            record = context.record(entity_name)
            if record is not None and isinstance(record.applications, list):
                record.applications.append(application.base_name)


def resolve_entities(
    jdl_object: JdlObject | None,
    database_type: DatabaseType | str | None,
    application_type: ApplicationType | str | None = None,
    *,
    creation_time: datetime | None = None,
) -> dict[str, ResolvedEntity]:
    """
    Resolve every entity of an object model.

    Args:
        jdl_object: Validated object model
        database_type: Storage kind the entities target
        application_type: Kind of application, optional
        creation_time: Base of the change-log timestamps, now when unset

    Returns:
        Resolved records keyed by entity name, in declaration order

    Raises:
        ResolutionError: If a mandatory argument is missing, relationships are
            declared for a NoSQL database, or a field type cannot be resolved
    """
    if jdl_object is None or not database_type:
        raise ResolutionError("The JDL object and the database type are both mandatory.")

    options: dict[str, Any] = {
        "database_type": database_type,
        "application_type": application_type,
    }
    if creation_time is not None:
        options["creation_time"] = creation_time
    try:
        settings = ResolverSettings(**options)
    except ValueError as e:
        raise ResolutionError(f"Invalid resolver settings: {e}") from e

    if not settings.is_gateway:
        check_no_sql_modeling(jdl_object, settings.database_type)

    is_type: Callable[[str], bool]
    if settings.is_gateway:
        is_type = lambda _type: True  # noqa: E731
    else:
        is_type = type_checker_for(settings.database_type)

    context = _ResolutionContext(jdl_object=jdl_object, settings=settings, is_type=is_type)
    _initialize_entities(context)
    _set_options(context)
    _fill_entities(context)
    _set_applications(context)

    logger.debug(f"Resolved {len(context.records)} entities")
    return context.records
