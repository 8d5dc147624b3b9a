"""
Abstract document types for JDL IR.

The AST produced by the builder: entities, relationships, enums, option
sections, applications, and constants, with repeated option declarations
already merged.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .catalog import RelationshipType

ConfigValue = str | int | bool | list[str]


class ValidationNode(BaseModel):
    """
    A field validation as written.

    Attributes:
        key: Validation keyword (required, minlength, pattern, ...)
        value: Literal value, or a constant name when ``constant`` is set
        constant: True when ``value`` names a constant to resolve later
    """

    key: str
    value: str | int = ""
    constant: bool = False

    model_config = ConfigDict(frozen=True)


class FieldNode(BaseModel):
    """A field declaration inside an entity body."""

    name: str
    type: str
    validations: list[ValidationNode] = Field(default_factory=list)
    javadoc: str | None = None

    model_config = ConfigDict(frozen=True)


class EntityNode(BaseModel):
    """An entity declaration; ``table_name`` defaults to the entity name."""

    name: str
    table_name: str
    fields: list[FieldNode] = Field(default_factory=list)
    javadoc: str | None = None

    model_config = ConfigDict(frozen=True)


class RelationshipSideNode(BaseModel):
    """
    One side of a relationship.

    Attributes:
        name: Entity name
        injected_field: ``name`` or ``name(otherField)`` when declared
        javadoc: Comment attached to the side
        required: Only set when an injected field was declared
    """

    name: str
    injected_field: str | None = None
    javadoc: str | None = None
    required: bool | None = None

    model_config = ConfigDict(frozen=True)


class RelationshipNode(BaseModel):
    """A single from/to pair, stamped with its block's cardinality."""

    cardinality: RelationshipType
    from_side: RelationshipSideNode
    to_side: RelationshipSideNode

    model_config = ConfigDict(frozen=True)


class EnumNode(BaseModel):
    """An enum with its values in declaration order."""

    name: str
    values: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class OptionEntry(BaseModel):
    """
    Accumulated targets of an option.

    Attributes:
        names: Entity names, the ``*`` wildcard, or method names
        excluded: Entity names listed after ``except``
    """

    names: list[str] = Field(default_factory=list, serialization_alias="list")
    excluded: list[str] = Field(default_factory=list)


class ApplicationEntities(BaseModel):
    """The ``entities`` block of an application."""

    entity_list: list[str] = Field(default_factory=list)
    excluded: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ApplicationNode(BaseModel):
    """An application declaration: its config and its entity selection."""

    config: dict[str, ConfigValue] = Field(default_factory=dict)
    entities: ApplicationEntities = Field(default_factory=ApplicationEntities)

    model_config = ConfigDict(frozen=True)


# Option sections keyed by value, in the order they are reported
KEYED_OPTION_SECTIONS = (
    "dto",
    "pagination",
    "service",
    "microservice",
    "search_engine",
    "angular_suffix",
    "client_root_folder",
)

# Option sections holding a single aggregate entry
UNARY_OPTION_SECTIONS = ("no_client", "no_server", "filter", "no_fluent_method")


class JdlDocument(BaseModel):
    """
    The normalized AST of a JDL document.

    Keyed option sections map the option value to its accumulated entry;
    unary sections hold one entry each.
    """

    applications: list[ApplicationNode] = Field(default_factory=list)
    constants: dict[str, int] = Field(default_factory=dict)
    entities: list[EntityNode] = Field(default_factory=list)
    relationships: list[RelationshipNode] = Field(default_factory=list)
    enums: list[EnumNode] = Field(default_factory=list)

    dto: dict[str, OptionEntry] = Field(default_factory=dict)
    pagination: dict[str, OptionEntry] = Field(default_factory=dict)
    service: dict[str, OptionEntry] = Field(default_factory=dict)
    microservice: dict[str, OptionEntry] = Field(default_factory=dict)
    search_engine: dict[str, OptionEntry] = Field(default_factory=dict)
    angular_suffix: dict[str, OptionEntry] = Field(default_factory=dict)
    client_root_folder: dict[str, OptionEntry] = Field(default_factory=dict)

    no_client: OptionEntry = Field(default_factory=OptionEntry)
    no_server: OptionEntry = Field(default_factory=OptionEntry)
    filter: OptionEntry = Field(default_factory=OptionEntry)
    no_fluent_method: OptionEntry = Field(default_factory=OptionEntry)
