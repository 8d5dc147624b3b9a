"""
Object model types for JDL IR.

The validated graph the entity resolver reads: entities with their fields,
relationships, enums, options, and applications. Cross references are
already checked by the linker when these objects exist.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .catalog import WILDCARD, BinaryOption, RelationshipType, UnaryOption
from .document import ConfigValue


class JdlValidation(BaseModel):
    """A validation with its value resolved (constants substituted)."""

    name: str
    value: str | int = ""

    model_config = ConfigDict(frozen=True)


class JdlField(BaseModel):
    """
    A field of an entity.

    Attributes:
        name: Field name as declared
        type: Declared type name
        validations: Validations keyed by name, in declaration order
        comment: Raw javadoc, formatted later
    """

    name: str
    type: str
    validations: dict[str, JdlValidation] = Field(default_factory=dict)
    comment: str | None = None

    model_config = ConfigDict(frozen=True)


class JdlEntity(BaseModel):
    """An entity with its fields keyed by name, in declaration order."""

    name: str
    table_name: str
    fields: dict[str, JdlField] = Field(default_factory=dict)
    comment: str | None = None

    model_config = ConfigDict(frozen=True)


class RelationshipSide(BaseModel):
    """One end of a relationship."""

    name: str
    injected_field: str | None = None
    comment: str | None = None
    required: bool = False

    model_config = ConfigDict(frozen=True)


class JdlRelationship(BaseModel):
    """
    A relationship between two entities.

    The ``from_side`` is the declaring side; ``to_side`` only carries an
    injected field when the author declared the inverse explicitly.
    """

    type: RelationshipType
    from_side: RelationshipSide
    to_side: RelationshipSide

    model_config = ConfigDict(frozen=True)

    @property
    def injected_field_in_from(self) -> str | None:
        return self.from_side.injected_field

    @property
    def injected_field_in_to(self) -> str | None:
        return self.to_side.injected_field

    @property
    def comment_in_from(self) -> str | None:
        return self.from_side.comment

    @property
    def comment_in_to(self) -> str | None:
        return self.to_side.comment

    @property
    def is_injected_field_in_from_required(self) -> bool:
        return self.from_side.required

    @property
    def is_injected_field_in_to_required(self) -> bool:
        return self.to_side.required


class JdlEnum(BaseModel):
    """An enum and its ordered values."""

    name: str
    values: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class JdlOption(BaseModel):
    """
    An option applied to a set of entities.

    Unary options carry no value; binary options carry the chosen value.

    Attributes:
        name: Option name
        value: Option value for binary options, None for unary ones
        entity_names: Target entity names, possibly just ``*``
        excluded_names: Entity names listed after ``except``
    """

    name: UnaryOption | BinaryOption
    value: str | None = None
    entity_names: list[str] = Field(default_factory=list)
    excluded_names: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def is_wildcard(self) -> bool:
        """True when the only target is the ``*`` wildcard."""
        return self.entity_names == [WILDCARD]


class JdlApplication(BaseModel):
    """
    An application with its resolved entity list.

    Attributes:
        config: Configuration values, ``baseName`` always present
        entities: Entity names generated in this application
    """

    config: dict[str, ConfigValue]
    entities: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def base_name(self) -> str:
        return str(self.config["baseName"])


class JdlObject(BaseModel):
    """
    The validated object model of a JDL document.

    Attributes:
        entities: Entities keyed by name, in declaration order
        relationships: Relationships in declaration order
        enums: Enums keyed by name
        applications: Applications keyed by base name
        options: Options in declaration order
        constants: Declared integer constants
    """

    entities: dict[str, JdlEntity] = Field(default_factory=dict)
    relationships: list[JdlRelationship] = Field(default_factory=list)
    enums: dict[str, JdlEnum] = Field(default_factory=dict)
    applications: dict[str, JdlApplication] = Field(default_factory=dict)
    options: list[JdlOption] = Field(default_factory=list)
    constants: dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def get_relationship_quantity(self) -> int:
        """Count declared relationships."""
        return len(self.relationships)

    def get_options(self) -> list[JdlOption]:
        """Get all options in declaration order."""
        return list(self.options)

    def get_options_for_name(self, name: UnaryOption | BinaryOption) -> list[JdlOption]:
        """Get the options declared under a given option name."""
        return [option for option in self.options if option.name == name]

    def is_entity_in_microservice(self, entity_name: str) -> bool:
        """Check whether a microservice option targets the entity."""
        for option in self.get_options_for_name(BinaryOption.MICROSERVICE):
            if entity_name in option.entity_names:
                return True
            if option.is_wildcard and entity_name not in option.excluded_names:
                return True
        return False
