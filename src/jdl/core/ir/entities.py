"""
Resolved entity records for JDL IR.

The terminal artifact of resolution: one record per entity, shaped for
direct serialization with camelCase keys.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .catalog import NO_VALUE

_RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    validate_assignment=True,
)


class ResolvedField(BaseModel):
    """
    A field of a resolved entity.

    Each validation other than ``required`` also stores its value under
    ``fieldValidateRules<Kind>``, e.g. ``fieldValidateRulesMaxlength``.
    """

    field_name: str
    field_type: str
    field_values: str | None = None
    field_type_blob_content: str | None = None
    javadoc: str | None = None
    field_validate_rules: list[str] | None = None
    field_validate_rules_minlength: int | None = None
    field_validate_rules_maxlength: int | None = None
    field_validate_rules_pattern: str | None = None
    field_validate_rules_min: int | None = None
    field_validate_rules_max: int | None = None
    field_validate_rules_minbytes: int | None = None
    field_validate_rules_maxbytes: int | None = None

    model_config = _RECORD_CONFIG


class ResolvedRelationship(BaseModel):
    """A relationship as seen from one entity."""

    relationship_type: str
    relationship_name: str | None = None
    other_entity_name: str | None = None
    other_entity_field: str | None = None
    other_entity_relationship_name: str | None = None
    owner_side: bool | None = None
    relationship_validate_rules: str | None = None
    javadoc: str | None = None

    model_config = _RECORD_CONFIG


class ResolvedEntity(BaseModel):
    """
    The resolved record of an entity.

    Attributes:
        entity_name: Declared entity name
        table_name: Storage identifier, snake_case
        changelog_date: Synthetic timestamp ordered by declaration
        applications: ``"*"`` when no application is declared, otherwise the
            base names of the applications generating this entity
    """

    entity_name: str
    table_name: str
    changelog_date: str
    javadoc: str | None = None
    fields: list[ResolvedField] = Field(default_factory=list)
    relationships: list[ResolvedRelationship] = Field(default_factory=list)
    dto: str = NO_VALUE
    pagination: str = NO_VALUE
    service: str = NO_VALUE
    fluent_methods: bool = True
    jpa_metamodel_filtering: bool = False
    client_root_folder: str = ""
    skip_client: bool | None = None
    skip_server: bool | None = None
    microservice_name: str | None = None
    angular_js_suffix: str | None = Field(default=None, alias="angularJSSuffix")
    search_engine: str | bool | None = None
    applications: str | list[str] = Field(default_factory=list)

    model_config = _RECORD_CONFIG

    def add_field(self, field: ResolvedField) -> None:
        self.fields.append(field)

    def add_relationship(self, relationship: ResolvedRelationship) -> None:
        self.relationships.append(relationship)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys, leaving unset optional values out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
