"""
JDL Intermediate Representation (IR) types.

Three layers, each produced by one pipeline stage:

- ``document``: the AST built from the concrete syntax tree
- ``objects``: the validated object model built by the linker
- ``entities``: the resolved per-entity records

``catalog`` holds the constant lookup data they share.
"""

# Catalog
from .catalog import (
    BLOB_CONTENT,
    BYTE_ARRAY_TYPE,
    DEFAULT_OTHER_ENTITY_FIELD,
    RESERVED_USER_ENTITY,
    WILDCARD,
    ApplicationType,
    BinaryOption,
    DatabaseType,
    RelationshipType,
    UnaryOption,
    ValidationKind,
    field_types_for,
    is_reserved_user,
    type_checker_for,
)

# Document (AST)
from .document import (
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

# Resolved records
from .entities import ResolvedEntity, ResolvedField, ResolvedRelationship

# Object model
from .objects import (
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

__all__ = [
    # Catalog
    "BLOB_CONTENT",
    "BYTE_ARRAY_TYPE",
    "DEFAULT_OTHER_ENTITY_FIELD",
    "RESERVED_USER_ENTITY",
    "WILDCARD",
    "ApplicationType",
    "BinaryOption",
    "DatabaseType",
    "RelationshipType",
    "UnaryOption",
    "ValidationKind",
    "field_types_for",
    "is_reserved_user",
    "type_checker_for",
    # Document
    "ApplicationEntities",
    "ApplicationNode",
    "ConfigValue",
    "EntityNode",
    "EnumNode",
    "FieldNode",
    "JdlDocument",
    "OptionEntry",
    "RelationshipNode",
    "RelationshipSideNode",
    "ValidationNode",
    # Object model
    "JdlApplication",
    "JdlEntity",
    "JdlEnum",
    "JdlField",
    "JdlObject",
    "JdlOption",
    "JdlRelationship",
    "JdlValidation",
    "RelationshipSide",
    # Resolved records
    "ResolvedEntity",
    "ResolvedField",
    "ResolvedRelationship",
]
