"""
Catalog types for JDL IR.

Constant lookup data: database and application kinds, relationship
cardinalities, validation kinds, entity options, and the field types each
storage kind accepts.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from ..errors import ResolutionError

RESERVED_USER_ENTITY = "User"
WILDCARD = "*"
DEFAULT_OTHER_ENTITY_FIELD = "id"
BYTE_ARRAY_TYPE = "byte[]"


def is_reserved_user(entity_name: str) -> bool:
    """Check whether a name designates the built-in User entity."""
    return entity_name.lower() == RESERVED_USER_ENTITY.lower()


class DatabaseType(str, Enum):
    """Storage kinds an application can target."""

    SQL = "sql"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    POSTGRESQL = "postgresql"
    ORACLE = "oracle"
    MSSQL = "mssql"
    MONGODB = "mongodb"
    CASSANDRA = "cassandra"
    COUCHBASE = "couchbase"
    NO = "no"

    def is_sql(self) -> bool:
        return self in _SQL_DATABASES


_SQL_DATABASES = frozenset(
    {
        DatabaseType.SQL,
        DatabaseType.MYSQL,
        DatabaseType.MARIADB,
        DatabaseType.POSTGRESQL,
        DatabaseType.ORACLE,
        DatabaseType.MSSQL,
    }
)


class ApplicationType(str, Enum):
    """Kinds of generated application."""

    MONOLITH = "monolith"
    MICROSERVICE = "microservice"
    GATEWAY = "gateway"
    UAA = "uaa"


class RelationshipType(str, Enum):
    """Relationship cardinalities."""

    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_ONE = "many-to-one"
    MANY_TO_MANY = "many-to-many"


class ValidationKind(str, Enum):
    """Field validation rules."""

    REQUIRED = "required"
    MINLENGTH = "minlength"
    MAXLENGTH = "maxlength"
    PATTERN = "pattern"
    MIN = "min"
    MAX = "max"
    MINBYTES = "minbytes"
    MAXBYTES = "maxbytes"


class UnaryOption(str, Enum):
    """Entity flags without an associated value."""

    SKIP_CLIENT = "skipClient"
    SKIP_SERVER = "skipServer"
    NO_FLUENT_METHOD = "noFluentMethod"
    FILTER = "filter"


class BinaryOption(str, Enum):
    """Entity settings carrying a value."""

    DTO = "dto"
    SERVICE = "service"
    PAGINATION = "pagination"
    MICROSERVICE = "microservice"
    SEARCH_ENGINE = "searchEngine"
    ANGULAR_SUFFIX = "angularSuffix"
    CLIENT_ROOT_FOLDER = "clientRootFolder"


SERVICE_CLASS = "serviceClass"
NO_VALUE = "no"

# Options whose values come from a closed set; the others accept any value
BINARY_OPTION_VALUES: dict[BinaryOption, frozenset[str]] = {
    BinaryOption.DTO: frozenset({"mapstruct"}),
    BinaryOption.SERVICE: frozenset({SERVICE_CLASS, "serviceImpl"}),
    BinaryOption.PAGINATION: frozenset({"pager", "pagination", "infinite-scroll"}),
    BinaryOption.SEARCH_ENGINE: frozenset({"elasticsearch"}),
}

# =============================================================================
# Field types
# =============================================================================

SQL_FIELD_TYPES = frozenset(
    {
        "String",
        "Integer",
        "Long",
        "BigDecimal",
        "Float",
        "Double",
        "Enum",
        "Boolean",
        "LocalDate",
        "ZonedDateTime",
        "Instant",
        "Blob",
        "AnyBlob",
        "ImageBlob",
        "TextBlob",
    }
)

MONGODB_FIELD_TYPES = SQL_FIELD_TYPES - {"TextBlob"}

COUCHBASE_FIELD_TYPES = MONGODB_FIELD_TYPES

CASSANDRA_FIELD_TYPES = frozenset(
    {
        "String",
        "Integer",
        "Long",
        "BigDecimal",
        "Float",
        "Double",
        "Boolean",
        "Date",
        "UUID",
        "Instant",
    }
)

BLOB_CONTENT = {
    "ImageBlob": "image",
    "Blob": "any",
    "AnyBlob": "any",
    "TextBlob": "text",
}

_FIELD_TYPES_BY_DATABASE: dict[DatabaseType, frozenset[str]] = {
    DatabaseType.SQL: SQL_FIELD_TYPES,
    DatabaseType.MYSQL: SQL_FIELD_TYPES,
    DatabaseType.MARIADB: SQL_FIELD_TYPES,
    DatabaseType.POSTGRESQL: SQL_FIELD_TYPES,
    DatabaseType.ORACLE: SQL_FIELD_TYPES,
    DatabaseType.MSSQL: SQL_FIELD_TYPES,
    DatabaseType.NO: SQL_FIELD_TYPES,
    DatabaseType.MONGODB: MONGODB_FIELD_TYPES,
    DatabaseType.COUCHBASE: COUCHBASE_FIELD_TYPES,
    DatabaseType.CASSANDRA: CASSANDRA_FIELD_TYPES,
}


def field_types_for(database_type: DatabaseType) -> frozenset[str]:
    """Get the field types legal for a storage kind."""
    return _FIELD_TYPES_BY_DATABASE[DatabaseType(database_type)]


def type_checker_for(database_type: DatabaseType) -> Callable[[str], bool]:
    """
    Build the field type legality predicate for a storage kind.

    Raises:
        ResolutionError: If the database type is unknown
    """
    try:
        legal_types = field_types_for(database_type)
    except ValueError as e:
        raise ResolutionError(f"Unknown database type '{database_type}'") from e
    return legal_types.__contains__
