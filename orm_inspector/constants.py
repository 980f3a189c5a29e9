"""
Centralized constants for ORM Inspector.

Default configuration values, the Django field type table used by the
introspection adapter and the key order of generated mapping documents.
"""

from typing import Dict, List, Set

from orm_inspector.domain.models import (
    DbType, DB_BLOB, DB_BOOL, DB_DAY, DB_DAY_TIME, DB_INT32, DB_INT64, DB_REAL, DB_STRING, DB_TIME,
)


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    OUTPUT_DIR = "./generated_mappings"
    NAMING_STYLE = "default"
    BASELINE_STYLE = "default"
    TYPE_MAPPING = "default"
    NATIVE_INT_WIDTH = 64
    OUTPUT_FORMAT = "json"
    MINIMIZE = True
    GENERATE_UNIQUE_KEY_PHANTOMS = True


class OutputFiles:
    """Names of the files written by the command line tool."""

    DECLARATIONS = "models.py"
    MAPPING_STEM = "mapping"


class SupportedDatabases:
    """Supported database engines."""

    POSTGRESQL = 'django.db.backends.postgresql'
    SQLITE = 'django.db.backends.sqlite3'
    MYSQL = 'django.db.backends.mysql'

    SUPPORTED = [POSTGRESQL, SQLITE, MYSQL]


# =============================================================================
# DJANGO INTROSPECTION
# =============================================================================

class DjangoFieldTypes:
    """Field type names returned by ``connection.introspection.get_field_type``."""

    AUTO_FIELD = "AutoField"
    BIG_AUTO_FIELD = "BigAutoField"
    SMALL_AUTO_FIELD = "SmallAutoField"

    INTEGER_FIELD = "IntegerField"
    BIG_INTEGER_FIELD = "BigIntegerField"
    SMALL_INTEGER_FIELD = "SmallIntegerField"
    POSITIVE_INTEGER_FIELD = "PositiveIntegerField"
    POSITIVE_BIG_INTEGER_FIELD = "PositiveBigIntegerField"
    POSITIVE_SMALL_INTEGER_FIELD = "PositiveSmallIntegerField"
    FLOAT_FIELD = "FloatField"

    CHAR_FIELD = "CharField"
    TEXT_FIELD = "TextField"

    DATE_FIELD = "DateField"
    DATE_TIME_FIELD = "DateTimeField"
    TIME_FIELD = "TimeField"

    BOOLEAN_FIELD = "BooleanField"
    BINARY_FIELD = "BinaryField"


AUTO_FIELD_TYPES: Set[str] = {
    DjangoFieldTypes.AUTO_FIELD,
    DjangoFieldTypes.BIG_AUTO_FIELD,
    DjangoFieldTypes.SMALL_AUTO_FIELD,
}

# Django field type to logical column type. Types missing here (decimal,
# uuid, json, ...) are kept as dialect specific types.
DJANGO_TYPE_MAP: Dict[str, DbType] = {
    DjangoFieldTypes.AUTO_FIELD: DB_INT32,
    DjangoFieldTypes.BIG_AUTO_FIELD: DB_INT64,
    DjangoFieldTypes.SMALL_AUTO_FIELD: DB_INT32,

    DjangoFieldTypes.INTEGER_FIELD: DB_INT32,
    DjangoFieldTypes.BIG_INTEGER_FIELD: DB_INT64,
    DjangoFieldTypes.SMALL_INTEGER_FIELD: DB_INT32,
    DjangoFieldTypes.POSITIVE_INTEGER_FIELD: DB_INT32,
    DjangoFieldTypes.POSITIVE_BIG_INTEGER_FIELD: DB_INT64,
    DjangoFieldTypes.POSITIVE_SMALL_INTEGER_FIELD: DB_INT32,
    DjangoFieldTypes.FLOAT_FIELD: DB_REAL,

    DjangoFieldTypes.CHAR_FIELD: DB_STRING,
    DjangoFieldTypes.TEXT_FIELD: DB_STRING,

    DjangoFieldTypes.DATE_FIELD: DB_DAY,
    DjangoFieldTypes.DATE_TIME_FIELD: DB_DAY_TIME,
    DjangoFieldTypes.TIME_FIELD: DB_TIME,

    DjangoFieldTypes.BOOLEAN_FIELD: DB_BOOL,
    DjangoFieldTypes.BINARY_FIELD: DB_BLOB,
}

# SQLite stores every integer in up to 8 bytes
SQLITE_INTEGER_FIELD_TYPES: Set[str] = {
    DjangoFieldTypes.AUTO_FIELD,
    DjangoFieldTypes.INTEGER_FIELD,
    DjangoFieldTypes.SMALL_INTEGER_FIELD,
    DjangoFieldTypes.POSITIVE_INTEGER_FIELD,
    DjangoFieldTypes.POSITIVE_SMALL_INTEGER_FIELD,
}


# =============================================================================
# MAPPING DOCUMENTS
# =============================================================================

# Keys of a mapping document are written in this order; other keys follow
# alphabetically.
CANONICAL_KEY_ORDER: List[str] = [
    "entity",
    "name",
    "dbName",
    "schema",
    "autoKey",
    "keyDbName",
    "type",
    "embeddedType",
    "columns",
    "keys",
    "fields",
    "uniques",
]

OUTPUT_FORMATS: List[str] = ["json", "yaml"]
