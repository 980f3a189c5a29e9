"""
Database dialect descriptors.

A dialect answers the few backend-specific questions the mapping generator
asks: which type the backend gives an autoincremented key, which
referential actions it applies when none are declared, and how a logical
type is spelled in SQL.
"""

from dataclasses import dataclass, field
from typing import Dict

from .models import (
    DbType, DbTypePrimitive, ReferenceAction, DB_INT64,
)
from orm_inspector.exceptions import ConfigurationError


_COMMON_SQL_TYPES: Dict[DbTypePrimitive, str] = {
    DbTypePrimitive.STRING: "VARCHAR",
    DbTypePrimitive.INT32: "INTEGER",
    DbTypePrimitive.INT64: "BIGINT",
    DbTypePrimitive.REAL: "DOUBLE PRECISION",
    DbTypePrimitive.BOOL: "BOOLEAN",
    DbTypePrimitive.DAY: "DATE",
    DbTypePrimitive.TIME: "TIME",
    DbTypePrimitive.DAY_TIME: "TIMESTAMP",
    DbTypePrimitive.DAY_TIME_ZONED: "TIMESTAMP WITH TIME ZONE",
    DbTypePrimitive.BLOB: "BLOB",
}


@dataclass(frozen=True)
class Dialect:
    """Backend-specific defaults used during mapping generation."""

    name: str
    default_auto_key_type: DbType = DB_INT64
    default_on_delete: ReferenceAction = ReferenceAction.NO_ACTION
    default_on_update: ReferenceAction = ReferenceAction.NO_ACTION
    sql_types: Dict[DbTypePrimitive, str] = field(default_factory=lambda: dict(_COMMON_SQL_TYPES))

    def show_sql_type(self, db_type: DbType) -> str:
        """Spell a logical type the way the backend declares it."""
        if db_type.is_other:
            return db_type.other
        return self.sql_types[db_type.primitive]


POSTGRESQL = Dialect(
    name="postgresql",
    sql_types={
        **_COMMON_SQL_TYPES,
        DbTypePrimitive.INT64: "INT8",
        DbTypePrimitive.BLOB: "BYTEA",
    },
)

SQLITE = Dialect(
    name="sqlite",
    sql_types={
        **_COMMON_SQL_TYPES,
        DbTypePrimitive.INT64: "INTEGER",
        DbTypePrimitive.REAL: "REAL",
    },
)

MYSQL = Dialect(
    name="mysql",
    default_on_delete=ReferenceAction.RESTRICT,
    default_on_update=ReferenceAction.RESTRICT,
    sql_types={
        **_COMMON_SQL_TYPES,
        DbTypePrimitive.REAL: "DOUBLE",
        DbTypePrimitive.DAY_TIME: "DATETIME",
    },
)

DIALECTS: Dict[str, Dialect] = {d.name: d for d in (POSTGRESQL, SQLITE, MYSQL)}


def get_dialect(name: str) -> Dialect:
    """Look up a dialect by its vendor name (as reported by Django)."""
    try:
        return DIALECTS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported database dialect: {name}",
            context={'supported_dialects': sorted(DIALECTS)},
        ) from None
