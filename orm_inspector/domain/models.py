"""
Schema model for ORM Inspector.

These immutable structures describe what the schema introspector found in
the database catalog. They are produced once per table and never mutated;
the rest of the pipeline only reads them.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple, Union
from enum import Enum

from orm_inspector.exceptions import find_one


@dataclass(frozen=True)
class QualifiedName:
    """Stable identity of a table: optional schema plus table name."""

    schema: Optional[str]
    table: str

    def __str__(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table}"
        return self.table

    def sort_key(self) -> Tuple[str, str]:
        """Key usable for ordering names with and without schema together."""
        return (self.schema or "", self.table)


class DbTypePrimitive(Enum):
    """Logical column types understood by the generators."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    REAL = "real"
    BOOL = "bool"
    DAY = "day"
    TIME = "time"
    DAY_TIME = "day_time"
    DAY_TIME_ZONED = "day_time_zoned"
    BLOB = "blob"
    OTHER = "other"


@dataclass(frozen=True)
class DbType:
    """
    Logical type of a column.

    ``other`` carries the dialect-specific type string and is only set for
    ``DbTypePrimitive.OTHER``.
    """

    primitive: DbTypePrimitive
    other: Optional[str] = None

    def __post_init__(self):
        if self.primitive is DbTypePrimitive.OTHER and not self.other:
            raise ValueError("DbType OTHER requires the dialect type string")
        if self.primitive is not DbTypePrimitive.OTHER and self.other is not None:
            raise ValueError(f"DbType {self.primitive.value} cannot carry a type string")

    @property
    def is_other(self) -> bool:
        return self.primitive is DbTypePrimitive.OTHER

    @classmethod
    def of_other(cls, type_string: str) -> "DbType":
        return cls(DbTypePrimitive.OTHER, type_string)

    def __str__(self) -> str:
        return self.other if self.is_other else self.primitive.value


# Shorthands used throughout the code base and the tests
DB_STRING = DbType(DbTypePrimitive.STRING)
DB_INT32 = DbType(DbTypePrimitive.INT32)
DB_INT64 = DbType(DbTypePrimitive.INT64)
DB_REAL = DbType(DbTypePrimitive.REAL)
DB_BOOL = DbType(DbTypePrimitive.BOOL)
DB_DAY = DbType(DbTypePrimitive.DAY)
DB_TIME = DbType(DbTypePrimitive.TIME)
DB_DAY_TIME = DbType(DbTypePrimitive.DAY_TIME)
DB_DAY_TIME_ZONED = DbType(DbTypePrimitive.DAY_TIME_ZONED)
DB_BLOB = DbType(DbTypePrimitive.BLOB)


@dataclass(frozen=True)
class ColumnInfo:
    """A database column as reported by the introspector."""

    name: str
    nullable: bool
    db_type: DbType
    default: Optional[str] = None


class UniqueKind(Enum):
    """Kinds of unique definitions. The order is used for sorting."""

    CONSTRAINT = "constraint"
    INDEX = "index"
    PRIMARY = "primary"

    @property
    def rank(self) -> int:
        return _UNIQUE_KIND_RANK[self]


_UNIQUE_KIND_RANK = {
    UniqueKind.CONSTRAINT: 0,
    UniqueKind.INDEX: 1,
    UniqueKind.PRIMARY: 2,
}


@dataclass(frozen=True)
class UniqueExpr:
    """An expression participating in a unique index, e.g. ``lower(email)``."""

    expression: str

    def __str__(self) -> str:
        return self.expression


# A unique field is either a column name or an opaque expression
UniqueField = Union[str, UniqueExpr]


def unique_field_sort_key(item: UniqueField) -> Tuple[int, str]:
    """Columns sort before expressions, each group alphabetically."""
    if isinstance(item, UniqueExpr):
        return (1, item.expression)
    return (0, item)


@dataclass(frozen=True)
class UniqueDefInfo:
    """
    A primary key, unique constraint or unique index of a table.

    ``auto_increment`` is only meaningful for primary keys and marks the
    synthetic autoincremented key the ORM manages itself.
    """

    kind: UniqueKind
    fields: Tuple[UniqueField, ...]
    name: Optional[str] = None
    auto_increment: bool = False

    def __post_init__(self):
        if self.auto_increment and self.kind is not UniqueKind.PRIMARY:
            raise ValueError("Only a primary key can be autoincremented")
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, 'fields', tuple(self.fields))

    @property
    def is_auto_primary(self) -> bool:
        return self.kind is UniqueKind.PRIMARY and self.auto_increment

    @property
    def column_names(self) -> List[str]:
        """Names of the plain columns, expressions skipped."""
        return [f for f in self.fields if isinstance(f, str)]

    def sorted_fields(self) -> Tuple[UniqueField, ...]:
        return tuple(sorted(self.fields, key=unique_field_sort_key))

    def sort_key(self) -> Tuple[Any, ...]:
        """Sort by column set, then kind, then name (unnamed first)."""
        return (
            tuple(unique_field_sort_key(f) for f in self.sorted_fields()),
            self.kind.rank,
            self.auto_increment,
            (self.name is not None, self.name or ""),
        )

    def same_group(self, other: "UniqueDefInfo") -> bool:
        """True if both definitions cover the same fields irrespective of order."""
        return self.sorted_fields() == other.sorted_fields()


class ReferenceAction(Enum):
    """Referential actions for ON DELETE / ON UPDATE."""

    NO_ACTION = "NO ACTION"
    RESTRICT = "RESTRICT"
    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"


@dataclass(frozen=True)
class ReferenceInfo:
    """A foreign key of the child table."""

    referenced_table: QualifiedName
    columns: Tuple[Tuple[str, str], ...]  # (child column, parent column)
    name: Optional[str] = None
    on_delete: Optional[ReferenceAction] = None
    on_update: Optional[ReferenceAction] = None

    def __post_init__(self):
        if not self.columns:
            raise ValueError("A reference must have at least one column pair")
        object.__setattr__(self, 'columns', tuple(tuple(pair) for pair in self.columns))

    @property
    def child_columns(self) -> List[str]:
        return [child for child, _ in self.columns]

    @property
    def parent_columns(self) -> List[str]:
        return [parent for _, parent in self.columns]


@dataclass(frozen=True)
class TableInfo:
    """Immutable snapshot of one table."""

    name: QualifiedName
    columns: Tuple[ColumnInfo, ...] = field(default_factory=tuple)
    uniques: Tuple[UniqueDefInfo, ...] = field(default_factory=tuple)
    references: Tuple[ReferenceInfo, ...] = field(default_factory=tuple)

    def __post_init__(self):
        for attr in ('columns', 'uniques', 'references'):
            value = getattr(self, attr)
            if not isinstance(value, tuple):
                object.__setattr__(self, attr, tuple(value))

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]

    @property
    def auto_key_columns(self) -> List[UniqueField]:
        """Fields of every autoincremented primary key, in declaration order."""
        return [f for u in self.uniques if u.is_auto_primary for f in u.fields]

    def get_column(self, name: str) -> ColumnInfo:
        """Get a column by name, failing when it does not exist."""
        return find_one("column", lambda c: c.name, name, self.columns)

    def references_to(self, target: QualifiedName) -> List[ReferenceInfo]:
        return [ref for ref in self.references if ref.referenced_table == target]


# Working set handed from the closure to the generators
TableClosureMap = Dict[QualifiedName, TableInfo]
