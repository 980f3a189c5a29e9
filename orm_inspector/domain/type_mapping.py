"""
Logical type to declaration type mapping.

Turns the logical type of a column into the Python type annotation of the
generated record field. The width of the native ``int`` of the target
platform is an explicit setting: the integer primitive of that width maps
to ``int``, the other one to an explicit marker type.
"""

from dataclasses import dataclass
from typing import Callable, Dict

from .declarations import TypeRef
from .models import ColumnInfo, DbType, DbTypePrimitive


KEYS_MODULE = "orm_inspector.keys"

STR = TypeRef("str")
INT = TypeRef("int")
FLOAT = TypeRef("float")
BOOL = TypeRef("bool")
BYTES = TypeRef("bytes")
DATE = TypeRef("date", module="datetime")
TIME = TypeRef("time", module="datetime")
DATETIME = TypeRef("datetime", module="datetime")
INT32 = TypeRef("Int32", module=KEYS_MODULE)
INT64 = TypeRef("Int64", module=KEYS_MODULE)


@dataclass(frozen=True)
class TypeMappingConfig:
    """Target platform settings for type mapping."""

    native_int_width: int = 64

    def __post_init__(self):
        if self.native_int_width not in (32, 64):
            raise ValueError(f"native_int_width must be 32 or 64, got {self.native_int_width}")


def optional(type_ref: TypeRef) -> TypeRef:
    return TypeRef("Optional", (type_ref,), module="typing")


def tuple_of(*type_refs: TypeRef) -> TypeRef:
    return TypeRef("Tuple", tuple(type_refs), module="typing")


def primitive_type(config: TypeMappingConfig, primitive: DbTypePrimitive) -> TypeRef:
    """Declaration type of a primitive logical type."""
    if primitive is DbTypePrimitive.INT32:
        return INT if config.native_int_width == 32 else INT32
    if primitive is DbTypePrimitive.INT64:
        return INT if config.native_int_width == 64 else INT64
    return _PRIMITIVE_TYPES[primitive]


_PRIMITIVE_TYPES: Dict[DbTypePrimitive, TypeRef] = {
    DbTypePrimitive.STRING: STR,
    DbTypePrimitive.REAL: FLOAT,
    DbTypePrimitive.BOOL: BOOL,
    DbTypePrimitive.DAY: DATE,
    DbTypePrimitive.TIME: TIME,
    DbTypePrimitive.DAY_TIME: DATETIME,
    DbTypePrimitive.DAY_TIME_ZONED: DATETIME,
    DbTypePrimitive.BLOB: BYTES,
    # Dialect specific types are kept as raw bytes
    DbTypePrimitive.OTHER: BYTES,
}


def _with_nullability(column: ColumnInfo, type_ref: TypeRef) -> TypeRef:
    return optional(type_ref) if column.nullable else type_ref


def default_mk_type(config: TypeMappingConfig, column: ColumnInfo) -> TypeRef:
    """Map a column by its primitive type; nullable columns become ``Optional``."""
    return _with_nullability(column, primitive_type(config, column.db_type.primitive))


def affinity_type(type_string: str) -> TypeRef:
    """
    Type of a column declared with an arbitrary SQLite type name.

    Follows the SQLite type affinity rules: the first matching substring
    decides, an empty declaration means a blob.

    Example:
        >>> affinity_type("VARCHAR(20)").name
        'str'
    """
    upper = type_string.upper()

    def contains(*parts: str) -> bool:
        return any(part in upper for part in parts)

    if contains("INT"):
        return INT
    if contains("CHAR", "CLOB", "TEXT"):
        return STR
    if contains("BLOB") or not type_string:
        return BYTES
    if contains("REAL", "FLOA", "DOUB"):
        return FLOAT
    return BYTES


def sqlite_mk_type(config: TypeMappingConfig, column: ColumnInfo) -> TypeRef:
    """Like ``default_mk_type`` but resolves dialect specific types by SQLite affinity."""
    db_type: DbType = column.db_type
    if db_type.is_other:
        return _with_nullability(column, affinity_type(db_type.other))
    return default_mk_type(config, column)


MkType = Callable[[TypeMappingConfig, ColumnInfo], TypeRef]

MK_TYPES: Dict[str, MkType] = {
    "default": default_mk_type,
    "sqlite": sqlite_mk_type,
}
