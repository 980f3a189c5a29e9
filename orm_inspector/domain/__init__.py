"""
Domain module for ORM Inspector.

The reverse-mapping engine: the schema model, the table closure, naming
strategies, reference resolution and the neutral declaration and mapping
models. Nothing here talks to a database or renders output.
"""

from .models import (
    QualifiedName,
    DbType,
    DbTypePrimitive,
    ColumnInfo,
    UniqueKind,
    UniqueExpr,
    UniqueDefInfo,
    ReferenceAction,
    ReferenceInfo,
    TableInfo,
    TableClosureMap,
)

from .mapping_models import (
    AutoKeyMode,
    ConstructorDef,
    EntityDef,
    FieldDef,
    ReferenceParent,
    UniqueDef,
    UniqueKeyDef,
)

from .declarations import (
    DataDeclaration,
    DataField,
    TypeRef,
    UniquePhantom,
)

from .dialects import Dialect, get_dialect

from .introspection import SchemaIntrospector, StaticSchemaIntrospector

from .closure import collect_tables, follow_referenced_tables, include_all

from .naming import (
    ReverseNamingStrategy,
    DefaultReverseNamingStyle,
    VerbatimReverseNamingStyle,
    NamingStyle,
    DefaultNamingStyle,
    PersistentNamingStyle,
    SnakeCaseNamingStyle,
)

from .references import ReferenceResolver, ReferenceShape

from .type_mapping import TypeMappingConfig, default_mk_type, sqlite_mk_type


__all__ = [
    # Schema model
    'QualifiedName',
    'DbType',
    'DbTypePrimitive',
    'ColumnInfo',
    'UniqueKind',
    'UniqueExpr',
    'UniqueDefInfo',
    'ReferenceAction',
    'ReferenceInfo',
    'TableInfo',
    'TableClosureMap',

    # Mapping definitions
    'AutoKeyMode',
    'ConstructorDef',
    'EntityDef',
    'FieldDef',
    'ReferenceParent',
    'UniqueDef',
    'UniqueKeyDef',

    # Declarations
    'DataDeclaration',
    'DataField',
    'TypeRef',
    'UniquePhantom',

    # Engine
    'Dialect',
    'get_dialect',
    'SchemaIntrospector',
    'StaticSchemaIntrospector',
    'collect_tables',
    'follow_referenced_tables',
    'include_all',
    'ReverseNamingStrategy',
    'DefaultReverseNamingStyle',
    'VerbatimReverseNamingStyle',
    'NamingStyle',
    'DefaultNamingStyle',
    'PersistentNamingStyle',
    'SnakeCaseNamingStyle',
    'ReferenceResolver',
    'ReferenceShape',
    'TypeMappingConfig',
    'default_mk_type',
    'sqlite_mk_type',
]
