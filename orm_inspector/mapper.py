"""
Mapping definition generation for ORM Inspector.

This module turns a closure of tables into one ``EntityDef`` per table: the
entity and constructor names, the auto-key designation, the unique keys
other entities reference and the field list. Every value is set
explicitly; ``minimizer.minimize_mapping`` removes what a baseline naming
convention implies anyway.

Example:
    >>> from orm_inspector.mapper import generate_mapping
    >>> entities = generate_mapping(DefaultReverseNamingStyle(), POSTGRESQL, tables)
    >>> entities[QualifiedName(None, "orders")].to_dict()
"""

import logging
from typing import Dict, List, Optional, Tuple

from orm_inspector.domain.constraints import sorted_unique_defs
from orm_inspector.domain.dialects import Dialect
from orm_inspector.domain.mapping_models import (
    AutoKeyMode, ConstructorDef, EntityDef, FieldDef, ReferenceParent, UniqueDef, UniqueKeyDef,
)
from orm_inspector.domain.models import (
    ColumnInfo, QualifiedName, ReferenceAction, TableInfo, TableClosureMap, UniqueDefInfo,
)
from orm_inspector.domain.naming import ReverseNamingStrategy
from orm_inspector.domain.references import ReferenceResolver, ReferenceShape, ResolvedReference
from orm_inspector.exceptions import MultipleAutoKeysError


logger = logging.getLogger(__name__)


def generate_mapping(
    strategy: ReverseNamingStrategy,
    dialect: Dialect,
    tables: TableClosureMap,
) -> Dict[QualifiedName, EntityDef]:
    """
    Generate the mapping definition of every table of the closure.

    Args:
        strategy: Naming strategy shared with the declaration generator
        dialect: Backend defaults (auto-key type, referential actions, SQL types)
        tables: The table closure

    Returns:
        Mapping definition per table, in closure order

    Raises:
        MultipleAutoKeysError: If a table has several autoincremented key columns
        AmbiguousColumnReferenceError: If a column belongs to several foreign keys
    """
    generator = MappingGenerator(strategy, dialect, tables)
    entities = {name: generator.generate(table) for name, table in tables.items()}
    logger.info(f"Generated {len(entities)} mapping definitions")
    return entities


class MappingGenerator:
    """Builds mapping definitions for the tables of one closure."""

    def __init__(self, strategy: ReverseNamingStrategy, dialect: Dialect, tables: TableClosureMap):
        self.strategy = strategy
        self.dialect = dialect
        self.tables = tables
        self.resolver = ReferenceResolver(strategy, tables)

    def generate(self, table: TableInfo) -> EntityDef:
        name = table.name
        auto_key, key_db_name = self._auto_key(table)
        unique_defs = sorted_unique_defs(table)

        entity = EntityDef(
            name=self.strategy.entity_name(name),
            db_name=name.table,
            schema=name.schema,
            auto_key=auto_key,
            keys=self._unique_keys(table, unique_defs, auto_key),
            constructors=[
                ConstructorDef(
                    name=self.strategy.constructor_name(name),
                    db_name=self.strategy.constructor_db_name(name),
                    key_db_name=key_db_name,
                    fields=self._fields(table),
                    uniques=[
                        self._unique_def(name, index, unique)
                        for index, unique in enumerate(unique_defs)
                    ],
                )
            ],
        )
        logger.debug(
            f"Mapping {entity.name} for {name}: auto key {auto_key.value}, "
            f"{len(entity.keys)} unique keys"
        )
        return entity

    def _auto_key(self, table: TableInfo) -> Tuple[AutoKeyMode, Optional[str]]:
        columns = table.auto_key_columns
        if not columns:
            return AutoKeyMode.NONE, None
        if len(columns) > 1 or not isinstance(columns[0], str):
            raise MultipleAutoKeysError(
                f"More than one autoincremented column for {table.name}: {columns}",
                table=str(table.name),
                columns=[str(c) for c in columns],
            )
        return AutoKeyMode.AUTOINCREMENT, columns[0]

    def _unique_keys(
        self,
        table: TableInfo,
        unique_defs: List[UniqueDefInfo],
        auto_key: AutoKeyMode,
    ) -> List[UniqueKeyDef]:
        used = self.resolver.used_unique_keys(table)
        default_unique = None
        # Without an autoincremented key one of the used uniques acts as the default key
        if auto_key is AutoKeyMode.NONE and used:
            default_unique = self.strategy.choose_canonical_unique(table.name, used)

        return [
            UniqueKeyDef(
                name=self.strategy.unique_name(table.name, unique_defs.index(unique), unique),
                default=True if unique == default_unique else None,
            )
            for unique in used
        ]

    def _unique_def(self, name: QualifiedName, index: int, unique: UniqueDefInfo) -> UniqueDef:
        return UniqueDef(
            name=self.strategy.unique_name(name, index, unique),
            kind=unique.kind,
            fields=[
                self.strategy.field_name(name, f) if isinstance(f, str) else f
                for f in unique.fields
            ],
        )

    def _fields(self, table: TableInfo) -> List[FieldDef]:
        fields = []
        for group in self.resolver.field_groups(table):
            if group.resolved is None:
                fields.append(self._plain_field(self.strategy.field_name(table.name, group.column.name), group.column))
            else:
                fields.append(self._reference_field(table, group.resolved))
        return fields

    @staticmethod
    def _plain_field(name: str, column: ColumnInfo) -> FieldDef:
        return FieldDef(
            name=name,
            db_name=column.name,
            db_type=column.db_type.other if column.db_type.is_other else None,
            default=column.default,
        )

    def _reference_field(self, table: TableInfo, resolved: ResolvedReference) -> FieldDef:
        name = self.strategy.key_field_name(table.name, resolved.reference)
        shape = resolved.shape

        if shape is ReferenceShape.SCALAR:
            field_def = self._plain_field(name, resolved.child_columns[0])
            field_def.reference = self._reference_parent(resolved, with_target=True)
            return field_def

        if shape is ReferenceShape.EMBEDDED:
            return FieldDef(
                name=name,
                embedded=[
                    self._plain_field(f"val{index}", column)
                    for index, column in enumerate(resolved.child_columns)
                ],
                reference=self._reference_parent(resolved, with_target=True),
            )

        if shape is ReferenceShape.AUTO_KEY:
            column = resolved.child_columns[0]
            return FieldDef(
                name=name,
                db_name=column.name,
                db_type=self._type_override(column, self.dialect.default_auto_key_type),
                default=column.default,
                reference=self._reference_parent(resolved),
            )

        # Typed key to a unique: sub-fields are named after the parent columns
        return FieldDef(
            name=name,
            embedded=[
                FieldDef(
                    name=parent.name,
                    db_name=child.name,
                    db_type=self._type_override(child, parent.db_type),
                    default=child.default,
                )
                for child, parent in zip(resolved.child_columns, resolved.parent_columns)
            ],
            reference=self._reference_parent(resolved),
        )

    def _type_override(self, column: ColumnInfo, expected) -> Optional[str]:
        """SQL type of ``column`` when it differs from the type the key implies."""
        if column.db_type == expected:
            return None
        return self.dialect.show_sql_type(column.db_type)

    def _reference_parent(self, resolved: ResolvedReference, with_target: bool = False) -> ReferenceParent:
        reference = resolved.reference
        parent = ReferenceParent(
            on_delete=self._action_override(reference.on_delete, self.dialect.default_on_delete),
            on_update=self._action_override(reference.on_update, self.dialect.default_on_update),
        )
        if with_target:
            parent.table = reference.referenced_table
            parent.columns = reference.parent_columns
        return parent

    @staticmethod
    def _action_override(
        action: Optional[ReferenceAction], default: ReferenceAction
    ) -> Optional[ReferenceAction]:
        return action if action is not None and action != default else None
