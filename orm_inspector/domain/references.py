"""
Reference resolution for ORM Inspector.

Decides how the columns of a foreign key are represented in a generated
record: as a typed key to a mapped parent, or as plain values when the
parent is not mapped or a faithful key cannot be built. The columns of one
foreign key are always consumed together.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .constraints import reference_matches_unique, referenced_unique, sorted_unique_defs, unique_groups
from .models import ColumnInfo, ReferenceInfo, TableInfo, TableClosureMap, UniqueDefInfo
from .naming import ReverseNamingStrategy
from orm_inspector.exceptions import AmbiguousColumnReferenceError


logger = logging.getLogger(__name__)


class ReferenceShape(Enum):
    """Representation of a reference in the generated field list."""

    SCALAR = "scalar"          # one plain column value
    EMBEDDED = "embedded"      # tuple of plain column values
    AUTO_KEY = "auto_key"      # key of the parent's autoincremented primary key
    UNIQUE_KEY = "unique_key"  # key of a parent unique, parametrised by a phantom


class Nullability(Enum):
    """How child column nullability compares to the referenced parent columns."""

    MATCH = "match"
    OPTIONAL = "optional"  # a single nullable child column referencing a non-null parent column
    MISMATCH = "mismatch"


def compare_nullability(child: List[ColumnInfo], parent: List[ColumnInfo]) -> Nullability:
    child_nulls = [c.nullable for c in child]
    if child_nulls == [p.nullable for p in parent]:
        return Nullability.MATCH
    if child_nulls == [True]:
        return Nullability.OPTIONAL
    return Nullability.MISMATCH


@dataclass
class ResolvedReference:
    """A foreign key together with everything needed to represent it."""

    reference: ReferenceInfo
    child_columns: List[ColumnInfo]
    parent: Optional[TableInfo] = None
    parent_columns: Optional[List[ColumnInfo]] = None
    unique: Optional[UniqueDefInfo] = None
    nullability: Optional[Nullability] = None

    @property
    def is_mapped(self) -> bool:
        """True when the parent table is part of the closure."""
        return self.parent is not None

    @property
    def unmapped_shape(self) -> ReferenceShape:
        return ReferenceShape.SCALAR if len(self.child_columns) == 1 else ReferenceShape.EMBEDDED

    @property
    def shape(self) -> ReferenceShape:
        """
        Shape of the reference in a mapping definition.

        An autoincremented parent key is always referenced by a typed key.
        A key to any other unique needs matching nullability, or a single
        nullable column which is wrapped as optional.
        """
        if not self.is_mapped:
            return self.unmapped_shape
        if self.unique.is_auto_primary:
            return ReferenceShape.AUTO_KEY
        if self.nullability is Nullability.MISMATCH:
            return self.unmapped_shape
        return ReferenceShape.UNIQUE_KEY

    @property
    def optional(self) -> bool:
        return self.nullability is Nullability.OPTIONAL


@dataclass
class FieldGroup:
    """
    One entry of a constructor's field list.

    ``column`` is the column at whose position the entry appears; for a
    reference it is the first of its columns in table order.
    """

    column: ColumnInfo
    resolved: Optional[ResolvedReference] = None


class ReferenceResolver:
    """Resolves the foreign keys of tables within a closure."""

    def __init__(self, strategy: ReverseNamingStrategy, tables: TableClosureMap):
        self.strategy = strategy
        self.tables = tables

    def find_reference(self, table: TableInfo, column: str) -> Optional[ReferenceInfo]:
        """
        Return the foreign key ``column`` participates in, if any.

        Raises:
            AmbiguousColumnReferenceError: If the column is part of several foreign keys
        """
        refs = [ref for ref in table.references if column in ref.child_columns]
        if not refs:
            return None
        if len(refs) > 1:
            raise AmbiguousColumnReferenceError(
                f"Column {column} in table {table.name} participates in multiple references",
                table=str(table.name),
                column=column,
                context={'references': [str(r.referenced_table) for r in refs]},
            )
        return refs[0]

    def resolve(self, table: TableInfo, reference: ReferenceInfo) -> ResolvedReference:
        """Work out the representation of ``reference`` declared on ``table``."""
        child_columns = [table.get_column(name) for name in reference.child_columns]
        parent = self.tables.get(reference.referenced_table)
        if parent is None:
            logger.debug(
                f"{table.name}: reference to unmapped table {reference.referenced_table} kept as plain values"
            )
            return ResolvedReference(reference=reference, child_columns=child_columns)

        parent_columns = [parent.get_column(name) for name in reference.parent_columns]
        resolved = ResolvedReference(
            reference=reference,
            child_columns=child_columns,
            parent=parent,
            parent_columns=parent_columns,
            unique=referenced_unique(self.strategy, parent, reference),
            nullability=compare_nullability(child_columns, parent_columns),
        )
        logger.debug(
            f"{table.name}: reference {reference.child_columns} -> {parent.name} resolved as {resolved.shape.value}"
        )
        return resolved

    def field_groups(self, table: TableInfo) -> List[FieldGroup]:
        """
        Walk the columns of ``table`` in order, grouping foreign key columns.

        Columns of the autoincremented primary key are skipped. A foreign key
        appears once, at the position of its first column, and its remaining
        columns are consumed with it.
        """
        auto_key_columns = set(table.auto_key_columns)
        consumed = set()
        groups: List[FieldGroup] = []

        for column in table.columns:
            if column.name in auto_key_columns or column.name in consumed:
                continue
            reference = self.find_reference(table, column.name)
            if reference is None:
                groups.append(FieldGroup(column=column))
                continue
            for name in reference.child_columns:
                # Every column of the group must be unambiguous as well
                self.find_reference(table, name)
            consumed.update(reference.child_columns)
            groups.append(FieldGroup(column=column, resolved=self.resolve(table, reference)))

        return groups

    def is_unique_used(self, table: TableInfo, unique: UniqueDefInfo) -> bool:
        """True if some reference in the closure is represented as a typed key to ``unique``."""
        for child in self.tables.values():
            for ref in child.references_to(table.name):
                if not reference_matches_unique(ref, unique):
                    continue
                resolved = self.resolve(child, ref)
                if resolved.shape is ReferenceShape.UNIQUE_KEY and resolved.unique == unique:
                    return True
        return False

    def used_unique_keys(self, table: TableInfo) -> List[UniqueDefInfo]:
        """
        Uniques of ``table`` that become typed keys.

        One canonical unique per column group, kept only when a reference in
        the closure is represented as a key to it. The autoincremented key is
        handled separately and never appears here.
        """
        canonical = [
            self.strategy.choose_canonical_unique(table.name, group)
            for group in unique_groups(sorted_unique_defs(table))
        ]
        return [u for u in canonical if self.is_unique_used(table, u)]
