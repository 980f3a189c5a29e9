"""
Table closure computation.

Collects every table reachable from a seed set through foreign keys. The
closure grows one frontier at a time: only the tables discovered in the
previous round have their references examined, tables already checked are
never fetched again.
"""

import logging
from typing import Callable, Dict, Mapping, Optional, Set

from .introspection import SchemaIntrospector
from .models import QualifiedName, TableInfo, TableClosureMap
from orm_inspector.exceptions import DanglingReferenceError


logger = logging.getLogger(__name__)

IncludePredicate = Callable[[QualifiedName], bool]
FetchTable = Callable[[QualifiedName], Optional[TableInfo]]


def include_all(name: QualifiedName) -> bool:
    """Predicate following every reference."""
    return True


def _sorted_map(tables: Mapping[QualifiedName, TableInfo]) -> TableClosureMap:
    return {name: tables[name] for name in sorted(tables, key=QualifiedName.sort_key)}


def _fetch(fetch: FetchTable, name: QualifiedName) -> TableInfo:
    table = fetch(name)
    if table is None:
        raise DanglingReferenceError(f"Reference to {name} not found", table=str(name))
    return table


def follow_referenced_tables(
    include: IncludePredicate,
    tables: Mapping[QualifiedName, TableInfo],
    fetch: FetchTable,
) -> TableClosureMap:
    """
    Extend ``tables`` with every table they reference, transitively.

    A referenced table is fetched only if ``include`` accepts its name and it
    is not known yet. References rejected by ``include`` stay unresolved and
    are later mapped as plain columns.

    Args:
        include: Decides whether a reference to this table is followed
        tables: The seed tables
        fetch: Analyzes one table; returns None when it does not exist

    Returns:
        The closure, keyed and ordered by qualified name

    Raises:
        DanglingReferenceError: If a followed reference cannot be fetched
    """
    checked: Dict[QualifiedName, TableInfo] = {}
    frontier: Dict[QualifiedName, TableInfo] = dict(tables)
    round_number = 0

    while frontier:
        round_number += 1
        targets: Set[QualifiedName] = {
            ref.referenced_table
            for table in frontier.values()
            for ref in table.references
        }
        missing = sorted(
            (t for t in targets if include(t) and t not in checked and t not in frontier),
            key=QualifiedName.sort_key,
        )
        logger.debug(
            f"Closure round {round_number}: {len(frontier)} new tables, {len(missing)} missing references"
        )

        discovered: Dict[QualifiedName, TableInfo] = {}
        for name in missing:
            logger.debug(f"Fetching referenced table {name}")
            discovered[name] = _fetch(fetch, name)

        checked.update(frontier)
        frontier = discovered

    logger.info(f"Table closure complete: {len(checked)} tables after {round_number} rounds")
    return _sorted_map(checked)


def collect_tables(
    introspector: SchemaIntrospector,
    include: IncludePredicate = include_all,
    schema: Optional[str] = None,
) -> TableClosureMap:
    """
    Return the tables of a schema together with the tables they reference.

    If several schemas are collected separately with different filters, run
    ``follow_referenced_tables`` over the merged result to make sure no
    dependency is missing.

    Args:
        introspector: Source of table metadata
        include: Decides which tables are mapped and which references are followed
        schema: Schema name; the introspector's current schema when None
    """
    resolved_schema = schema if schema is not None else introspector.get_current_schema()
    names = [
        QualifiedName(resolved_schema, table)
        for table in introspector.list_tables(resolved_schema)
    ]
    selected = [name for name in names if include(name)]
    logger.info(
        f"Found {len(names)} tables in schema {resolved_schema or '<default>'}, {len(selected)} selected"
    )

    seed = {name: _fetch(introspector.analyze_table, name) for name in selected}
    return follow_referenced_tables(include, seed, introspector.analyze_table)
