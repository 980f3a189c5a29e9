"""
Record declaration generation.

Builds one ``DataDeclaration`` per table of a closure, plus the phantom
types parametrising keys built on uniques. The field list follows the same
column walk as the mapping generator so both stay structurally parallel.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple

from orm_inspector.domain.declarations import DataDeclaration, DataField, TypeRef, UniquePhantom
from orm_inspector.domain.models import QualifiedName, TableInfo, TableClosureMap
from orm_inspector.domain.naming import ReverseNamingStrategy
from orm_inspector.domain.references import Nullability, ReferenceResolver, ReferenceShape, ResolvedReference
from orm_inspector.domain.type_mapping import (
    KEYS_MODULE, MkType, TypeMappingConfig, default_mk_type, optional, tuple_of,
)


logger = logging.getLogger(__name__)


@dataclass
class DataCodegenConfig:
    """
    Settings of declaration generation.

    Attributes:
        generate_unique_key_phantoms: Emit phantom types for used uniques. Turn
            it off when the phantoms are declared elsewhere and would collide.
        mk_type: Maps a column to its declaration type
        type_mapping: Target platform settings passed to ``mk_type``
    """

    generate_unique_key_phantoms: bool = True
    mk_type: MkType = default_mk_type
    type_mapping: TypeMappingConfig = field(default_factory=TypeMappingConfig)


class GeneratedData(NamedTuple):
    declaration: DataDeclaration
    phantoms: List[UniquePhantom]


def generate_data(
    config: DataCodegenConfig,
    strategy: ReverseNamingStrategy,
    tables: TableClosureMap,
) -> Dict[QualifiedName, GeneratedData]:
    """
    Generate record declarations for every table of the closure.

    Args:
        config: Declaration settings
        strategy: Naming strategy shared with the mapping generator
        tables: The table closure

    Returns:
        Declaration and phantom types per table, in closure order
    """
    resolver = ReferenceResolver(strategy, tables)
    result = {}
    for name, table in tables.items():
        result[name] = GeneratedData(
            declaration=_generate_declaration(config, strategy, resolver, table),
            phantoms=_generate_phantoms(config, strategy, resolver, table),
        )
    logger.info(f"Generated {len(result)} record declarations")
    return result


def _generate_phantoms(
    config: DataCodegenConfig,
    strategy: ReverseNamingStrategy,
    resolver: ReferenceResolver,
    table: TableInfo,
) -> List[UniquePhantom]:
    if not config.generate_unique_key_phantoms:
        return []
    entity = strategy.entity_name(table.name)
    return [
        UniquePhantom(name=strategy.unique_key_phantom_name(table.name, unique), entity=entity)
        for unique in resolver.used_unique_keys(table)
    ]


def _generate_declaration(
    config: DataCodegenConfig,
    strategy: ReverseNamingStrategy,
    resolver: ReferenceResolver,
    table: TableInfo,
) -> DataDeclaration:
    fields = []
    for group in resolver.field_groups(table):
        if group.resolved is None:
            fields.append(DataField(
                name=strategy.field_name(table.name, group.column.name),
                type=config.mk_type(config.type_mapping, group.column),
            ))
        else:
            fields.append(DataField(
                name=strategy.key_field_name(table.name, group.resolved.reference),
                type=_reference_type(config, strategy, group.resolved),
            ))

    declaration = DataDeclaration(
        name=strategy.entity_name(table.name),
        constructor_name=strategy.constructor_name(table.name),
        fields=fields,
    )
    logger.debug(f"Declaration {declaration.name} for {table.name}: {declaration.field_names}")
    return declaration


def _reference_type(
    config: DataCodegenConfig,
    strategy: ReverseNamingStrategy,
    resolved: ResolvedReference,
) -> TypeRef:
    shape = resolved.shape
    if shape is ReferenceShape.AUTO_KEY and resolved.nullability is Nullability.MISMATCH:
        # The mapping still refers to the auto key, but the record keeps the column value
        shape = resolved.unmapped_shape
    if shape in (ReferenceShape.SCALAR, ReferenceShape.EMBEDDED):
        column_types = [config.mk_type(config.type_mapping, c) for c in resolved.child_columns]
        if shape is ReferenceShape.SCALAR:
            return column_types[0]
        return tuple_of(*column_types)

    parent_name = resolved.parent.name
    entity = TypeRef(strategy.entity_name(parent_name))
    if shape is ReferenceShape.AUTO_KEY:
        key = TypeRef("AutoKey", (entity,), module=KEYS_MODULE)
    else:
        phantom = TypeRef(strategy.unique_key_phantom_name(parent_name, resolved.unique))
        unique = TypeRef("Unique", (phantom,), module=KEYS_MODULE)
        key = TypeRef("Key", (entity, unique), module=KEYS_MODULE)
    return optional(key) if resolved.optional else key
