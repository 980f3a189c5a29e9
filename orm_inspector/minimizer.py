"""
Mapping minimization.

A generated mapping sets every database name explicitly. Most of them are
exactly what the baseline naming convention would assign to the declared
record anyway. ``minimize_mapping`` clears those values, ``apply_defaults``
puts them back, so that for any generated mapping ``D``::

    apply_defaults(minimize_mapping(style, decl, D), style, decl) == D
"""

import copy
import logging
from typing import Dict, List, Optional

from orm_inspector.domain.declarations import DataDeclaration
from orm_inspector.domain.mapping_models import AutoKeyMode, ConstructorDef, EntityDef, FieldDef
from orm_inspector.domain.naming import NamingStyle
from orm_inspector.exceptions import find_one


logger = logging.getLogger(__name__)


def baseline_entity(style: NamingStyle, declaration: DataDeclaration) -> EntityDef:
    """The fully resolved mapping ``style`` assigns to ``declaration`` by default."""
    entity_name = declaration.name
    constr_name = declaration.constructor_name
    constr_index = 0
    return EntityDef(
        name=entity_name,
        db_name=style.db_entity_name(entity_name),
        constructors=[
            ConstructorDef(
                name=constr_name,
                db_name=style.db_constr_name(entity_name, constr_name, constr_index),
                key_db_name=style.db_auto_key_name(entity_name, constr_name, constr_index),
                fields=[
                    FieldDef(
                        name=field.name,
                        db_name=style.db_field_name(entity_name, constr_name, constr_index, field.name, index),
                    )
                    for index, field in enumerate(declaration.fields)
                ],
                uniques=[],
            )
        ],
    )


def _unset_if_same(value, baseline):
    return None if value == baseline else value


def _subtract_field(baseline: FieldDef, field: FieldDef) -> Optional[FieldDef]:
    result = copy.deepcopy(field)
    result.db_name = _unset_if_same(field.db_name, baseline.db_name)
    result.db_type = _unset_if_same(field.db_type, baseline.db_type)
    result.default = _unset_if_same(field.default, baseline.default)
    # The field is dropped only when nothing but its name is left
    if (
        result.db_name is None
        and result.db_type is None
        and result.embedded is None
        and result.default is None
        and result.reference is None
    ):
        return None
    return result


def _subtract_constructor(baseline: ConstructorDef, constructor: ConstructorDef) -> Optional[ConstructorDef]:
    fields = None
    if constructor.fields is not None:
        subtracted = [
            _subtract_field(find_one("field", lambda f: f.name, field.name, baseline.fields), field)
            for field in constructor.fields
        ]
        fields = [f for f in subtracted if f is not None] or None

    result = ConstructorDef(
        name=constructor.name,
        db_name=_unset_if_same(constructor.db_name, baseline.db_name),
        key_db_name=_unset_if_same(constructor.key_db_name, baseline.key_db_name),
        fields=fields,
        uniques=copy.deepcopy(constructor.uniques) or None,
    )
    return None if result.is_empty() else result


def minimize_mapping(style: NamingStyle, declaration: DataDeclaration, entity: EntityDef) -> EntityDef:
    """
    Remove every value of ``entity`` that ``style`` implies for ``declaration``.

    Entity and constructor database names, the auto-key column name, field
    database names, types and defaults are cleared when they equal the
    baseline. A field stays as long as any of its attributes differs, with
    only the matching ones cleared. Constructors left with nothing but a name
    are dropped, and empty lists collapse to unset.

    Args:
        style: Baseline naming convention
        declaration: The record declaration generated for the same table
        entity: Generated mapping definition

    Returns:
        A new, minimized mapping definition; ``entity`` is left untouched
    """
    baseline = baseline_entity(style, declaration)
    constructors = None
    if entity.constructors is not None:
        subtracted = [
            _subtract_constructor(base, constructor)
            for base, constructor in zip(baseline.constructors, entity.constructors)
        ]
        constructors = [c for c in subtracted if c is not None] or None

    minimized = EntityDef(
        name=entity.name,
        db_name=_unset_if_same(entity.db_name, baseline.db_name),
        schema=entity.schema,
        auto_key=entity.auto_key,
        keys=copy.deepcopy(entity.keys) or None,
        constructors=constructors,
    )
    logger.debug(f"Minimized mapping of {entity.name}")
    return minimized


def _resolve_field(baseline: FieldDef, field: Optional[FieldDef]) -> FieldDef:
    if field is None:
        return copy.deepcopy(baseline)
    result = copy.deepcopy(field)
    if result.db_name is None and not result.is_embedded:
        result.db_name = baseline.db_name
    if result.db_type is None:
        result.db_type = baseline.db_type
    if result.default is None:
        result.default = baseline.default
    return result


def _resolve_constructor(
    baseline: ConstructorDef, constructor: Optional[ConstructorDef], auto_key: AutoKeyMode
) -> ConstructorDef:
    constructor = constructor or ConstructorDef(name=baseline.name)
    given: Dict[str, FieldDef] = {f.name: f for f in constructor.fields or []}
    for name in given:
        # Every field must exist in the declaration
        find_one("field", lambda f: f.name, name, baseline.fields)

    key_db_name = constructor.key_db_name
    if key_db_name is None and auto_key is AutoKeyMode.AUTOINCREMENT:
        key_db_name = baseline.key_db_name

    return ConstructorDef(
        name=constructor.name,
        db_name=constructor.db_name if constructor.db_name is not None else baseline.db_name,
        key_db_name=key_db_name,
        fields=[_resolve_field(base, given.get(base.name)) for base in baseline.fields],
        uniques=copy.deepcopy(constructor.uniques) or [],
    )


def apply_defaults(entity: EntityDef, style: NamingStyle, declaration: DataDeclaration) -> EntityDef:
    """
    Fill every unset value of ``entity`` from the baseline ``style``.

    This is the inverse of ``minimize_mapping``: the result is the mapping a
    mapping layer would actually use for ``declaration``. Fields are listed
    in declaration order.
    """
    baseline = baseline_entity(style, declaration)
    given: List[ConstructorDef] = entity.constructors or []
    constructors = [
        _resolve_constructor(
            base,
            next((c for c in given if c.name == base.name), None),
            entity.auto_key,
        )
        for base in baseline.constructors
    ]
    return EntityDef(
        name=entity.name,
        db_name=entity.db_name if entity.db_name is not None else baseline.db_name,
        schema=entity.schema,
        auto_key=entity.auto_key,
        keys=copy.deepcopy(entity.keys) or [],
        constructors=constructors,
    )
