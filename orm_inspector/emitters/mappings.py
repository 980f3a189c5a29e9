"""
Mapping document emitter.

Serializes mapping definitions as a JSON or YAML document whose keys
follow a fixed order, so regenerating the mapping of an unchanged schema
yields an identical file.
"""

import json
import logging
from typing import Any, Iterable, List

import yaml

from orm_inspector.constants import CANONICAL_KEY_ORDER, OUTPUT_FORMATS
from orm_inspector.domain.mapping_models import EntityDef
from orm_inspector.exceptions import CodeGenerationError


logger = logging.getLogger(__name__)

_KEY_RANK = {key: index for index, key in enumerate(CANONICAL_KEY_ORDER)}


def canonical_key(key: str):
    """Sort key: canonical keys in their fixed order, then the rest alphabetically."""
    return (_KEY_RANK.get(key, len(_KEY_RANK)), key)


def order_keys(value: Any) -> Any:
    """Recursively rebuild dictionaries with their keys in canonical order."""
    if isinstance(value, dict):
        return {key: order_keys(value[key]) for key in sorted(value, key=canonical_key)}
    if isinstance(value, list):
        return [order_keys(item) for item in value]
    return value


def mapping_documents(entities: Iterable[EntityDef]) -> List[dict]:
    return [order_keys(entity.to_dict()) for entity in entities]


def show_mappings(entities: Iterable[EntityDef], fmt: str = "json") -> str:
    """
    Render mapping definitions as one document.

    Args:
        entities: Mapping definitions, written in the given order
        fmt: ``json`` (4-space indent) or ``yaml``

    Raises:
        CodeGenerationError: If the format is not supported
    """
    documents = mapping_documents(entities)
    if fmt == "json":
        return json.dumps(documents, indent=4, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(documents, sort_keys=False, default_flow_style=False, allow_unicode=True)
    raise CodeGenerationError(
        f"Unsupported mapping format: {fmt}",
        component="mappings",
        suggestions=[f"Use one of {OUTPUT_FORMATS}"],
    )
