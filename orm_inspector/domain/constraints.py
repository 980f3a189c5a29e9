"""
Unique constraint analysis for ORM Inspector.

A table may declare several uniques over the same columns: a primary key,
constraints and indexes. These helpers group them and decide which one a
foreign key points at.
"""

from itertools import groupby
from typing import List

from .models import ReferenceInfo, TableInfo, UniqueDefInfo
from .naming import ReverseNamingStrategy


def reference_matches_unique(reference: ReferenceInfo, unique: UniqueDefInfo) -> bool:
    """True if the parent columns of ``reference`` are exactly the fields of ``unique``."""
    # A reference cannot point at an expression index
    if not all(isinstance(f, str) for f in unique.fields):
        return False
    return sorted(reference.parent_columns) == sorted(unique.fields)


def candidate_uniques(parent: TableInfo, reference: ReferenceInfo) -> List[UniqueDefInfo]:
    """Uniques of ``parent`` that ``reference`` may point at."""
    return [u for u in parent.uniques if reference_matches_unique(reference, u)]


def referenced_unique(
    strategy: ReverseNamingStrategy, parent: TableInfo, reference: ReferenceInfo
) -> UniqueDefInfo:
    """The canonical unique of ``parent`` targeted by ``reference``."""
    return strategy.choose_canonical_unique(parent.name, candidate_uniques(parent, reference))


def sorted_unique_defs(table: TableInfo) -> List[UniqueDefInfo]:
    """
    Uniques of ``table`` except the autoincremented primary key.

    Sorted by column set, kind and name so that positions are stable; the
    position is used when naming uniques.
    """
    return sorted(
        (u for u in table.uniques if not u.is_auto_primary),
        key=UniqueDefInfo.sort_key,
    )


def unique_groups(unique_defs: List[UniqueDefInfo]) -> List[List[UniqueDefInfo]]:
    """Split sorted uniques into runs covering the same fields."""
    return [list(group) for _, group in groupby(unique_defs, key=UniqueDefInfo.sorted_fields)]

