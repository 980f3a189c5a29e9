"""
Naming conventions for ORM Inspector.

Two directions are covered here:

* reverse naming strategies derive record, constructor, field and key names
  from table and column names when a schema is reverse-engineered;
* forward naming styles derive the database names a mapping layer would
  assign by default to a declared record. They serve as the baseline that
  minimization subtracts from generated mappings.

Name collisions are not resolved. A strategy only has to be deterministic;
if the generated names clash, customize the strategy.
"""

import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional

import inflect

from .models import QualifiedName, ReferenceInfo, UniqueDefInfo, UniqueKind
from orm_inspector.exceptions import EmptyUniqueCandidateSetError


# Initialize inflect engine for pluralization
p = inflect.engine()


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Example:
        >>> to_snake_case("UserAccount")
        'user_account'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def is_singular_ending_in_s(name: str) -> bool:
    """
    True for singular nouns such as ``address``, ``bus`` or ``analysis``.

    ``inflect.singular_noun`` strips the trailing 's' of those. Their plural
    is not formed by appending a plain 's', unlike for a word that already
    is a plural.
    """
    lowered = name.lower()
    return lowered.endswith("s") and p.plural_noun(lowered) != lowered + "s"


def to_pascal_case(name: str) -> str:
    """
    Convert snake_case to PascalCase with singularization.

    Example:
        >>> to_pascal_case("user_accounts")
        'UserAccount'
        >>> to_pascal_case("categories")
        'Category'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    singular_name = p.singular_noun(name)
    if not singular_name or is_singular_ending_in_s(name):
        singular_name = name

    return "".join(word.capitalize() for word in singular_name.split("_"))


def pluralize(word: str) -> str:
    """Plural form of ``word``; appends 's' when inflect gives up."""
    if not word:
        return ""
    plural = p.plural(word)
    return plural if plural else word + "s"


def filter_identifier(name: str) -> str:
    """Drop every character that is neither alphanumeric nor underscore."""
    return "".join(c for c in name if c.isalnum() or c == "_")


def first_upper(name: str) -> str:
    name = filter_identifier(name)
    return name[:1].upper() + name[1:]


def first_lower(name: str) -> str:
    name = filter_identifier(name)
    return name[:1].lower() + name[1:]


def camel_words(name: str) -> str:
    """
    Join the words of a column name in CamelCase.

    Example:
        >>> camel_words("customer_id")
        'CustomerId'
    """
    return "".join(first_upper(word) for word in re.split(r"[^0-9A-Za-z]+", name) if word)


def choose_referenced_unique(
    table: QualifiedName, candidates: Iterable[UniqueDefInfo]
) -> UniqueDefInfo:
    """
    Pick one unique among several covering the same columns.

    The result depends only on the set of candidates: they are sorted by
    name first, then a primary key wins over a constraint, which wins over
    an index.

    Raises:
        EmptyUniqueCandidateSetError: If there are no candidates
    """
    ordered = sorted(candidates, key=lambda u: ((u.name is not None, u.name or ""), u.sort_key()))
    for kind in (UniqueKind.PRIMARY, UniqueKind.CONSTRAINT, UniqueKind.INDEX):
        for unique in ordered:
            if unique.kind is kind:
                return unique
    raise EmptyUniqueCandidateSetError(
        f"Cannot choose a referenced unique for {table}: the candidate list is empty",
        table=str(table),
    )


# --- Reverse naming: schema -> declarations ---


class ReverseNamingStrategy(ABC):
    """
    Supplies the names of generated declarations.

    Every method must be a pure function of its arguments.
    """

    @abstractmethod
    def entity_name(self, table: QualifiedName) -> str:
        """Name of the record type generated for ``table``."""

    @abstractmethod
    def constructor_name(self, table: QualifiedName) -> str:
        """Name of the record constructor."""

    def constructor_db_name(self, table: QualifiedName) -> str:
        """Database name of the record constructor."""
        return to_snake_case(self.constructor_name(table))

    @abstractmethod
    def field_name(self, table: QualifiedName, column: str) -> str:
        """Name of the field mapped from a plain column."""

    @abstractmethod
    def key_field_name(self, table: QualifiedName, reference: ReferenceInfo) -> str:
        """Name of the field holding a reference, for one-column and composite keys alike."""

    def choose_canonical_unique(
        self, table: QualifiedName, candidates: Iterable[UniqueDefInfo]
    ) -> UniqueDefInfo:
        """
        Choose the unique referenced through a column set.

        A table may have one primary key and several constraints and indexes
        with the same columns. The choice must not depend on their order.
        """
        return choose_referenced_unique(table, candidates)

    @abstractmethod
    def unique_key_phantom_name(self, table: QualifiedName, unique: UniqueDefInfo) -> str:
        """Name of the phantom type parametrising keys of ``unique``."""

    @abstractmethod
    def unique_name(self, table: QualifiedName, index: int, unique: UniqueDefInfo) -> str:
        """Name of the unique in the mapping. ``index`` is its position among the table uniques."""


class DefaultReverseNamingStyle(ReverseNamingStrategy):
    """
    Singular PascalCase records with camelCase fields prefixed by the record name.

    ``orders.customer_id`` becomes record ``Order`` with field ``orderCustomerId``.
    """

    def entity_name(self, table: QualifiedName) -> str:
        return to_pascal_case(filter_identifier(table.table))

    def constructor_name(self, table: QualifiedName) -> str:
        return self.entity_name(table)

    def _prefix(self, table: QualifiedName) -> str:
        return first_lower(self.entity_name(table))

    def field_name(self, table: QualifiedName, column: str) -> str:
        return self._prefix(table) + camel_words(column)

    def key_field_name(self, table: QualifiedName, reference: ReferenceInfo) -> str:
        columns = reference.child_columns
        if len(columns) == 1:
            return self.field_name(table, columns[0])
        return self._prefix(table) + "".join(camel_words(c) for c in columns)

    def unique_key_phantom_name(self, table: QualifiedName, unique: UniqueDefInfo) -> str:
        # A table cannot reference an expression index, so only columns count
        if unique.name:
            return camel_words(unique.name)
        return self.entity_name(table) + "".join(camel_words(c) for c in unique.column_names)

    def unique_name(self, table: QualifiedName, index: int, unique: UniqueDefInfo) -> str:
        if unique.name:
            return unique.name
        columns = "".join(camel_words(c) for c in unique.column_names)
        return f"{filter_identifier(table.table)}{columns}{index}"


class VerbatimReverseNamingStyle(ReverseNamingStrategy):
    """
    Keeps table and column names as they are, only adjusting the first letter.

    ``orders.customer_id`` becomes record ``Orders`` with field ``ordersCustomer_id``.
    """

    def entity_name(self, table: QualifiedName) -> str:
        return first_upper(table.table)

    def constructor_name(self, table: QualifiedName) -> str:
        return first_upper(table.table)

    def field_name(self, table: QualifiedName, column: str) -> str:
        return first_lower(table.table) + first_upper(column)

    def key_field_name(self, table: QualifiedName, reference: ReferenceInfo) -> str:
        columns = reference.child_columns
        if len(columns) == 1:
            return first_lower(table.table) + first_upper(columns[0])
        return first_lower(table.table) + first_upper("".join(columns))

    def unique_key_phantom_name(self, table: QualifiedName, unique: UniqueDefInfo) -> str:
        fallback = filter_identifier(table.table) + "".join(first_upper(c) for c in unique.column_names)
        return first_upper(unique.name or fallback)

    def unique_name(self, table: QualifiedName, index: int, unique: UniqueDefInfo) -> str:
        if unique.name:
            return unique.name
        columns = "".join(first_upper(c) for c in unique.column_names)
        return f"{filter_identifier(table.table)}{columns}{index}"


REVERSE_NAMING_STYLES = {
    "default": DefaultReverseNamingStyle,
    "verbatim": VerbatimReverseNamingStyle,
}


# --- Forward naming: declarations -> default database names ---


class NamingStyle(ABC):
    """
    Default database names a mapping layer assigns to a declared record.

    Minimization removes every generated value equal to what the style
    would produce anyway.
    """

    @abstractmethod
    def db_entity_name(self, entity_name: str) -> str:
        """Table name of the entity."""

    @abstractmethod
    def db_constr_name(self, entity_name: str, constr_name: str, constr_index: int) -> str:
        """Database name of a constructor."""

    def db_auto_key_name(self, entity_name: str, constr_name: str, constr_index: int) -> Optional[str]:
        """Column holding the autoincremented key."""
        return "id"

    @abstractmethod
    def db_field_name(
        self,
        entity_name: str,
        constr_name: str,
        constr_index: int,
        field_name: str,
        field_index: int,
    ) -> str:
        """Column name of a field."""


class PersistentNamingStyle(NamingStyle):
    """Database names equal the declared names."""

    def db_entity_name(self, entity_name: str) -> str:
        return entity_name

    def db_constr_name(self, entity_name: str, constr_name: str, constr_index: int) -> str:
        return constr_name

    def db_field_name(self, entity_name, constr_name, constr_index, field_name, field_index) -> str:
        return field_name


class SnakeCaseNamingStyle(NamingStyle):
    """Database names are the declared names in snake_case."""

    def db_entity_name(self, entity_name: str) -> str:
        return to_snake_case(entity_name)

    def db_constr_name(self, entity_name: str, constr_name: str, constr_index: int) -> str:
        return to_snake_case(constr_name)

    def db_field_name(self, entity_name, constr_name, constr_index, field_name, field_index) -> str:
        return to_snake_case(field_name)


class DefaultNamingStyle(NamingStyle):
    """
    Counterpart of ``DefaultReverseNamingStyle``.

    Record ``Order`` maps to table ``orders`` and field ``orderCustomerId``
    to column ``customer_id``.
    """

    def db_entity_name(self, entity_name: str) -> str:
        return pluralize(to_snake_case(entity_name))

    def db_constr_name(self, entity_name: str, constr_name: str, constr_index: int) -> str:
        return to_snake_case(constr_name)

    def db_field_name(self, entity_name, constr_name, constr_index, field_name, field_index) -> str:
        prefix = first_lower(entity_name)
        rest = field_name[len(prefix):]
        if field_name.startswith(prefix) and rest[:1].isupper():
            return to_snake_case(rest)
        return to_snake_case(field_name)


NAMING_STYLES = {
    "default": DefaultNamingStyle,
    "persistent": PersistentNamingStyle,
    "snake_case": SnakeCaseNamingStyle,
}
