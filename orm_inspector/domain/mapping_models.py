"""
Mapping definition models for ORM Inspector.

A mapping definition is the neutral, output-format independent description
of how one table maps onto a generated record type. ``None`` always means
"unset": the value is left to the baseline naming convention.
"""

from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Union
from enum import Enum

from .models import QualifiedName, ReferenceAction, UniqueKind, UniqueExpr


class AutoKeyMode(Enum):
    """How the primary key of an entity is managed."""

    # One autoincremented column, named by ConstructorDef.key_db_name
    AUTOINCREMENT = "autoincrement"
    # No autoincremented column; a unique key acts as the default key
    NONE = "none"


@dataclass
class ReferenceParent:
    """
    Foreign key settings carried by a field.

    ``table`` and ``columns`` are only set when the parent is not mapped,
    otherwise the parent is implied by the field's key type.
    """

    table: Optional[QualifiedName] = None
    columns: Optional[List[str]] = None
    on_delete: Optional[ReferenceAction] = None
    on_update: Optional[ReferenceAction] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, unset values omitted."""
        result: Dict[str, Any] = {}
        if self.table is not None:
            if self.table.schema is not None:
                result['schema'] = self.table.schema
            result['table'] = self.table.table
        if self.columns is not None:
            result['columns'] = list(self.columns)
        if self.on_delete is not None:
            result['onDelete'] = self.on_delete.value
        if self.on_update is not None:
            result['onUpdate'] = self.on_update.value
        return result


@dataclass
class FieldDef:
    """A field of a constructor: plain column, key reference or embedded composite."""

    name: str
    db_name: Optional[str] = None
    db_type: Optional[str] = None
    embedded: Optional[List["FieldDef"]] = None
    default: Optional[str] = None
    reference: Optional[ReferenceParent] = None

    @property
    def is_embedded(self) -> bool:
        return self.embedded is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, unset values omitted."""
        result: Dict[str, Any] = {'name': self.name}
        if self.db_name is not None:
            result['dbName'] = self.db_name
        if self.db_type is not None:
            result['type'] = self.db_type
        if self.embedded is not None:
            result['embeddedType'] = [f.to_dict() for f in self.embedded]
        if self.default is not None:
            result['default'] = self.default
        if self.reference is not None:
            reference = self.reference.to_dict()
            if reference:
                result['reference'] = reference
        return result


@dataclass
class UniqueDef:
    """A unique constraint or index declared on a constructor."""

    name: str
    kind: Optional[UniqueKind] = None
    fields: Optional[List[Union[str, UniqueExpr]]] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'name': self.name}
        if self.kind is not None:
            result['type'] = self.kind.value
        if self.fields is not None:
            result['fields'] = [
                {'expr': f.expression} if isinstance(f, UniqueExpr) else f
                for f in self.fields
            ]
        return result


@dataclass
class UniqueKeyDef:
    """A unique that can be used as a typed key by referencing entities."""

    name: str
    db_name: Optional[str] = None
    default: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'name': self.name}
        if self.db_name is not None:
            result['keyDbName'] = self.db_name
        if self.default is not None:
            result['default'] = self.default
        return result


@dataclass
class ConstructorDef:
    """The single constructor of a generated record type."""

    name: str
    db_name: Optional[str] = None
    key_db_name: Optional[str] = None
    fields: Optional[List[FieldDef]] = None
    uniques: Optional[List[UniqueDef]] = None

    def is_empty(self) -> bool:
        """True when nothing but the constructor name is set."""
        return (
            self.db_name is None
            and self.key_db_name is None
            and self.fields is None
            and self.uniques is None
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'name': self.name}
        if self.db_name is not None:
            result['dbName'] = self.db_name
        if self.key_db_name is not None:
            result['keyDbName'] = self.key_db_name
        if self.fields is not None:
            result['fields'] = [f.to_dict() for f in self.fields]
        if self.uniques is not None:
            result['uniques'] = [u.to_dict() for u in self.uniques]
        return result


@dataclass
class EntityDef:
    """Mapping definition of one table."""

    name: str
    db_name: Optional[str] = None
    schema: Optional[str] = None
    auto_key: AutoKeyMode = AutoKeyMode.AUTOINCREMENT
    keys: Optional[List[UniqueKeyDef]] = None
    constructors: Optional[List[ConstructorDef]] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the mapping document representation.

        ``autoKey: null`` declares that the entity has no autoincremented
        key. The autoincrement mode is the default and therefore omitted.
        """
        result: Dict[str, Any] = {'entity': self.name}
        if self.db_name is not None:
            result['dbName'] = self.db_name
        if self.schema is not None:
            result['schema'] = self.schema
        if self.auto_key is AutoKeyMode.NONE:
            result['autoKey'] = None
        if self.keys is not None:
            result['keys'] = [k.to_dict() for k in self.keys]
        if self.constructors is not None:
            result['constructors'] = [c.to_dict() for c in self.constructors]
        return result
