"""
Type declaration models for ORM Inspector.

A declaration is the skeleton of a generated record type: entity name,
constructor name and typed fields. It is built from the same schema and
naming strategy as the mapping definition and is turned into source code by
an emitter.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass(frozen=True)
class TypeRef:
    """
    A type expression such as ``int``, ``Optional[str]`` or ``AutoKey[Customer]``.

    ``module`` names where the type has to be imported from; it is empty for
    builtins and for types declared in the generated module itself.
    """

    name: str
    args: Tuple["TypeRef", ...] = ()
    module: str = ""

    def render(self) -> str:
        """Render as a Python annotation string."""
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(arg.render() for arg in self.args)}]"

    def walk(self):
        """Yield this type and every nested argument, depth first."""
        yield self
        for arg in self.args:
            yield from arg.walk()

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class DataField:
    """A typed record field."""

    name: str
    type: TypeRef


@dataclass
class DataDeclaration:
    """The record type generated for one table."""

    name: str
    constructor_name: str
    fields: List[DataField] = field(default_factory=list)

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class UniquePhantom:
    """
    Marker type parametrising a typed key for one unique of an entity.

    Keys built on different uniques of the same entity get different
    phantoms and are therefore not interchangeable.
    """

    name: str
    entity: str
