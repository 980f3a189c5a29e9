"""
Schema introspection interface.

The reverse-mapping engine never talks to a database itself. It consumes
an introspector that can list tables, analyze one table and describe the
backend dialect. ``DjangoSchemaIntrospector`` adapts a live connection;
``StaticSchemaIntrospector`` serves an already captured snapshot.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Dict

from .dialects import Dialect, POSTGRESQL
from .models import QualifiedName, TableInfo


class SchemaIntrospector(ABC):
    """Read-only view of a database catalog."""

    @abstractmethod
    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        """Return the table names of ``schema`` (current schema when None)."""

    @abstractmethod
    def analyze_table(self, name: QualifiedName) -> Optional[TableInfo]:
        """Return the table snapshot, or None when the table does not exist."""

    @abstractmethod
    def get_current_schema(self) -> Optional[str]:
        """Return the schema unqualified names resolve to, if the backend has one."""

    @property
    @abstractmethod
    def dialect(self) -> Dialect:
        """The dialect of the backend being introspected."""


class StaticSchemaIntrospector(SchemaIntrospector):
    """Introspector over a fixed set of table snapshots."""

    def __init__(
        self,
        tables: Iterable[TableInfo],
        dialect: Dialect = POSTGRESQL,
        current_schema: Optional[str] = None,
    ):
        self._tables: Dict[QualifiedName, TableInfo] = {t.name: t for t in tables}
        self._dialect = dialect
        self._current_schema = current_schema
        self.analyzed: List[QualifiedName] = []

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        return sorted(name.table for name in self._tables if name.schema == schema)

    def analyze_table(self, name: QualifiedName) -> Optional[TableInfo]:
        self.analyzed.append(name)
        return self._tables.get(name)

    def get_current_schema(self) -> Optional[str]:
        return self._current_schema

    @property
    def dialect(self) -> Dialect:
        return self._dialect
