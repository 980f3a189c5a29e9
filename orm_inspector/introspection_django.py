"""
Schema introspection through Django's database backends.

``DjangoSchemaIntrospector`` reads tables, columns, uniques and foreign keys
through ``connection.introspection`` and converts them into the immutable
schema model. Django has to be configured first with ``setup_django``.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

import django
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections

from orm_inspector.constants import AUTO_FIELD_TYPES, DJANGO_TYPE_MAP, SQLITE_INTEGER_FIELD_TYPES
from orm_inspector.domain.dialects import Dialect, get_dialect
from orm_inspector.domain.introspection import SchemaIntrospector
from orm_inspector.domain.models import (
    ColumnInfo, DbType, DB_INT64, QualifiedName, ReferenceAction, ReferenceInfo, TableInfo,
    UniqueDefInfo, UniqueKind,
)
from orm_inspector.exceptions import SchemaIntrospectionError


logger = logging.getLogger(__name__)

# --- Django Setup Helper ---
_django_setup_done = False


def setup_django(db_settings: Dict[str, Any], secret_key: str) -> None:
    """Configures minimal Django settings and runs django.setup()."""
    global _django_setup_done
    if _django_setup_done or settings.configured:
        logger.debug("Django setup already performed.")
        _django_setup_done = True
        return

    logger.info("Configuring Django settings for introspection...")
    plain_db_settings: Dict[str, Dict[str, Any]] = {}
    for alias, db_model in db_settings.items():
        if hasattr(db_model, 'model_dump'):
            plain_db_settings[alias] = db_model.model_dump(exclude_none=True)
        elif isinstance(db_model, dict):
            plain_db_settings[alias] = dict(db_model)
        else:
            raise TypeError(f"Invalid database settings type for alias '{alias}': {type(db_model).__name__}")
    logger.debug(f"Using database aliases for Django: {sorted(plain_db_settings)}")

    settings.configure(
        SECRET_KEY=secret_key,
        DATABASES=plain_db_settings,
        TIME_ZONE='UTC',
        USE_TZ=True,
        DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
    )
    django.setup()
    _django_setup_done = True
    logger.info("Django setup complete.")


# Referential actions as reported by SQLite's foreign_key_list pragma
_SQLITE_ACTIONS = {action.value: action for action in ReferenceAction}


def _constraint_name(name: str) -> Optional[str]:
    """Django invents names like ``__primary__`` for unnamed constraints."""
    if name.startswith("__") and name.endswith("__"):
        return None
    return name


class DjangoSchemaIntrospector(SchemaIntrospector):
    """
    Introspector over one Django database connection.

    Django sees the tables of the connection's current schema only, so
    every qualified name produced here carries that schema.
    """

    def __init__(self, alias: str = DEFAULT_DB_ALIAS):
        if not _django_setup_done and not settings.configured:
            raise SchemaIntrospectionError(
                "Django has not been set up. Call setup_django() first.",
                context={'alias': alias},
            )
        self.alias = alias
        self.connection = connections[alias]
        self._dialect = get_dialect(self.connection.vendor)
        self._current_schema: Optional[str] = None
        self._current_schema_loaded = False

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def introspection(self):
        return self.connection.introspection

    def get_current_schema(self) -> Optional[str]:
        if not self._current_schema_loaded:
            if self.connection.vendor == "postgresql":
                with self.connection.cursor() as cursor:
                    cursor.execute("SELECT current_schema()")
                    self._current_schema = cursor.fetchone()[0]
            self._current_schema_loaded = True
        return self._current_schema

    def _is_visible_schema(self, schema: Optional[str]) -> bool:
        return schema is None or schema == self.get_current_schema()

    def _table_names(self, cursor) -> List[str]:
        return [
            item.name
            for item in self.introspection.get_table_list(cursor)
            if getattr(item, 'type', 't') == 't'
        ]

    def list_tables(self, schema: Optional[str] = None) -> List[str]:
        if not self._is_visible_schema(schema):
            logger.warning(
                f"Schema {schema} is not the current schema of connection '{self.alias}'; no tables listed"
            )
            return []
        with self.connection.cursor() as cursor:
            names = sorted(self._table_names(cursor))
        logger.debug(f"Found {len(names)} tables: {', '.join(names)}")
        return names

    def analyze_table(self, name: QualifiedName) -> Optional[TableInfo]:
        if not self._is_visible_schema(name.schema):
            return None
        with self.connection.cursor() as cursor:
            if name.table not in self._table_names(cursor):
                return None
            logger.debug(f"Analyzing table {name}")
            try:
                return self._analyze(cursor, name)
            except SchemaIntrospectionError:
                raise
            except Exception as e:
                raise SchemaIntrospectionError(
                    f"Could not analyze table {name}: {e}", table=str(name)
                ) from e

    # --- Table analysis ---

    def _analyze(self, cursor, name: QualifiedName) -> TableInfo:
        description = self.introspection.get_table_description(cursor, name.table)
        constraints = self.introspection.get_constraints(cursor, name.table)
        primary_key = self._primary_key_columns(constraints)

        field_types = {d.name: self._field_type(d) for d in description}
        auto_column = None
        if len(primary_key) == 1 and field_types.get(primary_key[0]) in AUTO_FIELD_TYPES:
            auto_column = primary_key[0]

        columns = [
            ColumnInfo(
                name=d.name,
                # A primary key column never holds NULL
                nullable=bool(d.null_ok) and d.name not in primary_key,
                db_type=self._db_type(field_types[d.name], d),
                default=None if getattr(d, 'default', None) is None else str(d.default),
            )
            for d in description
        ]

        return TableInfo(
            name=name,
            columns=columns,
            uniques=self._uniques(constraints, auto_column),
            references=self._references(cursor, name, constraints),
        )

    @staticmethod
    def _primary_key_columns(constraints: Dict[str, Dict[str, Any]]) -> List[str]:
        for data in constraints.values():
            if data.get('primary_key'):
                return list(data.get('columns') or [])
        return []

    def _field_type(self, description) -> Optional[str]:
        """Django field type of a column, None for types Django does not know."""
        try:
            return self.introspection.get_field_type(description.type_code, description)
        except KeyError:
            return None

    def _db_type(self, field_type: Optional[str], description) -> DbType:
        if self.connection.vendor == "sqlite" and field_type in SQLITE_INTEGER_FIELD_TYPES:
            return DB_INT64
        if field_type in DJANGO_TYPE_MAP:
            return DJANGO_TYPE_MAP[field_type]
        type_code = description.type_code
        if isinstance(type_code, str) and type_code:
            return DbType.of_other(type_code)
        return DbType.of_other(field_type or str(type_code))

    @staticmethod
    def _uniques(constraints: Dict[str, Dict[str, Any]], auto_column: Optional[str]) -> List[UniqueDefInfo]:
        uniques = []
        for name, data in constraints.items():
            columns = [c for c in data.get('columns') or [] if c is not None]
            # SQLite reports its primary key as not unique
            if not (data.get('unique') or data.get('primary_key')) or not columns:
                continue
            if data.get('primary_key'):
                kind = UniqueKind.PRIMARY
            elif data.get('index'):
                kind = UniqueKind.INDEX
            else:
                kind = UniqueKind.CONSTRAINT
            uniques.append(UniqueDefInfo(
                kind=kind,
                fields=columns,
                name=_constraint_name(name),
                auto_increment=kind is UniqueKind.PRIMARY and columns == [auto_column],
            ))
        return uniques

    def _references(self, cursor, name: QualifiedName, constraints) -> List[ReferenceInfo]:
        if self.connection.vendor == "sqlite":
            return self._sqlite_references(cursor, name)

        schema = self.get_current_schema()
        references = []
        for constraint_name, data in constraints.items():
            target = data.get('foreign_key')
            if not target:
                continue
            target_table, target_column = target
            child_columns = list(data.get('columns') or [])
            if len(child_columns) == 1:
                parent_columns = [target_column]
            else:
                # Django reports one target column; composite keys point at the parent primary key
                parent_constraints = self.introspection.get_constraints(cursor, target_table)
                parent_columns = self._primary_key_columns(parent_constraints)
                if len(parent_columns) != len(child_columns):
                    raise SchemaIntrospectionError(
                        f"Cannot determine the referenced columns of foreign key {constraint_name}",
                        table=str(name),
                        context={'columns': child_columns, 'referenced_table': target_table},
                    )
            references.append(ReferenceInfo(
                referenced_table=QualifiedName(schema, target_table),
                columns=list(zip(child_columns, parent_columns)),
                name=_constraint_name(constraint_name),
            ))
        return references

    def _sqlite_references(self, cursor, name: QualifiedName) -> List[ReferenceInfo]:
        """Read foreign keys from the pragma, which keeps composite keys and actions."""
        quoted = self.connection.ops.quote_name(name.table)
        cursor.execute(f"PRAGMA foreign_key_list({quoted})")
        grouped: "OrderedDict[int, List[Tuple]]" = OrderedDict()
        for row in cursor.fetchall():
            # id, seq, table, from, to, on_update, on_delete, match
            grouped.setdefault(row[0], []).append(row)

        references = []
        for rows in grouped.values():
            rows.sort(key=lambda r: r[1])
            target_table = rows[0][2]
            child_columns = [r[3] for r in rows]
            parent_columns = [r[4] for r in rows]
            if any(c is None for c in parent_columns):
                # REFERENCES parent without a column list targets the parent primary key
                parent_columns = self._primary_key_columns(
                    self.introspection.get_constraints(cursor, target_table)
                )
            references.append(ReferenceInfo(
                referenced_table=QualifiedName(None, target_table),
                columns=list(zip(child_columns, parent_columns)),
                on_update=_SQLITE_ACTIONS.get(rows[0][5]),
                on_delete=_SQLITE_ACTIONS.get(rows[0][6]),
            ))
        return references
