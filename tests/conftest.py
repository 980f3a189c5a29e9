# File: tests/conftest.py
# Shared schema snapshots for the reverse-mapping tests.

from typing import Dict, Iterable, Optional, Sequence, Tuple

import pytest

from orm_inspector.domain.models import (
    ColumnInfo, DbType, QualifiedName, ReferenceAction, ReferenceInfo, TableInfo, UniqueDefInfo,
    UniqueKind, DB_INT64, DB_REAL, DB_STRING,
)


def build_table(
    name: str,
    columns: Sequence[Tuple[str, DbType, bool]],
    uniques: Iterable[UniqueDefInfo] = (),
    references: Iterable[ReferenceInfo] = (),
    schema: Optional[str] = None,
    defaults: Optional[Dict[str, str]] = None,
) -> TableInfo:
    """Build a table snapshot from ``(column, type, nullable)`` triples."""
    defaults = defaults or {}
    return TableInfo(
        name=QualifiedName(schema, name),
        columns=[ColumnInfo(col, nullable, db_type, defaults.get(col)) for col, db_type, nullable in columns],
        uniques=list(uniques),
        references=list(references),
    )


def auto_pk(column: str = "id", name: Optional[str] = None) -> UniqueDefInfo:
    return UniqueDefInfo(kind=UniqueKind.PRIMARY, fields=(column,), name=name, auto_increment=True)


@pytest.fixture
def table_factory():
    """The table builder, for tests that need a schema of their own."""
    return build_table


@pytest.fixture
def auto_pk_factory():
    return auto_pk


@pytest.fixture
def shop_tables() -> Dict[QualifiedName, TableInfo]:
    """
    customers <- orders (through the autoincremented key)
    customers <- invoices (through the unique email, nullable on the invoice side)
    """
    customers = build_table(
        "customers",
        [("id", DB_INT64, False), ("email", DB_STRING, False), ("name", DB_STRING, True)],
        uniques=[
            auto_pk(name="customers_pkey"),
            UniqueDefInfo(kind=UniqueKind.CONSTRAINT, fields=("email",), name="customers_email_key"),
        ],
    )
    orders = build_table(
        "orders",
        [
            ("id", DB_INT64, False),
            ("customer_id", DB_INT64, False),
            ("amount", DB_REAL, False),
            ("status", DB_STRING, False),
        ],
        uniques=[auto_pk()],
        references=[
            ReferenceInfo(
                referenced_table=QualifiedName(None, "customers"),
                columns=[("customer_id", "id")],
                on_delete=ReferenceAction.CASCADE,
            )
        ],
        defaults={"status": "'new'"},
    )
    invoices = build_table(
        "invoices",
        [("number", DB_STRING, False), ("customer_email", DB_STRING, True), ("total", DB_REAL, False)],
        uniques=[UniqueDefInfo(kind=UniqueKind.PRIMARY, fields=("number",), name="invoices_pkey")],
        references=[
            ReferenceInfo(
                referenced_table=QualifiedName(None, "customers"),
                columns=[("customer_email", "email")],
            )
        ],
    )
    return {t.name: t for t in (customers, invoices, orders)}


@pytest.fixture
def geo_tables() -> Dict[QualifiedName, TableInfo]:
    """countries has no autoincremented key; cities reference it by its primary key."""
    countries = build_table(
        "countries",
        [("code", DB_STRING, False), ("name", DB_STRING, False)],
        uniques=[UniqueDefInfo(kind=UniqueKind.PRIMARY, fields=("code",))],
    )
    cities = build_table(
        "cities",
        [("id", DB_INT64, False), ("country_code", DB_STRING, False), ("name", DB_STRING, False)],
        uniques=[auto_pk()],
        references=[
            ReferenceInfo(referenced_table=QualifiedName(None, "countries"), columns=[("country_code", "code")])
        ],
    )
    return {t.name: t for t in (cities, countries)}


@pytest.fixture
def customers_name() -> QualifiedName:
    return QualifiedName(None, "customers")


@pytest.fixture
def orders_name() -> QualifiedName:
    return QualifiedName(None, "orders")


@pytest.fixture
def invoices_name() -> QualifiedName:
    return QualifiedName(None, "invoices")
