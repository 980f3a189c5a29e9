"""
Tests for record declaration generation and column type mapping.
"""

from unittest import TestCase

import pytest

from orm_inspector.data_gen import DataCodegenConfig, generate_data
from orm_inspector.domain.dialects import POSTGRESQL
from orm_inspector.domain.declarations import TypeRef, UniquePhantom
from orm_inspector.domain.models import (
    ColumnInfo, DbType, QualifiedName, ReferenceInfo, UniqueDefInfo, UniqueKind, DB_DAY_TIME, DB_INT32, DB_INT64,
    DB_STRING,
)
from orm_inspector.domain.naming import DefaultReverseNamingStyle
from orm_inspector.domain.type_mapping import (
    BYTES, FLOAT, INT, KEYS_MODULE, STR, TypeMappingConfig, affinity_type, default_mk_type, sqlite_mk_type,
)
from orm_inspector.mapper import generate_mapping


def field_types(generated) -> dict:
    return {f.name: f.type.render() for f in generated.declaration.fields}


class TestGenerateData(TestCase):

    @pytest.fixture(autouse=True)
    def _schema(self, shop_tables, customers_name, orders_name, invoices_name):
        self.tables = shop_tables
        self.customers_name = customers_name
        self.orders_name = orders_name
        self.invoices_name = invoices_name
        self.data = generate_data(DataCodegenConfig(), DefaultReverseNamingStyle(), shop_tables)

    def test_declaration_per_table(self):
        assert list(self.data) == list(self.tables)
        order = self.data[self.orders_name].declaration
        assert order.name == "Order"
        assert order.constructor_name == "Order"

    def test_plain_columns(self):
        assert field_types(self.data[self.customers_name]) == {
            'customerEmail': "str",
            'customerName': "Optional[str]",
        }

    def test_autoincremented_key_reference(self):
        assert field_types(self.data[self.orders_name]) == {
            'orderCustomerId': "AutoKey[Customer]",
            'orderAmount': "float",
            'orderStatus': "str",
        }

    def test_nullable_unique_key_reference_is_optional(self):
        types = field_types(self.data[self.invoices_name])

        assert types['invoiceCustomerEmail'] == "Optional[Key[Customer, Unique[CustomersEmailKey]]]"
        assert list(types) == ["invoiceNumber", "invoiceCustomerEmail", "invoiceTotal"]

    def test_phantoms_for_used_uniques(self):
        assert self.data[self.customers_name].phantoms == [UniquePhantom("CustomersEmailKey", "Customer")]
        assert self.data[self.orders_name].phantoms == []
        assert self.data[self.invoices_name].phantoms == []

    def test_phantoms_can_be_disabled(self):
        config = DataCodegenConfig(generate_unique_key_phantoms=False)

        data = generate_data(config, DefaultReverseNamingStyle(), self.tables)

        assert data[self.customers_name].phantoms == []
        # Keys still name the phantom declared elsewhere
        assert "CustomersEmailKey" in field_types(data[self.invoices_name])['invoiceCustomerEmail']

    def test_unmapped_parent_gives_plain_type(self):
        orders = self.tables[self.orders_name]

        data = generate_data(DataCodegenConfig(), DefaultReverseNamingStyle(), {orders.name: orders})

        assert field_types(data[orders.name])['orderCustomerId'] == "int"

    def test_key_types_are_imported_from_the_keys_module(self):
        key_type = self.data[self.orders_name].declaration.fields[0].type

        assert key_type.module == KEYS_MODULE
        assert key_type.args == (TypeRef("Customer"),)

    def test_declarations_parallel_the_mapping_fields(self):
        entities = generate_mapping(DefaultReverseNamingStyle(), POSTGRESQL, self.tables)

        for name, generated in self.data.items():
            mapped = [f.name for f in entities[name].constructors[0].fields]
            assert generated.declaration.field_names == mapped


class TestCompositeData(TestCase):

    @pytest.fixture(autouse=True)
    def _schema(self, geo_tables):
        self.data = generate_data(DataCodegenConfig(), DefaultReverseNamingStyle(), geo_tables)

    def test_key_to_primary_key_without_autoincrement(self):
        city = self.data[QualifiedName(None, "cities")]
        country = self.data[QualifiedName(None, "countries")]

        assert field_types(city)['cityCountryCode'] == "Key[Country, Unique[CountryCode]]"
        assert country.phantoms == [UniquePhantom("CountryCode", "Country")]


class TestAutoKeyReferences(TestCase):

    @pytest.fixture(autouse=True)
    def _factories(self, table_factory, auto_pk_factory):
        self.table_factory = table_factory
        self.auto_pk = auto_pk_factory

    def generate(self, parent_id_nullable: bool, child_nullable: bool, parent_uniques=()):
        accounts = self.table_factory(
            "accounts",
            [("id", DB_INT64, parent_id_nullable), ("login", DB_STRING, False)],
            uniques=[self.auto_pk(), *parent_uniques],
        )
        sessions = self.table_factory(
            "sessions",
            [("id", DB_INT64, False), ("account_id", DB_INT64, child_nullable)],
            uniques=[self.auto_pk()],
            references=[ReferenceInfo(QualifiedName(None, "accounts"), [("account_id", "id")])],
        )
        tables = {t.name: t for t in (accounts, sessions)}
        strategy = DefaultReverseNamingStyle()
        return generate_data(DataCodegenConfig(), strategy, tables), generate_mapping(strategy, POSTGRESQL, tables)

    def test_redundant_index_on_the_auto_key_is_not_a_key(self):
        index = UniqueDefInfo(UniqueKind.INDEX, ("id",), name="accounts_id_idx")

        data, entities = self.generate(False, False, parent_uniques=[index])

        accounts = QualifiedName(None, "accounts")
        assert data[accounts].phantoms == []
        assert entities[accounts].keys == []
        assert field_types(data[QualifiedName(None, "sessions")]) == {'sessionAccountId': "AutoKey[Account]"}

    def test_nullable_child_of_auto_key_is_optional(self):
        data, _ = self.generate(False, True)

        assert field_types(data[QualifiedName(None, "sessions")]) == {'sessionAccountId': "Optional[AutoKey[Account]]"}

    def test_nullability_mismatch_with_auto_key_keeps_the_column_type(self):
        data, entities = self.generate(True, False)

        assert field_types(data[QualifiedName(None, "sessions")]) == {'sessionAccountId': "int"}
        # The mapping still points at the autoincremented key
        field = entities[QualifiedName(None, "sessions")].constructors[0].fields[0]
        assert field.db_name == "account_id"
        assert field.embedded is None


class TestTypeMapping(TestCase):

    def column(self, db_type: DbType, nullable: bool = False) -> ColumnInfo:
        return ColumnInfo("c", nullable, db_type)

    def test_native_int_width(self):
        wide = TypeMappingConfig(native_int_width=64)
        narrow = TypeMappingConfig(native_int_width=32)

        assert default_mk_type(wide, self.column(DB_INT64)) == INT
        assert default_mk_type(wide, self.column(DB_INT32)).render() == "Int32"
        assert default_mk_type(narrow, self.column(DB_INT32)) == INT
        assert default_mk_type(narrow, self.column(DB_INT64)).render() == "Int64"

    def test_invalid_int_width(self):
        with pytest.raises(ValueError):
            TypeMappingConfig(native_int_width=16)

    def test_nullable_columns_are_optional(self):
        mapped = default_mk_type(TypeMappingConfig(), self.column(DB_DAY_TIME, nullable=True))

        assert mapped.render() == "Optional[datetime]"
        assert {t.module for t in mapped.walk()} == {"typing", "datetime"}

    def test_other_types_map_to_bytes(self):
        assert default_mk_type(TypeMappingConfig(), self.column(DbType.of_other("uuid"))) == BYTES

    def test_sqlite_affinity(self):
        assert affinity_type("VARCHAR(20)") == STR
        assert affinity_type("BIGINT") == INT
        assert affinity_type("clob") == STR
        assert affinity_type("") == BYTES
        assert affinity_type("DOUBLE PRECISION") == FLOAT
        assert affinity_type("NUMERIC") == BYTES
        # INT is checked first
        assert affinity_type("FLOATING POINT") == INT

    def test_sqlite_mk_type(self):
        config = TypeMappingConfig()

        assert sqlite_mk_type(config, self.column(DbType.of_other("nvarchar(10)"), nullable=True)).render() == (
            "Optional[str]"
        )
        assert sqlite_mk_type(config, self.column(DB_INT64)) == INT
