"""
Tests for mapping definition generation.
"""

from unittest import TestCase

import pytest

from orm_inspector.domain.dialects import MYSQL, POSTGRESQL
from orm_inspector.domain.mapping_models import AutoKeyMode, FieldDef, ReferenceParent
from orm_inspector.domain.models import (
    DbType, QualifiedName, ReferenceAction, ReferenceInfo, UniqueDefInfo, UniqueExpr, UniqueKind,
    DB_INT32, DB_INT64, DB_STRING,
)
from orm_inspector.domain.naming import DefaultReverseNamingStyle
from orm_inspector.exceptions import MultipleAutoKeysError
from orm_inspector.mapper import MappingGenerator, generate_mapping


class TestShopMapping(TestCase):

    @pytest.fixture(autouse=True)
    def _schema(self, shop_tables, customers_name, orders_name, invoices_name):
        self.tables = shop_tables
        self.entities = generate_mapping(DefaultReverseNamingStyle(), POSTGRESQL, shop_tables)
        self.customer = self.entities[customers_name]
        self.order = self.entities[orders_name]
        self.invoice = self.entities[invoices_name]

    def test_one_entity_per_table_in_closure_order(self):
        assert list(self.entities) == list(self.tables)
        assert [e.name for e in self.entities.values()] == ["Customer", "Invoice", "Order"]

    def test_reference_to_autoincremented_key(self):
        assert self.order.to_dict() == {
            'entity': "Order",
            'dbName': "orders",
            'keys': [],
            'constructors': [
                {
                    'name': "Order",
                    'dbName': "order",
                    'keyDbName': "id",
                    'fields': [
                        {'name': "orderCustomerId", 'dbName': "customer_id", 'reference': {'onDelete': "CASCADE"}},
                        {'name': "orderAmount", 'dbName': "amount"},
                        {'name': "orderStatus", 'dbName': "status", 'default': "'new'"},
                    ],
                    'uniques': [],
                }
            ],
        }

    def test_referenced_unique_becomes_a_key(self):
        assert self.customer.auto_key is AutoKeyMode.AUTOINCREMENT
        assert [k.to_dict() for k in self.customer.keys] == [{'name': "customers_email_key"}]
        constructor = self.customer.constructors[0]
        assert [u.to_dict() for u in constructor.uniques] == [
            {'name': "customers_email_key", 'type': "constraint", 'fields': ["customerEmail"]}
        ]
        assert [f.name for f in constructor.fields] == ["customerEmail", "customerName"]

    def test_reference_to_unique_embeds_parent_columns(self):
        field = self.invoice.constructors[0].fields[1]

        assert field == FieldDef(
            name="invoiceCustomerEmail",
            embedded=[FieldDef(name="email", db_name="customer_email")],
            reference=ReferenceParent(),
        )
        # An empty reference is not written out
        assert 'reference' not in field.to_dict()

    def test_table_without_autoincrement(self):
        assert self.invoice.auto_key is AutoKeyMode.NONE
        assert self.invoice.constructors[0].key_db_name is None
        assert self.invoice.to_dict()['autoKey'] is None
        assert self.invoice.keys == []


class TestDefaultKey(TestCase):

    @pytest.fixture(autouse=True)
    def _schema(self, geo_tables):
        self.entities = generate_mapping(DefaultReverseNamingStyle(), POSTGRESQL, geo_tables)
        self.country = self.entities[QualifiedName(None, "countries")]
        self.city = self.entities[QualifiedName(None, "cities")]

    def test_used_unique_is_the_default_key_without_autoincrement(self):
        assert self.country.to_dict() == {
            'entity': "Country",
            'dbName': "countries",
            'autoKey': None,
            'keys': [{'name': "countriesCode0", 'default': True}],
            'constructors': [
                {
                    'name': "Country",
                    'dbName': "country",
                    'fields': [
                        {'name': "countryCode", 'dbName': "code"},
                        {'name': "countryName", 'dbName': "name"},
                    ],
                    'uniques': [{'name': "countriesCode0", 'type': "primary", 'fields': ["countryCode"]}],
                }
            ],
        }

    def test_referencing_field_embeds_the_parent_key(self):
        field = self.city.constructors[0].fields[0]

        assert field.to_dict() == {
            'name': "cityCountryCode",
            'embeddedType': [{'name': "code", 'dbName': "country_code"}],
        }


class TestFallbacks(TestCase):

    @pytest.fixture(autouse=True)
    def _factories(self, table_factory, auto_pk_factory, shop_tables, orders_name):
        self.table_factory = table_factory
        self.auto_pk = auto_pk_factory
        self.orders = shop_tables[orders_name]

    def test_unmapped_parent_keeps_plain_column_with_target(self):
        entities = generate_mapping(DefaultReverseNamingStyle(), POSTGRESQL, {self.orders.name: self.orders})

        field = entities[self.orders.name].constructors[0].fields[0]

        assert field.to_dict() == {
            'name': "orderCustomerId",
            'dbName': "customer_id",
            'reference': {'table': "customers", 'columns': ["id"], 'onDelete': "CASCADE"},
        }

    def test_composite_mismatch_is_embedded_with_target(self):
        warehouses = self.table_factory(
            "warehouses",
            [("region", DB_STRING, False), ("code", DB_STRING, False)],
            uniques=[UniqueDefInfo(UniqueKind.PRIMARY, ("region", "code"))],
            schema="inv",
        )
        stock = self.table_factory(
            "stock",
            [("id", DB_INT64, False), ("wh_region", DB_STRING, True), ("wh_code", DB_STRING, False)],
            uniques=[self.auto_pk()],
            references=[
                ReferenceInfo(QualifiedName("inv", "warehouses"), [("wh_region", "region"), ("wh_code", "code")])
            ],
            schema="inv",
        )

        entities = generate_mapping(
            DefaultReverseNamingStyle(), POSTGRESQL, {stock.name: stock, warehouses.name: warehouses}
        )

        field = entities[stock.name].constructors[0].fields[0]
        assert field.to_dict() == {
            'name': "stockWhRegionWhCode",
            'embeddedType': [
                {'name': "val0", 'dbName': "wh_region"},
                {'name': "val1", 'dbName': "wh_code"},
            ],
            'reference': {'schema': "inv", 'table': "warehouses", 'columns': ["region", "code"]},
        }
        assert entities[warehouses.name].keys == []
        assert entities[stock.name].schema == "inv"


class TestOverrides(TestCase):

    @pytest.fixture(autouse=True)
    def _factories(self, table_factory, auto_pk_factory):
        self.table_factory = table_factory
        self.auto_pk = auto_pk_factory
        self.parents = table_factory("parents", [("id", DB_INT64, False)], uniques=[auto_pk_factory()])

    def child(self, column_type: DbType, **reference_options):
        return self.table_factory(
            "children",
            [("id", DB_INT64, False), ("parent_id", column_type, False)],
            uniques=[self.auto_pk()],
            references=[
                ReferenceInfo(QualifiedName(None, "parents"), [("parent_id", "id")], **reference_options)
            ],
        )

    def field_of(self, child, dialect=POSTGRESQL) -> FieldDef:
        entities = generate_mapping(
            DefaultReverseNamingStyle(), dialect, {child.name: child, self.parents.name: self.parents}
        )
        return entities[child.name].constructors[0].fields[0]

    def test_auto_key_type_is_written_when_it_differs(self):
        assert self.field_of(self.child(DB_INT64)).db_type is None
        assert self.field_of(self.child(DB_INT32)).db_type == "INTEGER"

    def test_other_types_keep_the_dialect_spelling(self):
        assert self.field_of(self.child(DbType.of_other("numeric(20,0)"))).db_type == "numeric(20,0)"

    def test_default_actions_are_omitted(self):
        field = self.field_of(
            self.child(DB_INT64, on_delete=ReferenceAction.NO_ACTION, on_update=ReferenceAction.CASCADE)
        )

        assert field.reference == ReferenceParent(on_update=ReferenceAction.CASCADE)

    def test_default_actions_depend_on_the_dialect(self):
        child = self.child(DB_INT64, on_delete=ReferenceAction.RESTRICT, on_update=ReferenceAction.NO_ACTION)

        assert self.field_of(child, MYSQL).reference == ReferenceParent(on_update=ReferenceAction.NO_ACTION)
        assert self.field_of(child, POSTGRESQL).reference == ReferenceParent(on_delete=ReferenceAction.RESTRICT)


class TestUniquesAndAutoKeys(TestCase):

    @pytest.fixture(autouse=True)
    def _factories(self, table_factory):
        self.table_factory = table_factory

    def test_expression_uniques_are_kept(self):
        table = self.table_factory(
            "accounts",
            [("login", DB_STRING, False)],
            uniques=[UniqueDefInfo(UniqueKind.INDEX, ("login", UniqueExpr("lower(login)")), name="accounts_login_idx")],
        )

        entity = MappingGenerator(DefaultReverseNamingStyle(), POSTGRESQL, {table.name: table}).generate(table)

        assert entity.constructors[0].uniques[0].to_dict() == {
            'name': "accounts_login_idx",
            'type': "index",
            'fields': ["accountLogin", {'expr': "lower(login)"}],
        }

    def test_several_autoincremented_columns_raise(self):
        table = self.table_factory(
            "pairs",
            [("a", DB_INT64, False), ("b", DB_INT64, False)],
            uniques=[UniqueDefInfo(UniqueKind.PRIMARY, ("a", "b"), auto_increment=True)],
        )

        with pytest.raises(MultipleAutoKeysError) as excinfo:
            generate_mapping(DefaultReverseNamingStyle(), POSTGRESQL, {table.name: table})

        assert excinfo.value.context['columns'] == ["a", "b"]

    def test_auto_key_column_name_is_kept(self):
        table = self.table_factory(
            "tags",
            [("tag_id", DB_INT64, False), ("label", DB_STRING, False)],
            uniques=[UniqueDefInfo(UniqueKind.PRIMARY, ("tag_id",), auto_increment=True)],
        )

        entity = generate_mapping(DefaultReverseNamingStyle(), POSTGRESQL, {table.name: table})[table.name]

        assert entity.constructors[0].key_db_name == "tag_id"
        assert [f.name for f in entity.constructors[0].fields] == ["tagLabel"]
