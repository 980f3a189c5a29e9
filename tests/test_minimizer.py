"""
Tests for mapping minimization against a baseline naming style.
"""

from unittest import TestCase

import pytest

from orm_inspector.data_gen import DataCodegenConfig, generate_data
from orm_inspector.domain.declarations import DataDeclaration, DataField
from orm_inspector.domain.dialects import POSTGRESQL
from orm_inspector.domain.mapping_models import ConstructorDef, EntityDef, FieldDef
from orm_inspector.domain.naming import (
    DefaultNamingStyle, DefaultReverseNamingStyle, PersistentNamingStyle, SnakeCaseNamingStyle,
)
from orm_inspector.domain.type_mapping import INT
from orm_inspector.exceptions import NotFoundInCollectionError
from orm_inspector.mapper import generate_mapping
from orm_inspector.minimizer import apply_defaults, baseline_entity, minimize_mapping


class TestMinimizeShop(TestCase):

    @pytest.fixture(autouse=True)
    def _schema(self, shop_tables, customers_name, orders_name, invoices_name):
        strategy = DefaultReverseNamingStyle()
        self.data = generate_data(DataCodegenConfig(), strategy, shop_tables)
        self.entities = generate_mapping(strategy, POSTGRESQL, shop_tables)
        self.style = DefaultNamingStyle()
        self.customers_name = customers_name
        self.orders_name = orders_name
        self.invoices_name = invoices_name

    def minimized(self, name):
        return minimize_mapping(self.style, self.data[name].declaration, self.entities[name])

    def test_values_implied_by_the_baseline_are_removed(self):
        assert self.minimized(self.orders_name).to_dict() == {
            'entity': "Order",
            'constructors': [
                {
                    'name': "Order",
                    'fields': [
                        {'name': "orderCustomerId", 'reference': {'onDelete': "CASCADE"}},
                        {'name': "orderStatus", 'default': "'new'"},
                    ],
                }
            ],
        }

    def test_keys_and_uniques_are_kept(self):
        assert self.minimized(self.customers_name).to_dict() == {
            'entity': "Customer",
            'keys': [{'name': "customers_email_key"}],
            'constructors': [
                {
                    'name': "Customer",
                    'uniques': [{'name': "customers_email_key", 'type': "constraint", 'fields': ["customerEmail"]}],
                }
            ],
        }

    def test_auto_key_mode_and_embedded_fields_are_kept(self):
        document = self.minimized(self.invoices_name).to_dict()

        assert document['autoKey'] is None
        assert document['constructors'][0]['fields'] == [
            {'name': "invoiceCustomerEmail", 'embeddedType': [{'name': "email", 'dbName': "customer_email"}]}
        ]

    def test_input_is_not_modified(self):
        before = self.entities[self.orders_name].to_dict()

        self.minimized(self.orders_name)

        assert self.entities[self.orders_name].to_dict() == before

    def test_round_trip(self):
        for style in (DefaultNamingStyle(), PersistentNamingStyle(), SnakeCaseNamingStyle()):
            for name, entity in self.entities.items():
                declaration = self.data[name].declaration
                minimized = minimize_mapping(style, declaration, entity)

                assert apply_defaults(minimized, style, declaration) == entity

    def test_generated_mapping_is_fully_resolved(self):
        for name, entity in self.entities.items():
            declaration = self.data[name].declaration

            assert apply_defaults(entity, self.style, declaration) == entity
            assert entity.constructors[0].db_name == declaration.constructor_name.lower()

    def test_minimizing_twice_changes_nothing(self):
        for name, entity in self.entities.items():
            declaration = self.data[name].declaration
            once = minimize_mapping(self.style, declaration, entity)

            assert minimize_mapping(self.style, declaration, once) == once


class TestMinimizeWithoutAutoKey(TestCase):

    @pytest.fixture(autouse=True)
    def _schema(self, geo_tables):
        strategy = DefaultReverseNamingStyle()
        self.data = generate_data(DataCodegenConfig(), strategy, geo_tables)
        self.entities = generate_mapping(strategy, POSTGRESQL, geo_tables)

    def test_round_trip_keeps_the_default_key(self):
        for style in (DefaultNamingStyle(), PersistentNamingStyle(), SnakeCaseNamingStyle()):
            for name, entity in self.entities.items():
                declaration = self.data[name].declaration
                minimized = minimize_mapping(style, declaration, entity)

                assert apply_defaults(minimized, style, declaration) == entity


class TestMinimizeDifferentNames(TestCase):

    def setUp(self):
        self.declaration = DataDeclaration(
            name="Order",
            constructor_name="Order",
            fields=[DataField("orderTotal", INT), DataField("orderNote", INT)],
        )

    def test_names_differing_from_the_baseline_stay(self):
        entity = EntityDef(
            name="Order",
            db_name="tbl_orders",
            constructors=[
                ConstructorDef(
                    name="Order",
                    key_db_name="order_id",
                    fields=[
                        FieldDef(name="orderTotal", db_name="total_cents", db_type="numeric(12,0)"),
                        FieldDef(name="orderNote", db_name="note"),
                    ],
                    uniques=[],
                )
            ],
        )

        minimized = minimize_mapping(DefaultNamingStyle(), self.declaration, entity)

        assert minimized.to_dict() == {
            'entity': "Order",
            'dbName': "tbl_orders",
            'constructors': [
                {
                    'name': "Order",
                    'keyDbName': "order_id",
                    'fields': [{'name': "orderTotal", 'dbName': "total_cents", 'type': "numeric(12,0)"}],
                }
            ],
        }

    def test_baseline_entity(self):
        baseline = baseline_entity(DefaultNamingStyle(), self.declaration)

        assert baseline.db_name == "orders"
        constructor = baseline.constructors[0]
        assert constructor.db_name == "order"
        assert constructor.key_db_name == "id"
        assert [(f.name, f.db_name) for f in constructor.fields] == [("orderTotal", "total"), ("orderNote", "note")]

    def test_apply_defaults_fills_every_field(self):
        resolved = apply_defaults(EntityDef(name="Order"), DefaultNamingStyle(), self.declaration)

        assert resolved.db_name == "orders"
        assert resolved.keys == []
        assert [f.db_name for f in resolved.constructors[0].fields] == ["total", "note"]
        assert resolved.constructors[0].key_db_name == "id"

    def test_apply_defaults_leaves_embedded_fields_without_column(self):
        entity = EntityDef(
            name="Order",
            constructors=[
                ConstructorDef(
                    name="Order",
                    fields=[FieldDef(name="orderTotal", embedded=[FieldDef(name="amount", db_name="total_cents")])],
                )
            ],
        )

        total, note = apply_defaults(entity, DefaultNamingStyle(), self.declaration).constructors[0].fields

        assert total.db_name is None
        assert total.embedded == [FieldDef(name="amount", db_name="total_cents")]
        assert note.db_name == "note"

    def test_apply_defaults_rejects_unknown_fields(self):
        entity = EntityDef(
            name="Order",
            constructors=[ConstructorDef(name="Order", fields=[FieldDef(name="orderMissing", db_name="x")])],
        )

        with pytest.raises(NotFoundInCollectionError):
            apply_defaults(entity, DefaultNamingStyle(), self.declaration)
