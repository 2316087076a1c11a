# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Tests - In-memory catalog and tracked model fixtures
# PURPOSE: Exercise planning and health logic without a database
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shared fixtures.

FakeCatalog answers the CatalogInspector predicates from in-memory sets and
records every lookup, so tests can assert both on the planned DDL and on
which catalog questions were asked.
"""

import pytest

from core.config import AuditDefaults
from core.contracts import (
    ACTION_TYPE_NAME,
    DELETE_KEYS_FUNCTION,
    DELETE_VALUES_FUNCTION,
    LOG_ACTION_FUNCTION,
    ROW_TRIGGER_NAME,
    STMT_TRIGGER_NAME,
)
from core.models import TrackedModelConfig


class FakeCatalog:
    """In-memory stand-in for CatalogInspector."""

    def __init__(self):
        self.schemas = set()
        self.types = set()        # (schema, name)
        self.functions = set()    # (schema, name)
        self.tables = set()       # "schema.table"
        self.triggers = set()     # ("schema.table", trigger)
        self.lookups = []

    def schema_exists(self, schema):
        self.lookups.append(("schema", schema))
        return schema in self.schemas

    def type_exists(self, type_name, schema=None):
        self.lookups.append(("type", schema, type_name))
        return (schema or "public", type_name) in self.types

    def function_exists(self, function_name, schema=None):
        self.lookups.append(("function", schema, function_name))
        if schema is None:
            return any(name == function_name for _, name in self.functions)
        return (schema, function_name) in self.functions

    def table_exists(self, qualified_name):
        self.lookups.append(("table", qualified_name))
        return qualified_name in self.tables

    def trigger_exists(self, qualified_table, trigger_name):
        self.lookups.append(("trigger", qualified_table, trigger_name))
        return (qualified_table, trigger_name) in self.triggers

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def install_shared(self, schema="audits"):
        """Schema, enum and all three functions."""
        self.schemas.add(schema)
        self.types.add((schema, ACTION_TYPE_NAME))
        for name in (DELETE_KEYS_FUNCTION, DELETE_VALUES_FUNCTION, LOG_ACTION_FUNCTION):
            self.functions.add((schema, name))

    def install_model(self, config: TrackedModelConfig):
        """Everything a fully provisioned model has."""
        names = config.resolve()
        self.install_shared(names.schema_name)
        self.tables.add(names.qualified_audit_table)
        if names.changeset_table:
            self.tables.add(names.qualified_changeset_table)
        self.triggers.add((names.source_table, ROW_TRIGGER_NAME))
        self.triggers.add((names.source_table, STMT_TRIGGER_NAME))


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def orders_config():
    """Tracked model with a changeset table."""
    return TrackedModelConfig(
        model_id="orders",
        table_name="shop.orders",
        audit_table_name="audits.logged_actions",
        changeset_table_name="audits.changesets",
    )


@pytest.fixture
def plain_config():
    """Tracked model without changesets."""
    return TrackedModelConfig(
        model_id="customers",
        table_name="shop.customers",
        audit_table_name="audits.logged_actions",
    )


@pytest.fixture
def defaults():
    return AuditDefaults(
        audit_schema="audits",
        audit_table="logged_actions",
        changeset_table="changesets",
        tracking_file="audit_tracking.yaml",
    )


def render(statement) -> str:
    """SQL text of a psycopg Composable."""
    return statement.as_string(None)
