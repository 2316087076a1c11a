# ============================================================================
# CATALOG INSPECTOR
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Read-only system catalog predicates
# PURPOSE: Existence checks for schemas, types, functions, tables, triggers
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Inspector

Boolean existence predicates against the PostgreSQL system catalogs:

    schema_exists    pg_namespace
    type_exists      pg_type + pg_namespace
    function_exists  pg_proc (+ pg_namespace when a schema is given)
    table_exists     pg_class + pg_namespace (ordinary / partitioned tables)
    trigger_exists   pg_trigger + pg_class + pg_namespace

A missing object yields False. Connection or permission errors are logged
and propagated unchanged; nothing is retried.
"""

import logging
from typing import Optional

import psycopg

from core.contracts import DEFAULT_SCHEMA
from core.models.tracking import split_qualified_name

logger = logging.getLogger(__name__)


SCHEMA_EXISTS_SQL = """
    SELECT EXISTS (
        SELECT 1 FROM pg_catalog.pg_namespace
        WHERE nspname = %s
    ) AS exists
"""

TYPE_EXISTS_SQL = """
    SELECT EXISTS (
        SELECT 1
        FROM pg_catalog.pg_type t
        JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
        WHERE t.typname = %s AND n.nspname = %s
    ) AS exists
"""

FUNCTION_EXISTS_SQL = """
    SELECT EXISTS (
        SELECT 1 FROM pg_catalog.pg_proc
        WHERE proname = %s
    ) AS exists
"""

SCHEMA_FUNCTION_EXISTS_SQL = """
    SELECT EXISTS (
        SELECT 1
        FROM pg_catalog.pg_proc p
        JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
        WHERE p.proname = %s AND n.nspname = %s
    ) AS exists
"""

TABLE_EXISTS_SQL = """
    SELECT EXISTS (
        SELECT 1
        FROM pg_catalog.pg_class c
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
        WHERE n.nspname = %s AND c.relname = %s AND c.relkind IN ('r', 'p')
    ) AS exists
"""

TRIGGER_EXISTS_SQL = """
    SELECT EXISTS (
        SELECT 1
        FROM pg_catalog.pg_trigger t
        JOIN pg_catalog.pg_class c ON c.oid = t.tgrelid
        JOIN pg_catalog.pg_namespace n ON n.oid = c.relnamespace
        WHERE n.nspname = %s AND c.relname = %s AND t.tgname = %s
    ) AS exists
"""


class CatalogInspector:
    """
    Read-only existence predicates.

    Args:
        db: PostgreSQLRepository (or any object with fetch_one(query, params)
            returning a dict row)

    Usage:
        inspector = CatalogInspector(PostgreSQLRepository())
        if not inspector.schema_exists("audits"):
            ...
    """

    def __init__(self, db):
        self.db = db

    def _exists(self, query: str, params: tuple, description: str) -> bool:
        try:
            row = self.db.fetch_one(query, params)
        except psycopg.Error as e:
            logger.error(f"Catalog lookup failed for {description}: {e}")
            raise
        result = bool(row and row.get("exists"))
        logger.debug(f"Catalog: {description} exists={result}")
        return result

    def schema_exists(self, schema: str) -> bool:
        return self._exists(SCHEMA_EXISTS_SQL, (schema,), f"schema {schema}")

    def type_exists(self, type_name: str, schema: Optional[str] = None) -> bool:
        schema = schema or DEFAULT_SCHEMA
        return self._exists(TYPE_EXISTS_SQL, (type_name, schema), f"type {schema}.{type_name}")

    def function_exists(self, function_name: str, schema: Optional[str] = None) -> bool:
        """
        Whether a function with this name exists.

        With schema=None any schema matches.
        """
        if schema is None:
            return self._exists(FUNCTION_EXISTS_SQL, (function_name,), f"function {function_name}")
        return self._exists(
            SCHEMA_FUNCTION_EXISTS_SQL,
            (function_name, schema),
            f"function {schema}.{function_name}",
        )

    def table_exists(self, qualified_name: str) -> bool:
        """Whether "schema.table" (unqualified -> public) is a live table."""
        schema, table = split_qualified_name(qualified_name)
        schema = schema or DEFAULT_SCHEMA
        return self._exists(TABLE_EXISTS_SQL, (schema, table), f"table {schema}.{table}")

    def trigger_exists(self, qualified_table: str, trigger_name: str) -> bool:
        """Whether trigger_name is attached to "schema.table"."""
        schema, table = split_qualified_name(qualified_table)
        schema = schema or DEFAULT_SCHEMA
        return self._exists(
            TRIGGER_EXISTS_SQL,
            (schema, table, trigger_name),
            f"trigger {trigger_name} on {schema}.{table}",
        )


__all__ = [
    "CatalogInspector",
]
