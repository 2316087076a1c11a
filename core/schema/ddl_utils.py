# ============================================================================
# DDL UTILITIES
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - DRY utilities for SQL DDL generation
# PURPOSE: Schema, type, table, index, function and trigger builders
#          using psycopg.sql
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: IndexBuilder, TableBuilder, TriggerBuilder, SchemaUtils
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

All methods return psycopg.sql.Composed objects for safe execution.
No string concatenation of identifiers - full SQL composition for
injection safety.

Usage:
    from core.schema.ddl_utils import IndexBuilder, TriggerBuilder

    idx = IndexBuilder.btree('audits', 'logged_actions', ['relation_id'])
    cursor.execute(idx)

    trg = TriggerBuilder.create(
        'log_action_row_trigger', 'shop', 'orders', 'audits', 'log_action',
        for_each='ROW', events=['INSERT', 'UPDATE', 'DELETE'],
    )
    cursor.execute(trg)
"""

import hashlib
from typing import Dict, Optional, Sequence, Union

from psycopg import sql

ColumnClause = Union[str, sql.Composable]

MAX_IDENTIFIER_LENGTH = 63


# ============================================================================
# INDEX BUILDER
# ============================================================================

def index_name(table: str, columns: Sequence[str], suffix: str = "") -> str:
    """
    idx_<table>_<columns>[_<suffix>].

    Names over PostgreSQL's 63 byte limit are cut and end in a hash of the
    full name, so two long names never collapse into one.
    """
    parts = ["idx", table, *columns]
    if suffix:
        parts.append(suffix)
    name = "_".join(parts)
    if len(name.encode()) <= MAX_IDENTIFIER_LENGTH:
        return name
    digest = hashlib.sha1(name.encode()).hexdigest()[:8]
    head = name.encode()[:MAX_IDENTIFIER_LENGTH - len(digest) - 1].decode(errors="ignore")
    return f"{head}_{digest}"


class IndexBuilder:
    """
    CREATE INDEX statements for audit and changeset tables.

    Names are explicit and carry no IF NOT EXISTS, so a clash with an
    existing index fails the statement.
    """

    @staticmethod
    def btree(
        schema: str,
        table: str,
        columns: Union[str, Sequence[str]],
        name: Optional[str] = None,
    ) -> sql.Composed:
        cols = [columns] if isinstance(columns, str) else list(columns)
        return sql.SQL("CREATE INDEX {name} ON {schema}.{table} ({columns})").format(
            name=sql.Identifier(name or index_name(table, cols)),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table),
            columns=sql.SQL(", ").join(map(sql.Identifier, cols)),
        )

    @staticmethod
    def using(
        schema: str,
        table: str,
        column: str,
        method: str,
        opclass: Optional[str] = None,
        name: Optional[str] = None,
    ) -> sql.Composed:
        """
        Index with an explicit access method, e.g.
        using("audits", "logged_actions", "row_data", "gin", "jsonb_path_ops").
        """
        target = sql.Identifier(column)
        if opclass:
            target = sql.SQL("{} {}").format(target, sql.SQL(opclass))

        return sql.SQL(
            "CREATE INDEX {name} ON {schema}.{table} USING {method} ({target})"
        ).format(
            name=sql.Identifier(name or index_name(table, [column], method.lower())),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table),
            method=sql.SQL(method.upper()),
            target=target,
        )


# ============================================================================
# TABLE BUILDER
# ============================================================================

class TableBuilder:
    """
    Builder for CREATE / DROP TABLE statements from an ordered column map.

    Column clauses are trusted SQL fragments (types and constraints);
    column names are always quoted.
    """

    @staticmethod
    def _clause(clause: ColumnClause) -> sql.Composable:
        if isinstance(clause, sql.Composable):
            return clause
        return sql.SQL(clause)

    @staticmethod
    def create(schema: str, table: str, columns: Dict[str, ColumnClause]) -> sql.Composed:
        """CREATE TABLE schema.table (col clause, ...)."""
        if not columns:
            raise ValueError(f"Table {schema}.{table} has no columns")

        column_sql = sql.SQL(", ").join(
            sql.SQL("{} {}").format(sql.Identifier(name), TableBuilder._clause(clause))
            for name, clause in columns.items()
        )
        return sql.SQL("CREATE TABLE {}.{} ({})").format(
            sql.Identifier(schema),
            sql.Identifier(table),
            column_sql,
        )

    @staticmethod
    def drop(schema: str, table: str) -> sql.Composed:
        return sql.SQL("DROP TABLE {}.{}").format(
            sql.Identifier(schema),
            sql.Identifier(table),
        )


# ============================================================================
# TRIGGER BUILDER
# ============================================================================

class TriggerBuilder:
    """
    Builder for PostgreSQL trigger DDL statements.
    """

    LEVELS = ("ROW", "STATEMENT")

    @staticmethod
    def create(
        trigger_name: str,
        schema: str,
        table: str,
        function_schema: str,
        function_name: str,
        for_each: str = "ROW",
        events: Sequence[str] = ("INSERT", "UPDATE", "DELETE"),
        args: Sequence[str] = (),
    ) -> sql.Composed:
        """
        Create an AFTER trigger executing function_schema.function_name().

        Args:
            trigger_name: Trigger name
            schema: Schema of the tracked table
            table: Tracked table
            function_schema: Schema of the trigger function
            function_name: Trigger function name
            for_each: 'ROW' or 'STATEMENT'
            events: Trigger events, joined with OR
            args: Literal string arguments passed as TG_ARGV
        """
        level = for_each.upper()
        if level not in TriggerBuilder.LEVELS:
            raise ValueError(f"Invalid trigger level: {for_each}")

        return sql.SQL(
            "CREATE TRIGGER {name} AFTER {events} ON {schema}.{table} "
            "FOR EACH {level} EXECUTE FUNCTION {fschema}.{function}({args})"
        ).format(
            name=sql.Identifier(trigger_name),
            events=sql.SQL(" OR ").join(sql.SQL(e.upper()) for e in events),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table),
            level=sql.SQL(level),
            fschema=sql.Identifier(function_schema),
            function=sql.Identifier(function_name),
            args=sql.SQL(", ").join(sql.Literal(a) for a in args),
        )

    @staticmethod
    def drop(trigger_name: str, schema: str, table: str, if_exists: bool = True) -> sql.Composed:
        stmt = "DROP TRIGGER IF EXISTS {name} ON {schema}.{table}" if if_exists \
            else "DROP TRIGGER {name} ON {schema}.{table}"
        return sql.SQL(stmt).format(
            name=sql.Identifier(trigger_name),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table),
        )


# ============================================================================
# SCHEMA UTILITIES
# ============================================================================

class SchemaUtils:
    """
    Utility methods for schema, type and function level DDL operations.
    """

    @staticmethod
    def create_schema(schema: str) -> sql.Composed:
        return sql.SQL("CREATE SCHEMA {}").format(sql.Identifier(schema))

    @staticmethod
    def drop_schema(schema: str) -> sql.Composed:
        # No CASCADE: a schema still holding objects must not be dropped
        return sql.SQL("DROP SCHEMA {}").format(sql.Identifier(schema))

    @staticmethod
    def create_enum(schema: str, type_name: str, values: Sequence[str]) -> sql.Composed:
        return sql.SQL("CREATE TYPE {}.{} AS ENUM ({})").format(
            sql.Identifier(schema),
            sql.Identifier(type_name),
            sql.SQL(", ").join(sql.Literal(v) for v in values),
        )

    @staticmethod
    def drop_type(schema: str, type_name: str) -> sql.Composed:
        return sql.SQL("DROP TYPE {}.{}").format(
            sql.Identifier(schema),
            sql.Identifier(type_name),
        )

    @staticmethod
    def drop_function(
        schema: str,
        function_name: str,
        arg_types: Sequence[str] = (),
        if_exists: bool = True,
    ) -> sql.Composed:
        """DROP FUNCTION with its argument signature."""
        stmt = "DROP FUNCTION IF EXISTS {}.{}({})" if if_exists else "DROP FUNCTION {}.{}({})"
        return sql.SQL(stmt).format(
            sql.Identifier(schema),
            sql.Identifier(function_name),
            sql.SQL(", ").join(sql.SQL(t) for t in arg_types),
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'ColumnClause',
    'IndexBuilder',
    'TableBuilder',
    'TriggerBuilder',
    'SchemaUtils',
]
