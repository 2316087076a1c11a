# ============================================================================
# AUDIT DDL TEMPLATES
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - DDL generators for the audit object graph
# PURPOSE: Forward/reverse DDL plus live existence for schema, enum type,
#          functions, tables and triggers
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: AuditTemplateGenerator, audit_columns, changeset_columns
# DEPENDENCIES: psycopg
# ============================================================================
"""
Audit DDL Templates.

Each template returns the "up" statements, the "down" statements (exact
structural reverse of up) and the catalog existence of what it describes.
Templates are deterministic given their inputs; existence is evaluated
through the CatalogInspector on every call.

Object graph, in creation order:
    schema -> action_type -> [changeset table] -> audit table
           -> json_object_delete_keys -> json_object_delete_values
           -> log_action -> row trigger -> statement trigger

The schema default is "public" whenever a template is called without one.
"""

import logging
from typing import Dict, List, Optional

from psycopg import sql

from core.contracts import (
    ACTION_TYPE_NAME,
    DEFAULT_SCHEMA,
    DELETE_KEYS_FUNCTION,
    DELETE_VALUES_FUNCTION,
    LOG_ACTION_FUNCTION,
    ROW_TRIGGER_NAME,
    STMT_TRIGGER_NAME,
    ActionType,
    AuditObjectKind,
)
from core.models.audit_objects import (
    AuditObjectSpec,
    AuditTableSpec,
    ColumnListIndex,
    RawClauseIndex,
)
from core.models.tracking import TriggerOptions, split_qualified_name
from core.schema.ddl_utils import (
    ColumnClause,
    IndexBuilder,
    SchemaUtils,
    TableBuilder,
    TriggerBuilder,
)
from core.schema.trigger_function import (
    DELETE_KEYS_ARGS,
    DELETE_VALUES_ARGS,
    LOG_ACTION_ARGS,
    delete_keys_function,
    delete_values_function,
    log_action_function,
    trigger_arguments,
)

logger = logging.getLogger(__name__)

ROW_TRIGGER_EVENTS = ("INSERT", "UPDATE", "DELETE")
STMT_TRIGGER_EVENTS = ("INSERT", "UPDATE", "DELETE", "TRUNCATE")


# ============================================================================
# COLUMN SETS
# ============================================================================

def changeset_columns() -> Dict[str, ColumnClause]:
    """Fixed columns of the changeset table."""
    return {
        "id": "serial NOT NULL PRIMARY KEY",
        "transaction_id": "bigint",
        "user_id": "integer",
        "session_id": "text",
        "request_date": "timestamp with time zone NOT NULL",
        "request_url": "text",
        "request_addr": "inet",
    }


def audit_columns(schema: str, changeset_table: Optional[str] = None) -> Dict[str, ColumnClause]:
    """
    Fixed columns of the audit table, in the order log_action() fills them.
    """
    columns: Dict[str, ColumnClause] = {
        "action_id": "bigserial NOT NULL PRIMARY KEY",
        "schema_name": "text NOT NULL",
        "table_name": "text NOT NULL",
        "relation_id": "oid NOT NULL",
        "transaction_date": "timestamp with time zone NOT NULL",
        "statement_date": "timestamp with time zone NOT NULL",
        "action_date": "timestamp with time zone NOT NULL",
        "transaction_id": "bigint",
        "session_user_name": "text",
        "application_name": "text",
        "client_addr": "inet",
        "client_port": "integer",
        "query": "text",
        "action_type": sql.SQL("{}.{} NOT NULL").format(
            sql.Identifier(schema), sql.Identifier(ACTION_TYPE_NAME)
        ),
        "row_data": "jsonb",
        "changed_fields": "jsonb",
        "statement_only": "boolean NOT NULL DEFAULT FALSE",
    }
    if changeset_table is not None:
        columns["changeset_id"] = sql.SQL(
            "integer REFERENCES {}.{} (id) ON UPDATE CASCADE ON DELETE CASCADE"
        ).format(sql.Identifier(schema), sql.Identifier(changeset_table))
    return columns


CHANGESET_INDEXES = [
    ColumnListIndex(("transaction_id",)),
    ColumnListIndex(("user_id",)),
    ColumnListIndex(("session_id",)),
    ColumnListIndex(("request_url",)),
    ColumnListIndex(("request_addr",)),
]

AUDIT_INDEXES = [
    ColumnListIndex(("schema_name", "table_name")),
    ColumnListIndex(("relation_id",)),
    ColumnListIndex(("statement_date",)),
    ColumnListIndex(("action_type",)),
    RawClauseIndex("row_data", method="GIN", opclass="jsonb_path_ops"),
]


# ============================================================================
# TEMPLATE GENERATOR
# ============================================================================

class AuditTemplateGenerator:
    """
    Builds AuditObjectSpec / AuditTableSpec instances.

    Args:
        inspector: CatalogInspector (or any object with the same exists
            methods) used to evaluate existence predicates
    """

    def __init__(self, inspector):
        self.inspector = inspector

    # =========================================================================
    # SCHEMA & TYPE
    # =========================================================================

    def schema_template(self, schema: str) -> AuditObjectSpec:
        """
        CREATE / DROP SCHEMA.

        The planner never applies the down statement; see MigrationPlanner.
        """
        return AuditObjectSpec(
            kind=AuditObjectKind.SCHEMA,
            name=schema,
            up={schema: SchemaUtils.create_schema(schema)},
            down={schema: SchemaUtils.drop_schema(schema)},
            present={schema: self.inspector.schema_exists(schema)},
        )

    def action_type_template(self, schema: Optional[str] = None) -> AuditObjectSpec:
        """CREATE / DROP TYPE <schema>.action_type."""
        schema = schema or DEFAULT_SCHEMA
        name = f"{schema}.{ACTION_TYPE_NAME}"
        return AuditObjectSpec(
            kind=AuditObjectKind.TYPE,
            name=name,
            up={name: SchemaUtils.create_enum(schema, ACTION_TYPE_NAME, [a.value for a in ActionType])},
            down={name: SchemaUtils.drop_type(schema, ACTION_TYPE_NAME)},
            present={name: self.inspector.type_exists(ACTION_TYPE_NAME, schema)},
        )

    # =========================================================================
    # FUNCTIONS
    # =========================================================================

    def function_template(
        self,
        audit_table: str,
        changeset_table: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> AuditObjectSpec:
        """
        The two JSON utilities and log_action(), in dependency order.

        Down drops log_action() first and the utilities last.
        """
        schema = schema or DEFAULT_SCHEMA
        keys = f"{schema}.{DELETE_KEYS_FUNCTION}()"
        values = f"{schema}.{DELETE_VALUES_FUNCTION}()"
        log_action = f"{schema}.{LOG_ACTION_FUNCTION}()"

        up = {
            keys: delete_keys_function(schema),
            values: delete_values_function(schema),
            log_action: log_action_function(schema, audit_table, changeset_table),
        }
        down = {
            log_action: SchemaUtils.drop_function(schema, LOG_ACTION_FUNCTION, LOG_ACTION_ARGS),
            values: SchemaUtils.drop_function(schema, DELETE_VALUES_FUNCTION, DELETE_VALUES_ARGS),
            keys: SchemaUtils.drop_function(schema, DELETE_KEYS_FUNCTION, DELETE_KEYS_ARGS),
        }
        present = {
            keys: self.inspector.function_exists(DELETE_KEYS_FUNCTION, schema),
            values: self.inspector.function_exists(DELETE_VALUES_FUNCTION, schema),
            log_action: self.inspector.function_exists(LOG_ACTION_FUNCTION, schema),
        }
        return AuditObjectSpec(
            kind=AuditObjectKind.FUNCTION,
            name=log_action,
            up=up,
            down=down,
            present=present,
            replaceable=True,
        )

    # =========================================================================
    # TABLES
    # =========================================================================

    def table_templates(
        self,
        audit_table: str,
        changeset_table: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> List[AuditTableSpec]:
        """
        Table specs in creation order: changeset table (if any), audit table.
        """
        schema = schema or DEFAULT_SCHEMA
        result = []

        if changeset_table is not None:
            result.append(AuditTableSpec(
                schema_name=schema,
                table_name=changeset_table,
                columns=changeset_columns(),
                indexes=list(CHANGESET_INDEXES),
                exists=self.inspector.table_exists(f"{schema}.{changeset_table}"),
            ))

        result.append(AuditTableSpec(
            schema_name=schema,
            table_name=audit_table,
            columns=audit_columns(schema, changeset_table),
            indexes=list(AUDIT_INDEXES),
            exists=self.inspector.table_exists(f"{schema}.{audit_table}"),
        ))
        return result

    @staticmethod
    def create_table_statements(spec: AuditTableSpec) -> Dict[str, sql.Composable]:
        """CREATE TABLE followed by one CREATE INDEX per index spec."""
        statements: Dict[str, sql.Composable] = {
            spec.name: TableBuilder.create(spec.schema_name, spec.table_name, spec.columns),
        }
        for index in spec.indexes:
            if isinstance(index, ColumnListIndex):
                stmt = IndexBuilder.btree(spec.schema_name, spec.table_name, index.columns)
                label = f"{spec.name}({', '.join(index.columns)})"
            elif isinstance(index, RawClauseIndex):
                stmt = IndexBuilder.using(
                    spec.schema_name, spec.table_name, index.column,
                    index.method, opclass=index.opclass,
                )
                label = f"{spec.name}({index.column}) USING {index.method}"
            else:
                raise TypeError(f"Unsupported index spec: {index!r}")
            statements[label] = stmt
        return statements

    @staticmethod
    def drop_table_statement(spec: AuditTableSpec) -> sql.Composable:
        return TableBuilder.drop(spec.schema_name, spec.table_name)

    # =========================================================================
    # TRIGGERS
    # =========================================================================

    def trigger_template(
        self,
        table_name: str,
        schema: Optional[str] = None,
        options: Optional[TriggerOptions] = None,
    ) -> AuditObjectSpec:
        """
        Row and statement triggers on table_name calling <schema>.log_action().

        Args:
            table_name: Tracked table, "schema.table" (unqualified -> public)
            schema: Schema holding log_action()
            options: Trigger arguments (query/client capture, excluded columns)
        """
        schema = schema or DEFAULT_SCHEMA
        table_schema, table = split_qualified_name(table_name)
        table_schema = table_schema or DEFAULT_SCHEMA
        qualified = f"{table_schema}.{table}"
        args = trigger_arguments(options)

        up = {
            ROW_TRIGGER_NAME: TriggerBuilder.create(
                ROW_TRIGGER_NAME, table_schema, table, schema, LOG_ACTION_FUNCTION,
                for_each="ROW", events=ROW_TRIGGER_EVENTS, args=args,
            ),
            STMT_TRIGGER_NAME: TriggerBuilder.create(
                STMT_TRIGGER_NAME, table_schema, table, schema, LOG_ACTION_FUNCTION,
                for_each="STATEMENT", events=STMT_TRIGGER_EVENTS, args=args,
            ),
        }
        down = {
            STMT_TRIGGER_NAME: TriggerBuilder.drop(STMT_TRIGGER_NAME, table_schema, table),
            ROW_TRIGGER_NAME: TriggerBuilder.drop(ROW_TRIGGER_NAME, table_schema, table),
        }
        present = {
            ROW_TRIGGER_NAME: self.inspector.trigger_exists(qualified, ROW_TRIGGER_NAME),
            STMT_TRIGGER_NAME: self.inspector.trigger_exists(qualified, STMT_TRIGGER_NAME),
        }
        return AuditObjectSpec(
            kind=AuditObjectKind.TRIGGER,
            name=qualified,
            up=up,
            down=down,
            present=present,
        )


__all__ = [
    "AuditTemplateGenerator",
    "audit_columns",
    "changeset_columns",
    "CHANGESET_INDEXES",
    "AUDIT_INDEXES",
    "ROW_TRIGGER_EVENTS",
    "STMT_TRIGGER_EVENTS",
]
