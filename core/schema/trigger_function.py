# ============================================================================
# AUDIT TRIGGER FUNCTION TEMPLATES
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - PL/pgSQL executed inside PostgreSQL
# PURPOSE: Versioned templates for the JSON utilities and log_action()
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: delete_keys_function, delete_values_function, log_action_function,
#          trigger_arguments, LOG_ACTION_VERSION
# DEPENDENCIES: psycopg
# ============================================================================
"""
Audit Trigger Function Templates.

This code runs in the database engine, not in this process. The templates
are rendered with psycopg.sql so schema/table identifiers are quoted; the
function bodies themselves are static.

log_action() behaviour, per event:
    1. Refuses to run unless fired AFTER the event.
    2. Builds one audit row (sequence id, origin, three timestamps, txid,
       operation, statement_only = false).
    3. TG_ARGV[0] boolean (default true): capture current_query().
    4. TG_ARGV[1] text[]: columns excluded from changed_fields on UPDATE
       and from row_data on INSERT / DELETE. UPDATE row_data is always
       the complete OLD row, excluded columns included.
    5. TG_ARGV[2] boolean (default true): capture session user,
       application name, client address and port.
    6. ROW UPDATE: row_data = full OLD row, changed_fields = NEW values differing
       from OLD minus excluded columns; nothing changed -> no audit row.
       ROW DELETE / INSERT: OLD / NEW minus excluded columns.
       STATEMENT events: statement_only = true.
       Anything else raises.
    7. Inserts the row and returns NULL.

The ROW(...) constructor lists values in the audit table's column order;
any change to the audit table columns needs a new LOG_ACTION_VERSION.
"""

from typing import List, Optional

from psycopg import sql

from core.contracts import (
    ACTION_TYPE_NAME,
    CHANGESET_SETTING,
    DELETE_KEYS_FUNCTION,
    DELETE_VALUES_FUNCTION,
    LOG_ACTION_FUNCTION,
)
from core.models.tracking import TriggerOptions

LOG_ACTION_VERSION = 2

DELETE_KEYS_ARGS = ("json", "text[]")
DELETE_VALUES_ARGS = ("json", "json")
LOG_ACTION_ARGS = ()


# ============================================================================
# JSON UTILITY FUNCTIONS
# ============================================================================

_DELETE_KEYS_TEMPLATE = """
CREATE OR REPLACE FUNCTION {schema}.{function}(_json json, VARIADIC _keys text[])
RETURNS json AS $BODY$
SELECT json_object_agg(key, value) AS json
FROM json_each(_json)
WHERE key <> ALL (_keys)
$BODY$
LANGUAGE sql
IMMUTABLE STRICT
"""

_DELETE_VALUES_TEMPLATE = """
CREATE OR REPLACE FUNCTION {schema}.{function}(_json json, _values json)
RETURNS json AS $BODY$
SELECT json_object_agg(a.key, a.value) AS json
FROM json_each(_json) a
JOIN json_each(_values) b
  ON a.key = b.key AND a.value::jsonb IS DISTINCT FROM b.value::jsonb
$BODY$
LANGUAGE sql
IMMUTABLE STRICT
"""


def delete_keys_function(schema: str) -> sql.Composed:
    """json_object_delete_keys(json, VARIADIC text[]): drop the named keys."""
    return sql.SQL(_DELETE_KEYS_TEMPLATE).format(
        schema=sql.Identifier(schema),
        function=sql.Identifier(DELETE_KEYS_FUNCTION),
    )


def delete_values_function(schema: str) -> sql.Composed:
    """json_object_delete_values(json, json): keep keys whose value differs."""
    return sql.SQL(_DELETE_VALUES_TEMPLATE).format(
        schema=sql.Identifier(schema),
        function=sql.Identifier(DELETE_VALUES_FUNCTION),
    )


# ============================================================================
# LOG_ACTION TRIGGER FUNCTION
# ============================================================================

_LOG_ACTION_TEMPLATE = """
CREATE OR REPLACE FUNCTION {schema}.{function}() RETURNS trigger AS $BODY$
DECLARE
    audit_row {schema}.{audit_table};
    excluded_cols text[] = ARRAY[]::text[];
BEGIN
    IF TG_WHEN <> 'AFTER' THEN
        RAISE EXCEPTION {timing_error};
    END IF;

    audit_row = ROW(
        nextval({sequence})     -- action_id
        ,TG_TABLE_SCHEMA::text  -- schema_name
        ,TG_TABLE_NAME::text    -- table_name
        ,TG_RELID               -- relation_id
        ,current_timestamp      -- transaction_date
        ,statement_timestamp()  -- statement_date
        ,clock_timestamp()      -- action_date
        ,txid_current()         -- transaction_id
        ,NULL::text             -- session_user_name
        ,NULL::text             -- application_name
        ,NULL::inet             -- client_addr
        ,NULL::integer          -- client_port
        ,NULL::text             -- query
        ,TG_OP::{schema}.{action_type}  -- action_type
        ,NULL::jsonb            -- row_data
        ,NULL::jsonb            -- changed_fields
        ,FALSE                  -- statement_only
        {changeset_column}
    );

    IF TG_ARGV[0]::boolean IS DISTINCT FROM FALSE THEN
        audit_row.query = current_query();
    END IF;

    IF TG_ARGV[1] IS NOT NULL THEN
        excluded_cols = TG_ARGV[1]::text[];
    END IF;

    IF TG_ARGV[2]::boolean IS DISTINCT FROM FALSE THEN
        audit_row.session_user_name = session_user::text;
        audit_row.application_name = current_setting('application_name');
        audit_row.client_addr = inet_client_addr();
        audit_row.client_port = inet_client_port();
    END IF;

    IF (TG_OP = 'UPDATE' AND TG_LEVEL = 'ROW') THEN
        audit_row.row_data = row_to_json(OLD)::jsonb;
        audit_row.changed_fields = {schema}.{delete_keys}(
            {schema}.{delete_values}(row_to_json(NEW), row_to_json(OLD)),
            VARIADIC excluded_cols
        )::jsonb;
        IF audit_row.changed_fields IS NULL THEN
            -- only excluded columns changed
            RETURN NULL;
        END IF;
    ELSIF (TG_OP = 'DELETE' AND TG_LEVEL = 'ROW') THEN
        audit_row.row_data = {schema}.{delete_keys}(row_to_json(OLD), VARIADIC excluded_cols)::jsonb;
    ELSIF (TG_OP = 'INSERT' AND TG_LEVEL = 'ROW') THEN
        audit_row.row_data = {schema}.{delete_keys}(row_to_json(NEW), VARIADIC excluded_cols)::jsonb;
    ELSIF (TG_LEVEL = 'STATEMENT' AND TG_OP IN ('INSERT', 'UPDATE', 'DELETE', 'TRUNCATE')) THEN
        audit_row.statement_only = TRUE;
    ELSE
        RAISE EXCEPTION {unhandled_error}, TG_OP, TG_LEVEL;
    END IF;

    INSERT INTO {schema}.{audit_table} VALUES (audit_row.*);
    RETURN NULL;
END;
$BODY$
LANGUAGE plpgsql VOLATILE SECURITY DEFINER
SET search_path = pg_catalog, pg_temp
"""


def _qualified(schema: str, name: str) -> str:
    """Quoted schema.name as text, for use inside string literals."""
    return f"{sql.Identifier(schema).as_string(None)}.{sql.Identifier(name).as_string(None)}"


def log_action_function(
    schema: str,
    audit_table: str,
    changeset_table: Optional[str] = None,
) -> sql.Composed:
    """
    Render log_action() bound to schema.audit_table.

    Args:
        schema: Audit schema
        audit_table: Audit table receiving the rows
        changeset_table: When set, rows also carry changeset_id read from
            the transaction-local audit.changeset_id setting
    """
    label = f"{schema}.{LOG_ACTION_FUNCTION}()"

    if changeset_table is None:
        changeset_column = sql.SQL("")
    else:
        changeset_column = sql.SQL(
            ",NULLIF(current_setting({setting}, true), '')::integer  -- changeset_id"
        ).format(setting=sql.Literal(CHANGESET_SETTING))

    return sql.SQL(_LOG_ACTION_TEMPLATE).format(
        schema=sql.Identifier(schema),
        function=sql.Identifier(LOG_ACTION_FUNCTION),
        audit_table=sql.Identifier(audit_table),
        action_type=sql.Identifier(ACTION_TYPE_NAME),
        delete_keys=sql.Identifier(DELETE_KEYS_FUNCTION),
        delete_values=sql.Identifier(DELETE_VALUES_FUNCTION),
        sequence=sql.Literal(_qualified(schema, f"{audit_table}_action_id_seq")),
        timing_error=sql.Literal(f"{label} may only run as an AFTER trigger"),
        unhandled_error=sql.Literal(
            f"[{label}] - Trigger func added as trigger for unhandled case: %, %"
        ),
        changeset_column=changeset_column,
    )


# ============================================================================
# TRIGGER ARGUMENTS
# ============================================================================

def _array_literal(values: List[str]) -> str:
    """Format a text[] input literal, e.g. {"a","b"}."""
    quoted = [
        '"' + v.replace("\\", "\\\\").replace('"', '\\"') + '"'
        for v in values
    ]
    return "{" + ",".join(quoted) + "}"


def trigger_arguments(options: Optional[TriggerOptions]) -> List[str]:
    """
    TG_ARGV values for log_action().

    Default options produce no arguments so log_action() falls back to its
    own defaults.
    """
    if options is None or options.is_default:
        return []
    return [
        "true" if options.log_query else "false",
        _array_literal(options.excluded_columns),
        "true" if options.log_client else "false",
    ]


__all__ = [
    "LOG_ACTION_VERSION",
    "DELETE_KEYS_ARGS",
    "DELETE_VALUES_ARGS",
    "LOG_ACTION_ARGS",
    "delete_keys_function",
    "delete_values_function",
    "log_action_function",
    "trigger_arguments",
]
