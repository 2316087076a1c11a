# ============================================================================
# TRIGGER FUNCTION TEMPLATE TESTS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Tests - log_action() and JSON utility templates
# PURPOSE: Verify rendered PL/pgSQL and trigger argument encoding
# CREATED: 19 OCT 2026
# ============================================================================
"""
Trigger Function Template Tests

Behaviour inside PostgreSQL is covered by test_audit_integration.py; these
tests check the rendered text.

Run with:
    pytest tests/test_trigger_function.py -v
"""

from core.models import TriggerOptions
from core.schema.trigger_function import (
    delete_keys_function,
    delete_values_function,
    log_action_function,
    trigger_arguments,
)
from conftest import render


class TestJsonUtilities:

    def test_delete_keys_signature(self):
        text = render(delete_keys_function("audits"))
        assert 'CREATE OR REPLACE FUNCTION "audits"."json_object_delete_keys"' \
            '(_json json, VARIADIC _keys text[])' in text
        assert "key <> ALL (_keys)" in text
        assert "IMMUTABLE STRICT" in text

    def test_delete_values_compares_as_jsonb(self):
        text = render(delete_values_function("audits"))
        assert '"audits"."json_object_delete_values"(_json json, _values json)' in text
        assert "a.value::jsonb IS DISTINCT FROM b.value::jsonb" in text


class TestLogActionFunction:

    def test_binds_audit_table_and_sequence(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert 'CREATE OR REPLACE FUNCTION "audits"."log_action"() RETURNS trigger' in text
        assert 'audit_row "audits"."logged_actions";' in text
        assert "nextval('\"audits\".\"logged_actions_action_id_seq\"')" in text
        assert 'INSERT INTO "audits"."logged_actions" VALUES (audit_row.*)' in text

    def test_security_definer_with_pinned_search_path(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert "SECURITY DEFINER" in text
        assert "SET search_path = pg_catalog, pg_temp" in text

    def test_capture_flags_default_to_true(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert "TG_ARGV[0]::boolean IS DISTINCT FROM FALSE" in text
        assert "TG_ARGV[2]::boolean IS DISTINCT FROM FALSE" in text

    def test_update_diff_drops_empty_changes(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert '"audits"."json_object_delete_values"(row_to_json(NEW), row_to_json(OLD))' in text
        assert "IF audit_row.changed_fields IS NULL THEN" in text

    def test_statement_level_includes_truncate(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert "TG_LEVEL = 'STATEMENT' AND TG_OP IN ('INSERT', 'UPDATE', 'DELETE', 'TRUNCATE')" in text

    def test_action_type_cast(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert 'TG_OP::"audits"."action_type"' in text

    def test_without_changeset(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert "audit.changeset_id" not in text

    def test_with_changeset_reads_local_setting(self):
        text = render(log_action_function("audits", "logged_actions", "changesets"))
        assert "NULLIF(current_setting('audit.changeset_id', true), '')::integer" in text

    def test_error_messages_name_function(self):
        text = render(log_action_function("audits", "logged_actions"))
        assert "audits.log_action() may only run as an AFTER trigger" in text
        assert "unhandled case: %, %" in text


class TestTriggerArguments:

    def test_defaults_produce_no_arguments(self):
        assert trigger_arguments(None) == []
        assert trigger_arguments(TriggerOptions()) == []

    def test_excluded_columns(self):
        options = TriggerOptions(excluded_columns=["updated_at", "token"])
        assert trigger_arguments(options) == ["true", '{"updated_at","token"}', "true"]

    def test_flags_off(self):
        options = TriggerOptions(log_query=False, log_client=False)
        assert trigger_arguments(options) == ["false", "{}", "false"]

    def test_array_literal_escaping(self):
        options = TriggerOptions(excluded_columns=['we"ird'])
        assert trigger_arguments(options)[1] == '{"we\\"ird"}'
