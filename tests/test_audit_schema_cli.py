# ============================================================================
# AUDIT SCHEMA CLI TESTS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Tests - scripts/audit_schema.py
# PURPOSE: Verify sub-commands, exit codes and printed DDL
# CREATED: 19 OCT 2026
# ============================================================================
"""
Audit Schema CLI Tests

The catalog and repository are patched; no database is needed.

Run with:
    pytest tests/test_audit_schema_cli.py -v
"""

import json

import psycopg
import pytest
from unittest.mock import MagicMock, patch

from scripts import audit_schema

TRACKING_YAML = """
models:
  orders:
    table: shop.orders
    audit_table: audits.logged_actions
    changeset_table: audits.changesets
"""


@pytest.fixture
def tracking_file(tmp_path):
    path = tmp_path / "audit_tracking.yaml"
    path.write_text(TRACKING_YAML)
    return str(path)


@pytest.fixture
def cli(catalog):
    """Run main() against the fake catalog and a mocked repository."""
    db = MagicMock()
    db.fetch_one.return_value = {"version": "PostgreSQL 16.4", "db": "app", "health_check": 1}

    with patch.object(audit_schema, "configure_logging"), \
            patch.object(audit_schema, "PostgreSQLRepository", return_value=db), \
            patch.object(audit_schema, "CatalogInspector", return_value=catalog), \
            patch("infrastructure.audit_installer.CatalogInspector", return_value=catalog), \
            patch("infrastructure.catalog.CatalogInspector", return_value=catalog):
        def run(*argv):
            return audit_schema.main(list(argv))

        run.db = db
        yield run


class TestPlan:

    def test_plan_up_prints_ddl(self, cli, tracking_file, capsys):
        assert cli("--tracking-file", tracking_file, "plan", "orders") == 0
        out = capsys.readouterr().out
        assert "-- orders (up): " in out
        assert "-- orders (up): 0 statements" not in out
        assert 'CREATE SCHEMA "audits";' in out

    def test_plan_down_nothing_installed(self, cli, tracking_file, capsys):
        assert cli("--tracking-file", tracking_file, "plan", "--all", "--down") == 0
        assert "-- orders (down): 0 statements" in capsys.readouterr().out

    def test_untracked_model(self, cli, tracking_file, capsys):
        assert cli("--tracking-file", tracking_file, "plan", "unknown") == 2
        assert "Model is not tracked: unknown" in capsys.readouterr().out


class TestCheck:

    def test_missing_objects(self, cli, tracking_file, capsys):
        assert cli("--tracking-file", tracking_file, "check") == 1
        out = capsys.readouterr().out
        assert "[FAIL] Missing db schema: audits" in out
        assert "[FAIL] orders: enabled=True valid=False" in out

    def test_installed(self, cli, catalog, orders_config, tracking_file, capsys):
        catalog.install_model(orders_config)
        assert cli("--tracking-file", tracking_file, "check") == 0
        assert "[OK] orders: enabled=True valid=True" in capsys.readouterr().out

    def test_untracked_model_skipped(self, cli, tracking_file, capsys):
        cli("--tracking-file", tracking_file, "check", "unknown")
        assert "[SKIP] unknown: not tracked" in capsys.readouterr().out


class TestApply:

    def test_dry_run(self, cli, tracking_file, capsys):
        assert cli("--tracking-file", tracking_file, "apply", "orders", "--dry-run") == 0
        out = capsys.readouterr().out
        assert "[OK] execute: [DRY RUN] Would execute " in out
        assert 'CREATE SCHEMA "audits";' in out

    def test_down_blocked_by_other_models_prints_hint(self, cli, catalog, orders_config, tracking_file, capsys):
        catalog.install_model(orders_config)
        cli.db.execute_in_transaction.side_effect = psycopg.errors.DependentObjectsStillExist(
            "cannot drop function audits.log_action() because other objects depend on it"
        )

        assert cli("--tracking-file", tracking_file, "apply", "orders", "--down") == 1
        out = capsys.readouterr().out
        assert "[FAIL] execute" in out
        assert "Hint: Other tracked models in this audit schema" in out

    def test_invalid_arguments(self, cli):
        with pytest.raises(SystemExit):
            cli("apply", "--sideways")


class TestHealth:

    def test_health_json(self, cli, tracking_file, capsys):
        assert cli("--tracking-file", tracking_file, "health") == 1
        out = capsys.readouterr().out
        report = json.loads(out[out.index("{"):])
        assert report["status"] == "unhealthy"
        assert report["checks"]["postgres"]["status"] == "healthy"
        assert report["checks"]["audit_objects"]["status"] == "unhealthy"
