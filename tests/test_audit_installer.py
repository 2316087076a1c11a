# ============================================================================
# AUDIT INSTALLER TESTS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Tests - Planned DDL execution
# PURPOSE: Verify step results, dry run, rollback reporting and verification
# CREATED: 19 OCT 2026
# ============================================================================
"""
Audit Installer Tests

Unit tests with a mocked PostgreSQLRepository and an in-memory catalog.

Run with:
    pytest tests/test_audit_installer.py -v
"""

import psycopg
import pytest
from unittest.mock import MagicMock

from core.contracts import Direction
from core.models import TrackingConfigError
from infrastructure.audit_installer import SHARED_OBJECTS_HINT, AuditInstaller
from services.migration_planner import MigrationPlanner
from services.tracking_service import TrackingService


def _make_installer(catalog, config, defaults, tmp_path, execute_error=None, provision=True):
    """
    Create an AuditInstaller whose planner reads the fake catalog.

    Args:
        provision: Mark the model as installed once DDL is executed,
            so the verify step sees the target state.
    """
    db = MagicMock()
    db.fetch_one.return_value = {"version": "PostgreSQL 16.4", "db": "app"}

    def execute_in_transaction(statements):
        if execute_error:
            raise execute_error
        if provision:
            catalog.install_model(config)
        return len(statements)

    db.execute_in_transaction.side_effect = execute_in_transaction

    tracking = TrackingService(str(tmp_path / "absent.yaml"), defaults)
    tracking.register(config)

    installer = AuditInstaller(db=db, tracking=tracking)
    installer.planner = MigrationPlanner.from_inspector(catalog)
    return installer, db


class TestApply:

    def test_fresh_install(self, catalog, orders_config, defaults, tmp_path):
        installer, db = _make_installer(catalog, orders_config, defaults, tmp_path)
        result = installer.apply("orders", Direction.UP)

        assert result.success
        assert [s.name for s in result.steps] == ["test_connection", "plan", "execute", "verify"]
        assert all(s.status == "success" for s in result.steps)
        db.execute_in_transaction.assert_called_once()
        assert len(db.execute_in_transaction.call_args.args[0]) == len(result.statements)
        assert result.statements[0] == 'CREATE SCHEMA "audits"'

    def test_already_installed_skips_execution(self, catalog, orders_config, defaults, tmp_path):
        catalog.install_model(orders_config)
        installer, db = _make_installer(catalog, orders_config, defaults, tmp_path)
        result = installer.apply("orders", "up")

        assert result.success
        assert result.steps[-1].status == "skipped"
        db.execute_in_transaction.assert_not_called()

    def test_dry_run(self, catalog, orders_config, defaults, tmp_path):
        installer, db = _make_installer(catalog, orders_config, defaults, tmp_path)
        result = installer.apply("orders", dry_run=True)

        assert result.success
        assert result.dry_run
        assert result.statements
        assert "[DRY RUN]" in result.steps[-1].message
        db.execute_in_transaction.assert_not_called()

    def test_rollback_reported(self, catalog, orders_config, defaults, tmp_path):
        error = psycopg.errors.DuplicateObject('trigger "log_action_row_trigger" already exists')
        installer, _ = _make_installer(catalog, orders_config, defaults, tmp_path, execute_error=error)
        result = installer.apply("orders")

        assert not result.success
        assert result.steps[-1].name == "execute"
        assert result.steps[-1].status == "failed"
        assert "already exists" in result.errors[0]

    def test_dependent_objects_hint_on_down(self, catalog, orders_config, defaults, tmp_path):
        catalog.install_model(orders_config)
        error = psycopg.errors.DependentObjectsStillExist(
            "cannot drop function audits.log_action() because other objects depend on it"
        )
        installer, _ = _make_installer(catalog, orders_config, defaults, tmp_path, execute_error=error)
        result = installer.apply("orders", Direction.DOWN)

        assert not result.success
        step = result.steps[-1]
        assert step.status == "failed"
        assert step.details["hint"] == SHARED_OBJECTS_HINT

    def test_other_failures_carry_no_hint(self, catalog, orders_config, defaults, tmp_path):
        error = psycopg.errors.InsufficientPrivilege("permission denied for schema shop")
        installer, _ = _make_installer(catalog, orders_config, defaults, tmp_path, execute_error=error)
        result = installer.apply("orders")
        assert "hint" not in result.steps[-1].details

    def test_verification_failure_is_warning(self, catalog, orders_config, defaults, tmp_path):
        installer, _ = _make_installer(catalog, orders_config, defaults, tmp_path, provision=False)
        result = installer.apply("orders")

        assert result.success
        assert result.steps[-1].name == "verify"
        assert result.steps[-1].status == "failed"
        assert result.warnings

    def test_connection_failure(self, catalog, orders_config, defaults, tmp_path):
        installer, db = _make_installer(catalog, orders_config, defaults, tmp_path)
        db.fetch_one.side_effect = psycopg.OperationalError("connection refused")
        result = installer.apply("orders")

        assert not result.success
        assert [s.name for s in result.steps] == ["test_connection"]
        assert catalog.lookups == []

    def test_untracked_model(self, catalog, orders_config, defaults, tmp_path):
        installer, _ = _make_installer(catalog, orders_config, defaults, tmp_path)
        with pytest.raises(TrackingConfigError):
            installer.apply("unknown")

    def test_invalid_direction(self, catalog, orders_config, defaults, tmp_path):
        installer, _ = _make_installer(catalog, orders_config, defaults, tmp_path)
        with pytest.raises(ValueError):
            installer.apply("orders", "sideways")

    def test_to_dict_summary(self, catalog, orders_config, defaults, tmp_path):
        installer, _ = _make_installer(catalog, orders_config, defaults, tmp_path)
        summary = installer.apply("orders").to_dict()["summary"]
        assert summary == {"total_steps": 4, "successful": 4, "failed": 0, "skipped": 0}


class TestApplyAll:

    def test_stops_at_first_failure(self, catalog, orders_config, plain_config, defaults, tmp_path):
        error = psycopg.errors.InsufficientPrivilege("permission denied for schema audits")
        installer, db = _make_installer(catalog, orders_config, defaults, tmp_path, execute_error=error)
        installer.tracking.register(plain_config)

        results = installer.apply_all()
        assert len(results) == 1
        assert not results[0].success
