# ============================================================================
# TRACKING SERVICE TESTS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Tests - YAML tracked-model configuration
# PURPOSE: Verify loading, defaults, disabling and registration
# CREATED: 19 OCT 2026
# ============================================================================
"""
Tracking Service Tests

Run with:
    pytest tests/test_tracking_service.py -v
"""

import pytest

from core.config import AuditDefaults
from core.models import TrackedModelConfig, TrackingConfigError
from services.tracking_service import TrackingService

TRACKING_YAML = """
defaults:
  audit_table: history.actions
  changeset_table: history.requests

models:
  orders:
    table: shop.orders
    options:
      excluded_columns: [updated_at]
  sessions:
    table: public.sessions
    changeset_table: null
  archived:
    table: shop.archived
    enabled: false
  customers:
    table: shop.customers
    audit_table: audits.customer_log
    changeset_table: audits.customer_requests
"""


@pytest.fixture
def tracking_file(tmp_path):
    path = tmp_path / "audit_tracking.yaml"
    path.write_text(TRACKING_YAML)
    return path


@pytest.fixture
def service(tracking_file, defaults):
    return TrackingService(str(tracking_file), defaults)


class TestLoading:

    def test_load_all_skips_disabled(self, service):
        assert service.load_all() == 3
        assert service.get("archived") is None

    def test_file_defaults_applied(self, service):
        config = service.get("orders")
        assert config.table_name == "shop.orders"
        assert config.audit_table_name == "history.actions"
        assert config.changeset_table_name == "history.requests"
        assert config.trigger_options.excluded_columns == ["updated_at"]

    def test_explicit_null_disables_changesets(self, service):
        assert service.get("sessions").changeset_table_name is None

    def test_model_overrides(self, service):
        config = service.get("customers")
        assert config.resolve().qualified_audit_table == "audits.customer_log"

    def test_untracked_model(self, service):
        assert service.get("unknown") is None
        with pytest.raises(TrackingConfigError, match="not tracked"):
            service.get_or_raise("unknown")

    def test_list_all(self, service):
        assert sorted(c.model_id for c in service.list_all()) == ["customers", "orders", "sessions"]

    def test_missing_file(self, tmp_path, defaults):
        service = TrackingService(str(tmp_path / "absent.yaml"), defaults)
        assert service.load_all() == 0
        assert service.list_all() == []

    def test_environment_defaults_used_without_file_defaults(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("models:\n  notes:\n    table: notes\n")
        defaults = AuditDefaults(audit_schema="logs", audit_table="actions", changeset_table=None)

        config = TrackingService(str(path), defaults).get("notes")
        assert config.audit_table_name == "logs.actions"
        assert config.changeset_table_name is None

    def test_reload(self, service, tracking_file):
        service.load_all()
        tracking_file.write_text("models:\n  only:\n    table: shop.only\n")
        assert service.reload() == 1
        assert service.get("orders") is None


class TestInvalidEntries:

    def test_missing_table(self, tmp_path, defaults):
        path = tmp_path / "t.yaml"
        path.write_text("models:\n  broken:\n    audit_table: audits.x\n")
        with pytest.raises(TrackingConfigError, match="no table"):
            TrackingService(str(path), defaults).load_all()

    def test_schema_mismatch(self, tmp_path, defaults):
        path = tmp_path / "t.yaml"
        path.write_text(
            "models:\n"
            "  broken:\n"
            "    table: shop.x\n"
            "    audit_table: s1.audit\n"
            "    changeset_table: s2.changeset\n"
        )
        with pytest.raises(TrackingConfigError, match="different schemas"):
            TrackingService(str(path), defaults).load_all()

    def test_invalid_options(self, tmp_path, defaults):
        path = tmp_path / "t.yaml"
        path.write_text("models:\n  broken:\n    table: shop.x\n    options:\n      log_query: maybe\n")
        with pytest.raises(TrackingConfigError, match="Invalid tracking entry"):
            TrackingService(str(path), defaults).load_all()


class TestRegister:

    def test_register(self, tmp_path, defaults, orders_config):
        service = TrackingService(str(tmp_path / "absent.yaml"), defaults)
        service.register(orders_config)
        assert service.get("orders") is orders_config

    def test_register_rejects_mismatch(self, tmp_path, defaults):
        service = TrackingService(str(tmp_path / "absent.yaml"), defaults)
        config = TrackedModelConfig(
            model_id="bad", table_name="t", audit_table_name="s1.a", changeset_table_name="s2.c",
        )
        with pytest.raises(TrackingConfigError):
            service.register(config)
        assert service.get("bad") is None
