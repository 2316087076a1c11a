# ============================================================================
# HEALTH CHECK TESTS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Tests - Health plugin system and audit checks
# PURPOSE: Verify aggregation, tiering, timeouts and audit check outcomes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Tests

Run with:
    pytest tests/test_health_checks.py -v
"""

import asyncio
import psycopg
import pytest
from unittest.mock import MagicMock

from core.contracts import ROW_TRIGGER_NAME
from health import (
    HealthCheckCategory,
    HealthCheckExecutor,
    HealthCheckPlugin,
    HealthCheckRegistry,
    HealthCheckResult,
    HealthStatus,
    get_registry,
    run_health_checks,
)
from health.checks import AuditObjectsCheck, AuditTriggersCheck, PostgresCheck
from services.audit_manager import AuditManager
from services.tracking_service import TrackingService


# ============================================================================
# HELPERS
# ============================================================================

class StaticCheck(HealthCheckPlugin):
    """Check returning a fixed result."""

    def __init__(self, name, status, category=HealthCheckCategory.SCHEMA, delay=0.0):
        self.name = name
        self.category = category
        self.priority = category.default_priority
        self._status = status
        self._delay = delay
        self.calls = 0

    async def check(self) -> HealthCheckResult:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        return HealthCheckResult(status=self._status)


@pytest.fixture
def manager(catalog, defaults, orders_config, tmp_path):
    tracking = TrackingService(str(tmp_path / "absent.yaml"), defaults)
    tracking.register(orders_config)
    return AuditManager(catalog, tracking)


# ============================================================================
# CORE
# ============================================================================

class TestHealthStatus:

    def test_worst_wins(self):
        assert HealthStatus.aggregate([HealthStatus.HEALTHY, HealthStatus.DEGRADED]) == HealthStatus.DEGRADED
        assert HealthStatus.aggregate(list(HealthStatus)) == HealthStatus.UNHEALTHY

    def test_empty_is_healthy(self):
        assert HealthStatus.aggregate([]) == HealthStatus.HEALTHY

    def test_result_to_dict(self):
        result = HealthCheckResult.degraded("2 models not audited", invalid_models=["a", "b"])
        assert result.to_dict() == {
            "status": "degraded",
            "duration_ms": 0.0,
            "message": "2 models not audited",
            "details": {"invalid_models": ["a", "b"]},
        }


class TestRegistry:

    def test_priority_order(self):
        registry = HealthCheckRegistry()
        registry.register(StaticCheck("triggers", HealthStatus.HEALTHY, HealthCheckCategory.TRACKING))
        registry.register(StaticCheck("db", HealthStatus.HEALTHY, HealthCheckCategory.CONNECTIVITY))
        assert [c.name for c in registry.get_checks_by_priority()] == ["db", "triggers"]

    def test_unregister(self):
        registry = HealthCheckRegistry()
        registry.register(StaticCheck("db", HealthStatus.HEALTHY))
        assert "db" in registry
        assert registry.unregister("db")
        assert not registry.unregister("db")
        assert len(registry) == 0

    def test_builtin_checks_registered_globally(self):
        registry = get_registry()
        for name in ("postgres", "audit_objects", "audit_triggers"):
            assert name in registry
        assert registry.get("postgres").category == HealthCheckCategory.CONNECTIVITY
        assert registry.get("audit_triggers").priority == 30


# ============================================================================
# EXECUTOR
# ============================================================================

class TestExecutor:

    def test_aggregates_all_checks(self):
        registry = HealthCheckRegistry()
        registry.register(StaticCheck("a", HealthStatus.HEALTHY, HealthCheckCategory.CONNECTIVITY))
        registry.register(StaticCheck("b", HealthStatus.DEGRADED, HealthCheckCategory.TRACKING))

        result = asyncio.run(HealthCheckExecutor(registry).execute_all())
        assert result.status == HealthStatus.DEGRADED
        assert set(result.checks) == {"a", "b"}

    def test_empty_registry_is_not_replaced_by_global(self):
        result = run_health_checks(HealthCheckRegistry())
        assert result.status == HealthStatus.HEALTHY
        assert result.checks == {}

    def test_early_termination(self):
        registry = HealthCheckRegistry()
        db = StaticCheck("db", HealthStatus.UNHEALTHY, HealthCheckCategory.CONNECTIVITY)
        schema = StaticCheck("schema", HealthStatus.HEALTHY, HealthCheckCategory.SCHEMA)
        registry.register(db)
        registry.register(schema)

        result = asyncio.run(HealthCheckExecutor(registry).execute_all())
        assert result.status == HealthStatus.UNHEALTHY
        assert schema.calls == 0

    def test_timeout(self):
        registry = HealthCheckRegistry()
        slow = StaticCheck("slow", HealthStatus.HEALTHY, delay=1.0)
        slow.timeout_seconds = 0.01
        registry.register(slow)

        result = asyncio.run(HealthCheckExecutor(registry).execute_all())
        assert result.checks["slow"].status == HealthStatus.UNHEALTHY
        assert "Timeout" in result.checks["slow"].message

    def test_exception_becomes_unhealthy(self):
        class Broken(HealthCheckPlugin):
            name = "broken"

            async def check(self):
                raise RuntimeError("boom")

        registry = HealthCheckRegistry()
        registry.register(Broken())
        result = asyncio.run(HealthCheckExecutor(registry).execute_single("broken"))
        assert result.status == HealthStatus.UNHEALTHY
        assert result.details["exception_type"] == "RuntimeError"

    def test_execute_single_unknown(self):
        assert asyncio.run(HealthCheckExecutor(HealthCheckRegistry()).execute_single("x")) is None

    def test_to_dict(self):
        registry = HealthCheckRegistry()
        registry.register(StaticCheck("a", HealthStatus.HEALTHY))
        data = run_health_checks(registry).to_dict()
        assert data["status"] == "healthy"
        assert data["checks"]["a"]["status"] == "healthy"


# ============================================================================
# BUILT-IN CHECKS
# ============================================================================

class TestPostgresCheck:

    def test_connected(self):
        db = MagicMock()
        db.fetch_one.return_value = {"health_check": 1, "db": "app"}
        result = asyncio.run(PostgresCheck(db=db).check())
        assert result.status == HealthStatus.HEALTHY
        assert result.details["database"] == "app"

    def test_not_configured(self):
        db = MagicMock()
        db.fetch_one.side_effect = ValueError("Database connection not configured")
        result = asyncio.run(PostgresCheck(db=db).check())
        assert result.status == HealthStatus.UNHEALTHY
        assert result.message == "PostgreSQL not configured"

    def test_connection_refused(self):
        db = MagicMock()
        db.fetch_one.side_effect = psycopg.OperationalError("connection refused")
        result = asyncio.run(PostgresCheck(db=db).check())
        assert result.status == HealthStatus.UNHEALTHY
        assert "connection refused" in result.message


class TestAuditChecks:

    def test_objects_missing(self, manager):
        result = asyncio.run(AuditObjectsCheck(manager=manager).check())
        assert result.status == HealthStatus.UNHEALTHY
        assert "Missing db schema: audits" in result.details["missing"]

    def test_objects_installed(self, manager, catalog):
        catalog.install_shared("audits")
        result = asyncio.run(AuditObjectsCheck(manager=manager).check())
        assert result.status == HealthStatus.HEALTHY

    def test_triggers_partial(self, manager, catalog):
        catalog.triggers.add(("shop.orders", ROW_TRIGGER_NAME))
        result = asyncio.run(AuditTriggersCheck(manager=manager).check())
        assert result.status == HealthStatus.DEGRADED
        assert result.details["invalid_models"] == ["orders"]

    def test_triggers_installed(self, manager, catalog, orders_config):
        catalog.install_model(orders_config)
        result = asyncio.run(AuditTriggersCheck(manager=manager).check())
        assert result.status == HealthStatus.HEALTHY
        assert result.details["models"] == ["orders"]

    def test_no_tracked_models(self, catalog, defaults, tmp_path):
        manager = AuditManager(catalog, TrackingService(str(tmp_path / "absent.yaml"), defaults))
        result = asyncio.run(AuditTriggersCheck(manager=manager).check())
        assert result.status == HealthStatus.DEGRADED
