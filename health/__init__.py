# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Health check plugin system
# PURPOSE: Connectivity and audit object monitoring
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Module

Plugin-based health check system for the audited database.

Architecture:
- HealthCheckPlugin: Base class for health checks
- HealthCheckRegistry: Plugin discovery and registration
- HealthCheckExecutor: Tiered parallel execution with timeouts

Usage:
    import health.checks  # registers the built-in checks
    from health import run_health_checks

    result = run_health_checks()
    print(result.to_dict())
"""

from health.core import (
    HealthStatus,
    HealthCheckResult,
    HealthCheckPlugin,
    HealthCheckCategory,
    AggregatedHealthResult,
)
from health.registry import (
    HealthCheckRegistry,
    register_check,
    get_registry,
)
from health.executor import HealthCheckExecutor, run_health_checks

__all__ = [
    # Core types
    "HealthStatus",
    "HealthCheckResult",
    "HealthCheckPlugin",
    "HealthCheckCategory",
    "AggregatedHealthResult",
    # Registry
    "HealthCheckRegistry",
    "register_check",
    "get_registry",
    # Executor
    "HealthCheckExecutor",
    "run_health_checks",
]
