# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Base classes for health checks
# PURPOSE: Plugin interface and result types for audit health
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Core Types

Status (worst wins when aggregated):
- healthy: database reachable, audit objects and triggers installed
- degraded: some tracked models are not audited
- unhealthy: no database, or the shared audit objects are missing

Categories run in priority order:
    connectivity (10) -> schema (20) -> tracking (30)
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Iterable, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def aggregate(cls, statuses: Iterable["HealthStatus"]) -> "HealthStatus":
        """Worst status of the given ones; healthy when there are none."""
        # str ordering would rank "degraded" below "healthy"
        return max(statuses, key=lambda status: status.severity, default=cls.HEALTHY)


_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}


class HealthCheckCategory(str, Enum):
    CONNECTIVITY = "connectivity"
    SCHEMA = "schema"
    TRACKING = "tracking"

    @property
    def default_priority(self) -> int:
        return _CATEGORY_PRIORITY[self]


_CATEGORY_PRIORITY = {
    HealthCheckCategory.CONNECTIVITY: 10,
    HealthCheckCategory.SCHEMA: 20,
    HealthCheckCategory.TRACKING: 30,
}


@dataclass
class HealthCheckResult:
    """Outcome of one check. duration_ms is filled in by the executor."""
    status: HealthStatus
    message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0
    checked_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def healthy(cls, message: str = None, **details) -> "HealthCheckResult":
        return cls(HealthStatus.HEALTHY, message, details)

    @classmethod
    def degraded(cls, message: str, **details) -> "HealthCheckResult":
        return cls(HealthStatus.DEGRADED, message, details)

    @classmethod
    def unhealthy(cls, message: str, **details) -> "HealthCheckResult":
        return cls(HealthStatus.UNHEALTHY, message, details)

    @classmethod
    def from_exception(cls, e: Exception) -> "HealthCheckResult":
        return cls.unhealthy(str(e), exception_type=type(e).__name__)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status.value,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.message:
            data["message"] = self.message
        if self.details:
            data["details"] = self.details
        return data


@dataclass
class AggregatedHealthResult:
    """Overall status plus every check that ran, keyed by check name."""
    status: HealthStatus
    checks: Dict[str, HealthCheckResult]
    total_duration_ms: float
    checked_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "checks": {name: result.to_dict() for name, result in self.checks.items()},
            "total_duration_ms": round(self.total_duration_ms, 2),
            "checked_at": self.checked_at.isoformat(),
        }


class HealthCheckPlugin(ABC):
    """
    Base class for health check plugins.

    Subclasses set name / category and implement check(). Blocking
    database calls belong in asyncio.to_thread so one slow check does not
    stall the rest of its tier.

    Example:
        @register_check(category="schema")
        class AuditObjectsCheck(HealthCheckPlugin):
            name = "audit_objects"

            async def check(self) -> HealthCheckResult:
                ...
    """

    name: str = "unnamed"
    category: HealthCheckCategory = HealthCheckCategory.SCHEMA
    priority: Optional[int] = None
    timeout_seconds: float = 10.0

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        # Priority follows the category unless a subclass pins it
        if "priority" not in cls.__dict__:
            cls.priority = cls.category.default_priority

    @abstractmethod
    async def check(self) -> HealthCheckResult:
        """Run the check and report its status."""
