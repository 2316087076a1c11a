# ============================================================================
# AUDIT HEALTH CHECKS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Audit object checks
# PURPOSE: Shared audit objects and per-model trigger status
# CREATED: 19 OCT 2026
# ============================================================================
"""
Audit Health Checks

- AuditObjectsCheck (priority 20): audit schema, action_type and
  log_action() installed. Unhealthy when any is missing, since no trigger
  can fire without them.
- AuditTriggersCheck (priority 30): every tracked model has both triggers.
  Degraded when some models are not audited.
"""

import asyncio
import logging
from typing import Any, Dict

from health.core import (
    HealthCheckPlugin,
    HealthCheckResult,
)
from health.registry import register_check

logger = logging.getLogger(__name__)


class _AuditCheckBase(HealthCheckPlugin):
    """Lazily builds the audit manager the audit checks share."""

    def __init__(self, db=None, tracking=None, manager=None):
        self._db = db
        self._tracking = tracking
        self._manager = manager

    @property
    def manager(self):
        if self._manager is None:
            from infrastructure.catalog import CatalogInspector
            from infrastructure.postgresql import get_postgres_repository
            from services.audit_manager import AuditManager
            from services.tracking_service import TrackingService

            db = self._db or get_postgres_repository()
            tracking = self._tracking or TrackingService()
            self._manager = AuditManager(CatalogInspector(db), tracking)
        return self._manager


@register_check(category="schema")
class AuditObjectsCheck(_AuditCheckBase):
    """Shared audit objects installed."""

    name = "audit_objects"
    timeout_seconds = 10.0

    async def check(self) -> HealthCheckResult:
        missing = await asyncio.to_thread(self.manager.check_general)
        if missing:
            return HealthCheckResult.unhealthy(
                message=f"{len(missing)} audit objects missing",
                missing=missing,
            )
        return HealthCheckResult.healthy(message="Audit objects installed")


@register_check(category="tracking")
class AuditTriggersCheck(_AuditCheckBase):
    """Every tracked model has its row and statement triggers."""

    name = "audit_triggers"
    timeout_seconds = 15.0

    def _check_models(self) -> Dict[str, Any]:
        return {
            config.model_id: self.manager.check_model(config)
            for config in self.manager.tracking.list_all()
        }

    async def check(self) -> HealthCheckResult:
        statuses = await asyncio.to_thread(self._check_models)
        invalid = sorted(model_id for model_id, s in statuses.items() if not s["valid"])

        if not statuses:
            return HealthCheckResult.degraded(message="No tracked models configured")
        if invalid:
            return HealthCheckResult.degraded(
                message=f"{len(invalid)} of {len(statuses)} tracked models not audited",
                invalid_models=invalid,
            )
        return HealthCheckResult.healthy(
            message=f"All {len(statuses)} tracked models audited",
            models=sorted(statuses),
        )


__all__ = [
    "AuditObjectsCheck",
    "AuditTriggersCheck",
]
