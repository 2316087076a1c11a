# ============================================================================
# AUDIT MANAGER
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Service - Public audit provisioning surface
# PURPOSE: check_general / check_model / get_db_commands by model id
# CREATED: 19 OCT 2026
# ============================================================================
"""
Audit Manager

Facade over the planner and the health checker that resolves model ids
through the TrackingService.

Usage:
    db = PostgreSQLRepository()
    manager = AuditManager(CatalogInspector(db), TrackingService())
    manager.check_general()                 # ["Missing db schema: audits", ...]
    manager.check_model("orders")           # {"enabled": True, "valid": False}
    manager.get_db_commands("orders", "up") # MigrationCommand
"""

import logging
from typing import Any, Dict, List, Optional, Union

from core.config import AuditDefaults
from core.contracts import Direction
from core.models.audit_objects import MigrationCommand
from core.models.tracking import TrackedModelConfig
from core.schema.audit_templates import AuditTemplateGenerator
from services.audit_health import AuditHealthChecker
from services.migration_planner import MigrationPlanner
from services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

ModelRef = Union[str, TrackedModelConfig]


class AuditManager:
    """Audit provisioning operations for tracked models."""

    def __init__(
        self,
        inspector,
        tracking: TrackingService,
        defaults: Optional[AuditDefaults] = None,
    ):
        self.inspector = inspector
        self.tracking = tracking
        self.generator = AuditTemplateGenerator(inspector)
        self.planner = MigrationPlanner(self.generator)
        self.health = AuditHealthChecker(self.generator, defaults or tracking.defaults)

    def check_general(self) -> List[str]:
        """Describe missing shared audit objects (empty list = healthy)."""
        return self.health.check_general()

    def check_model(self, model: ModelRef) -> Optional[Dict[str, Any]]:
        """
        Check one model's triggers.

        Returns:
            None if the model is not tracked, else {"enabled": True, "valid": bool}
        """
        config = self._lookup(model)
        result = self.health.check_model(config)
        return result.to_dict() if result else None

    def get_db_commands(
        self,
        model: ModelRef,
        direction: Union[Direction, str] = Direction.UP,
    ) -> MigrationCommand:
        """
        Plan the DDL for one tracked model.

        Raises:
            TrackingConfigError: If the model is not tracked or misconfigured
            ValueError: If direction is not "up" / "down"
        """
        direction = Direction.parse(direction)
        if isinstance(model, TrackedModelConfig):
            config = model
        else:
            config = self.tracking.get_or_raise(model)
        return self.planner.get_db_commands(config, direction)

    def _lookup(self, model: ModelRef) -> Optional[TrackedModelConfig]:
        if isinstance(model, TrackedModelConfig):
            return model
        return self.tracking.get(model)


__all__ = [
    "AuditManager",
]
