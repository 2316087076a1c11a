# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core module initialization
# PURPOSE: Export core contracts, models, and schema utilities
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import Direction, ActionType, AuditObjectKind
from core.models import (
    TrackedModelConfig,
    TriggerOptions,
    TrackingConfigError,
    AuditObjectSpec,
    AuditTableSpec,
    MigrationCommand,
    AuditRecord,
    ChangesetRecord,
)
from core.schema import AuditTemplateGenerator

__all__ = [
    # Enums
    "Direction",
    "ActionType",
    "AuditObjectKind",
    # Models
    "TrackedModelConfig",
    "TriggerOptions",
    "TrackingConfigError",
    "AuditObjectSpec",
    "AuditTableSpec",
    "MigrationCommand",
    "AuditRecord",
    "ChangesetRecord",
    # Schema
    "AuditTemplateGenerator",
]
