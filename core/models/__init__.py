# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Model exports
# PURPOSE: Central export point for configuration, spec and record models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

- Tracking configuration (pydantic): TrackedModelConfig, TriggerOptions
- DDL specs (dataclasses, ephemeral): AuditObjectSpec, AuditTableSpec,
  MigrationCommand
- Runtime rows (pydantic, read-side): AuditRecord, ChangesetRecord
"""

from core.models.tracking import (
    TrackedModelConfig,
    TriggerOptions,
    ResolvedAuditNames,
    TrackingConfigError,
    split_qualified_name,
)
from core.models.audit_objects import (
    ColumnListIndex,
    RawClauseIndex,
    IndexSpec,
    AuditObjectSpec,
    AuditTableSpec,
    PlannedStatement,
    MigrationCommand,
)
from core.models.records import AuditRecord, ChangesetRecord

__all__ = [
    # Tracking
    "TrackedModelConfig",
    "TriggerOptions",
    "ResolvedAuditNames",
    "TrackingConfigError",
    "split_qualified_name",
    # Specs
    "ColumnListIndex",
    "RawClauseIndex",
    "IndexSpec",
    "AuditObjectSpec",
    "AuditTableSpec",
    "PlannedStatement",
    "MigrationCommand",
    # Records
    "AuditRecord",
    "ChangesetRecord",
]
