# ============================================================================
# SERVICES MODULE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - Business logic layer
# PURPOSE: Tracking configuration, DDL planning and health checks
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Business logic for audit provisioning. Services read the catalog through
an inspector and never execute DDL themselves.

Usage:
    from services import AuditManager, TrackingService

    manager = AuditManager(CatalogInspector(db), TrackingService())
    command = manager.get_db_commands("orders", "up")
"""

from .tracking_service import TrackingService
from .migration_planner import MigrationPlanner
from .audit_health import AuditHealthChecker, ModelCheckResult
from .audit_manager import AuditManager

__all__ = [
    "TrackingService",
    "MigrationPlanner",
    "AuditHealthChecker",
    "ModelCheckResult",
    "AuditManager",
]
