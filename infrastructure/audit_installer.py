# ============================================================================
# AUDIT INSTALLER
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Audit DDL execution
# PURPOSE: Plan and execute audit DDL for tracked models in one transaction
# CREATED: 19 OCT 2026
# ============================================================================
"""
AuditInstaller - executes planned audit DDL.

Workflow for one model:
1. Test connection
2. Plan statements (MigrationPlanner, existence-gated)
3. Execute every statement in a single transaction
4. Verify: re-planning the same direction must yield no statements

Any failure during execution rolls back the whole batch, so a model is never
left half provisioned.

Usage:
    from infrastructure import AuditInstaller

    installer = AuditInstaller(tracking=TrackingService())
    result = installer.apply("orders")                 # up
    result = installer.apply("orders", "down")
    result = installer.apply("orders", dry_run=True)   # show SQL only
"""

import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import psycopg

from core.contracts import Direction
from core.models.audit_objects import MigrationCommand
from infrastructure.catalog import CatalogInspector
from infrastructure.postgresql import PostgreSQLRepository
from services.migration_planner import MigrationPlanner
from services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

# log_action() and the audit tables are shared by every model in an audit schema
SHARED_OBJECTS_HINT = (
    "Other tracked models in this audit schema still depend on these objects. "
    "Remove their triggers first, then run down again."
)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class StepResult:
    """Result of a single installation step."""
    name: str
    status: str  # 'success', 'failed', 'skipped'
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InstallationResult:
    """Complete result of applying one model's audit DDL."""
    model_id: str
    direction: str
    timestamp: str
    success: bool
    dry_run: bool = False
    statements: List[str] = field(default_factory=list)
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "model_id": self.model_id,
            "direction": self.direction,
            "timestamp": self.timestamp,
            "success": self.success,
            "dry_run": self.dry_run,
            "statements": self.statements,
            "steps": [
                {
                    "name": s.name,
                    "status": s.status,
                    "message": s.message,
                    "error": s.error,
                    "details": s.details,
                }
                for s in self.steps
            ],
            "errors": self.errors,
            "warnings": self.warnings,
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status == "success"]),
                "failed": len([s for s in self.steps if s.status == "failed"]),
                "skipped": len([s for s in self.steps if s.status == "skipped"]),
            },
        }


# ============================================================================
# AUDIT INSTALLER
# ============================================================================

class AuditInstaller:
    """
    Applies audit DDL for tracked models.

    Args:
        db: PostgreSQLRepository (created from the environment if omitted)
        tracking: TrackingService resolving model ids
    """

    def __init__(
        self,
        db: Optional[PostgreSQLRepository] = None,
        tracking: Optional[TrackingService] = None,
    ):
        self.db = db or PostgreSQLRepository()
        self.tracking = tracking or TrackingService()
        self.planner = MigrationPlanner.from_inspector(CatalogInspector(self.db))

    def apply(
        self,
        model_id: str,
        direction: Union[Direction, str] = Direction.UP,
        dry_run: bool = False,
    ) -> InstallationResult:
        """
        Plan and execute audit DDL for one model.

        Args:
            model_id: Tracked model id
            direction: "up" or "down"
            dry_run: If True, render the SQL but don't execute

        Returns:
            InstallationResult with detailed step results

        Raises:
            ValueError: Invalid direction
            TrackingConfigError: Model not tracked or misconfigured
        """
        direction = Direction.parse(direction)
        config = self.tracking.get_or_raise(model_id)

        result = InstallationResult(
            model_id=model_id,
            direction=direction.value,
            timestamp=datetime.now(timezone.utc).isoformat(),
            success=False,
            dry_run=dry_run,
        )

        logger.info("=" * 70)
        logger.info(f"AUDIT {direction.value.upper()} - {model_id}")
        logger.info(f"   Table: {config.qualified_table_name}")
        logger.info(f"   Mode: {'DRY RUN' if dry_run else 'EXECUTE'}")
        logger.info("=" * 70)

        try:
            step = self._test_connection()
            result.steps.append(step)
            if step.status == "failed":
                result.errors.append(f"Connection failed: {step.error}")
                return result

            command = self.planner.get_db_commands(config, direction)
            result.statements = command.render()
            result.steps.append(StepResult(
                name="plan",
                status="success",
                message=f"Planned {len(command)} statements",
                details={"objects": command.object_names},
            ))

            step = self._execute(command, dry_run=dry_run)
            result.steps.append(step)
            if step.status == "failed":
                result.errors.append(f"Execution failed: {step.error}")

            if not dry_run and step.status == "success":
                step = self._verify(config, direction)
                result.steps.append(step)
                if step.status == "failed":
                    result.warnings.append(f"Verification issue: {step.error}")

            critical_failures = [
                s for s in result.steps
                if s.status == "failed" and s.name != "verify"
            ]
            result.success = len(critical_failures) == 0

        except Exception as e:
            logger.error(f"Audit {direction.value} failed for {model_id}: {e}")
            logger.error(traceback.format_exc())
            result.errors.append(str(e))
            result.success = False

        summary = result.to_dict()["summary"]
        logger.info("=" * 70)
        logger.info(f"AUDIT {direction.value.upper()} {'COMPLETE' if result.success else 'FAILED'}")
        logger.info(f"   Steps: {summary['successful']} succeeded, {summary['failed']} failed")
        if result.errors:
            logger.warning(f"   Errors: {result.errors}")
        logger.info("=" * 70)

        return result

    def apply_all(
        self,
        direction: Union[Direction, str] = Direction.UP,
        dry_run: bool = False,
    ) -> List[InstallationResult]:
        """Apply every tracked model, stopping at the first failure."""
        results = []
        for config in self.tracking.list_all():
            result = self.apply(config.model_id, direction, dry_run=dry_run)
            results.append(result)
            if not result.success:
                break
        return results

    def _test_connection(self) -> StepResult:
        step = StepResult(name="test_connection", status="pending")

        try:
            row = self.db.fetch_one("SELECT version() as version, current_database() as db")
            step.status = "success"
            step.message = f"Connected to {row['db']}"
            step.details = {"version": row["version"][:50], "database": row["db"]}
        except Exception as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Connection failed: {e}"
            logger.error(f"Connection test failed: {e}")

        logger.info(f"   Result: {step.status} - {step.message}")
        return step

    def _execute(self, command: MigrationCommand, dry_run: bool = False) -> StepResult:
        step = StepResult(name="execute", status="pending")

        if command.is_empty:
            step.status = "skipped"
            step.message = f"Nothing to do, already {command.direction.value}"
            logger.info(f"   Result: {step.status} - {step.message}")
            return step

        if dry_run:
            for i, name in enumerate(command.object_names, 1):
                logger.info(f"   [{i}] {name}")
            step.status = "success"
            step.message = f"[DRY RUN] Would execute {len(command)} statements"
            step.details = {"statements_count": len(command)}
            return step

        try:
            executed = self.db.execute_in_transaction([s.statement for s in command])
            step.status = "success"
            step.message = f"Executed {executed} statements in one transaction"
            step.details = {"statements_executed": executed}
        except psycopg.errors.DependentObjectsStillExist as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Rolled back: {e}"
            step.details = {"hint": SHARED_OBJECTS_HINT}
            logger.error(f"Audit DDL rolled back: {e}")
        except Exception as e:
            step.status = "failed"
            step.error = str(e)
            step.message = f"Rolled back: {e}"
            logger.error(f"Audit DDL rolled back: {e}")

        logger.info(f"   Result: {step.status} - {step.message}")
        return step

    def _verify(self, config, direction: Direction) -> StepResult:
        step = StepResult(name="verify", status="pending")

        remaining = self.planner.get_db_commands(config, direction)
        if remaining.is_empty:
            step.status = "success"
            step.message = f"All audit objects {direction.value}"
        else:
            step.status = "failed"
            step.error = f"Objects not in {direction.value} state: {remaining.object_names}"
            step.message = "Verification failed"
            step.details = {"remaining": remaining.object_names}

        logger.info(f"   Result: {step.status} - {step.message}")
        return step


__all__ = [
    "AuditInstaller",
    "InstallationResult",
    "StepResult",
]
