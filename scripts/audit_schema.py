#!/usr/bin/env python
# ============================================================================
# AUDIT SCHEMA SCRIPT
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# PURPOSE: Check, plan and apply audit objects for tracked models
# USAGE:
#   python scripts/audit_schema.py check                  # General + all models
#   python scripts/audit_schema.py plan orders            # Print up DDL
#   python scripts/audit_schema.py plan orders --down     # Print down DDL
#   python scripts/audit_schema.py apply orders           # Execute up DDL
#   python scripts/audit_schema.py apply --all --dry-run  # Preview every model
#   python scripts/audit_schema.py health                 # Health plugins as JSON
# ============================================================================

import sys
import os
import argparse
import json

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.contracts import Direction
from core.logging import ComponentType, configure_logging, get_logger
from health import HealthCheckRegistry, HealthStatus, run_health_checks
from health.checks import AuditObjectsCheck, AuditTriggersCheck, PostgresCheck
from infrastructure import AuditInstaller, CatalogInspector, PostgreSQLRepository
from services import AuditManager, TrackingService

logger = get_logger(__name__, ComponentType.CLI)

STATUS_MARKS = {
    "success": "[OK]",
    "failed": "[FAIL]",
    "skipped": "[SKIP]",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage audit triggers and tables for tracked models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  DATABASE_URL           Full PostgreSQL connection string
  POSTGRES_HOST          Database host
  POSTGRES_DB            Database name
  POSTGRES_USER          Database user (default: postgres)
  POSTGRES_PASSWORD      Database password
  POSTGRES_PORT          Database port (default: 5432)
  POSTGRES_SSLMODE       SSL mode (default: prefer)
  AUDIT_SCHEMA           Audit schema (default: audits)
  AUDIT_TABLE            Default audit table (default: logged_actions)
  AUDIT_CHANGESET_TABLE  Default changeset table, empty disables (default: changesets)
  AUDIT_TRACKING_FILE    Tracked model file (default: audit_tracking.yaml)
        """
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--tracking-file",
        type=str,
        help="Tracked model YAML file (overrides AUDIT_TRACKING_FILE)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Report missing audit objects")
    check.add_argument("models", nargs="*", help="Model ids (default: all tracked)")

    sub.add_parser("health", help="Run the health check plugins (JSON output)")

    for name, help_text in (("plan", "Print planned DDL"), ("apply", "Execute planned DDL")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("models", nargs="*", help="Model ids")
        cmd.add_argument("--all", action="store_true", help="Every tracked model")
        cmd.add_argument("--down", action="store_true", help="Remove instead of install")
        if name == "apply":
            cmd.add_argument("--dry-run", action="store_true", help="Print DDL without executing")

    return parser


def _model_ids(args, tracking: TrackingService) -> list:
    if getattr(args, "all", False) or not args.models:
        return [config.model_id for config in tracking.list_all()]
    return args.models


def cmd_check(args, manager: AuditManager) -> int:
    print("\n[GENERAL]\n")
    missing = manager.check_general()
    if missing:
        for message in missing:
            print(f"  {STATUS_MARKS['failed']} {message}")
    else:
        print(f"  {STATUS_MARKS['success']} Audit schema, type and trigger function installed")

    print("\n[MODELS]\n")
    healthy = not missing
    for model_id in _model_ids(args, manager.tracking):
        status = manager.check_model(model_id)
        if status is None:
            print(f"  {STATUS_MARKS['skipped']} {model_id}: not tracked")
            continue
        mark = STATUS_MARKS["success"] if status["valid"] else STATUS_MARKS["failed"]
        print(f"  {mark} {model_id}: enabled={status['enabled']} valid={status['valid']}")
        healthy = healthy and status["valid"]

    return 0 if healthy else 1


def cmd_plan(args, manager: AuditManager) -> int:
    direction = Direction.DOWN if args.down else Direction.UP
    for model_id in _model_ids(args, manager.tracking):
        command = manager.get_db_commands(model_id, direction)
        print(f"\n-- {model_id} ({direction.value}): {len(command)} statements\n")
        for statement in command.render():
            print(f"{statement};\n")
    return 0


def cmd_apply(args, installer: AuditInstaller) -> int:
    direction = Direction.DOWN if args.down else Direction.UP
    exit_code = 0

    for model_id in _model_ids(args, installer.tracking):
        result = installer.apply(model_id, direction, dry_run=args.dry_run)

        print(f"\n[{model_id.upper()} - {direction.value.upper()}]\n")
        for step in result.steps:
            print(f"{STATUS_MARKS.get(step.status, '[?]')} {step.name}: {step.message}")
            if step.error:
                print(f"   Error: {step.error}")
            if step.details.get("hint"):
                print(f"   Hint: {step.details['hint']}")
            if step.details and args.verbose:
                for key, value in step.details.items():
                    print(f"   {key}: {value}")

        if args.dry_run:
            for statement in result.statements:
                print(f"{statement};\n")

        if not result.success:
            for error in result.errors:
                print(f"   - {error}")
            exit_code = 1
            break

    return exit_code


def cmd_health(db: PostgreSQLRepository, tracking: TrackingService) -> int:
    registry = HealthCheckRegistry()
    registry.register(PostgresCheck(db=db))
    registry.register(AuditObjectsCheck(db=db, tracking=tracking))
    registry.register(AuditTriggersCheck(db=db, tracking=tracking))

    result = run_health_checks(registry)
    print(json.dumps(result.to_dict(), indent=2, default=str))
    return 0 if result.status == HealthStatus.HEALTHY else 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging("DEBUG" if args.verbose else "INFO")

    tracking = TrackingService(tracking_file=args.tracking_file)
    db = PostgreSQLRepository(connection_string=args.connection)

    print("=" * 70)
    print("AUDIT SCHEMA")
    print(f"Tracking file: {tracking.tracking_file}")
    print("=" * 70)

    try:
        if args.command == "apply":
            return cmd_apply(args, AuditInstaller(db, tracking))

        if args.command == "health":
            return cmd_health(db, tracking)

        manager = AuditManager(CatalogInspector(db), tracking)
        if args.command == "check":
            return cmd_check(args, manager)
        return cmd_plan(args, manager)

    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        print(f"\nError: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
