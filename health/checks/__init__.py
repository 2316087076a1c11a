# ============================================================================
# HEALTH CHECK PLUGINS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Health check implementations
# PURPOSE: Health checks for the audited database
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Plugins

Connectivity Checks (priority 10):
- postgres: PostgreSQL connection

Schema Checks (priority 20):
- audit_objects: audit schema, action_type enum and log_action() installed

Tracking Checks (priority 30):
- audit_triggers: row and statement triggers on every tracked model

Import this module to register all checks:
    import health.checks
"""

# Import all check modules to trigger registration
from health.checks.database import PostgresCheck
from health.checks.audit import AuditObjectsCheck, AuditTriggersCheck

__all__ = [
    "PostgresCheck",
    "AuditObjectsCheck",
    "AuditTriggersCheck",
]
