# ============================================================================
# SCHEMA MODULE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - Audit DDL generation
# PURPOSE: Generate PostgreSQL DDL for the audit object graph
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.schema.ddl_utils import (
    IndexBuilder,
    TableBuilder,
    TriggerBuilder,
    SchemaUtils,
)
from core.schema.trigger_function import (
    LOG_ACTION_VERSION,
    log_action_function,
    trigger_arguments,
)
from core.schema.audit_templates import AuditTemplateGenerator

__all__ = [
    # Generator
    "AuditTemplateGenerator",
    # Trigger function
    "LOG_ACTION_VERSION",
    "log_action_function",
    "trigger_arguments",
    # Utilities
    "IndexBuilder",
    "TableBuilder",
    "TriggerBuilder",
    "SchemaUtils",
]
