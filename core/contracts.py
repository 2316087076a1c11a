# ============================================================================
# AUDIT CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Foundation - Core enums and fixed object names
# PURPOSE: Migration direction, action types and the database object names
#          that tooling inspecting the audit trail relies on
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: Direction, ActionType, AuditObjectKind, object name constants
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the audit trail system.

The names below are part of the contract with anything that reads the audit
trail after installation. Renaming any of them requires a migration of
existing databases.
"""

from enum import Enum
from typing import Union


# ============================================================================
# FIXED OBJECT NAMES
# ============================================================================

DEFAULT_SCHEMA = "public"

ACTION_TYPE_NAME = "action_type"

DELETE_KEYS_FUNCTION = "json_object_delete_keys"
DELETE_VALUES_FUNCTION = "json_object_delete_values"
LOG_ACTION_FUNCTION = "log_action"

ROW_TRIGGER_NAME = "log_action_row_trigger"
STMT_TRIGGER_NAME = "log_action_stmt_trigger"

# Transaction-local setting read by log_action() to link rows to a changeset
CHANGESET_SETTING = "audit.changeset_id"


# ============================================================================
# ENUMS
# ============================================================================

class Direction(str, Enum):
    """
    Migration direction.

    UP provisions the audit objects, DOWN tears down everything except the
    shared schema and action_type enum.
    """
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, value: Union[str, "Direction"]) -> "Direction":
        """
        Coerce a string into a Direction.

        Raises:
            ValueError: If value is not "up" or "down"
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Invalid migration direction: {value!r}. Expected 'up' or 'down'"
            ) from None


class ActionType(str, Enum):
    """Values of the action_type enum stored with every audit row."""
    INSERT = "INSERT"
    SELECT = "SELECT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    TRUNCATE = "TRUNCATE"


class AuditObjectKind(str, Enum):
    """Kinds of database objects managed by the templates."""
    SCHEMA = "schema"
    TYPE = "type"
    FUNCTION = "function"
    TABLE = "table"
    TRIGGER = "trigger"


__all__ = [
    "DEFAULT_SCHEMA",
    "ACTION_TYPE_NAME",
    "DELETE_KEYS_FUNCTION",
    "DELETE_VALUES_FUNCTION",
    "LOG_ACTION_FUNCTION",
    "ROW_TRIGGER_NAME",
    "STMT_TRIGGER_NAME",
    "CHANGESET_SETTING",
    "Direction",
    "ActionType",
    "AuditObjectKind",
]
