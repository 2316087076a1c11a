# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - Default configuration values
# PURPOSE: Audit schema/table naming and tracking file location
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for audit object naming. These can be overridden via
environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuditDefaults:
    """
    Defaults for audit object naming.

    Used by the general health check and as fallbacks for tracking entries
    that omit audit/changeset table names.
    """
    audit_schema: str = "audits"
    audit_table: str = "logged_actions"
    changeset_table: Optional[str] = "changesets"
    tracking_file: str = "audit_tracking.yaml"

    @property
    def qualified_audit_table(self) -> str:
        return f"{self.audit_schema}.{self.audit_table}"

    @property
    def qualified_changeset_table(self) -> Optional[str]:
        if not self.changeset_table:
            return None
        return f"{self.audit_schema}.{self.changeset_table}"

    @classmethod
    def from_env(cls) -> "AuditDefaults":
        """
        Create from environment variables.

        AUDIT_CHANGESET_TABLE set to an empty string disables changesets.
        """
        changeset = os.getenv("AUDIT_CHANGESET_TABLE", "changesets")
        return cls(
            audit_schema=os.getenv("AUDIT_SCHEMA", "audits"),
            audit_table=os.getenv("AUDIT_TABLE", "logged_actions"),
            changeset_table=changeset or None,
            tracking_file=os.getenv("AUDIT_TRACKING_FILE", "audit_tracking.yaml"),
        )


# ============================================================================
# SINGLETON ACCESS
# ============================================================================

_defaults: Optional[AuditDefaults] = None


def get_defaults() -> AuditDefaults:
    """Get cached defaults loaded from the environment."""
    global _defaults
    if _defaults is None:
        _defaults = AuditDefaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Forget cached defaults (tests)."""
    global _defaults
    _defaults = None


__all__ = [
    "AuditDefaults",
    "get_defaults",
    "reset_defaults",
]
