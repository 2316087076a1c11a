# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for audit provisioning.
"""

from core.config.defaults import (
    AuditDefaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "AuditDefaults",
    "get_defaults",
    "reset_defaults",
]
