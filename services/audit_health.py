# ============================================================================
# AUDIT HEALTH CHECKER
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Service - Install / validity status without generating DDL
# PURPOSE: General and per-model audit object checks
# CREATED: 19 OCT 2026
# ============================================================================
"""
Audit Health Checker

Two independent checks:

- check_general(): the shared objects (audit schema, action_type enum,
  log_action() trigger function). Returns human-readable descriptions of
  what is missing; an empty list means healthy.
- check_model(config): None for untracked models, otherwise
  ModelCheckResult(enabled=True, valid=<row and statement triggers exist>).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.config import AuditDefaults, get_defaults
from core.contracts import ACTION_TYPE_NAME, LOG_ACTION_FUNCTION
from core.models.tracking import TrackedModelConfig
from core.schema.audit_templates import AuditTemplateGenerator

logger = logging.getLogger(__name__)


@dataclass
class ModelCheckResult:
    """Audit status of one tracked model."""
    enabled: bool
    valid: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "valid": self.valid}


class AuditHealthChecker:
    """
    Checks installed audit objects.

    Args:
        generator: AuditTemplateGenerator bound to a CatalogInspector
        defaults: Audit naming defaults (schema used by check_general)
    """

    def __init__(
        self,
        generator: AuditTemplateGenerator,
        defaults: Optional[AuditDefaults] = None,
    ):
        self.generator = generator
        self.defaults = defaults or get_defaults()

    @property
    def inspector(self):
        return self.generator.inspector

    def check_general(self) -> List[str]:
        """
        Check the schema, enum type and trigger function.

        Returns:
            Descriptions of missing objects (empty list = healthy)
        """
        schema = self.defaults.audit_schema
        missing = []

        if not self.generator.schema_template(schema).exists:
            missing.append(f"Missing db schema: {schema}")
        if not self.generator.action_type_template(schema).exists:
            missing.append(f"Missing db type: {schema}.{ACTION_TYPE_NAME}")
        if not self.inspector.function_exists(LOG_ACTION_FUNCTION, schema):
            missing.append(f"Missing db proc: {schema}.{LOG_ACTION_FUNCTION}")

        if missing:
            logger.warning(f"Audit objects missing: {missing}")
        return missing

    def check_model(self, config: Optional[TrackedModelConfig]) -> Optional[ModelCheckResult]:
        """
        Check the triggers of one tracked model.

        Returns:
            None when the model is not tracked, else ModelCheckResult
        """
        if config is None:
            return None

        names = config.resolve()
        triggers = self.generator.trigger_template(names.source_table, names.schema_name)
        result = ModelCheckResult(enabled=True, valid=triggers.exists)

        if not result.valid:
            missing = [name for name, present in triggers.present.items() if not present]
            logger.warning(f"Audit triggers missing on {names.source_table}: {missing}")
        return result


__all__ = [
    "AuditHealthChecker",
    "ModelCheckResult",
]
