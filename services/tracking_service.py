# ============================================================================
# TRACKING SERVICE
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Service - Tracked model configuration
# PURPOSE: Load and cache tracked-model configuration
# CREATED: 19 OCT 2026
# ============================================================================
"""
Tracking Service

Loads TrackedModelConfig entries from a YAML file and provides lookup by
model id. A model that is missing from the file, or listed with
``enabled: false``, is not tracked.

File format:

    defaults:
      audit_table: audits.logged_actions
      changeset_table: audits.changesets

    models:
      orders:
        table: shop.orders
        options:
          excluded_columns: [updated_at]
      sessions:
        table: public.sessions
        changeset_table: null      # explicit null disables changesets
        enabled: true

Names omitted by a model fall back to the file's defaults, then to
AuditDefaults (environment).
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from core.config import AuditDefaults, get_defaults
from core.models.tracking import TrackedModelConfig, TrackingConfigError, TriggerOptions

logger = logging.getLogger(__name__)

_MISSING = object()


class TrackingService:
    """Service for loading and looking up tracked models."""

    def __init__(
        self,
        tracking_file: Optional[str] = None,
        defaults: Optional[AuditDefaults] = None,
    ):
        """
        Initialize tracking service.

        Args:
            tracking_file: Path to the tracking YAML file.
                           Defaults to AUDIT_TRACKING_FILE.
            defaults: Audit naming defaults
        """
        self.defaults = defaults or get_defaults()
        self.tracking_file = Path(tracking_file or self.defaults.tracking_file)

        self._cache: Dict[str, TrackedModelConfig] = {}
        self._loaded = False

    def load_all(self) -> int:
        """
        Load all tracked models from the tracking file.

        Returns:
            Number of tracked models loaded

        Raises:
            TrackingConfigError: If an entry is invalid
        """
        self._loaded = True

        if not self.tracking_file.exists():
            logger.warning(f"Tracking file not found: {self.tracking_file}")
            return 0

        with open(self.tracking_file) as f:
            data = yaml.safe_load(f) or {}

        file_defaults = data.get("defaults") or {}
        count = 0
        for model_id, entry in (data.get("models") or {}).items():
            entry = entry or {}
            if not entry.get("enabled", True):
                logger.info(f"Model {model_id} disabled, not tracked")
                continue

            self._cache[model_id] = self._build_config(model_id, entry, file_defaults)
            count += 1
            logger.debug(f"Loaded tracked model: {model_id}")

        logger.info(f"Loaded {count} tracked models from {self.tracking_file}")
        return count

    def get(self, model_id: str) -> Optional[TrackedModelConfig]:
        """
        Get the tracking configuration of a model.

        Returns:
            TrackedModelConfig or None if the model is not tracked
        """
        if not self._loaded:
            self.load_all()

        return self._cache.get(model_id)

    def get_or_raise(self, model_id: str) -> TrackedModelConfig:
        """
        Get the tracking configuration, raising if not tracked.

        Raises:
            TrackingConfigError if the model is not tracked
        """
        config = self.get(model_id)
        if config is None:
            raise TrackingConfigError(f"Model is not tracked: {model_id}", model_id=model_id)
        return config

    def list_all(self) -> List[TrackedModelConfig]:
        """List all tracked models."""
        if not self._loaded:
            self.load_all()

        return list(self._cache.values())

    def register(self, config: TrackedModelConfig) -> None:
        """
        Register a tracked model (for testing or programmatic use).

        Args:
            config: TrackedModelConfig to register
        """
        # Reject schema mismatches up front
        config.resolve()

        self._cache[config.model_id] = config
        logger.info(f"Registered tracked model: {config.model_id}")

    def reload(self) -> int:
        """Reload all tracked models from disk."""
        self._cache.clear()
        self._loaded = False
        return self.load_all()

    def _build_config(
        self,
        model_id: str,
        entry: Dict[str, Any],
        file_defaults: Dict[str, Any],
    ) -> TrackedModelConfig:
        if "table" not in entry:
            raise TrackingConfigError(f"Model {model_id} has no table in {self.tracking_file}", model_id=model_id)

        audit_table = entry.get("audit_table") or file_defaults.get("audit_table") \
            or self.defaults.qualified_audit_table

        changeset_table = entry.get("changeset_table", _MISSING)
        if changeset_table is _MISSING:
            changeset_table = file_defaults.get("changeset_table", self.defaults.qualified_changeset_table)

        try:
            config = TrackedModelConfig(
                model_id=model_id,
                table_name=entry["table"],
                audit_table_name=audit_table,
                changeset_table_name=changeset_table,
                trigger_options=TriggerOptions(**(entry.get("options") or {})),
            )
        except ValidationError as e:
            raise TrackingConfigError(f"Invalid tracking entry {model_id}: {e}", model_id=model_id) from e

        config.resolve()
        return config


__all__ = [
    "TrackingService",
]
