# ============================================================================
# HEALTH CHECK REGISTRY
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Health check plugin registration
# PURPOSE: Named collection of health check plugins
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Registry

Built-in checks register themselves in a process-wide registry through
@register_check. Callers that need injected dependencies (the CLI) build a
private HealthCheckRegistry and register instances directly:

    registry = HealthCheckRegistry()
    registry.register(AuditObjectsCheck(db=repo, tracking=tracking))
"""

import logging
from typing import Dict, List, Optional, Type, Union

from health.core import HealthCheckCategory, HealthCheckPlugin

logger = logging.getLogger(__name__)


class HealthCheckRegistry:
    """Health check plugins keyed by name."""

    def __init__(self):
        self._checks: Dict[str, HealthCheckPlugin] = {}

    def register(self, check: HealthCheckPlugin) -> None:
        """Add a check; an existing check with the same name is replaced."""
        if check.name in self._checks:
            logger.warning(f"Replacing health check: {check.name}")
        self._checks[check.name] = check
        logger.debug(f"Health check {check.name}: {check.category.value}/{check.priority}")

    def register_class(self, check_class: Type[HealthCheckPlugin], **kwargs) -> HealthCheckPlugin:
        check = check_class(**kwargs)
        self.register(check)
        return check

    def unregister(self, name: str) -> bool:
        return self._checks.pop(name, None) is not None

    def get(self, name: str) -> Optional[HealthCheckPlugin]:
        return self._checks.get(name)

    def get_checks_by_priority(self) -> List[HealthCheckPlugin]:
        """Checks ordered by priority, registration order within a priority."""
        return sorted(self._checks.values(), key=lambda check: check.priority)

    def clear(self) -> None:
        self._checks.clear()

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, name: str) -> bool:
        return name in self._checks


# ============================================================================
# PROCESS-WIDE REGISTRY
# ============================================================================

_registry: Optional[HealthCheckRegistry] = None


def get_registry() -> HealthCheckRegistry:
    global _registry
    if _registry is None:
        _registry = HealthCheckRegistry()
    return _registry


def register_check(
    category: Union[str, HealthCheckCategory] = None,
    priority: int = None,
    timeout_seconds: float = None,
):
    """
    Class decorator: instantiate the check with no arguments and add it
    to the process-wide registry.

    Checks registered this way must build their dependencies lazily.
    """
    def decorator(cls: Type[HealthCheckPlugin]) -> Type[HealthCheckPlugin]:
        if category is not None:
            cls.category = HealthCheckCategory(category)
        cls.priority = priority if priority is not None else cls.category.default_priority
        if timeout_seconds is not None:
            cls.timeout_seconds = timeout_seconds

        get_registry().register_class(cls)
        return cls

    return decorator


__all__ = [
    "HealthCheckRegistry",
    "get_registry",
    "register_check",
]
