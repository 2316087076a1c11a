# ============================================================================
# DATABASE HEALTH CHECKS
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - PostgreSQL connectivity
# PURPOSE: Verify the audited database is reachable
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database Health Checks

PostgreSQL connectivity check (priority 10):
- PostgresCheck: Basic PostgreSQL connectivity
"""

import asyncio
import logging

from health.core import (
    HealthCheckPlugin,
    HealthCheckResult,
)
from health.registry import register_check

logger = logging.getLogger(__name__)


@register_check(category="connectivity")
class PostgresCheck(HealthCheckPlugin):
    """
    PostgreSQL connectivity health check.

    Args:
        db: PostgreSQLRepository (shared repository if omitted)
    """

    name = "postgres"
    timeout_seconds = 5.0

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        if self._db is None:
            from infrastructure.postgresql import get_postgres_repository
            self._db = get_postgres_repository()
        return self._db

    async def check(self) -> HealthCheckResult:
        try:
            row = await asyncio.to_thread(
                self.db.fetch_one,
                "SELECT 1 as health_check, current_database() as db",
            )
        except ValueError as e:
            return HealthCheckResult.unhealthy(
                message="PostgreSQL not configured",
                hint=str(e),
            )
        except Exception as e:
            logger.warning(f"PostgreSQL connection failed: {e}")
            return HealthCheckResult.unhealthy(
                message=f"PostgreSQL connection failed: {e}",
            )

        if row and row.get("health_check") == 1:
            return HealthCheckResult.healthy(
                message="PostgreSQL connected",
                database=row.get("db"),
            )
        return HealthCheckResult.unhealthy(
            message="PostgreSQL query returned unexpected result",
        )


__all__ = [
    "PostgresCheck",
]
