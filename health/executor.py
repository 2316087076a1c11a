# ============================================================================
# HEALTH CHECK EXECUTOR
# ============================================================================
# EPOCH: 1 - AUDIT TRAIL
# STATUS: Infrastructure - Tiered health check execution
# PURPOSE: Run checks tier by tier with timeouts and aggregate the outcome
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Executor

Checks are bucketed into priority tiers (<=15, <=25, <=35, rest). Tiers run
in order; checks inside a tier run concurrently, bounded by max_parallel.
Every check has its own timeout and the whole run shares one deadline.
An unhealthy tier stops the run by default: trigger checks mean nothing
when the database or the audit schema is gone.
"""

import asyncio
import bisect
import logging
import time
from typing import Dict, List, Optional

from health.core import (
    AggregatedHealthResult,
    HealthCheckPlugin,
    HealthCheckResult,
    HealthStatus,
)
from health.registry import HealthCheckRegistry, get_registry

logger = logging.getLogger(__name__)

DEADLINE_MESSAGE = "Skipped: overall timeout exceeded"


class HealthCheckExecutor:
    """Runs the checks of one registry."""

    TIER_BOUNDARIES = [15, 25, 35, 100]

    def __init__(
        self,
        registry: Optional[HealthCheckRegistry] = None,
        overall_timeout: float = 30.0,
        max_parallel: int = 5,
    ):
        # An empty private registry must not fall back to the global one
        self.registry = registry if registry is not None else get_registry()
        self.overall_timeout = overall_timeout
        self.max_parallel = max_parallel

    async def execute_all(self, early_terminate: bool = True) -> AggregatedHealthResult:
        started = time.monotonic()
        deadline = started + self.overall_timeout
        results: Dict[str, HealthCheckResult] = {}

        for tier in self._group_by_tier(self.registry.get_checks_by_priority()):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(f"Health checks exceeded {self.overall_timeout}s, skipping rest")
                results.update((check.name, HealthCheckResult.unhealthy(DEADLINE_MESSAGE)) for check in tier)
                continue

            tier_results = await self._execute_tier(tier, remaining)
            results.update(tier_results)

            if early_terminate and any(
                r.status is HealthStatus.UNHEALTHY for r in tier_results.values()
            ):
                logger.info("Unhealthy tier, later health checks not run")
                break

        return AggregatedHealthResult(
            status=HealthStatus.aggregate(r.status for r in results.values()),
            checks=results,
            total_duration_ms=(time.monotonic() - started) * 1000,
        )

    async def execute_single(self, name: str) -> Optional[HealthCheckResult]:
        check = self.registry.get(name)
        return await self._execute_check(check) if check is not None else None

    async def _execute_tier(
        self,
        checks: List[HealthCheckPlugin],
        remaining: float,
    ) -> Dict[str, HealthCheckResult]:
        limit = asyncio.Semaphore(self.max_parallel)

        async def bounded(check: HealthCheckPlugin) -> HealthCheckResult:
            async with limit:
                return await self._execute_check(check)

        tasks = {check.name: asyncio.create_task(bounded(check)) for check in checks}
        _, pending = await asyncio.wait(tasks.values(), timeout=remaining)
        for task in pending:
            task.cancel()

        return {
            name: HealthCheckResult.unhealthy(DEADLINE_MESSAGE) if task in pending else task.result()
            for name, task in tasks.items()
        }

    async def _execute_check(self, check: HealthCheckPlugin) -> HealthCheckResult:
        started = time.monotonic()
        try:
            result = await asyncio.wait_for(check.check(), timeout=check.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Health check {check.name} timed out after {check.timeout_seconds}s")
            result = HealthCheckResult.unhealthy(f"Timeout after {check.timeout_seconds}s")
        except Exception as e:
            logger.error(f"Health check {check.name} raised: {e}")
            result = HealthCheckResult.from_exception(e)

        result.duration_ms = (time.monotonic() - started) * 1000
        logger.debug(f"Health check {check.name}: {result.status.value} in {result.duration_ms:.1f}ms")
        return result

    def _group_by_tier(self, checks: List[HealthCheckPlugin]) -> List[List[HealthCheckPlugin]]:
        """Split priority-ordered checks into consecutive tiers."""
        last = len(self.TIER_BOUNDARIES) - 1
        tiers: Dict[int, List[HealthCheckPlugin]] = {}
        for check in checks:
            index = min(bisect.bisect_left(self.TIER_BOUNDARIES, check.priority), last)
            tiers.setdefault(index, []).append(check)
        return [tiers[index] for index in sorted(tiers)]


def run_health_checks(
    registry: Optional[HealthCheckRegistry] = None,
    overall_timeout: float = 30.0,
) -> AggregatedHealthResult:
    """Blocking entry point for the CLI."""
    executor = HealthCheckExecutor(registry, overall_timeout=overall_timeout)
    return asyncio.run(executor.execute_all())


__all__ = [
    "HealthCheckExecutor",
    "run_health_checks",
]
