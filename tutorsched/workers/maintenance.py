"""
Periodic maintenance for a running scheduler.

The weekly reset is evaluated once at startup and then on every tick; the
scheduler itself guarantees at most one purge per calendar day.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

import structlog
from tutorsched.domain.engine import SchedulingEngine

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def run_weekly_reset(engine: SchedulingEngine, clock: Clock = datetime.now) -> bool:
    """Evaluate the weekly reset once and report whether it purged."""
    now = clock()
    try:
        purged = engine.weekly_reset.evaluate(now)
    except Exception:
        logger.exception("weekly_reset_job_failed", at=now.isoformat())
        return False
    if purged:
        logger.info("weekly_reset_job_purged", at=now.isoformat())
    return purged


async def maintenance_loop(
    engine: SchedulingEngine,
    *,
    interval_seconds: float,
    clock: Clock = datetime.now,
) -> None:
    """Run maintenance jobs until cancelled."""
    logger.info("maintenance_loop_started", interval_seconds=interval_seconds)
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            run_weekly_reset(engine, clock)
    except asyncio.CancelledError:
        logger.info("maintenance_loop_stopped")
        raise
