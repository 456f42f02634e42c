"""Background tasks wired into the FastAPI lifespan."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from .media.retention_sweeper import RetentionSweeper


logger = logging.getLogger(__name__)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


def seconds_until_next_run(now: datetime, interval_seconds: float) -> float:
    """Delay until the next multiple of ``interval_seconds`` since the epoch.

    With the default hourly interval this fires at minute zero, like a
    ``0 * * * *`` cron entry.
    """

    elapsed = now.timestamp() % interval_seconds
    return interval_seconds - elapsed


async def run_periodic_retention_sweep(
    *,
    sweeper: RetentionSweeper,
    shutdown_event: asyncio.Event,
    interval_seconds: float = 3600.0,
    clock: Callable[[], datetime] | None = None,
) -> None:
    """Sweep expired artifacts on every interval boundary until shutdown."""

    interval = max(0.01, float(interval_seconds))
    tick = clock or _default_clock
    while not shutdown_event.is_set():
        delay = seconds_until_next_run(tick(), interval)
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
        else:
            return
        try:
            removed = await sweeper.sweep_once(now=tick())
        except Exception:  # pragma: no cover - unexpected sweep failure
            logger.exception("retention.sweep.iteration_failed")
        else:
            if removed:
                logger.info("Purged %s expired artifacts", len(removed))


__all__ = ["run_periodic_retention_sweep", "seconds_until_next_run"]
