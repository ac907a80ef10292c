"""
Background Retention Worker
===========================

Ticks the store's ``Scheduler`` every ``SWEEP_INTERVAL_SECONDS`` (default
60 s).  The scheduler decides which jobs are due; the only job registered
here is the retention sweep.  Tests skip this loop entirely and drive the
scheduler with a ``ManualClock``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from src.config import settings
from src.domain.store import NegotiationStore
from src.infrastructure.clock import Scheduler

logger = logging.getLogger(__name__)

_task: Optional[asyncio.Task] = None
_stop_event: Optional[asyncio.Event] = None


def build_scheduler(
    store: NegotiationStore, interval: Optional[timedelta] = None
) -> Scheduler:
    scheduler = Scheduler(store.clock)
    scheduler.every(
        interval or timedelta(seconds=settings.sweep_interval_seconds),
        store.sweep,
        name="retention_sweep",
    )
    return scheduler


# ── Public API ────────────────────────────────────────────────────────


async def start_sweep_loop(scheduler: Scheduler) -> None:
    global _task, _stop_event
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop(scheduler))
    logger.info(
        "Retention worker started (interval=%ds)", settings.sweep_interval_seconds
    )


async def stop_sweep_loop() -> None:
    global _task, _stop_event
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    _task = _stop_event = None
    logger.info("Retention worker stopped")


# ── Internals ─────────────────────────────────────────────────────────


async def _loop(scheduler: Scheduler) -> None:
    """Periodic loop: tick the scheduler then sleep."""
    assert _stop_event is not None
    stop = _stop_event
    while not stop.is_set():
        run_cycle(scheduler)
        # Wait for the interval or until stop is signalled
        try:
            await asyncio.wait_for(
                stop.wait(), timeout=settings.sweep_interval_seconds
            )
            break
        except asyncio.TimeoutError:
            pass  # next cycle


def run_cycle(scheduler: Scheduler) -> int:
    """Execute one scheduler tick.  Returns the number of jobs run."""
    try:
        return scheduler.tick()
    except Exception:
        logger.exception("Unhandled error in retention cycle")
        return 0
