"""
Clock and scheduler abstractions.

The store never reads the wall clock directly.  Production wires a
``SystemClock``; tests wire a ``ManualClock`` and call ``advance`` and
``Scheduler.tick`` themselves, so periodic jobs (the retention sweep) run
synchronously and deterministically.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime: ...


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock(Clock):
    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        if delta < timedelta(0):
            raise ValueError("ManualClock cannot move backwards")
        self._now += delta
        return self._now


@dataclass
class _Job:
    name: str
    interval: timedelta
    callback: Callable[[], object]
    next_run: datetime


class Scheduler:
    """Runs registered jobs whose interval has elapsed on each ``tick``."""

    def __init__(self, clock: Clock):
        self.clock = clock
        self._jobs: list[_Job] = []

    def every(
        self,
        interval: timedelta,
        callback: Callable[[], object],
        name: str = "",
        run_immediately: bool = True,
    ) -> None:
        now = self.clock.now()
        self._jobs.append(
            _Job(
                name=name or getattr(callback, "__name__", "job"),
                interval=interval,
                callback=callback,
                next_run=now if run_immediately else now + interval,
            )
        )

    def tick(self) -> int:
        """Run every due job once.  Returns the number of jobs run."""
        now = self.clock.now()
        ran = 0
        for job in self._jobs:
            if job.next_run > now:
                continue
            logger.debug("Running scheduled job %s", job.name)
            job.callback()
            job.next_run = now + job.interval
            ran += 1
        return ran
