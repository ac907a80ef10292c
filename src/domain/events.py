"""
Change notifications for the presentation layer (Observer pattern).

Components record ``StoreEvent`` values in an ``Outbox`` while a command
runs; the store drains it and hands the events to the ``EventBus`` once the
command has committed.  A subscriber that raises is logged and skipped so it
can never undo or block a command that already happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreEvent:
    kind: str
    ride_id: Optional[str] = None
    entity_id: Optional[str] = None


Subscriber = Callable[[StoreEvent], None]


class Outbox:
    def __init__(self) -> None:
        self._pending: list[StoreEvent] = []

    def record(
        self, kind: str, ride_id: Optional[str] = None, entity_id: Optional[str] = None
    ) -> None:
        self._pending.append(StoreEvent(kind, ride_id, entity_id))

    def drain(self) -> list[StoreEvent]:
        events, self._pending = self._pending, []
        return events


class EventBus:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, events: list[StoreEvent]) -> None:
        for event in events:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    logger.exception("Subscriber failed on %s", event.kind)
