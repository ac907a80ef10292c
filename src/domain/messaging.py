"""
Messaging Log
=============

Append-only per-ride chat trail.  Besides user messages it carries one
*system* entry for every ride state change, attributed to the ``system``
sender sentinel.  Entries are never edited; they disappear only when the
retention sweeper purges their ride.
"""

from __future__ import annotations

import logging
from typing import Iterator

from src.infrastructure.clock import Clock
from src.infrastructure.ids import IdGenerator
from src.infrastructure.repositories import MessageRepository

from .access import AccessGuard
from .entities import SYSTEM_SENDER_ID, SYSTEM_SENDER_NAME, Message, Ride, Session
from .errors import EmptyMessage, InvalidState
from .events import Outbox

logger = logging.getLogger(__name__)


class MessagingLog:
    def __init__(
        self,
        messages: MessageRepository,
        ids: IdGenerator,
        clock: Clock,
        guard: AccessGuard,
        outbox: Outbox,
    ):
        self.messages = messages
        self.ids = ids
        self.clock = clock
        self.guard = guard
        self.outbox = outbox

    def post(self, session: Session, ride: Ride, text: str) -> Message:
        sender = self.guard.resolve(session)
        if ride.is_terminal:
            raise InvalidState(
                f"Cannot chat on a {ride.status.value} ride", entity_id=ride.id
            )
        body = (text or "").strip()
        if not body:
            raise EmptyMessage("Message text is blank", entity_id=ride.id)

        message = self._append(ride.id, sender.id, sender.name, body, is_system=False)
        self.outbox.record("message.posted", ride_id=ride.id, entity_id=message.id)
        return message

    def post_system(self, ride_id: str, text: str) -> Message:
        return self._append(
            ride_id, SYSTEM_SENDER_ID, SYSTEM_SENDER_NAME, text, is_system=True
        )

    def messages_for(self, ride_id: str) -> Iterator[Message]:
        """Ascending by timestamp; each call starts a fresh pass."""
        return self.messages.iter_for_ride(ride_id)

    def count_for(self, ride_id: str) -> int:
        return self.messages.count_for_ride(ride_id)

    # ── Internals ─────────────────────────────────────────────────

    def _append(
        self, ride_id: str, sender_id: str, sender_name: str, text: str, is_system: bool
    ) -> Message:
        message = Message(
            id=self.ids.next_id("msg"),
            ride_id=ride_id,
            sender_id=sender_id,
            sender_name=sender_name,
            text=text,
            timestamp=self.clock.now(),
            is_system=is_system,
        )
        self.messages.append(message)
        logger.debug("Ride %s: %s", ride_id, text)
        return message
