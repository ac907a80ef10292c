"""
Negotiation Store
=================

Single owner of all mutable domain state.  The presentation layer talks to
this facade only: command methods mutate and return a snapshot of the
affected entity, query methods return snapshots and never mutate.

Concurrency
-----------
Every command and query runs under one re-entrant lock, which makes each
command atomic and serializes commands against the same ride.  Events are
published to subscribers after the lock is released, so a subscriber may
call back into the store.
"""

from __future__ import annotations

import copy
import functools
import logging
import threading
from datetime import timedelta
from typing import Callable, Iterable, Optional

from src.infrastructure.clock import Clock, SystemClock
from src.infrastructure.ids import IdGenerator, UuidIdGenerator
from src.infrastructure.repositories import (
    AccountRepository,
    MessageRepository,
    OfferRepository,
    RideRepository,
)

from .access import AccessGuard
from .entities import Account, Message, Offer, Ride, Session, Vehicle
from .enums import OPEN_RIDE_STATUSES, Role
from .events import EventBus, Outbox, Subscriber
from .lifecycle import RideLifecycle
from .messaging import MessagingLog
from .offers import OfferLedger
from .registry import IdentityRegistry
from .retention import DEFAULT_RETENTION, RetentionSweeper
from .stats import PlatformStats, compute_stats
from .validation import Amount

logger = logging.getLogger(__name__)


def _snapshot(value):
    if isinstance(value, list):
        return [copy.copy(v) for v in value]
    return copy.copy(value)


def command(method: Callable) -> Callable:
    """Run *method* atomically, then publish the events it recorded."""

    @functools.wraps(method)
    def wrapper(self: "NegotiationStore", *args, **kwargs):
        with self._lock:
            try:
                result = method(self, *args, **kwargs)
            except Exception as exc:
                self._outbox.drain()
                logger.debug("%s rejected: %r", method.__name__, exc)
                raise
            events = self._outbox.drain()
        self._bus.publish(events)
        return _snapshot(result)

    return wrapper


def query(method: Callable) -> Callable:
    @functools.wraps(method)
    def wrapper(self: "NegotiationStore", *args, **kwargs):
        with self._lock:
            return _snapshot(method(self, *args, **kwargs))

    return wrapper


class NegotiationStore:
    def __init__(
        self,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Optional[Clock] = None,
        ids: Optional[IdGenerator] = None,
    ):
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdGenerator()
        self._lock = threading.RLock()
        self._outbox = Outbox()
        self._bus = EventBus()

        self._accounts = AccountRepository()
        self._rides = RideRepository()
        self._offers = OfferRepository()
        self._messages = MessageRepository()

        self.guard = AccessGuard(self._accounts)
        self.registry = IdentityRegistry(
            self._accounts, self.ids, self.guard, self._outbox
        )
        self.messaging = MessagingLog(
            self._messages, self.ids, self.clock, self.guard, self._outbox
        )
        self.lifecycle = RideLifecycle(
            self._rides,
            self._offers,
            self.ids,
            self.clock,
            self.guard,
            self.messaging,
            self._outbox,
        )
        self.ledger = OfferLedger(
            self._offers, self.lifecycle, self.ids, self.guard, self.messaging, self._outbox
        )
        self.sweeper = RetentionSweeper(
            self._rides,
            self._offers,
            self._messages,
            self.clock,
            self._outbox,
            retention=retention,
        )

    # ── Subscriptions ─────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self._bus.subscribe(callback)

    # ── Identity commands ─────────────────────────────────────────

    @command
    def seed(self, accounts: Iterable[Account]) -> list[Account]:
        """Insert pre-built accounts verbatim (ids included)."""
        added = []
        for account in accounts:
            if account.id is None:
                account = copy.copy(account)
                account.id = self.ids.next_id(Role(account.role).value)
            if self._accounts.get_by_id(account.id) is None:
                added.append(self._accounts.add(copy.copy(account)))
        return added

    @command
    def register_account(
        self, account: Account, session: Optional[Session] = None
    ) -> Account:
        return self.registry.register(account, session)

    @command
    def authenticate(self, email: str, role: Role) -> Account:
        return self.registry.authenticate(email, role)

    @command
    def logout(self) -> None:
        self.guard.clear_active()

    @query
    def active_session(self) -> Session:
        return self.guard.active()

    @command
    def set_blocked(self, session: Session, account_id: str, blocked: bool) -> Account:
        return self.registry.set_blocked(session, account_id, blocked)

    @command
    def toggle_blocked(self, session: Session, account_id: str) -> Account:
        return self.registry.toggle_blocked(session, account_id)

    @command
    def update_vehicle(self, session: Session, vehicle: Vehicle) -> Account:
        return self.registry.update_vehicle(session, vehicle)

    # ── Ride commands ─────────────────────────────────────────────

    @command
    def create_ride(
        self, session: Session, origin: str, destination: str, offer_price: Amount
    ) -> Ride:
        return self.lifecycle.create(session, origin, destination, offer_price)

    @command
    def cancel_ride(self, session: Session, ride_id: str) -> Ride:
        return self.lifecycle.cancel(session, ride_id)

    @command
    def confirm_ride(self, session: Session, ride_id: str) -> Ride:
        return self.lifecycle.confirm(session, ride_id)

    @command
    def complete_ride(self, ride_id: str) -> Ride:
        return self.lifecycle.complete(ride_id)

    # ── Offer commands ────────────────────────────────────────────

    @command
    def submit_offer(self, session: Session, ride_id: str, amount: Amount) -> Offer:
        return self.ledger.submit(session, ride_id, amount)

    @command
    def accept_offer(self, session: Session, offer_id: str) -> Offer:
        return self.ledger.accept(session, offer_id)

    @command
    def reject_offer(self, session: Session, offer_id: str) -> Offer:
        return self.ledger.reject(session, offer_id)

    # ── Messaging ─────────────────────────────────────────────────

    @command
    def post_message(self, session: Session, ride_id: str, text: str) -> Message:
        ride = self.lifecycle.get(ride_id)
        return self.messaging.post(session, ride, text)

    # ── Maintenance ───────────────────────────────────────────────

    @command
    def sweep(self, session: Optional[Session] = None) -> int:
        """Purge expired rides.

        The scheduler calls this without a session; any caller that passes
        one must be an admin.
        """
        if session is not None:
            self.guard.require_role(session, Role.ADMIN)
        return self.sweeper.sweep()

    # ── Queries ───────────────────────────────────────────────────

    @query
    def list_accounts(self) -> list[Account]:
        return self._accounts.list_all()

    @query
    def search_accounts(self, session: Session, term: str = "") -> list[Account]:
        return self.registry.search(session, term)

    @query
    def get_account(self, account_id: str) -> Account:
        return self.registry.get(account_id)

    @query
    def list_rides(self) -> list[Ride]:
        return self._rides.list_all()

    @query
    def open_rides(self) -> list[Ride]:
        """Rides drivers can still bid on, newest first."""
        return [r for r in self._rides.list_all() if r.status in OPEN_RIDE_STATUSES]

    @query
    def get_ride(self, ride_id: str) -> Ride:
        return self.lifecycle.get(ride_id)

    @query
    def rides_for_account(self, account_id: str) -> list[Ride]:
        self.registry.get(account_id)
        return self._rides.list_for_account(account_id)

    @query
    def active_ride_for(self, account_id: str) -> Optional[Ride]:
        account = self.registry.get(account_id)
        if account.role == Role.DRIVER:
            return self._rides.get_active_for_driver(account_id)
        return self._rides.get_active_for_requester(account_id)

    @query
    def offers_for_ride(self, ride_id: str) -> list[Offer]:
        self.lifecycle.get(ride_id)
        return self.ledger.for_ride(ride_id)

    @query
    def visible_offers(self, session: Session, ride_id: str) -> list[Offer]:
        return self.ledger.visible_to(session, ride_id)

    @query
    def messages_for_ride(self, ride_id: str) -> list[Message]:
        self.lifecycle.get(ride_id)
        return list(self.messaging.messages_for(ride_id))

    @query
    def stats(self, session: Session) -> PlatformStats:
        self.guard.require_role(session, Role.ADMIN)
        return compute_stats(self._accounts.list_all(), self._rides.list_all())
