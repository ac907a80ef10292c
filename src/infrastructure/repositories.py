"""
Repository Pattern -- keeps the domain components storage-agnostic.

All repositories are process-memory dicts keyed by id.  Each exposes
domain-relevant queries only; ordering guarantees live here so every
caller sees the same order.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional

from src.domain.entities import Account, Message, Offer, Ride
from src.domain.enums import ACTIVE_RIDE_STATUSES, Role


class AccountRepository:
    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    def add(self, account: Account) -> Account:
        self._accounts[account.id] = account
        return account

    def get_by_id(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def get_by_credential(self, email: str, role: Role) -> Optional[Account]:
        key = email.strip().lower()
        for account in self._accounts.values():
            if account.role == role and account.email.lower() == key:
                return account
        return None

    def list_all(self) -> list[Account]:
        return list(self._accounts.values())


class RideRepository:
    def __init__(self) -> None:
        self._rides: dict[str, Ride] = {}

    def add(self, ride: Ride) -> Ride:
        self._rides[ride.id] = ride
        return ride

    def get_by_id(self, ride_id: str) -> Optional[Ride]:
        return self._rides.get(ride_id)

    def list_all(self) -> list[Ride]:
        """Newest first."""
        return sorted(
            self._rides.values(), key=lambda r: r.created_at, reverse=True
        )

    def list_for_account(self, account_id: str) -> list[Ride]:
        return [
            r
            for r in self.list_all()
            if r.requester_id == account_id or r.driver_id == account_id
        ]

    def get_active_for_requester(self, account_id: str) -> Optional[Ride]:
        for ride in self._rides.values():
            if ride.requester_id == account_id and ride.status in ACTIVE_RIDE_STATUSES:
                return ride
        return None

    def get_active_for_driver(self, account_id: str) -> Optional[Ride]:
        for ride in self._rides.values():
            if ride.driver_id == account_id and ride.status in ACTIVE_RIDE_STATUSES:
                return ride
        return None

    def list_created_at_or_before(self, cutoff: datetime) -> list[Ride]:
        return [r for r in self._rides.values() if r.created_at <= cutoff]

    def delete(self, ride_id: str) -> None:
        self._rides.pop(ride_id, None)


class OfferRepository:
    def __init__(self) -> None:
        self._offers: dict[str, Offer] = {}

    def add(self, offer: Offer) -> Offer:
        self._offers[offer.id] = offer
        return offer

    def get_by_id(self, offer_id: str) -> Optional[Offer]:
        return self._offers.get(offer_id)

    def list_for_ride(self, ride_id: str) -> list[Offer]:
        return [o for o in self._offers.values() if o.ride_id == ride_id]

    def get_for_driver(self, ride_id: str, driver_id: str) -> Optional[Offer]:
        for offer in self._offers.values():
            if offer.ride_id == ride_id and offer.driver_id == driver_id:
                return offer
        return None

    def delete_for_ride(self, ride_id: str) -> int:
        doomed = [oid for oid, o in self._offers.items() if o.ride_id == ride_id]
        for oid in doomed:
            del self._offers[oid]
        return len(doomed)


class MessageRepository:
    """Append-only per-ride log."""

    def __init__(self) -> None:
        self._by_ride: dict[str, list[Message]] = {}

    def append(self, message: Message) -> Message:
        self._by_ride.setdefault(message.ride_id, []).append(message)
        return message

    def iter_for_ride(self, ride_id: str) -> Iterator[Message]:
        # sorted() is stable: equal timestamps keep append order
        yield from sorted(
            self._by_ride.get(ride_id, ()), key=lambda m: m.timestamp
        )

    def count_for_ride(self, ride_id: str) -> int:
        return len(self._by_ride.get(ride_id, ()))

    def delete_for_ride(self, ride_id: str) -> int:
        return len(self._by_ride.pop(ride_id, []))
