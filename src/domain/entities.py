"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Ride``: enforces valid lifecycle transitions
  (PENDING -> NEGOTIATING -> CONFIRMED -> COMPLETED, CANCELLED from any
  non-terminal status).
- ``Session`` is an immutable value passed into every store command.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .enums import (
    ACTIVE_RIDE_STATUSES,
    RIDE_TRANSITIONS,
    TERMINAL_RIDE_STATUSES,
    OfferStatus,
    RideStatus,
    Role,
)
from .errors import InvalidStateTransition

SYSTEM_SENDER_ID = "system"
SYSTEM_SENDER_NAME = "System"


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Vehicle:
    model: str
    plate: str


@dataclass(frozen=True)
class Session:
    account_id: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return self.account_id is None


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Account:
    name: str
    email: str
    role: Role
    id: Optional[str] = None
    phone: Optional[str] = None
    vehicle: Optional[Vehicle] = None
    blocked: bool = False


@dataclass
class Ride:
    requester_id: str
    requester_name: str
    origin: str
    destination: str
    offer_price: Decimal
    id: Optional[str] = None
    status: RideStatus = RideStatus.PENDING
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    vehicle: Optional[Vehicle] = None
    final_price: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_RIDE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_RIDE_STATUSES

    def transition_to(self, new_status: RideStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = RIDE_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}",
                entity_id=self.id,
            )
        self.status = new_status

    def assign_driver(self, offer: "Offer", vehicle: Optional[Vehicle] = None) -> None:
        """Confirm *offer*'s terms; *vehicle* is the driver's current car."""
        self.transition_to(RideStatus.CONFIRMED)
        self.driver_id = offer.driver_id
        self.driver_name = offer.driver_name
        self.vehicle = vehicle or offer.vehicle
        self.final_price = offer.amount


@dataclass
class Offer:
    ride_id: str
    driver_id: str
    driver_name: str
    amount: Decimal
    vehicle: Optional[Vehicle] = None
    id: Optional[str] = None
    status: OfferStatus = OfferStatus.PENDING


@dataclass(frozen=True)
class Message:
    id: str
    ride_id: str
    sender_id: str
    sender_name: str
    text: str
    timestamp: datetime
    is_system: bool = False
