"""Domain enumerations and state-transition rules."""

import enum


class Role(str, enum.Enum):
    PASSENGER = "passenger"
    DRIVER = "driver"
    ADMIN = "admin"


class RideStatus(str, enum.Enum):
    PENDING = "pending"
    NEGOTIATING = "negotiating"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OfferStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {RideStatus.NEGOTIATING, RideStatus.CANCELLED},
    RideStatus.NEGOTIATING: {RideStatus.CONFIRMED, RideStatus.CANCELLED},
    RideStatus.CONFIRMED: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}

ACTIVE_RIDE_STATUSES = frozenset(
    {RideStatus.PENDING, RideStatus.NEGOTIATING, RideStatus.CONFIRMED}
)
OPEN_RIDE_STATUSES = frozenset({RideStatus.PENDING, RideStatus.NEGOTIATING})
TERMINAL_RIDE_STATUSES = frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED})
