"""Aggregates shown on the admin dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .entities import Account, Ride
from .enums import ACTIVE_RIDE_STATUSES, RideStatus, Role

REVENUE_STATUSES = frozenset({RideStatus.CONFIRMED, RideStatus.COMPLETED})


@dataclass(frozen=True)
class PlatformStats:
    accounts: int
    passengers: int
    drivers: int
    blocked: int
    active_rides: int
    revenue: Decimal


def compute_stats(accounts: Iterable[Account], rides: Iterable[Ride]) -> PlatformStats:
    members = [a for a in accounts if a.role != Role.ADMIN]
    rides = list(rides)
    return PlatformStats(
        accounts=len(members),
        passengers=sum(1 for a in members if a.role == Role.PASSENGER),
        drivers=sum(1 for a in members if a.role == Role.DRIVER),
        blocked=sum(1 for a in members if a.blocked),
        active_rides=sum(1 for r in rides if r.status in ACTIVE_RIDE_STATUSES),
        revenue=sum(
            (r.final_price for r in rides if r.status in REVENUE_STATUSES and r.final_price),
            Decimal("0"),
        ),
    )
