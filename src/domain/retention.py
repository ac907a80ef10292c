"""
Retention Sweeper
=================

Purges rides whose creation time is at or before ``now - window`` together
with their offers and messages.  Status is not considered: a confirmed ride
older than the window goes too.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from src.infrastructure.clock import Clock
from src.infrastructure.repositories import (
    MessageRepository,
    OfferRepository,
    RideRepository,
)

from .events import Outbox

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=15)


class RetentionSweeper:
    def __init__(
        self,
        rides: RideRepository,
        offers: OfferRepository,
        messages: MessageRepository,
        clock: Clock,
        outbox: Outbox,
        retention: timedelta = DEFAULT_RETENTION,
    ):
        if retention <= timedelta(0):
            raise ValueError("retention window must be positive")
        self.rides = rides
        self.offers = offers
        self.messages = messages
        self.clock = clock
        self.outbox = outbox
        self.retention = retention

    def sweep(self) -> int:
        """Purge expired rides.  Returns the number of rides removed."""
        cutoff = self.clock.now() - self.retention
        expired = self.rides.list_created_at_or_before(cutoff)
        for ride in expired:
            offers = self.offers.delete_for_ride(ride.id)
            messages = self.messages.delete_for_ride(ride.id)
            self.rides.delete(ride.id)
            self.outbox.record("ride.purged", ride_id=ride.id, entity_id=ride.id)
            logger.debug(
                "Purged ride %s (%d offers, %d messages)", ride.id, offers, messages
            )
        if expired:
            logger.info("Retention sweep: %d rides purged", len(expired))
        return len(expired)
