"""
Offer Ledger
============

Driver bids against a ride.  A driver bids at most once per ride; there is
no re-bid.  Accepting an offer leaves its siblings untouched, so several
offers may be ``accepted`` at once until one of those drivers confirms.
"""

from __future__ import annotations

import logging

from src.infrastructure.ids import IdGenerator
from src.infrastructure.repositories import OfferRepository

from .access import AccessGuard
from .entities import Offer, Ride, Session
from .enums import OfferStatus, RideStatus, Role
from .errors import DuplicateOffer, Forbidden, InvalidState, NotFound
from .events import Outbox
from .lifecycle import RideLifecycle
from .messaging import MessagingLog
from .validation import Amount, format_amount, require_amount

logger = logging.getLogger(__name__)


class OfferLedger:
    def __init__(
        self,
        offers: OfferRepository,
        lifecycle: RideLifecycle,
        ids: IdGenerator,
        guard: AccessGuard,
        messaging: MessagingLog,
        outbox: Outbox,
    ):
        self.offers = offers
        self.lifecycle = lifecycle
        self.ids = ids
        self.guard = guard
        self.messaging = messaging
        self.outbox = outbox

    def get(self, offer_id: str) -> Offer:
        offer = self.offers.get_by_id(offer_id)
        if offer is None:
            raise NotFound("Offer not found", entity_id=offer_id)
        return offer

    # ── Commands ──────────────────────────────────────────────────

    def submit(self, session: Session, ride_id: str, amount: Amount) -> Offer:
        driver = self.guard.require_role(session, Role.DRIVER)
        ride = self.lifecycle.get(ride_id)
        if ride.is_terminal:
            raise Forbidden(
                f"Ride is {ride.status.value}; offers are closed", entity_id=ride.id
            )
        if ride.status == RideStatus.CONFIRMED:
            raise InvalidState("Ride already has a driver", entity_id=ride.id)
        value = require_amount(amount)
        if self.offers.get_for_driver(ride.id, driver.id) is not None:
            raise DuplicateOffer(
                "Driver already made an offer on this ride", entity_id=ride.id
            )

        offer = Offer(
            id=self.ids.next_id("offer"),
            ride_id=ride.id,
            driver_id=driver.id,
            driver_name=driver.name,
            amount=value,
            vehicle=driver.vehicle,
        )
        self.offers.add(offer)
        self.lifecycle.receive_offer(ride, offer)
        self.outbox.record("offer.submitted", ride_id=ride.id, entity_id=offer.id)
        logger.info("Offer %s on ride %s from driver %s", offer.id, ride.id, driver.id)
        return offer

    def accept(self, session: Session, offer_id: str) -> Offer:
        offer = self.get(offer_id)
        ride = self._ride_for_requester(session, offer)
        if offer.status != OfferStatus.PENDING:
            raise InvalidState(
                f"Offer is already {offer.status.value}", entity_id=offer.id
            )
        if ride.status != RideStatus.NEGOTIATING:
            raise InvalidState(
                f"Cannot accept offers on a {ride.status.value} ride",
                entity_id=ride.id,
            )

        offer.status = OfferStatus.ACCEPTED
        self.messaging.post_system(
            ride.id,
            f"Offer from {offer.driver_name} accepted by the passenger. "
            f"Waiting for driver confirmation.",
        )
        self.outbox.record("offer.accepted", ride_id=ride.id, entity_id=offer.id)
        logger.info("Offer %s accepted on ride %s", offer.id, ride.id)
        return offer

    def reject(self, session: Session, offer_id: str) -> Offer:
        offer = self.get(offer_id)
        ride = self._ride_for_requester(session, offer)
        if ride.is_terminal:
            raise InvalidState(f"Ride is {ride.status.value}", entity_id=ride.id)
        if offer.status == OfferStatus.REJECTED:
            raise InvalidState("Offer is already rejected", entity_id=offer.id)
        if ride.driver_id == offer.driver_id:
            raise InvalidState(
                "Offer belongs to the confirmed driver", entity_id=offer.id
            )

        offer.status = OfferStatus.REJECTED
        self.messaging.post_system(
            ride.id,
            f"Offer of {format_amount(offer.amount)} from {offer.driver_name} "
            f"was rejected.",
        )
        self.outbox.record("offer.rejected", ride_id=ride.id, entity_id=offer.id)
        logger.info("Offer %s rejected on ride %s", offer.id, ride.id)
        return offer

    # ── Queries ───────────────────────────────────────────────────

    def for_ride(self, ride_id: str) -> list[Offer]:
        return self.offers.list_for_ride(ride_id)

    def visible_to(self, session: Session, ride_id: str) -> list[Offer]:
        """Requester and admins see every bid; a driver sees only their own
        until the ride is confirmed."""
        viewer = self.guard.resolve(session)
        ride = self.lifecycle.get(ride_id)
        offers = self.offers.list_for_ride(ride.id)
        if viewer.role == Role.ADMIN or viewer.id == ride.requester_id:
            return offers
        if viewer.role == Role.DRIVER:
            if ride.status == RideStatus.CONFIRMED:
                return offers
            return [o for o in offers if o.driver_id == viewer.id]
        return []

    def _ride_for_requester(self, session: Session, offer: Offer) -> Ride:
        caller = self.guard.resolve(session)
        ride = self.lifecycle.get(offer.ride_id)
        if caller.id != ride.requester_id:
            raise Forbidden(
                "Only the ride requester can answer offers", entity_id=offer.id
            )
        return ride
