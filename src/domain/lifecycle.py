"""
Ride Lifecycle Engine
=====================

Owns ride records and the status state machine::

    pending -> negotiating -> confirmed -> completed
       \\____________\\_____________\\-> cancelled

A passenger holds at most one ride in {pending, negotiating, confirmed}.
A driver is set on a ride only by ``confirm``, and only when that driver's
offer on the ride was accepted by the requester.  Each transition appends
exactly one system message.
"""

from __future__ import annotations

import logging

from src.infrastructure.clock import Clock
from src.infrastructure.ids import IdGenerator
from src.infrastructure.repositories import OfferRepository, RideRepository

from .access import AccessGuard
from .entities import Offer, Ride, Session
from .enums import OfferStatus, RideStatus, Role
from .errors import Forbidden, InvalidState, NoAcceptedOffer, NotFound, RideAlreadyActive
from .events import Outbox
from .messaging import MessagingLog
from .validation import Amount, format_amount, require_amount, require_text

logger = logging.getLogger(__name__)


class RideLifecycle:
    def __init__(
        self,
        rides: RideRepository,
        offers: OfferRepository,
        ids: IdGenerator,
        clock: Clock,
        guard: AccessGuard,
        messaging: MessagingLog,
        outbox: Outbox,
    ):
        self.rides = rides
        self.offers = offers
        self.ids = ids
        self.clock = clock
        self.guard = guard
        self.messaging = messaging
        self.outbox = outbox

    def get(self, ride_id: str) -> Ride:
        ride = self.rides.get_by_id(ride_id)
        if ride is None:
            raise NotFound("Ride not found", entity_id=ride_id)
        return ride

    # ── Commands ──────────────────────────────────────────────────

    def create(
        self, session: Session, origin: str, destination: str, offer_price: Amount
    ) -> Ride:
        passenger = self.guard.require_role(session, Role.PASSENGER)
        origin = require_text(origin, "origin")
        destination = require_text(destination, "destination")
        price = require_amount(offer_price, "offer_price")

        existing = self.rides.get_active_for_requester(passenger.id)
        if existing is not None:
            raise RideAlreadyActive(
                f"Passenger already has a {existing.status.value} ride",
                entity_id=existing.id,
            )

        ride = Ride(
            id=self.ids.next_id("ride"),
            requester_id=passenger.id,
            requester_name=passenger.name,
            origin=origin,
            destination=destination,
            offer_price=price,
            created_at=self.clock.now(),
        )
        self.rides.add(ride)
        self.messaging.post_system(
            ride.id,
            f"Ride requested by {passenger.name} from {origin} to {destination} "
            f"for {format_amount(price)}.",
        )
        self.outbox.record("ride.created", ride_id=ride.id, entity_id=ride.id)
        logger.info("Ride %s created by %s", ride.id, passenger.id)
        return ride

    def receive_offer(self, ride: Ride, offer: Offer) -> None:
        """Called by the offer ledger once *offer* has been stored."""
        if ride.status == RideStatus.PENDING:
            ride.transition_to(RideStatus.NEGOTIATING)
            self.outbox.record("ride.negotiating", ride_id=ride.id, entity_id=ride.id)
        vehicle = f" ({offer.vehicle.model})" if offer.vehicle else ""
        self.messaging.post_system(
            ride.id,
            f"Offer of {format_amount(offer.amount)} received from "
            f"{offer.driver_name}{vehicle}.",
        )

    def confirm(self, session: Session, ride_id: str) -> Ride:
        driver = self.guard.require_role(session, Role.DRIVER)
        ride = self.get(ride_id)
        offer = self.offers.get_for_driver(ride.id, driver.id)
        if offer is None or offer.status != OfferStatus.ACCEPTED:
            raise NoAcceptedOffer(
                "Driver has no accepted offer on this ride", entity_id=ride.id
            )
        if ride.status != RideStatus.NEGOTIATING:
            raise InvalidState(
                f"Cannot confirm a {ride.status.value} ride", entity_id=ride.id
            )

        ride.assign_driver(offer, driver.vehicle)
        plate = f" ({ride.vehicle.plate})" if ride.vehicle else ""
        self.messaging.post_system(
            ride.id,
            f"Ride confirmed! Driver {driver.name}{plate} is on the way "
            f"for {format_amount(ride.final_price)}.",
        )
        self.outbox.record("ride.confirmed", ride_id=ride.id, entity_id=offer.id)
        logger.info("Ride %s confirmed by driver %s", ride.id, driver.id)
        return ride

    def cancel(self, session: Session, ride_id: str) -> Ride:
        caller = self.guard.resolve(session)
        ride = self.get(ride_id)
        if not (
            caller.role == Role.ADMIN
            or caller.id == ride.requester_id
            or (ride.driver_id is not None and caller.id == ride.driver_id)
        ):
            raise Forbidden("Caller cannot cancel this ride", entity_id=ride.id)
        if ride.is_terminal:
            raise InvalidState(
                f"Ride is already {ride.status.value}", entity_id=ride.id
            )

        ride.transition_to(RideStatus.CANCELLED)
        self.messaging.post_system(ride.id, f"Ride cancelled by {caller.name}.")
        self.outbox.record("ride.cancelled", ride_id=ride.id, entity_id=ride.id)
        logger.info("Ride %s cancelled by %s", ride.id, caller.id)
        return ride

    def complete(self, ride_id: str) -> Ride:
        """Trip-completion signal from outside the negotiation flow."""
        ride = self.get(ride_id)
        if ride.status != RideStatus.CONFIRMED:
            raise InvalidState(
                f"Cannot complete a {ride.status.value} ride", entity_id=ride.id
            )
        ride.transition_to(RideStatus.COMPLETED)
        self.messaging.post_system(ride.id, "Ride completed.")
        self.outbox.record("ride.completed", ride_id=ride.id, entity_id=ride.id)
        logger.info("Ride %s completed", ride.id)
        return ride
