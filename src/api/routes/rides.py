"""
Ride endpoints
==============

POST /api/v1/rides                       -- passenger requests a ride
GET  /api/v1/rides?open=true             -- all rides, or only biddable ones
GET  /api/v1/rides/{ride_id}             -- ride status and price
POST /api/v1/rides/{ride_id}/cancel      -- requester, driver or admin cancels
POST /api/v1/rides/{ride_id}/confirm     -- accepted driver confirms
POST /api/v1/rides/{ride_id}/offers      -- driver bids
GET  /api/v1/rides/{ride_id}/offers      -- offers visible to the caller
GET  /api/v1/rides/{ride_id}/messages    -- chat trail, oldest first
POST /api/v1/rides/{ride_id}/messages    -- signed-in account posts a message
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_session, get_store
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    MessageCreateRequest,
    MessageResponse,
    OfferCreateRequest,
    OfferResponse,
    RideCreateRequest,
    RideResponse,
)
from src.domain.entities import Session
from src.domain.store import NegotiationStore

router = APIRouter(prefix="/rides", tags=["rides"])


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Request a ride at a self-chosen price",
)
@limiter.limit(RATE_LIMIT)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.create_ride(session, body.origin, body.destination, body.offer_price)


@router.get("", response_model=list[RideResponse], summary="List rides")
@limiter.limit(RATE_LIMIT)
async def list_rides(
    request: Request,
    open: bool = False,
    store: NegotiationStore = Depends(get_store),
):
    return store.open_rides() if open else store.list_rides()


@router.get("/{ride_id}", response_model=RideResponse, summary="Get a ride")
async def get_ride(ride_id: str, store: NegotiationStore = Depends(get_store)):
    return store.get_ride(ride_id)


@router.post(
    "/{ride_id}/cancel",
    response_model=RideResponse,
    summary="Cancel a ride",
    description=(
        "Allowed for the requester, the confirmed driver or an admin while "
        "the ride is pending, negotiating or confirmed."
    ),
)
@limiter.limit(RATE_LIMIT)
async def cancel_ride(
    request: Request,
    ride_id: str,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.cancel_ride(session, ride_id)


@router.post(
    "/{ride_id}/confirm",
    response_model=RideResponse,
    summary="Driver confirms a ride after their offer was accepted",
)
@limiter.limit(RATE_LIMIT)
async def confirm_ride(
    request: Request,
    ride_id: str,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.confirm_ride(session, ride_id)


@router.post(
    "/{ride_id}/offers",
    status_code=201,
    response_model=OfferResponse,
    summary="Submit a driver offer",
)
@limiter.limit(RATE_LIMIT)
async def submit_offer(
    request: Request,
    ride_id: str,
    body: OfferCreateRequest,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.submit_offer(session, ride_id, body.amount)


@router.get(
    "/{ride_id}/offers",
    response_model=list[OfferResponse],
    summary="Offers on a ride visible to the caller",
)
async def list_offers(
    ride_id: str,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.visible_offers(session, ride_id)


@router.get(
    "/{ride_id}/messages",
    response_model=list[MessageResponse],
    summary="Chat trail for a ride, oldest first",
)
async def list_messages(ride_id: str, store: NegotiationStore = Depends(get_store)):
    return store.messages_for_ride(ride_id)


@router.post(
    "/{ride_id}/messages",
    status_code=201,
    response_model=MessageResponse,
    summary="Post a chat message",
)
@limiter.limit(RATE_LIMIT)
async def post_message(
    request: Request,
    ride_id: str,
    body: MessageCreateRequest,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.post_message(session, ride_id, body.text)
