"""
Offer endpoints
===============

POST /api/v1/offers/{offer_id}/accept -- requester accepts a bid
POST /api/v1/offers/{offer_id}/reject -- requester rejects a bid
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_session, get_store
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import OfferResponse
from src.domain.entities import Session
from src.domain.store import NegotiationStore

router = APIRouter(prefix="/offers", tags=["offers"])


@router.post(
    "/{offer_id}/accept",
    response_model=OfferResponse,
    summary="Accept an offer (other offers are left as they are)",
)
@limiter.limit(RATE_LIMIT)
async def accept_offer(
    request: Request,
    offer_id: str,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.accept_offer(session, offer_id)


@router.post("/{offer_id}/reject", response_model=OfferResponse, summary="Reject an offer")
@limiter.limit(RATE_LIMIT)
async def reject_offer(
    request: Request,
    offer_id: str,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.reject_offer(session, offer_id)
