"""
Account & session endpoints
===========================

POST   /api/v1/accounts                    -- register an account
POST   /api/v1/sessions                    -- sign in (email + role)
DELETE /api/v1/sessions                    -- sign out
GET    /api/v1/accounts?q=                 -- admin account search
PUT    /api/v1/accounts/me/vehicle         -- driver edits own vehicle
PUT    /api/v1/accounts/{id}/blocked       -- admin block / unblock
GET    /api/v1/accounts/{id}/rides         -- rides requested or driven
GET    /api/v1/accounts/{id}/active-ride   -- current non-terminal ride

Requests identify their caller with the ``X-Account-Id`` header.  The
store's active session is a single slot shared by every HTTP client, so
sign-in and sign-out only matter for single-user setups (a kiosk or the
demo UI) and never authorize anything on their own.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_session, get_store
from src.api.middleware import RATE_LIMIT, limiter
from src.api.schemas import (
    AccountCreateRequest,
    AccountResponse,
    BlockRequest,
    LoginRequest,
    RideResponse,
    SessionResponse,
    VehiclePayload,
)
from src.domain.entities import Account, Session, Vehicle
from src.domain.store import NegotiationStore

router = APIRouter(tags=["accounts"])


@router.post(
    "/accounts",
    status_code=201,
    response_model=AccountResponse,
    summary="Register an account",
)
@limiter.limit(RATE_LIMIT)
async def register_account(
    request: Request,
    body: AccountCreateRequest,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    vehicle = Vehicle(**body.vehicle.model_dump()) if body.vehicle else None
    account = Account(
        name=body.name,
        email=body.email,
        role=body.role,
        phone=body.phone,
        vehicle=vehicle,
    )
    return store.register_account(account, session)


@router.post("/sessions", response_model=SessionResponse, summary="Sign in")
@limiter.limit(RATE_LIMIT)
async def sign_in(
    request: Request,
    body: LoginRequest,
    store: NegotiationStore = Depends(get_store),
):
    """Check credentials and make the account the store's active session.

    Returns the id to send as ``X-Account-Id`` on later requests.
    """
    account = store.authenticate(body.email, body.role)
    return SessionResponse(
        account_id=account.id, account=AccountResponse.model_validate(account)
    )


@router.delete("/sessions", status_code=204, summary="Sign out")
async def sign_out(store: NegotiationStore = Depends(get_store)):
    """Clear the store's active session.  Shared by all clients."""
    store.logout()


@router.get(
    "/accounts",
    response_model=list[AccountResponse],
    summary="Search non-admin accounts (admin only)",
)
@limiter.limit(RATE_LIMIT)
async def search_accounts(
    request: Request,
    q: Optional[str] = None,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.search_accounts(session, q or "")


@router.put(
    "/accounts/me/vehicle",
    response_model=AccountResponse,
    summary="Update the calling driver's vehicle",
)
async def update_vehicle(
    body: VehiclePayload,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.update_vehicle(session, Vehicle(model=body.model, plate=body.plate))


@router.put(
    "/accounts/{account_id}/blocked",
    response_model=AccountResponse,
    summary="Block or unblock an account (admin only)",
)
async def set_blocked(
    account_id: str,
    body: BlockRequest,
    store: NegotiationStore = Depends(get_store),
    session: Session = Depends(get_session),
):
    return store.set_blocked(session, account_id, body.blocked)


@router.get(
    "/accounts/{account_id}/rides",
    response_model=list[RideResponse],
    summary="Rides requested or driven by an account, newest first",
)
async def rides_for_account(
    account_id: str, store: NegotiationStore = Depends(get_store)
):
    return store.rides_for_account(account_id)


@router.get(
    "/accounts/{account_id}/active-ride",
    response_model=Optional[RideResponse],
    summary="The account's current pending/negotiating/confirmed ride",
)
async def active_ride(account_id: str, store: NegotiationStore = Depends(get_store)):
    return store.active_ride_for(account_id)
