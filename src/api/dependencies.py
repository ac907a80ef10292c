"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Header, Request

from src.domain.entities import Session
from src.domain.store import NegotiationStore


def get_store(request: Request) -> NegotiationStore:
    """The store instance the app factory attached to ``app.state``."""
    return request.app.state.store


def get_session(
    x_account_id: Optional[str] = Header(None, alias="X-Account-Id"),
) -> Session:
    """Caller identity from the ``X-Account-Id`` header; absent = anonymous."""
    return Session(x_account_id or None)
