"""
Shared test fixtures.

Every store is built on a ``ManualClock`` and a ``SequentialIdGenerator``
so ids (``ride-1``, ``offer-1``, ...) and timestamps are deterministic.
Role fixtures return the ``Session`` each actor passes to commands.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.middleware import limiter
from src.domain.entities import Account, Session, Vehicle
from src.domain.enums import Role
from src.domain.store import NegotiationStore
from src.infrastructure.clock import ManualClock
from src.infrastructure.ids import SequentialIdGenerator


# ── Store ─────────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store(clock) -> NegotiationStore:
    return NegotiationStore(clock=clock, ids=SequentialIdGenerator())


# ── Actors ────────────────────────────────────────────────────────────


@pytest.fixture
def admin(store) -> Session:
    store.seed(
        [Account(id="admin-1", name="Ada Admin", email="admin@example.com", role=Role.ADMIN)]
    )
    return Session("admin-1")


@pytest.fixture
def passenger(store) -> Session:
    account = store.register_account(
        Account(name="Paula", email="paula@example.com", role=Role.PASSENGER)
    )
    return Session(account.id)


@pytest.fixture
def other_passenger(store) -> Session:
    account = store.register_account(
        Account(name="Oscar", email="oscar@example.com", role=Role.PASSENGER)
    )
    return Session(account.id)


@pytest.fixture
def driver(store) -> Session:
    account = store.register_account(
        Account(
            name="Dave",
            email="dave@example.com",
            role=Role.DRIVER,
            vehicle=Vehicle(model="VW Jetta", plate="abc-1234"),
        )
    )
    return Session(account.id)


@pytest.fixture
def driver2(store) -> Session:
    account = store.register_account(
        Account(
            name="Dina",
            email="dina@example.com",
            role=Role.DRIVER,
            vehicle=Vehicle(model="Honda Civic", plate="XYZ-9876"),
        )
    )
    return Session(account.id)


@pytest.fixture
def ride(store, passenger):
    return store.create_ride(passenger, "Station", "Airport", 20)


# ── HTTP ──────────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client(store) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient bound to an app that wraps the test store."""
    limiter.enabled = False
    app = create_app(store)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    limiter.enabled = True
