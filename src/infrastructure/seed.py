"""
Demo accounts loaded into a fresh store.

Gives the prototype a bootstrap admin (the only way to obtain one, since
registering an admin requires an admin session) plus a passenger and two
drivers to click through a negotiation with.
"""

from __future__ import annotations

import logging

from src.domain.entities import Account, Vehicle
from src.domain.enums import Role
from src.domain.store import NegotiationStore

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = [
    Account(
        id="admin-1",
        name="Leandro",
        email="admin@example.com",
        role=Role.ADMIN,
        phone="15981677695",
    ),
    Account(
        id="u1",
        name="Maria Silva",
        email="maria@email.com",
        role=Role.PASSENGER,
        phone="11999999999",
    ),
    Account(
        id="d1",
        name="João Souza",
        email="joao@email.com",
        role=Role.DRIVER,
        phone="11888888888",
        vehicle=Vehicle(model="VW Jetta", plate="ABC-1234"),
    ),
    Account(
        id="d2",
        name="Pedro Santos",
        email="pedro@email.com",
        role=Role.DRIVER,
        phone="11777777777",
        vehicle=Vehicle(model="Honda Civic", plate="XYZ-9876"),
    ),
]


def seed_demo_accounts(store: NegotiationStore) -> int:
    added = store.seed(DEMO_ACCOUNTS)
    if added:
        logger.info("Seeded %d demo accounts", len(added))
    return len(added)
