"""
Identity Registry
=================

Known accounts, credential lookup and the admin-only block flag.

Email is unique *per role*: one person may hold a passenger and a driver
account under the same address.  Accounts are never deleted.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.infrastructure.ids import IdGenerator
from src.infrastructure.repositories import AccountRepository

from .access import AccessGuard
from .entities import Account, Session, Vehicle
from .enums import Role
from .errors import (
    AccountBlocked,
    DuplicateIdentity,
    Forbidden,
    InvalidArgument,
    NotFound,
)
from .events import Outbox
from .validation import require_text

logger = logging.getLogger(__name__)


class IdentityRegistry:
    def __init__(
        self,
        accounts: AccountRepository,
        ids: IdGenerator,
        guard: AccessGuard,
        outbox: Outbox,
    ):
        self.accounts = accounts
        self.ids = ids
        self.guard = guard
        self.outbox = outbox

    def register(self, account: Account, session: Optional[Session] = None) -> Account:
        name = require_text(account.name, "name")
        email = require_text(account.email, "email").lower()
        role = _parse_role(account.role)
        vehicle = account.vehicle
        if role == Role.DRIVER:
            vehicle = _clean_vehicle(vehicle)
        if role == Role.ADMIN and not self.guard.is_admin(session):
            raise Forbidden("Only an admin can register an admin account")
        if self.accounts.get_by_credential(email, role) is not None:
            raise DuplicateIdentity(
                f"An account for {email} as {role.value} already exists"
            )

        created = Account(
            id=self.ids.next_id(role.value),
            name=name,
            email=email,
            role=role,
            phone=(account.phone or "").strip() or None,
            vehicle=vehicle,
        )
        self.accounts.add(created)
        self.outbox.record("account.registered", entity_id=created.id)
        logger.info("Registered %s account %s", role.value, created.id)
        return created

    def authenticate(self, email: str, role: Role) -> Account:
        role = _parse_role(role)
        account = self.accounts.get_by_credential(email or "", role)
        if account is None:
            raise NotFound(f"No {role.value} account for {email}")
        if account.blocked:
            raise AccountBlocked("Account is blocked", entity_id=account.id)
        self.guard.set_active(account)
        logger.info("Account %s signed in", account.id)
        return account

    def get(self, account_id: str) -> Account:
        account = self.accounts.get_by_id(account_id)
        if account is None:
            raise NotFound("Account not found", entity_id=account_id)
        return account

    def set_blocked(self, session: Session, account_id: str, blocked: bool) -> Account:
        self.guard.require_role(session, Role.ADMIN)
        account = self.get(account_id)
        if account.role == Role.ADMIN:
            raise Forbidden("Admin accounts cannot be blocked", entity_id=account_id)
        if account.blocked != blocked:
            account.blocked = blocked
            kind = "account.blocked" if blocked else "account.unblocked"
            self.outbox.record(kind, entity_id=account.id)
            logger.info("Account %s %s", account.id, kind.split(".")[1])
        return account

    def toggle_blocked(self, session: Session, account_id: str) -> Account:
        self.guard.require_role(session, Role.ADMIN)
        return self.set_blocked(session, account_id, not self.get(account_id).blocked)

    def update_vehicle(self, session: Session, vehicle: Vehicle) -> Account:
        account = self.guard.require_role(session, Role.DRIVER)
        account.vehicle = _clean_vehicle(vehicle)
        self.outbox.record("account.updated", entity_id=account.id)
        return account

    def search(self, session: Session, term: str = "") -> list[Account]:
        """Non-admin accounts whose name or email contains *term*."""
        self.guard.require_role(session, Role.ADMIN)
        needle = (term or "").strip().lower()
        return [
            a
            for a in self.accounts.list_all()
            if a.role != Role.ADMIN
            and (needle in a.name.lower() or needle in a.email.lower())
        ]


def _parse_role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise InvalidArgument(f"Unknown role: {value!r}") from None


def _clean_vehicle(vehicle: Optional[Vehicle]) -> Vehicle:
    if vehicle is None:
        raise InvalidArgument("Drivers must provide vehicle details")
    return Vehicle(
        model=require_text(vehicle.model, "vehicle model"),
        plate=require_text(vehicle.plate, "vehicle plate").upper(),
    )
