"""
Session / Access Guard.

Resolves the ``Session`` handed to a command into the acting ``Account`` and
enforces role gates.  It also remembers the single identity that is
"logged in" on this store instance, for callers that still work with one
user per process.
"""

from __future__ import annotations

from typing import Optional

from src.infrastructure.repositories import AccountRepository

from .entities import Account, Session
from .enums import Role
from .errors import AccountBlocked, Forbidden


class AccessGuard:
    def __init__(self, accounts: AccountRepository):
        self.accounts = accounts
        self._active: Optional[Session] = None

    # ── Active identity ───────────────────────────────────────────

    def set_active(self, account: Account) -> Session:
        self._active = Session(account.id)
        return self._active

    def clear_active(self) -> None:
        self._active = None

    def active(self) -> Session:
        return self._active or Session.anonymous()

    # ── Authorization ─────────────────────────────────────────────

    def resolve(self, session: Session) -> Account:
        """Return the acting account, refusing anonymous and blocked callers."""
        if session is None or session.is_anonymous:
            raise Forbidden("Authentication required")
        account = self.accounts.get_by_id(session.account_id)
        if account is None:
            raise Forbidden("Unknown session identity", entity_id=session.account_id)
        if account.blocked:
            raise AccountBlocked("Account is blocked", entity_id=account.id)
        return account

    def require_role(self, session: Session, *roles: Role) -> Account:
        account = self.resolve(session)
        if account.role not in roles:
            allowed = ", ".join(r.value for r in roles)
            raise Forbidden(
                f"Requires role {allowed}, caller is {account.role.value}",
                entity_id=account.id,
            )
        return account

    def is_admin(self, session: Optional[Session]) -> bool:
        if session is None or session.is_anonymous:
            return False
        account = self.accounts.get_by_id(session.account_id)
        return (
            account is not None
            and account.role == Role.ADMIN
            and not account.blocked
        )
