"""
Structured error kinds raised by the negotiation store.

Every error carries a stable ``kind`` string and, where one applies, the id
of the offending entity.  None of them is retried internally and the store
is left unchanged whenever one is raised.
"""

from __future__ import annotations

from typing import Optional


class NegotiationError(Exception):
    kind = "NegotiationError"

    def __init__(self, message: str = "", entity_id: Optional[str] = None):
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.entity_id = entity_id


class NotFound(NegotiationError):
    kind = "NotFound"


class Forbidden(NegotiationError):
    """Role or ownership violation."""

    kind = "Forbidden"


class InvalidState(NegotiationError):
    """Operation not valid for the entity's current status."""

    kind = "InvalidState"


class InvalidStateTransition(InvalidState):
    """Raised when a ride status change violates the state machine."""


class DuplicateIdentity(NegotiationError):
    kind = "DuplicateIdentity"


class DuplicateOffer(NegotiationError):
    kind = "DuplicateOffer"


class RideAlreadyActive(NegotiationError):
    kind = "RideAlreadyActive"


class NoAcceptedOffer(NegotiationError):
    kind = "NoAcceptedOffer"


class AccountBlocked(NegotiationError):
    kind = "AccountBlocked"


class EmptyMessage(NegotiationError):
    kind = "EmptyMessage"


class InvalidArgument(NegotiationError):
    """Blank text field or non-positive amount."""

    kind = "InvalidArgument"
