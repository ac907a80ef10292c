"""Argument normalisation shared by the store components."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .errors import InvalidArgument

Amount = Union[Decimal, int, float, str]


def require_text(value: str, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidArgument(f"{field} must not be blank")
    return text


def require_amount(value: Amount, field: str = "amount") -> Decimal:
    """Coerce *value* to a finite, strictly positive ``Decimal``."""
    if isinstance(value, bool):
        raise InvalidArgument(f"{field} must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidArgument(f"{field} must be a number") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidArgument(f"{field} must be positive")
    return amount


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"
