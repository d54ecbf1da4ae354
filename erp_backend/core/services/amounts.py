# core/services/amounts.py

"""
FIXED-POINT HELPERS

Money is stored with 2 decimal places, quantities with 4.
All service inputs pass through these helpers before any arithmetic.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.services.exceptions import InvalidAmountError

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")

ZERO_MONEY = Decimal("0.00")
ZERO_QTY = Decimal("0.0000")


def _to_decimal(value, field: str) -> Decimal:
    if value is None or value == "":
        raise InvalidAmountError(f"{field} is required")

    if isinstance(value, bool):
        # bool is an int subclass in Python
        raise InvalidAmountError(f"{field} must be a number")

    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(f"{field} must be a number") from exc

    if not d.is_finite():
        raise InvalidAmountError(f"{field} must be a finite number")

    return d


def to_money(value, *, field: str = "amount") -> Decimal:
    return _to_decimal(value, field).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_quantity(value, *, field: str = "quantity") -> Decimal:
    return _to_decimal(value, field).quantize(FOURPLACES, rounding=ROUND_HALF_UP)


def positive_quantity(value, *, field: str = "quantity") -> Decimal:
    qty = to_quantity(value, field=field)
    if qty <= ZERO_QTY:
        raise InvalidAmountError(f"{field} must be greater than zero")
    return qty


def positive_money(value, *, field: str = "amount") -> Decimal:
    amount = to_money(value, field=field)
    if amount <= ZERO_MONEY:
        raise InvalidAmountError(f"{field} must be greater than zero")
    return amount


def format_quantity(value) -> str:
    """Render a quantity without trailing zeros (70.0000 -> "70")."""
    d = Decimal(value or 0)
    if d == d.to_integral_value():
        return str(d.quantize(Decimal("1")))
    return format(d.normalize(), "f")
