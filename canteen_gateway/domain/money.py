"""Rupee amount helpers"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

PAISE = Decimal("0.01")


def to_amount(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Coerce a stored or computed value to a 2-dp Decimal (None -> 0)"""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(PAISE, rounding=ROUND_HALF_UP)


def format_rupees(value: Union[Decimal, int, float, str, None]) -> str:
    """
    Render an amount for user-facing text.

    Whole amounts drop the paise: 50 -> "₹50", 12.5 -> "₹12.50"
    """
    amount = to_amount(value)
    if amount == amount.to_integral_value():
        return f"₹{int(amount)}"
    return f"₹{amount}"
