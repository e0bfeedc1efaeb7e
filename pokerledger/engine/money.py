"""
Ledger amounts are plain numbers in whole currency units.

Settlement math carries exact (possibly fractional) balances and only
rounds at emission time. This module provides the rounding, tolerance
and formatting primitives shared by the settlement and hand code.
"""

import math

# Type alias for currency amounts - chips and ledger values both use this
Amount = int | float

# Residuals at or below this are treated as settled
SETTLEMENT_TOLERANCE = 0.01

DEFAULT_CURRENCY_SYMBOL = "Rs."


def to_amount(value: float | str | int) -> Amount:
    """
    Parse a user-entered amount.

    Args:
        value: Amount as float, string, or int

    Returns:
        int when the value is whole, float otherwise

    Raises:
        ValueError: If the value cannot be parsed or is not finite
    """
    if isinstance(value, bool):
        raise ValueError(f"Unsupported type: {type(value)}")
    if isinstance(value, str):
        try:
            parsed = float(value.strip().replace(",", ""))
        except ValueError as e:
            raise ValueError(f"Invalid amount format: {value}") from e
    elif isinstance(value, (int, float)):
        parsed = float(value)
    else:
        raise ValueError(f"Unsupported type: {type(value)}")

    if not math.isfinite(parsed):
        raise ValueError(f"Amount must be finite: {value}")

    if parsed.is_integer():
        return int(parsed)
    return parsed


def round_half_up(amount: Amount) -> int:
    """
    Round to the nearest whole unit, halves away from zero.

    Python's round() uses banker's rounding, which would turn a 2.5
    settlement into 2.
    """
    if amount >= 0:
        return int(math.floor(amount + 0.5))
    return -int(math.floor(-amount + 0.5))


def is_settled(amount: Amount) -> bool:
    """True when an outstanding amount is within rounding tolerance of zero."""
    return abs(amount) <= SETTLEMENT_TOLERANCE


def fmt_money(amount: Amount, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Format an amount as a currency string.

    Args:
        amount: Amount in currency units
        symbol: Currency symbol prefix

    Returns:
        Formatted string like "Rs. 1,250" or "-Rs. 300"
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValueError(f"Amount must be numeric, got {type(amount)}")

    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {round_half_up(abs(amount)):,}"


def nonneg(amount: Amount) -> Amount:
    """
    Assert that an amount is non-negative.

    Raises:
        ValueError: If amount is negative
    """
    if amount < 0:
        raise ValueError(f"Negative amount not allowed: {amount}")
    return amount
