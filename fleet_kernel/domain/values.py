"""
Values -- money arithmetic helpers for quote pricing.

Responsibility:
    Centralizes how monetary and rate values enter the pricing engine and
    how results are rounded.  Every monthly cost component is rounded to
    centavos with ROUND_HALF_UP before it is summed, so a quote total is
    always the exact sum of the components a customer sees.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - All monetary amounts are ``Decimal`` -- NEVER ``float``.
    - Floats are converted through ``str`` so 0.1 stays 0.1.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
ZERO = Decimal("0")
DEFAULT_CURRENCY = "BRL"


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric input to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(amount: Decimal) -> Decimal:
    """Round a monetary amount to centavos (ROUND_HALF_UP)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def sum_money(amounts) -> Decimal:
    """Sum Decimal amounts; the empty sum is 0.00."""
    total = Decimal("0.00")
    for amount in amounts:
        total += amount
    return total
