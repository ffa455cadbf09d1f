"""
Module: fleet_engines.roic
Responsibility:
    Return-on-invested-capital view of a quote.  Suggests the annual ROIC
    implied by the priced monthly total, and converts a negotiated ROIC
    back into the monthly amount to charge for the fleet.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - ValueError when a negotiated ROIC lies outside [MIN_ROIC, MAX_ROIC].
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from fleet_kernel.domain.values import ZERO, round_money, sum_money

MIN_ROIC = Decimal("3.0")
MAX_ROIC = Decimal("30.0")

_HUNDRED = Decimal("100")
_MONTHS = Decimal("12")


def calculate_initial_roic(
    total_monthly_cost: Decimal, vehicle_values: Iterable[Decimal]
) -> Decimal:
    """Annual ROIC (%) implied by the monthly total, never below MIN_ROIC."""
    fleet_value = sum_money(vehicle_values)
    if fleet_value == ZERO:
        return MIN_ROIC
    roic = (total_monthly_cost * _MONTHS / fleet_value * _HUNDRED).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )
    return max(roic, MIN_ROIC)


def calculate_adjusted_total(
    roic: Decimal, vehicle_values: Iterable[Decimal]
) -> Decimal:
    """Monthly amount yielding ``roic`` percent a year on the fleet value."""
    if not MIN_ROIC <= roic <= MAX_ROIC:
        raise ValueError(f"ROIC must be between {MIN_ROIC} and {MAX_ROIC}, got {roic}")
    return round_money(sum_money(vehicle_values) * roic / _HUNDRED / _MONTHS)
