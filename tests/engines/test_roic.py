"""Tests for the ROIC view of a quote."""

from decimal import Decimal

import pytest

from fleet_engines.roic import (
    MAX_ROIC,
    MIN_ROIC,
    calculate_adjusted_total,
    calculate_initial_roic,
)


class TestInitialRoic:
    def test_implied_annual_rate(self):
        # 1 980.00 x 12 / 60 000 = 39.6%
        roic = calculate_initial_roic(Decimal("1980.00"), [Decimal("60000.00")])

        assert roic == Decimal("39.6")

    def test_rounded_to_one_decimal(self):
        roic = calculate_initial_roic(
            Decimal("1000.00"), [Decimal("60000.00"), Decimal("40000.00")]
        )

        assert roic == Decimal("12.0")

    def test_floor_at_minimum(self):
        roic = calculate_initial_roic(Decimal("10.00"), [Decimal("60000.00")])

        assert roic == MIN_ROIC

    def test_empty_fleet(self):
        assert calculate_initial_roic(Decimal("0.00"), []) == MIN_ROIC


class TestAdjustedTotal:
    def test_monthly_amount_for_rate(self):
        # 100 000 x 12% / 12
        total = calculate_adjusted_total(
            Decimal("12"), [Decimal("60000.00"), Decimal("40000.00")]
        )

        assert total == Decimal("1000.00")

    def test_rounds_to_cents(self):
        total = calculate_adjusted_total(Decimal("7.5"), [Decimal("33333.33")])

        assert total == Decimal("208.33")

    @pytest.mark.parametrize("roic", [MIN_ROIC, MAX_ROIC])
    def test_bounds_are_inclusive(self, roic):
        calculate_adjusted_total(roic, [Decimal("60000.00")])

    @pytest.mark.parametrize("roic", [Decimal("2.9"), Decimal("30.1")])
    def test_out_of_range_raises(self, roic):
        with pytest.raises(ValueError, match="ROIC must be between"):
            calculate_adjusted_total(roic, [Decimal("60000.00")])
