"""Tests for contract parameters and money helpers."""

from decimal import Decimal
from uuid import uuid4

import pytest

from fleet_kernel.domain.calculation_config import CalculationConfig
from fleet_kernel.domain.contract import ContractParameters
from fleet_kernel.domain.values import round_money, sum_money, to_decimal


class TestContractParameters:
    def test_defaults(self):
        params = ContractParameters()

        assert params.contract_months == 12
        assert params.monthly_km == 3000
        assert params.operation_severity == 3
        assert not (params.has_tracking or params.include_ipva
                    or params.include_licensing or params.include_taxes)
        assert params.protection_plan_id is None

    def test_with_changes_returns_copy(self):
        params = ContractParameters()

        changed = params.with_changes(contract_months=24)

        assert changed.contract_months == 24
        assert params.contract_months == 12

    def test_dict_round_trip_keeps_plan_id(self):
        params = ContractParameters(
            contract_months=36, protection_plan_id=uuid4(), include_taxes=True,
        )

        data = params.as_dict()

        assert isinstance(data["protection_plan_id"], str)
        assert ContractParameters.from_dict(data) == params

    def test_from_dict_optional_flags_default_off(self):
        params = ContractParameters.from_dict(
            {"contract_months": 6, "monthly_km": 1500, "operation_severity": 2}
        )

        assert params == ContractParameters(
            contract_months=6, monthly_km=1500, operation_severity=2,
        )


class TestMoneyHelpers:
    @pytest.mark.parametrize("amount,expected", [
        ("0.005", "0.01"),
        ("0.004", "0.00"),
        ("2.675", "2.68"),
        ("-0.005", "-0.01"),
    ])
    def test_round_half_up(self, amount, expected):
        assert round_money(Decimal(amount)) == Decimal(expected)

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_bool_is_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_empty_sum(self):
        assert sum_money([]) == Decimal("0.00")


class TestCalculationConfig:
    def test_severity_table(self):
        config = CalculationConfig.with_defaults()

        assert config.severity_multiplier(1) == Decimal("0.06")
        assert config.severity_multiplier(6) == Decimal("0.11")

    def test_severity_out_of_range(self):
        with pytest.raises(ValueError):
            CalculationConfig().severity_multiplier(7)

    def test_table_must_cover_every_severity(self):
        with pytest.raises(ValueError, match="6 entries"):
            CalculationConfig(severity_multipliers=(Decimal("0.1"),))

    def test_negative_constants_rejected(self):
        with pytest.raises(ValueError):
            CalculationConfig(tracking_cost=Decimal("-1"))
