"""Tests for YAML-sourced pricing configuration."""

from decimal import Decimal

import pytest
import yaml

from fleet_config import (
    DEFAULT_CONFIG_PATH,
    get_calculation_config,
    get_default_tax_indices,
)
from fleet_config.loader import (
    compute_checksum,
    parse_calculation_config,
    parse_decimal,
    parse_severity_multipliers,
)
from fleet_kernel.domain.calculation_config import CalculationConfig
from fleet_kernel.domain.reference import SelicBucket


def write_config(tmp_path, **overrides):
    data = yaml.safe_load(DEFAULT_CONFIG_PATH.read_text())
    for section, values in overrides.items():
        data[section] = values
    path = tmp_path / "calculation.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestPackagedDefaults:
    def test_calculation_matches_documented_table(self):
        assert get_calculation_config() == CalculationConfig()

    def test_default_tax_indices(self):
        snapshot = get_default_tax_indices()

        assert snapshot.spread == Decimal("5.3")
        assert snapshot.selic_rates.rate_for(SelicBucket.MONTH_12) == Decimal("12.75")
        assert snapshot.selic_rates.rate_for(SelicBucket.MONTH_18) == Decimal("11.75")
        assert snapshot.selic_rates.rate_for(SelicBucket.MONTH_24) == Decimal("10.25")

    def test_load_emits_config_trace(self, captured_logs):
        get_calculation_config()

        traces = [r for r in captured_logs() if r["message"] == "FLEET_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_id"] == "fleet-default"
        assert traces[0]["section"] == "calculation"
        assert len(traces[0]["checksum"]) == 64


class TestCustomFile:
    def test_overridden_base_rate(self, tmp_path):
        path = write_config(tmp_path, calculation={
            "base_rate": "0.40",
            "severity_multipliers": {i: "0.08" for i in range(1, 7)},
            "tracking_cost": "45.00",
            "extra_km_percentage": "0.00001",
        })

        config = get_calculation_config(path)

        assert config.base_rate == Decimal("0.40")
        assert config.tracking_cost == Decimal("45.00")
        assert set(config.severity_multipliers) == {Decimal("0.08")}

    def test_yaml_floats_keep_their_text(self, tmp_path):
        path = write_config(tmp_path, calculation={
            "base_rate": 0.35,
            "severity_multipliers": {i: 0.1 for i in range(1, 7)},
            "tracking_cost": 50,
            "extra_km_percentage": 0.0000075,
        })

        config = get_calculation_config(path)

        assert config.base_rate == Decimal("0.35")
        assert config.severity_multiplier(3) == Decimal("0.1")

    def test_missing_key(self, tmp_path):
        path = write_config(tmp_path, calculation={"base_rate": "0.35"})

        with pytest.raises(KeyError):
            get_calculation_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_calculation_config(tmp_path / "absent.yaml")


class TestParsers:
    def test_severity_table_must_be_complete(self):
        with pytest.raises(ValueError, match="severities"):
            parse_severity_multipliers({1: "0.06", 2: "0.07"})

    def test_severity_table_rejects_extra_keys(self):
        table = {i: "0.08" for i in range(0, 7)}

        with pytest.raises(ValueError):
            parse_severity_multipliers(table)

    @pytest.mark.parametrize("value", [None, True, "abc"])
    def test_non_numeric(self, value):
        with pytest.raises(ValueError, match="rate"):
            parse_decimal(value, "rate")

    def test_negative_constant_rejected(self):
        data = {
            "base_rate": "-0.35",
            "severity_multipliers": {i: "0.08" for i in range(1, 7)},
            "tracking_cost": "50",
            "extra_km_percentage": "0",
        }

        with pytest.raises(ValueError):
            parse_calculation_config(data)

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
