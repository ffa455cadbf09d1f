"""Tests for the engine invocation tracer."""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from fleet_engines.tracer import compute_input_fingerprint, traced_engine


@dataclass(frozen=True)
class _Point:
    x: Decimal
    y: Decimal


class TestFingerprint:
    def test_deterministic(self):
        args = {"point": _Point(Decimal("1.0"), Decimal("2"))}

        assert compute_input_fingerprint(("point",), args) == compute_input_fingerprint(
            ("point",), args
        )

    def test_decimal_normalization(self):
        a = compute_input_fingerprint(("v",), {"v": Decimal("1.50")})
        b = compute_input_fingerprint(("v",), {"v": Decimal("1.5")})

        assert a == b

    def test_dict_key_order_ignored(self):
        a = compute_input_fingerprint(("d",), {"d": {"a": 1, "b": 2}})
        b = compute_input_fingerprint(("d",), {"d": {"b": 2, "a": 1}})

        assert a == b

    def test_different_inputs_differ(self):
        a = compute_input_fingerprint(("v",), {"v": 1})
        b = compute_input_fingerprint(("v",), {"v": 2})

        assert a != b


class TestTracedEngine:
    def test_return_value_untouched(self):
        @traced_engine("adder", "1.0", fingerprint_fields=("a", "b"))
        def add(a, b):
            return a + b

        assert add(2, b=3) == 5

    def test_positional_and_keyword_fingerprint_match(self, captured_logs):
        @traced_engine("adder", "1.0", fingerprint_fields=("a", "b"))
        def add(a, b):
            return a + b

        add(2, 3)
        add(a=2, b=3)

        traces = [r for r in captured_logs() if r["message"] == "FLEET_ENGINE_TRACE"]
        assert len(traces) == 2
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]
        assert traces[0]["engine_name"] == "adder"
        assert traces[0]["engine_version"] == "1.0"

    def test_unknown_fingerprint_field_rejected_at_decoration(self):
        with pytest.raises(TypeError):

            @traced_engine("adder", "1.0", fingerprint_fields=("c",))
            def add(a, b):
                return a + b

    def test_different_dataclass_types_differ(self):
        @dataclass(frozen=True)
        class _Other:
            x: Decimal
            y: Decimal

        point = compute_input_fingerprint(("v",), {"v": _Point(Decimal(1), Decimal(2))})
        other = compute_input_fingerprint(("v",), {"v": _Other(Decimal(1), Decimal(2))})

        assert point != other
