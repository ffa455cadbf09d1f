"""
Calculation configuration (``fleet_kernel.domain.calculation_config``).

Responsibility
--------------
The single value object holding every tunable pricing constant.  It is
sourced once (database row or YAML defaults via ``fleet_config``) and
passed into the engine; no pricing constant is hard-coded anywhere else.

Default table
-------------
==========  =====================================================
base_rate   0.35
severity    1: 0.06  2: 0.07  3: 0.08  4: 0.09  5: 0.10  6: 0.11
tracking    50.00 per month
extra km    0.0000075 x vehicle value per km
==========  =====================================================

With these defaults a vehicle worth 60 000.00 at severity 3 depreciates
0.35 x 0.08 x 60 000 = 1 680.00 per month.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from fleet_kernel.domain.contract import MAX_SEVERITY, MIN_SEVERITY

DEFAULT_BASE_RATE = Decimal("0.35")
DEFAULT_SEVERITY_MULTIPLIERS: tuple[Decimal, ...] = (
    Decimal("0.06"),
    Decimal("0.07"),
    Decimal("0.08"),
    Decimal("0.09"),
    Decimal("0.10"),
    Decimal("0.11"),
)
DEFAULT_TRACKING_COST = Decimal("50.00")
DEFAULT_EXTRA_KM_PERCENTAGE = Decimal("0.0000075")


@dataclass(frozen=True)
class CalculationConfig:
    """Pricing constants consumed by the cost composition engine."""

    base_rate: Decimal = DEFAULT_BASE_RATE
    # Index 0 is severity 1
    severity_multipliers: tuple[Decimal, ...] = DEFAULT_SEVERITY_MULTIPLIERS
    tracking_cost: Decimal = DEFAULT_TRACKING_COST
    extra_km_percentage: Decimal = DEFAULT_EXTRA_KM_PERCENTAGE

    def __post_init__(self):
        expected = MAX_SEVERITY - MIN_SEVERITY + 1
        if len(self.severity_multipliers) != expected:
            raise ValueError(
                f"severity_multipliers must have {expected} entries, "
                f"got {len(self.severity_multipliers)}"
            )
        if self.base_rate < 0:
            raise ValueError("base_rate cannot be negative")
        if any(m < 0 for m in self.severity_multipliers):
            raise ValueError("severity multipliers cannot be negative")
        if self.tracking_cost < 0:
            raise ValueError("tracking_cost cannot be negative")
        if self.extra_km_percentage < 0:
            raise ValueError("extra_km_percentage cannot be negative")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the documented default table."""
        return cls()

    def severity_multiplier(self, severity: int) -> Decimal:
        """Multiplier for an operation severity in 1..6."""
        if not MIN_SEVERITY <= severity <= MAX_SEVERITY:
            raise ValueError(f"operation severity out of range: {severity}")
        return self.severity_multipliers[severity - MIN_SEVERITY]

    def as_dict(self) -> dict[str, str | dict[str, str]]:
        return {
            "base_rate": str(self.base_rate),
            "severity_multipliers": {
                str(i + MIN_SEVERITY): str(m)
                for i, m in enumerate(self.severity_multipliers)
            },
            "tracking_cost": str(self.tracking_cost),
            "extra_km_percentage": str(self.extra_km_percentage),
        }
