"""
Contract parameters (``fleet_kernel.domain.contract``).

Responsibility
--------------
The normalized input schema for one vehicle's lease terms.  Quotes either
share one ``ContractParameters`` across all vehicles (global parameters)
or carry one per vehicle.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Range checks
live in the pricing engine so that every offending field is reported at
once; the bounds are declared here.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any
from uuid import UUID

MIN_CONTRACT_MONTHS = 1
MAX_CONTRACT_MONTHS = 60
MIN_MONTHLY_KM = 1
MAX_MONTHLY_KM = 10000
MIN_SEVERITY = 1
MAX_SEVERITY = 6


@dataclass(frozen=True)
class ContractParameters:
    """Lease terms governing the cost of one vehicle.

    ``operation_severity`` is an ordinal 1-6; heavier use selects a higher
    depreciation multiplier.  The three ``include_*`` flags are independent:
    clearing one zeroes only that component.
    """

    contract_months: int = 12
    monthly_km: int = 3000
    operation_severity: int = 3
    has_tracking: bool = False
    protection_plan_id: UUID | None = None
    include_ipva: bool = False
    include_licensing: bool = False
    include_taxes: bool = False

    def with_changes(self, **changes) -> ContractParameters:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        """JSON-safe representation (UUIDs as strings)."""
        data = asdict(self)
        if self.protection_plan_id is not None:
            data["protection_plan_id"] = str(self.protection_plan_id)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContractParameters:
        plan_id = data.get("protection_plan_id")
        return cls(
            contract_months=data["contract_months"],
            monthly_km=data["monthly_km"],
            operation_severity=data["operation_severity"],
            has_tracking=data.get("has_tracking", False),
            protection_plan_id=UUID(str(plan_id)) if plan_id else None,
            include_ipva=data.get("include_ipva", False),
            include_licensing=data.get("include_licensing", False),
            include_taxes=data.get("include_taxes", False),
        )
