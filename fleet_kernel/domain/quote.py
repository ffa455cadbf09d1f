"""
Quote aggregate value objects (``fleet_kernel.domain.quote``).

Responsibility
--------------
Frozen dataclasses for the outputs of the cost composition engine
(per-vehicle breakdown, per-quote calculation), the persisted quote
aggregate, the actors who act on it, and its action log.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``QuoteResultVehicle.total_cost`` is the sum of its included monthly
  components; ``extra_km_rate`` and ``cost_per_km`` are display figures
  and are never summed.
* ``Quote.total_value`` is derived: the sum of its lines' ``total_cost``
  at the time of the last computation.
* A missing protection plan is reported through an
  ``OptionalComponentUnavailable`` warning, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID

from fleet_kernel.domain.contract import ContractParameters
from fleet_kernel.domain.reference import SelicBucket
from fleet_kernel.domain.status import QuoteStatus


@dataclass(frozen=True)
class OptionalComponentUnavailable:
    """Warning: an optional cost component could not be resolved.

    The component was priced at zero; operators should be alerted so the
    reference data can be fixed.
    """

    code: ClassVar[str] = "OPTIONAL_COMPONENT_UNAVAILABLE"

    component: str
    reference_id: str | None
    message: str


@dataclass(frozen=True)
class QuoteResultVehicle:
    """Monthly cost breakdown for one vehicle under one set of terms."""

    vehicle_id: UUID
    depreciation_cost: Decimal
    maintenance_cost: Decimal
    tracking_cost: Decimal
    protection_cost: Decimal
    ipva_cost: Decimal
    licensing_cost: Decimal
    tax_cost: Decimal
    extra_km_rate: Decimal
    total_cost: Decimal
    cost_per_km: Decimal
    # Echo of the governing parameters
    contract_months: int
    monthly_km: int
    operation_severity: int
    has_tracking: bool
    protection_plan_id: UUID | None
    include_ipva: bool
    include_licensing: bool
    include_taxes: bool
    selic_bucket: SelicBucket | None = None
    warnings: tuple[OptionalComponentUnavailable, ...] = ()

    @property
    def parameters(self) -> ContractParameters:
        """The contract parameters this result was computed from."""
        return ContractParameters(
            contract_months=self.contract_months,
            monthly_km=self.monthly_km,
            operation_severity=self.operation_severity,
            has_tracking=self.has_tracking,
            protection_plan_id=self.protection_plan_id,
            include_ipva=self.include_ipva,
            include_licensing=self.include_licensing,
            include_taxes=self.include_taxes,
        )

    @property
    def components(self) -> dict[str, Decimal]:
        """The monthly components that make up ``total_cost``."""
        return {
            "depreciation": self.depreciation_cost,
            "maintenance": self.maintenance_cost,
            "tracking": self.tracking_cost,
            "protection": self.protection_cost,
            "ipva": self.ipva_cost,
            "licensing": self.licensing_cost,
            "tax": self.tax_cost,
        }


@dataclass(frozen=True)
class QuoteCalculation:
    """Priced set of vehicles, before or after persistence."""

    vehicle_results: tuple[QuoteResultVehicle, ...]
    total_cost: Decimal
    used_global_params: bool = True

    @property
    def warnings(self) -> tuple[OptionalComponentUnavailable, ...]:
        return tuple(w for r in self.vehicle_results for w in r.warnings)


@dataclass(frozen=True)
class QuoteVehicleRequest:
    """A vehicle to price, optionally with its own contract parameters."""

    vehicle_id: UUID
    params: ContractParameters | None = None


@dataclass(frozen=True)
class QuoteRequest:
    """What the user submitted for pricing.

    With ``use_global_params`` every vehicle is priced with
    ``global_params``; otherwise each vehicle uses its own parameters.
    """

    vehicles: tuple[QuoteVehicleRequest, ...]
    global_params: ContractParameters | None = None
    use_global_params: bool = True


class UserRole(str, Enum):
    """Role of the person acting on a quote."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"
    GUEST = "guest"


ELEVATED_ROLES: frozenset[UserRole] = frozenset({UserRole.ADMIN, UserRole.MANAGER})


@dataclass(frozen=True)
class Actor:
    """Explicit identity passed into every attributed operation."""

    id: UUID
    name: str
    role: UserRole = UserRole.USER

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES


@dataclass(frozen=True)
class QuoteLine:
    """A persisted vehicle line of a quote."""

    id: UUID
    quote_id: UUID
    vehicle_id: UUID
    result: QuoteResultVehicle

    @property
    def total_cost(self) -> Decimal:
        return self.result.total_cost


@dataclass(frozen=True)
class Quote:
    """The persisted quote aggregate (a saved quote)."""

    id: UUID
    client_id: UUID
    status: QuoteStatus
    total_value: Decimal
    created_at: datetime
    created_by: UUID
    lines: tuple[QuoteLine, ...] = ()
    global_params: ContractParameters | None = None
    title: str | None = None
    updated_at: datetime | None = None

    @property
    def uses_global_params(self) -> bool:
        return self.global_params is not None


class QuoteActionType(str, Enum):
    """Kinds of action recorded in the quote action log."""

    CREATED = "created"
    REPRICED = "repriced"
    DELETED = "deleted"


@dataclass(frozen=True)
class QuoteActionLog:
    """Append-only record of an action performed on a quote."""

    id: UUID
    quote_id: UUID
    action_type: QuoteActionType
    actor_id: UUID
    actor_name: str
    action_at: datetime
    quote_title: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    deleted_data: dict[str, Any] | None = None
