"""
Reference data value objects (``fleet_kernel.domain.reference``).

Responsibility
--------------
Frozen dataclasses for the externally maintained records the pricing
engine reads: vehicle groups, vehicles, protection plans, tax indices and
clients.  The engine never creates or edits these -- administrators and
the periodic rate refresh do, through the persistence layer.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``TaxIndexSnapshot`` exposes exactly one SELIC rate per
  contract-duration bucket.
* IPVA on a group is an annual *rate* (fraction of vehicle value);
  licensing on a group is an annual *amount*.  Vehicle-level overrides
  are annual amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


@dataclass(frozen=True)
class VehicleGroup:
    """Categorical bucket of vehicles sharing maintenance characteristics."""

    id: UUID
    code: str
    name: str
    revision_km: int
    revision_cost: Decimal
    tire_km: int
    tire_cost: Decimal
    description: str | None = None
    ipva_rate: Decimal | None = None  # annual, e.g. 0.03 = 3% of value
    licensing_cost: Decimal | None = None  # annual


@dataclass(frozen=True)
class Vehicle:
    """A specific unit, new (chosen by group + model) or used (by plate)."""

    id: UUID
    brand: str
    model: str
    year: int
    value: Decimal
    group_id: UUID
    is_used: bool = False
    plate_number: str | None = None
    color: str | None = None
    odometer: int | None = None
    fuel_type: str | None = None
    ipva_cost: Decimal | None = None  # annual override
    licensing_cost: Decimal | None = None  # annual override


class ProtectionType(str, Enum):
    """Coverage tier of a protection plan."""

    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    PREMIUM = "premium"


@dataclass(frozen=True)
class ProtectionPlan:
    """Optional insurance-like coverage with a flat monthly cost."""

    id: UUID
    name: str
    type: ProtectionType
    monthly_cost: Decimal
    description: str | None = None


class SelicBucket(str, Enum):
    """Contract-duration bucket that selects a SELIC rate."""

    MONTH_12 = "month12"
    MONTH_18 = "month18"
    MONTH_24 = "month24"

    @property
    def months(self) -> int:
        return int(self.value.removeprefix("month"))


@dataclass(frozen=True)
class SelicRates:
    """Annual SELIC rates (%) keyed by contract-duration bucket."""

    month12: Decimal
    month18: Decimal
    month24: Decimal

    def rate_for(self, bucket: SelicBucket) -> Decimal:
        return getattr(self, bucket.value)


@dataclass(frozen=True)
class TaxIndexSnapshot:
    """Externally maintained rates, all expressed in percent.

    ``igpm`` is stored for reporting and does not enter any calculation.
    """

    ipca: Decimal
    igpm: Decimal
    spread: Decimal
    selic_rates: SelicRates
    effective_at: datetime | None = None


class ClientType(str, Enum):
    """Individual (PF) or company (PJ) client."""

    PF = "PF"
    PJ = "PJ"


@dataclass(frozen=True)
class Client:
    """Quote owner."""

    id: UUID
    name: str
    type: ClientType
    document: str
    email: str | None = None
    contact: str | None = None
    responsible: str | None = None
