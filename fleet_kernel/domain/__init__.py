"""
Pure domain layer.

This module contains pure data transfer objects and value types
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (except through the injected Clock)
- I/O

All domain objects are immutable and deterministic.
"""

from fleet_kernel.domain.calculation_config import CalculationConfig
from fleet_kernel.domain.clock import (
    Clock,
    DeterministicClock,
    SystemClock,
)
from fleet_kernel.domain.contract import ContractParameters
from fleet_kernel.domain.quote import (
    Actor,
    OptionalComponentUnavailable,
    Quote,
    QuoteActionLog,
    QuoteActionType,
    QuoteCalculation,
    QuoteLine,
    QuoteRequest,
    QuoteResultVehicle,
    QuoteVehicleRequest,
    UserRole,
)
from fleet_kernel.domain.reference import (
    Client,
    ClientType,
    ProtectionPlan,
    ProtectionType,
    SelicBucket,
    SelicRates,
    TaxIndexSnapshot,
    Vehicle,
    VehicleGroup,
)
from fleet_kernel.domain.status import (
    STATUS_INFO,
    WORKFLOW_ORDER,
    QuoteStatus,
    StatusHistoryEntry,
    StatusInfo,
    TransitionRejection,
    TransitionResult,
    translate_status,
)
from fleet_kernel.domain.values import round_money, sum_money, to_decimal

__all__ = [
    # Values
    "round_money",
    "sum_money",
    "to_decimal",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Reference data
    "VehicleGroup",
    "Vehicle",
    "ProtectionPlan",
    "ProtectionType",
    "SelicBucket",
    "SelicRates",
    "TaxIndexSnapshot",
    "Client",
    "ClientType",
    # Pricing
    "CalculationConfig",
    "ContractParameters",
    "QuoteResultVehicle",
    "QuoteCalculation",
    "QuoteRequest",
    "QuoteVehicleRequest",
    "OptionalComponentUnavailable",
    # Quote aggregate
    "Actor",
    "UserRole",
    "Quote",
    "QuoteLine",
    "QuoteActionLog",
    "QuoteActionType",
    # Status workflow
    "QuoteStatus",
    "WORKFLOW_ORDER",
    "STATUS_INFO",
    "StatusInfo",
    "StatusHistoryEntry",
    "TransitionRejection",
    "TransitionResult",
    "translate_status",
]
