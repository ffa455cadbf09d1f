"""
Module: fleet_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for the
    service layer (``fleet_kernel.services``).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fleet_kernel.domain, fleet_kernel.exceptions and
    fleet_kernel.logging_config (and sibling engine modules).
    MUST NOT import fleet_kernel.services, models or selectors.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``.  Timestamps come from
      an injected Clock.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Pricing invocations are traced via the ``@traced_engine`` decorator
    (see ``fleet_engines.tracer``), emitting FLEET_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.

Usage:
    from fleet_engines import compute_vehicle_cost, compute_quote_total
    from fleet_engines import is_valid_transition, apply_transition
"""

from fleet_kernel.logging_config import get_logger

logger = get_logger("engines")

from fleet_engines.permissions import can_delete_quote, can_edit_quote
from fleet_engines.pricing import (
    VehiclePricingInput,
    compute_quote,
    compute_quote_total,
    compute_vehicle_cost,
    select_selic_bucket,
)
from fleet_engines.roic import (
    MAX_ROIC,
    MIN_ROIC,
    calculate_adjusted_total,
    calculate_initial_roic,
)
from fleet_engines.status_flow import (
    apply_transition,
    calculate_progress,
    is_valid_transition,
    valid_next_statuses,
)

__all__ = [
    # Pricing
    "compute_vehicle_cost",
    "compute_quote_total",
    "compute_quote",
    "select_selic_bucket",
    "VehiclePricingInput",
    # Status workflow
    "is_valid_transition",
    "valid_next_statuses",
    "apply_transition",
    "calculate_progress",
    # ROIC
    "MIN_ROIC",
    "MAX_ROIC",
    "calculate_initial_roic",
    "calculate_adjusted_total",
    # Permissions
    "can_edit_quote",
    "can_delete_quote",
]
