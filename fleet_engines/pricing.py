"""
Module: fleet_engines.pricing
Responsibility:
    Compute the monthly cost of leasing one vehicle under a set of
    contract parameters, and the total of a multi-vehicle quote.  Every
    component is computed independently, rounded to centavos and then
    summed, so the breakdown a customer sees always adds up.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fleet_kernel/domain and fleet_kernel/exceptions.
    Reference data (groups, plans, tax indices, calculation constants)
    is resolved by the caller and passed in.

Invariants enforced:
    - Purity: no clock access, no I/O; identical inputs produce identical
      results.
    - Decimal-only arithmetic for all monetary amounts.
    - Component independence: clearing one ``include_*`` flag lowers the
      total by exactly that component and leaves the others unchanged.
    - The cost of one vehicle never depends on the other vehicles of the
      quote.

Failure modes:
    - ValidationError listing every out-of-range input field.
    - MissingReferenceDataError when the vehicle group is absent or does
      not match the vehicle, or when taxes are requested without a tax
      snapshot.
    - A protection plan id that cannot be resolved is NOT an error: the
      component is priced at zero and an OptionalComponentUnavailable
      warning is attached to the result.

Amortization:
    IPVA and licensing are annual charges; both are spread over twelve
    months regardless of contract length.

Usage:
    from fleet_engines.pricing import compute_vehicle_cost, compute_quote_total

    result = compute_vehicle_cost(vehicle, group, params, plan, taxes, config)
    total = compute_quote_total([result, other_result])
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol
from uuid import UUID

from fleet_engines.tracer import traced_engine
from fleet_kernel.domain.calculation_config import CalculationConfig
from fleet_kernel.domain.contract import (
    MAX_CONTRACT_MONTHS,
    MAX_MONTHLY_KM,
    MAX_SEVERITY,
    MIN_CONTRACT_MONTHS,
    MIN_MONTHLY_KM,
    MIN_SEVERITY,
    ContractParameters,
)
from fleet_kernel.domain.quote import (
    OptionalComponentUnavailable,
    QuoteCalculation,
    QuoteResultVehicle,
)
from fleet_kernel.domain.reference import (
    ProtectionPlan,
    SelicBucket,
    TaxIndexSnapshot,
    Vehicle,
    VehicleGroup,
)
from fleet_kernel.domain.values import ZERO, round_money, sum_money
from fleet_kernel.exceptions import MissingReferenceDataError, ValidationError
from fleet_kernel.logging_config import get_logger

logger = get_logger("engines.pricing")

MONTHS_PER_YEAR = Decimal("12")
HUNDRED = Decimal("100")
# Per-km figures are shown with four decimal places
RATE_PLACES = Decimal("0.0001")


class _HasTotalCost(Protocol):
    total_cost: Decimal


@dataclass(frozen=True)
class VehiclePricingInput:
    """One vehicle of a quote with its resolved group.

    ``params`` is None when the quote prices every vehicle with the
    global parameters.
    """

    vehicle: Vehicle
    group: VehicleGroup | None
    params: ContractParameters | None = None


# =============================================================================
# Validation
# =============================================================================


def _field_error(field: str, constraint: str, value: Any) -> dict[str, Any]:
    return {"field": field, "constraint": constraint, "value": value}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_range(
    errors: list[dict[str, Any]],
    field: str,
    value: Any,
    low: int,
    high: int,
) -> None:
    if not _is_int(value) or not low <= value <= high:
        errors.append(
            _field_error(field, f"must be an integer between {low} and {high}", value)
        )


def validate_parameters(params: ContractParameters) -> list[dict[str, Any]]:
    """Return the field errors of a set of contract parameters."""
    errors: list[dict[str, Any]] = []
    _check_range(
        errors, "contract_months", params.contract_months,
        MIN_CONTRACT_MONTHS, MAX_CONTRACT_MONTHS,
    )
    _check_range(
        errors, "monthly_km", params.monthly_km, MIN_MONTHLY_KM, MAX_MONTHLY_KM,
    )
    _check_range(
        errors, "operation_severity", params.operation_severity,
        MIN_SEVERITY, MAX_SEVERITY,
    )
    return errors


def _is_amount(value: Any) -> bool:
    return isinstance(value, Decimal) and value.is_finite()


def _check_amount(
    errors: list[dict[str, Any]],
    field: str,
    value: Any,
    *,
    required: bool = False,
    positive: bool = False,
) -> None:
    if value is None:
        if required:
            errors.append(_field_error(field, "is required", value))
        return
    # NaN, infinities and floats never reach the arithmetic
    if not _is_amount(value):
        errors.append(_field_error(field, "must be a finite Decimal", value))
    elif positive and value <= ZERO:
        errors.append(_field_error(field, "must be greater than 0", value))
    elif not positive and value < ZERO:
        errors.append(_field_error(field, "must be greater than or equal to 0", value))


def validate_vehicle(vehicle: Vehicle) -> list[dict[str, Any]]:
    """Return the field errors of a vehicle."""
    errors: list[dict[str, Any]] = []
    _check_amount(errors, "vehicle.value", vehicle.value, required=True, positive=True)
    _check_amount(errors, "vehicle.ipva_cost", vehicle.ipva_cost)
    _check_amount(errors, "vehicle.licensing_cost", vehicle.licensing_cost)
    return errors


def validate_group(group: VehicleGroup) -> list[dict[str, Any]]:
    """Return the field errors of a vehicle group."""
    errors: list[dict[str, Any]] = []
    for name in ("revision_km", "tire_km"):
        km = getattr(group, name)
        if not _is_int(km) or km <= 0:
            errors.append(_field_error(f"group.{name}", "must be greater than 0", km))
    _check_amount(errors, "group.revision_cost", group.revision_cost, required=True)
    _check_amount(errors, "group.tire_cost", group.tire_cost, required=True)
    _check_amount(errors, "group.ipva_rate", group.ipva_rate)
    _check_amount(errors, "group.licensing_cost", group.licensing_cost)
    return errors


# =============================================================================
# Components
# =============================================================================


def depreciation_cost(
    value: Decimal, operation_severity: int, config: CalculationConfig
) -> Decimal:
    """base_rate x severity multiplier x vehicle value."""
    multiplier = config.severity_multiplier(operation_severity)
    return round_money(config.base_rate * multiplier * value)


def maintenance_cost(group: VehicleGroup, monthly_km: int) -> Decimal:
    """Revision and tire cost per km, scaled to the monthly mileage."""
    per_km = (
        group.revision_cost / Decimal(group.revision_km)
        + group.tire_cost / Decimal(group.tire_km)
    )
    return round_money(per_km * Decimal(monthly_km))


def tracking_cost(has_tracking: bool, config: CalculationConfig) -> Decimal:
    return round_money(config.tracking_cost) if has_tracking else round_money(ZERO)


def protection_cost(
    plan_id: UUID | None,
    plan: ProtectionPlan | None,
) -> tuple[Decimal, OptionalComponentUnavailable | None]:
    """Flat monthly cost of the selected plan.

    Returns the cost and, when a plan was selected but could not be
    resolved, the warning describing it.
    """
    if plan_id is None:
        return round_money(ZERO), None
    if plan is None or plan.id != plan_id:
        warning = OptionalComponentUnavailable(
            component="protection",
            reference_id=str(plan_id),
            message=f"Protection plan {plan_id} not found; priced at 0",
        )
        return round_money(ZERO), warning
    return round_money(plan.monthly_cost), None


def annual_ipva(vehicle: Vehicle, group: VehicleGroup) -> Decimal:
    """Vehicle override, else group rate applied to the vehicle value."""
    if vehicle.ipva_cost is not None:
        return vehicle.ipva_cost
    if group.ipva_rate is not None:
        return group.ipva_rate * vehicle.value
    return ZERO


def annual_licensing(vehicle: Vehicle, group: VehicleGroup) -> Decimal:
    if vehicle.licensing_cost is not None:
        return vehicle.licensing_cost
    if group.licensing_cost is not None:
        return group.licensing_cost
    return ZERO


def ipva_cost(vehicle: Vehicle, group: VehicleGroup) -> Decimal:
    return round_money(annual_ipva(vehicle, group) / MONTHS_PER_YEAR)


def licensing_cost(vehicle: Vehicle, group: VehicleGroup) -> Decimal:
    return round_money(annual_licensing(vehicle, group) / MONTHS_PER_YEAR)


def select_selic_bucket(contract_months: int) -> SelicBucket:
    """Map a contract duration to the SELIC bucket that prices it.

    Up to 12 months uses the 12-month rate, 13 to 18 the 18-month rate and
    anything longer the 24-month rate.
    """
    if contract_months <= 12:
        return SelicBucket.MONTH_12
    if contract_months <= 18:
        return SelicBucket.MONTH_18
    return SelicBucket.MONTH_24


def financial_cost(
    value: Decimal, contract_months: int, tax_snapshot: TaxIndexSnapshot
) -> Decimal:
    """Monthly cost of capital: value x (SELIC + spread) / 100 / 12."""
    bucket = select_selic_bucket(contract_months)
    annual_rate = tax_snapshot.selic_rates.rate_for(bucket) + tax_snapshot.spread
    return round_money(value * annual_rate / HUNDRED / MONTHS_PER_YEAR)


def extra_km_rate(value: Decimal, config: CalculationConfig) -> Decimal:
    """Price of each km driven above the contracted mileage."""
    return (config.extra_km_percentage * value).quantize(
        RATE_PLACES, rounding=ROUND_HALF_UP
    )


# =============================================================================
# Engine entry points
# =============================================================================


@traced_engine(
    "cost_composition",
    "1.0",
    fingerprint_fields=("vehicle", "group", "params", "plan", "tax_snapshot", "calc_config"),
)
def compute_vehicle_cost(
    vehicle: Vehicle,
    group: VehicleGroup | None,
    params: ContractParameters,
    plan: ProtectionPlan | None = None,
    tax_snapshot: TaxIndexSnapshot | None = None,
    calc_config: CalculationConfig | None = None,
) -> QuoteResultVehicle:
    """Price one vehicle under one set of contract parameters.

    Raises:
        ValidationError: Vehicle, group or parameters are out of range.
        MissingReferenceDataError: Group absent or mismatched, or taxes
            requested without a tax snapshot.
    """
    config = calc_config if calc_config is not None else CalculationConfig.with_defaults()

    errors = validate_vehicle(vehicle) + validate_parameters(params)
    if errors:
        raise ValidationError(errors)

    if group is None:
        raise MissingReferenceDataError("vehicle_group", str(vehicle.group_id))
    if group.id != vehicle.group_id:
        raise MissingReferenceDataError(
            "vehicle_group",
            str(vehicle.group_id),
            f"supplied group {group.id} does not match the vehicle",
        )
    group_errors = validate_group(group)
    if group_errors:
        raise ValidationError(group_errors)

    if params.include_taxes and tax_snapshot is None:
        raise MissingReferenceDataError(
            "tax_index_snapshot", None, "required when taxes are included"
        )

    depreciation = depreciation_cost(vehicle.value, params.operation_severity, config)
    maintenance = maintenance_cost(group, params.monthly_km)
    tracking = tracking_cost(params.has_tracking, config)
    protection, protection_warning = protection_cost(params.protection_plan_id, plan)
    ipva = ipva_cost(vehicle, group) if params.include_ipva else round_money(ZERO)
    licensing = (
        licensing_cost(vehicle, group) if params.include_licensing else round_money(ZERO)
    )
    bucket = None
    tax = round_money(ZERO)
    if params.include_taxes:
        bucket = select_selic_bucket(params.contract_months)
        tax = financial_cost(vehicle.value, params.contract_months, tax_snapshot)

    total = sum_money(
        (depreciation, maintenance, tracking, protection, ipva, licensing, tax)
    )
    per_km = (total / Decimal(params.monthly_km)).quantize(
        RATE_PLACES, rounding=ROUND_HALF_UP
    )

    warnings: tuple[OptionalComponentUnavailable, ...] = ()
    if protection_warning is not None:
        warnings = (protection_warning,)
        logger.warning(
            "protection_plan_unavailable",
            extra={
                "vehicle_id": str(vehicle.id),
                "protection_plan_id": protection_warning.reference_id,
            },
        )

    logger.debug(
        "vehicle_cost_computed",
        extra={
            "vehicle_id": str(vehicle.id),
            "total_cost": str(total),
            "contract_months": params.contract_months,
            "monthly_km": params.monthly_km,
        },
    )

    return QuoteResultVehicle(
        vehicle_id=vehicle.id,
        depreciation_cost=depreciation,
        maintenance_cost=maintenance,
        tracking_cost=tracking,
        protection_cost=protection,
        ipva_cost=ipva,
        licensing_cost=licensing,
        tax_cost=tax,
        extra_km_rate=extra_km_rate(vehicle.value, config),
        total_cost=total,
        cost_per_km=per_km,
        contract_months=params.contract_months,
        monthly_km=params.monthly_km,
        operation_severity=params.operation_severity,
        has_tracking=params.has_tracking,
        protection_plan_id=params.protection_plan_id,
        include_ipva=params.include_ipva,
        include_licensing=params.include_licensing,
        include_taxes=params.include_taxes,
        selic_bucket=bucket,
        warnings=warnings,
    )


def compute_quote_total(items: Iterable[_HasTotalCost]) -> Decimal:
    """Sum of the line totals; an empty quote totals 0.00."""
    return sum_money(item.total_cost for item in items)


@traced_engine("quote_composition", "1.0")
def compute_quote(
    items: Sequence[VehiclePricingInput],
    *,
    global_params: ContractParameters | None = None,
    use_global_params: bool = True,
    plans: Mapping[UUID, ProtectionPlan] | None = None,
    tax_snapshot: TaxIndexSnapshot | None = None,
    calc_config: CalculationConfig | None = None,
) -> QuoteCalculation:
    """Price every vehicle of a quote and total the results.

    With ``use_global_params`` every vehicle is priced with
    ``global_params``; otherwise each item's own parameters are used,
    falling back to ``global_params`` when an item has none.  Field
    errors from all vehicles are reported together, prefixed with the
    vehicle index.
    """
    plans = plans or {}
    results: list[QuoteResultVehicle] = []
    errors: list[dict[str, Any]] = []

    for index, item in enumerate(items):
        params = global_params if use_global_params else (item.params or global_params)
        if params is None:
            errors.append(_field_error(f"vehicles[{index}].params", "is required", None))
            continue
        plan = plans.get(params.protection_plan_id) if params.protection_plan_id else None
        try:
            results.append(
                compute_vehicle_cost(
                    item.vehicle, item.group, params, plan, tax_snapshot, calc_config
                )
            )
        except ValidationError as exc:
            errors.extend(
                {**e, "field": f"vehicles[{index}].{e['field']}"}
                for e in exc.field_errors
            )

    if errors:
        raise ValidationError(errors)

    return QuoteCalculation(
        vehicle_results=tuple(results),
        total_cost=compute_quote_total(results),
        used_global_params=use_global_params,
    )
