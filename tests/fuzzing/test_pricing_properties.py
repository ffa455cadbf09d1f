"""
Property-based tests for the pricing engine and the status workflow.

Properties checked over generated inputs:
- A vehicle total is the exact sum of its rounded components
- Clearing one include flag lowers the total by exactly that component
- Quote totals are additive and do not depend on vehicle order
- Cost of one vehicle does not depend on the other vehicles of the quote
- Transition rule: cancel always allowed, no skips, backward always allowed
"""

from decimal import Decimal
from uuid import uuid4

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from fleet_engines.pricing import (
    VehiclePricingInput,
    compute_quote,
    compute_quote_total,
    compute_vehicle_cost,
)
from fleet_engines.status_flow import (
    calculate_progress,
    is_valid_transition,
    valid_next_statuses,
)
from fleet_kernel.domain.contract import ContractParameters
from fleet_kernel.domain.reference import (
    ProtectionPlan,
    ProtectionType,
    SelicRates,
    TaxIndexSnapshot,
    Vehicle,
    VehicleGroup,
)
from fleet_kernel.domain.status import WORKFLOW_ORDER, QuoteStatus

settings.register_profile(
    "fleet_properties",
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile("fleet_properties")

GROUP = VehicleGroup(
    id=uuid4(),
    code="C",
    name="Utilitário",
    revision_km=15000,
    revision_cost=Decimal("780.00"),
    tire_km=50000,
    tire_cost=Decimal("2600.00"),
    ipva_rate=Decimal("0.035"),
    licensing_cost=Decimal("180.00"),
)
PLAN = ProtectionPlan(
    id=uuid4(), name="Premium", type=ProtectionType.PREMIUM, monthly_cost=Decimal("289.90"),
)
SNAPSHOT = TaxIndexSnapshot(
    ipca=Decimal("4.1"),
    igpm=Decimal("3.9"),
    spread=Decimal("5.3"),
    selic_rates=SelicRates(
        month12=Decimal("12.75"), month18=Decimal("11.75"), month24=Decimal("10.25"),
    ),
)

values = st.decimals(
    min_value=Decimal("1000.00"), max_value=Decimal("2000000.00"), places=2,
    allow_nan=False, allow_infinity=False,
)
params_strategy = st.builds(
    ContractParameters,
    contract_months=st.integers(min_value=1, max_value=60),
    monthly_km=st.integers(min_value=1, max_value=10000),
    operation_severity=st.integers(min_value=1, max_value=6),
    has_tracking=st.booleans(),
    protection_plan_id=st.sampled_from([None, PLAN.id]),
    include_ipva=st.booleans(),
    include_licensing=st.booleans(),
    include_taxes=st.booleans(),
)
statuses = st.sampled_from(list(QuoteStatus))


def make_vehicle(value: Decimal) -> Vehicle:
    return Vehicle(
        id=uuid4(), brand="VW", model="Saveiro", year=2023, value=value, group_id=GROUP.id,
    )


def price(value: Decimal, params: ContractParameters):
    return compute_vehicle_cost(make_vehicle(value), GROUP, params, PLAN, SNAPSHOT)


class TestVehicleCostProperties:
    @given(value=values, params=params_strategy)
    @settings(max_examples=200)
    def test_total_is_sum_of_cents(self, value, params):
        result = price(value, params)

        assert result.total_cost == sum(result.components.values())
        for amount in result.components.values():
            assert amount == amount.quantize(Decimal("0.01"))
            assert amount >= 0

    @given(
        value=values,
        params=params_strategy,
        flag=st.sampled_from(["include_ipva", "include_licensing", "include_taxes"]),
    )
    def test_component_independence(self, value, params, flag):
        with_flag = price(value, params.with_changes(**{flag: True}))
        without = price(value, params.with_changes(**{flag: False}))

        component = {
            "include_ipva": "ipva",
            "include_licensing": "licensing",
            "include_taxes": "tax",
        }[flag]
        assert with_flag.total_cost - without.total_cost == with_flag.components[component]
        for name, amount in without.components.items():
            if name != component:
                assert with_flag.components[name] == amount

    @given(value=values, params=params_strategy)
    def test_deterministic(self, value, params):
        vehicle = make_vehicle(value)

        first = compute_vehicle_cost(vehicle, GROUP, params, PLAN, SNAPSHOT)
        second = compute_vehicle_cost(vehicle, GROUP, params, PLAN, SNAPSHOT)

        assert first == second


class TestQuoteProperties:
    @given(vehicle_values=st.lists(values, min_size=1, max_size=8), params=params_strategy)
    def test_total_is_additive_and_order_free(self, vehicle_values, params):
        items = [VehiclePricingInput(make_vehicle(v), GROUP) for v in vehicle_values]

        calculation = compute_quote(
            items, global_params=params, plans={PLAN.id: PLAN}, tax_snapshot=SNAPSHOT,
        )
        reversed_calc = compute_quote(
            list(reversed(items)),
            global_params=params, plans={PLAN.id: PLAN}, tax_snapshot=SNAPSHOT,
        )

        assert calculation.total_cost == sum(
            r.total_cost for r in calculation.vehicle_results
        )
        assert calculation.total_cost == reversed_calc.total_cost

    @given(value=values, others=st.lists(values, max_size=5), params=params_strategy)
    def test_vehicle_cost_ignores_other_vehicles(self, value, others, params):
        target = VehiclePricingInput(make_vehicle(value), GROUP)
        alone = compute_quote(
            [target], global_params=params, plans={PLAN.id: PLAN}, tax_snapshot=SNAPSHOT,
        )
        crowded = compute_quote(
            [target] + [VehiclePricingInput(make_vehicle(v), GROUP) for v in others],
            global_params=params, plans={PLAN.id: PLAN}, tax_snapshot=SNAPSHOT,
        )

        assert alone.vehicle_results[0] == crowded.vehicle_results[0]

    @given(st.lists(values, max_size=10))
    def test_total_of_totals(self, totals):
        class Line:
            def __init__(self, total_cost):
                self.total_cost = total_cost

        assert compute_quote_total([Line(t) for t in totals]) == sum(totals, Decimal("0"))


class TestWorkflowProperties:
    @given(current=statuses.filter(lambda s: s is not QuoteStatus.CANCELADO))
    def test_cancel_always_allowed(self, current):
        assert is_valid_transition(current, QuoteStatus.CANCELADO)

    @given(current=statuses, target=statuses)
    def test_rule(self, current, target):
        allowed = is_valid_transition(current, target)

        if target is current:
            assert not allowed
        elif target is QuoteStatus.CANCELADO:
            assert allowed
        elif current in (QuoteStatus.CANCELADO, QuoteStatus.CONCLUIDO):
            assert not allowed
        else:
            i, j = WORKFLOW_ORDER.index(current), WORKFLOW_ORDER.index(target)
            assert allowed == (j < i or j == i + 1)

    @given(current=statuses)
    def test_next_statuses_exclude_current(self, current):
        assert current not in valid_next_statuses(current)

    @given(a=st.sampled_from(WORKFLOW_ORDER), b=st.sampled_from(WORKFLOW_ORDER))
    def test_progress_monotonic(self, a, b):
        if WORKFLOW_ORDER.index(a) <= WORKFLOW_ORDER.index(b):
            assert calculate_progress(a) <= calculate_progress(b)
