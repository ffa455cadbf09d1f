"""
fleet_kernel.services.quote_pricing_service -- Pricing and saving quotes.

Responsibility:
    Resolves the reference data a quote needs (vehicles, groups, plans,
    tax indices, calculation constants), hands it to the pure pricing
    engine and persists the result: a new quote with its initial status
    history entry, or a reprice that replaces the lines and total of an
    existing quote as one unit.

Architecture position:
    Kernel > Services.  May import from domain/, models/, selectors/,
    fleet_engines and fleet_config.

Invariants enforced:
    - The stored total always equals the sum of the stored line totals:
      both are written from the same QuoteCalculation in one flush.
    - A new quote starts in an initial status (draft or ORCAMENTO) with a
      history entry whose previous status is None.

Failure modes:
    - ValidationError / MissingReferenceDataError from the engine.
    - MissingReferenceDataError for an unknown vehicle or client.
    - QuoteNotFoundError / UnauthorizedQuoteActionError on reprice.
"""

from __future__ import annotations

from pathlib import Path
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from fleet_config import get_default_tax_indices
from fleet_engines.permissions import can_edit_quote
from fleet_engines.pricing import VehiclePricingInput, compute_quote
from fleet_kernel.domain.clock import Clock
from fleet_kernel.domain.quote import (
    Actor,
    Quote,
    QuoteActionLog,
    QuoteActionType,
    QuoteCalculation,
    QuoteRequest,
)
from fleet_kernel.domain.reference import TaxIndexSnapshot
from fleet_kernel.domain.status import INITIAL_STATUSES, QuoteStatus, StatusHistoryEntry
from fleet_kernel.exceptions import QuoteNotFoundError, UnauthorizedQuoteActionError
from fleet_kernel.logging_config import LogContext, get_logger
from fleet_kernel.models.action_log import QuoteActionLogModel
from fleet_kernel.models.quote import QuoteModel, QuoteVehicleModel
from fleet_kernel.models.status_history import QuoteStatusHistoryModel
from fleet_kernel.selectors.reference_selector import ReferenceSelector
from fleet_kernel.services.base import BaseService

logger = get_logger("services.quote_pricing")


class QuotePricingService(BaseService[QuoteModel]):
    """Prices quote requests and persists quotes."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config_path: Path | None = None,
        use_default_tax_indices: bool = True,
    ) -> None:
        super().__init__(session, clock)
        self._references = ReferenceSelector(session)
        self._config_path = config_path
        self._use_default_tax_indices = use_default_tax_indices

    def _tax_snapshot(self, request: QuoteRequest) -> TaxIndexSnapshot | None:
        params = [request.global_params] if request.use_global_params else [
            v.params or request.global_params for v in request.vehicles
        ]
        if not any(p is not None and p.include_taxes for p in params):
            return None
        snapshot = self._references.latest_tax_snapshot()
        if snapshot is None and self._use_default_tax_indices:
            logger.warning("tax_indices_from_defaults")
            snapshot = get_default_tax_indices(self._config_path)
        return snapshot

    def price_quote(self, request: QuoteRequest) -> QuoteCalculation:
        """Price every vehicle of the request without persisting anything."""
        items = []
        plan_ids = set()
        for vehicle_request in request.vehicles:
            vehicle = self._references.require_vehicle(vehicle_request.vehicle_id)
            items.append(
                VehiclePricingInput(
                    vehicle=vehicle,
                    group=self._references.get_group(vehicle.group_id),
                    params=vehicle_request.params,
                )
            )
            params = (
                request.global_params
                if request.use_global_params
                else (vehicle_request.params or request.global_params)
            )
            if params is not None and params.protection_plan_id is not None:
                plan_ids.add(params.protection_plan_id)

        calculation = compute_quote(
            items,
            global_params=request.global_params,
            use_global_params=request.use_global_params,
            plans=self._references.get_protection_plans(plan_ids),
            tax_snapshot=self._tax_snapshot(request),
            calc_config=self._references.get_calculation_config(self._config_path),
        )

        logger.info(
            "quote_priced",
            extra={
                "vehicle_count": len(calculation.vehicle_results),
                "total_cost": str(calculation.total_cost),
                "warning_count": len(calculation.warnings),
            },
        )
        return calculation

    def create_quote(
        self,
        client_id: UUID,
        request: QuoteRequest,
        actor: Actor,
        title: str | None = None,
        initial_status: QuoteStatus = QuoteStatus.ORCAMENTO,
        observation: str | None = None,
    ) -> Quote:
        """Price and save a new quote.

        Raises:
            ValueError: ``initial_status`` is not draft or ORCAMENTO.
        """
        if initial_status not in INITIAL_STATUSES:
            raise ValueError(f"A quote cannot start in status {initial_status.value}")
        self._references.require_client(client_id)

        calculation = self.price_quote(request)
        now = self._clock.now()
        quote_id = uuid4()

        with LogContext.bind(quote_id=quote_id, actor_id=actor.id):
            model = QuoteModel(
                id=quote_id,
                client_id=client_id,
                title=title,
                status=initial_status.value,
                total_value=calculation.total_cost,
                global_params=(
                    request.global_params.as_dict()
                    if request.use_global_params and request.global_params is not None
                    else None
                ),
                created_at=now,
                updated_at=now,
                created_by_id=actor.id,
            )
            model.lines = [
                QuoteVehicleModel.from_result(result, position)
                for position, result in enumerate(calculation.vehicle_results)
            ]
            self._session.add(model)

            self._session.add(QuoteStatusHistoryModel.from_dto(StatusHistoryEntry(
                id=uuid4(),
                quote_id=quote_id,
                previous_status=None,
                new_status=initial_status,
                changed_by=actor.id,
                changed_at=now,
                observation=observation,
            )))
            self._session.add(QuoteActionLogModel.from_dto(QuoteActionLog(
                id=uuid4(),
                quote_id=quote_id,
                action_type=QuoteActionType.CREATED,
                actor_id=actor.id,
                actor_name=actor.name,
                action_at=now,
                quote_title=title,
                details={
                    "total_value": str(calculation.total_cost),
                    "vehicle_count": len(calculation.vehicle_results),
                },
            )))
            self._session.flush()

            logger.info(
                "quote_created",
                extra={
                    "status": initial_status.value,
                    "total_value": str(calculation.total_cost),
                    "vehicle_count": len(calculation.vehicle_results),
                },
            )

        return model.to_dto()

    def reprice_quote(self, quote_id: UUID, request: QuoteRequest, actor: Actor) -> Quote:
        """Recompute a saved quote and replace its lines and total together."""
        model = self._session.get(QuoteModel, quote_id)
        if model is None:
            raise QuoteNotFoundError(str(quote_id))
        if not can_edit_quote(model.created_by_id, actor):
            logger.warning(
                "quote_action_denied",
                extra={"quote_id": str(quote_id), "actor_id": str(actor.id), "action": "edit"},
            )
            raise UnauthorizedQuoteActionError(str(quote_id), str(actor.id), "edit")

        calculation = self.price_quote(request)
        previous_total = model.total_value
        now = self._clock.now()

        with LogContext.bind(quote_id=quote_id, actor_id=actor.id):
            model.lines = [
                QuoteVehicleModel.from_result(result, position)
                for position, result in enumerate(calculation.vehicle_results)
            ]
            model.total_value = calculation.total_cost
            model.global_params = (
                request.global_params.as_dict()
                if request.use_global_params and request.global_params is not None
                else None
            )
            model.updated_at = now
            model.updated_by_id = actor.id

            self._session.add(QuoteActionLogModel.from_dto(QuoteActionLog(
                id=uuid4(),
                quote_id=quote_id,
                action_type=QuoteActionType.REPRICED,
                actor_id=actor.id,
                actor_name=actor.name,
                action_at=now,
                quote_title=model.title,
                details={
                    "previous_total": str(previous_total),
                    "new_total": str(calculation.total_cost),
                },
            )))
            self._session.flush()

            logger.info(
                "quote_repriced",
                extra={
                    "previous_total": str(previous_total),
                    "new_total": str(calculation.total_cost),
                },
            )

        return model.to_dto()
