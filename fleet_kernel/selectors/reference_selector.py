"""
Module: fleet_kernel.selectors.reference_selector
Responsibility: Read access to the reference data consumed by pricing:
    vehicle groups, vehicles, protection plans, the latest tax snapshot and
    the active calculation parameters.

Architecture position: Kernel > Selectors.

Failure modes:
    - ``require_vehicle`` and ``require_client`` raise
      MissingReferenceDataError when the record is absent; the plain
      getters return None.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from uuid import UUID

from sqlalchemy import select

from fleet_kernel.domain.calculation_config import CalculationConfig
from fleet_kernel.domain.reference import (
    Client,
    ProtectionPlan,
    TaxIndexSnapshot,
    Vehicle,
    VehicleGroup,
)
from fleet_kernel.exceptions import MissingReferenceDataError
from fleet_kernel.logging_config import get_logger
from fleet_kernel.models.reference import (
    CalculationParamsModel,
    ClientModel,
    ProtectionPlanModel,
    TaxIndexModel,
    VehicleGroupModel,
    VehicleModel,
)
from fleet_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.reference")


class ReferenceSelector(BaseSelector[VehicleGroupModel]):
    """Reference data lookups returning domain DTOs."""

    def get_group(self, group_id: UUID) -> VehicleGroup | None:
        model = self.session.get(VehicleGroupModel, group_id)
        return model.to_dto() if model is not None else None

    def get_vehicle(self, vehicle_id: UUID) -> Vehicle | None:
        model = self.session.get(VehicleModel, vehicle_id)
        return model.to_dto() if model is not None else None

    def require_vehicle(self, vehicle_id: UUID) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle is None:
            raise MissingReferenceDataError("vehicle", str(vehicle_id))
        return vehicle

    def vehicles_in_group(self, group_id: UUID) -> list[Vehicle]:
        models = self.session.scalars(
            select(VehicleModel)
            .where(VehicleModel.group_id == group_id)
            .order_by(VehicleModel.brand, VehicleModel.model, VehicleModel.year)
        )
        return [m.to_dto() for m in models]

    def get_protection_plans(self, plan_ids: Iterable[UUID]) -> dict[UUID, ProtectionPlan]:
        """Resolve the plans that exist; unknown ids are simply absent."""
        ids = set(plan_ids)
        if not ids:
            return {}
        models = self.session.scalars(
            select(ProtectionPlanModel).where(ProtectionPlanModel.id.in_(ids))
        )
        return {m.id: m.to_dto() for m in models}

    def get_client(self, client_id: UUID) -> Client | None:
        model = self.session.get(ClientModel, client_id)
        return model.to_dto() if model is not None else None

    def require_client(self, client_id: UUID) -> Client:
        client = self.get_client(client_id)
        if client is None:
            raise MissingReferenceDataError("client", str(client_id))
        return client

    def latest_tax_snapshot(self) -> TaxIndexSnapshot | None:
        model = self.session.scalars(
            select(TaxIndexModel).order_by(TaxIndexModel.effective_at.desc()).limit(1)
        ).first()
        return model.to_dto() if model is not None else None

    def get_calculation_config(self, yaml_path: Path | None = None) -> CalculationConfig:
        """Latest persisted calculation parameters, else the YAML defaults."""
        model = self.session.scalars(
            select(CalculationParamsModel)
            .order_by(CalculationParamsModel.effective_at.desc())
            .limit(1)
        ).first()
        if model is not None:
            return model.to_dto()

        from fleet_config import get_calculation_config

        logger.debug("calculation_params_from_yaml")
        return get_calculation_config(yaml_path)
