"""SQLAlchemy ORM models. Importing this package registers every table."""

from fleet_kernel.models.action_log import QuoteActionLogModel
from fleet_kernel.models.quote import QuoteModel, QuoteVehicleModel
from fleet_kernel.models.reference import (
    CalculationParamsModel,
    ClientModel,
    ProtectionPlanModel,
    TaxIndexModel,
    VehicleGroupModel,
    VehicleModel,
)
from fleet_kernel.models.status_history import QuoteStatusHistoryModel

__all__ = [
    "VehicleGroupModel",
    "VehicleModel",
    "ProtectionPlanModel",
    "TaxIndexModel",
    "CalculationParamsModel",
    "ClientModel",
    "QuoteModel",
    "QuoteVehicleModel",
    "QuoteStatusHistoryModel",
    "QuoteActionLogModel",
]
