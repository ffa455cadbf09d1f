"""
Module: fleet_kernel.models.reference
Responsibility: ORM persistence for the reference data read by the pricing
    engine: vehicle groups, vehicles, protection plans, tax index snapshots,
    calculation parameters and clients.

Architecture position: Kernel > Models.  May import from db/base.py only
    (domain DTOs are imported lazily inside to_dto()).

Invariants enforced:
    - Monetary and rate columns are Numeric(38, 9); never float.
    - Group maintenance intervals are positive (CHECK constraints).
    - Tax snapshots and calculation parameters are versioned by
      effective_at; the latest row wins.

Failure modes:
    - IntegrityError on a duplicate group code or a non-positive interval.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleet_kernel.db.base import Base, UTCDateTime, UUIDString

if TYPE_CHECKING:
    from fleet_kernel.domain.calculation_config import CalculationConfig
    from fleet_kernel.domain.reference import (
        Client,
        ProtectionPlan,
        TaxIndexSnapshot,
        Vehicle,
        VehicleGroup,
    )


class VehicleGroupModel(Base):
    """Persistent vehicle group with its maintenance and tax parameters."""

    __tablename__ = "vehicle_groups"

    __table_args__ = (
        CheckConstraint("revision_km > 0", name="ck_vehicle_groups_revision_km"),
        CheckConstraint("tire_km > 0", name="ck_vehicle_groups_tire_km"),
    )

    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    revision_km: Mapped[int] = mapped_column(Integer, nullable=False)
    revision_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    tire_km: Mapped[int] = mapped_column(Integer, nullable=False)
    tire_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    ipva_rate: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    licensing_cost: Mapped[Decimal | None] = mapped_column(
        Numeric(38, 9), nullable=True,
    )

    vehicles: Mapped[list["VehicleModel"]] = relationship(
        "VehicleModel", back_populates="group",
    )

    def __repr__(self) -> str:
        return f"<VehicleGroup {self.code}: {self.name}>"

    def to_dto(self) -> VehicleGroup:
        from fleet_kernel.domain.reference import VehicleGroup as VehicleGroupDTO

        return VehicleGroupDTO(
            id=self.id,
            code=self.code,
            name=self.name,
            description=self.description,
            revision_km=self.revision_km,
            revision_cost=self.revision_cost,
            tire_km=self.tire_km,
            tire_cost=self.tire_cost,
            ipva_rate=self.ipva_rate,
            licensing_cost=self.licensing_cost,
        )

    @classmethod
    def from_dto(cls, dto: VehicleGroup) -> VehicleGroupModel:
        return cls(
            id=dto.id,
            code=dto.code,
            name=dto.name,
            description=dto.description,
            revision_km=dto.revision_km,
            revision_cost=dto.revision_cost,
            tire_km=dto.tire_km,
            tire_cost=dto.tire_cost,
            ipva_rate=dto.ipva_rate,
            licensing_cost=dto.licensing_cost,
        )


class VehicleModel(Base):
    """Persistent vehicle, new (catalog model) or used (plate registered)."""

    __tablename__ = "vehicles"

    __table_args__ = (
        CheckConstraint("value > 0", name="ck_vehicles_value_positive"),
        Index("ix_vehicles_group_id", "group_id"),
    )

    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    group_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("vehicle_groups.id"), nullable=False,
    )
    is_used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    plate_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    odometer: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fuel_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    ipva_cost: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    licensing_cost: Mapped[Decimal | None] = mapped_column(
        Numeric(38, 9), nullable=True,
    )

    group: Mapped["VehicleGroupModel"] = relationship(
        "VehicleGroupModel", back_populates="vehicles",
    )

    def __repr__(self) -> str:
        return f"<Vehicle {self.brand} {self.model} {self.year}>"

    def to_dto(self) -> Vehicle:
        from fleet_kernel.domain.reference import Vehicle as VehicleDTO

        return VehicleDTO(
            id=self.id,
            brand=self.brand,
            model=self.model,
            year=self.year,
            value=self.value,
            group_id=self.group_id,
            is_used=self.is_used,
            plate_number=self.plate_number,
            color=self.color,
            odometer=self.odometer,
            fuel_type=self.fuel_type,
            ipva_cost=self.ipva_cost,
            licensing_cost=self.licensing_cost,
        )

    @classmethod
    def from_dto(cls, dto: Vehicle) -> VehicleModel:
        return cls(
            id=dto.id,
            brand=dto.brand,
            model=dto.model,
            year=dto.year,
            value=dto.value,
            group_id=dto.group_id,
            is_used=dto.is_used,
            plate_number=dto.plate_number,
            color=dto.color,
            odometer=dto.odometer,
            fuel_type=dto.fuel_type,
            ipva_cost=dto.ipva_cost,
            licensing_cost=dto.licensing_cost,
        )


class ProtectionPlanModel(Base):
    """Persistent protection plan."""

    __tablename__ = "protection_plans"

    __table_args__ = (
        CheckConstraint(
            "type IN ('basic', 'intermediate', 'premium')",
            name="ck_protection_plans_valid_type",
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    monthly_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self) -> ProtectionPlan:
        from fleet_kernel.domain.reference import (
            ProtectionPlan as ProtectionPlanDTO,
            ProtectionType,
        )

        return ProtectionPlanDTO(
            id=self.id,
            name=self.name,
            type=ProtectionType(self.type),
            monthly_cost=self.monthly_cost,
            description=self.description,
        )

    @classmethod
    def from_dto(cls, dto: ProtectionPlan) -> ProtectionPlanModel:
        return cls(
            id=dto.id,
            name=dto.name,
            type=dto.type.value,
            monthly_cost=dto.monthly_cost,
            description=dto.description,
        )


class TaxIndexModel(Base):
    """One snapshot of the externally maintained tax indices (percent)."""

    __tablename__ = "tax_indices"

    __table_args__ = (
        Index("ix_tax_indices_effective_at", "effective_at"),
    )

    ipca: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    igpm: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    spread: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    selic_month12: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    selic_month18: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    selic_month24: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    effective_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def to_dto(self) -> TaxIndexSnapshot:
        from fleet_kernel.domain.reference import SelicRates, TaxIndexSnapshot

        return TaxIndexSnapshot(
            ipca=self.ipca,
            igpm=self.igpm,
            spread=self.spread,
            selic_rates=SelicRates(
                month12=self.selic_month12,
                month18=self.selic_month18,
                month24=self.selic_month24,
            ),
            effective_at=self.effective_at,
        )

    @classmethod
    def from_dto(cls, dto: TaxIndexSnapshot, effective_at: datetime | None = None) -> TaxIndexModel:
        return cls(
            ipca=dto.ipca,
            igpm=dto.igpm,
            spread=dto.spread,
            selic_month12=dto.selic_rates.month12,
            selic_month18=dto.selic_rates.month18,
            selic_month24=dto.selic_rates.month24,
            effective_at=effective_at or dto.effective_at,
        )


class CalculationParamsModel(Base):
    """Administrator-maintained pricing constants; overrides the YAML defaults."""

    __tablename__ = "calculation_params"

    __table_args__ = (
        Index("ix_calculation_params_effective_at", "effective_at"),
    )

    base_rate: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    severity_1: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    severity_2: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    severity_3: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    severity_4: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    severity_5: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    severity_6: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    tracking_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    extra_km_percentage: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), nullable=False,
    )
    effective_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def to_dto(self) -> CalculationConfig:
        from fleet_kernel.domain.calculation_config import CalculationConfig

        return CalculationConfig(
            base_rate=self.base_rate,
            severity_multipliers=(
                self.severity_1,
                self.severity_2,
                self.severity_3,
                self.severity_4,
                self.severity_5,
                self.severity_6,
            ),
            tracking_cost=self.tracking_cost,
            extra_km_percentage=self.extra_km_percentage,
        )

    @classmethod
    def from_dto(cls, dto: CalculationConfig, effective_at: datetime) -> CalculationParamsModel:
        s1, s2, s3, s4, s5, s6 = dto.severity_multipliers
        return cls(
            base_rate=dto.base_rate,
            severity_1=s1,
            severity_2=s2,
            severity_3=s3,
            severity_4=s4,
            severity_5=s5,
            severity_6=s6,
            tracking_cost=dto.tracking_cost,
            extra_km_percentage=dto.extra_km_percentage,
            effective_at=effective_at,
        )


class ClientModel(Base):
    """Persistent client (individual or company)."""

    __tablename__ = "clients"

    __table_args__ = (
        CheckConstraint("type IN ('PF', 'PJ')", name="ck_clients_valid_type"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(2), nullable=False)
    document: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    contact: Mapped[str | None] = mapped_column(String(100), nullable=True)
    responsible: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def to_dto(self) -> Client:
        from fleet_kernel.domain.reference import Client as ClientDTO, ClientType

        return ClientDTO(
            id=self.id,
            name=self.name,
            type=ClientType(self.type),
            document=self.document,
            email=self.email,
            contact=self.contact,
            responsible=self.responsible,
        )

    @classmethod
    def from_dto(cls, dto: Client) -> ClientModel:
        return cls(
            id=dto.id,
            name=dto.name,
            type=dto.type.value,
            document=dto.document,
            email=dto.email,
            contact=dto.contact,
            responsible=dto.responsible,
        )
