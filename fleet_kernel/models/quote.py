"""
Module: fleet_kernel.models.quote
Responsibility: ORM persistence for the quote aggregate: the quote header
    (status, derived total, optional global parameters) and its priced
    vehicle lines.

Architecture position: Kernel > Models.  May import from db/base.py and the
    pure domain layer.

Invariants enforced:
    - status is one of the workflow codes (CHECK constraint).  Transition
      rules are enforced by QuoteStatusService, which updates the column
      only through a compare-and-swap statement.
    - total_value is derived: QuotePricingService writes it together with
      the lines it sums.
    - Lines belong to exactly one quote and are deleted with it.

Failure modes:
    - IntegrityError on an unknown status code or a missing client.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleet_kernel.db.base import Base, TrackedBase, UUIDString
from fleet_kernel.domain.status import QuoteStatus

if TYPE_CHECKING:
    from fleet_kernel.domain.quote import Quote, QuoteLine, QuoteResultVehicle

_STATUS_CODES = tuple(s.value for s in QuoteStatus)


class QuoteModel(TrackedBase):
    """Persistent quote header."""

    __tablename__ = "quotes"

    __table_args__ = (
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in _STATUS_CODES) + ")",
            name="ck_quotes_valid_status",
        ),
        Index("ix_quotes_client_id", "client_id"),
        Index("ix_quotes_status", "status"),
    )

    client_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("clients.id"), nullable=False,
    )
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ORCAMENTO")
    total_value: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    # Contract parameters shared by every line; NULL when lines carry their own
    global_params: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    lines: Mapped[list["QuoteVehicleModel"]] = relationship(
        "QuoteVehicleModel",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteVehicleModel.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Quote {self.id} status={self.status} total={self.total_value}>"

    def to_dto(self) -> Quote:
        from fleet_kernel.domain.contract import ContractParameters
        from fleet_kernel.domain.quote import Quote as QuoteDTO

        return QuoteDTO(
            id=self.id,
            client_id=self.client_id,
            status=QuoteStatus(self.status),
            total_value=self.total_value,
            created_at=self.created_at,
            created_by=self.created_by_id,
            lines=tuple(line.to_dto() for line in self.lines),
            global_params=(
                ContractParameters.from_dict(self.global_params)
                if self.global_params is not None
                else None
            ),
            title=self.title,
            updated_at=self.updated_at,
        )

    def deleted_snapshot(self) -> dict[str, Any]:
        """JSON-safe copy of the quote kept in the action log on deletion."""
        return {
            "id": str(self.id),
            "client_id": str(self.client_id),
            "title": self.title,
            "status": self.status,
            "total_value": str(self.total_value),
            "created_by": str(self.created_by_id),
            "global_params": self.global_params,
            "vehicles": [
                {
                    "vehicle_id": str(line.vehicle_id),
                    "total_cost": str(line.total_cost),
                }
                for line in self.lines
            ],
        }


class QuoteVehicleModel(Base):
    """One priced vehicle of a quote: its parameters and cost breakdown."""

    __tablename__ = "quote_vehicles"

    __table_args__ = (
        Index("ix_quote_vehicles_quote_id", "quote_id"),
    )

    quote_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False,
    )
    vehicle_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("vehicles.id"), nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    contract_months: Mapped[int] = mapped_column(Integer, nullable=False)
    monthly_km: Mapped[int] = mapped_column(Integer, nullable=False)
    operation_severity: Mapped[int] = mapped_column(Integer, nullable=False)
    has_tracking: Mapped[bool] = mapped_column(Boolean, nullable=False)
    protection_plan_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    include_ipva: Mapped[bool] = mapped_column(Boolean, nullable=False)
    include_licensing: Mapped[bool] = mapped_column(Boolean, nullable=False)
    include_taxes: Mapped[bool] = mapped_column(Boolean, nullable=False)
    selic_bucket: Mapped[str | None] = mapped_column(String(10), nullable=True)

    depreciation_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    maintenance_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    tracking_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    protection_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    ipva_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    licensing_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    tax_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    extra_km_rate: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    cost_per_km: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)

    quote: Mapped["QuoteModel"] = relationship("QuoteModel", back_populates="lines")

    def to_result(self) -> QuoteResultVehicle:
        from fleet_kernel.domain.quote import QuoteResultVehicle
        from fleet_kernel.domain.reference import SelicBucket

        return QuoteResultVehicle(
            vehicle_id=self.vehicle_id,
            depreciation_cost=self.depreciation_cost,
            maintenance_cost=self.maintenance_cost,
            tracking_cost=self.tracking_cost,
            protection_cost=self.protection_cost,
            ipva_cost=self.ipva_cost,
            licensing_cost=self.licensing_cost,
            tax_cost=self.tax_cost,
            extra_km_rate=self.extra_km_rate,
            total_cost=self.total_cost,
            cost_per_km=self.cost_per_km,
            contract_months=self.contract_months,
            monthly_km=self.monthly_km,
            operation_severity=self.operation_severity,
            has_tracking=self.has_tracking,
            protection_plan_id=self.protection_plan_id,
            include_ipva=self.include_ipva,
            include_licensing=self.include_licensing,
            include_taxes=self.include_taxes,
            selic_bucket=SelicBucket(self.selic_bucket) if self.selic_bucket else None,
        )

    def to_dto(self) -> QuoteLine:
        from fleet_kernel.domain.quote import QuoteLine

        return QuoteLine(
            id=self.id,
            quote_id=self.quote_id,
            vehicle_id=self.vehicle_id,
            result=self.to_result(),
        )

    @classmethod
    def from_result(
        cls, result: QuoteResultVehicle, position: int = 0
    ) -> QuoteVehicleModel:
        return cls(
            vehicle_id=result.vehicle_id,
            position=position,
            contract_months=result.contract_months,
            monthly_km=result.monthly_km,
            operation_severity=result.operation_severity,
            has_tracking=result.has_tracking,
            protection_plan_id=result.protection_plan_id,
            include_ipva=result.include_ipva,
            include_licensing=result.include_licensing,
            include_taxes=result.include_taxes,
            selic_bucket=result.selic_bucket.value if result.selic_bucket else None,
            depreciation_cost=result.depreciation_cost,
            maintenance_cost=result.maintenance_cost,
            tracking_cost=result.tracking_cost,
            protection_cost=result.protection_cost,
            ipva_cost=result.ipva_cost,
            licensing_cost=result.licensing_cost,
            tax_cost=result.tax_cost,
            extra_km_rate=result.extra_km_rate,
            total_cost=result.total_cost,
            cost_per_km=result.cost_per_km,
        )
