"""
Module: fleet_kernel.models.status_history
Responsibility: ORM persistence for quote status history entries.

Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: ORM listeners reject UPDATE and DELETE.
    - quote_id is a plain indexed column, not a foreign key: the history of
      a deleted quote is kept.

Failure modes:
    - ImmutabilityViolationError on UPDATE/DELETE through the ORM.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Index, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from fleet_kernel.db.base import Base, UTCDateTime, UUIDString
from fleet_kernel.exceptions import ImmutabilityViolationError

if TYPE_CHECKING:
    from fleet_kernel.domain.status import StatusHistoryEntry


class QuoteStatusHistoryModel(Base):
    """One status transition of a quote. Append-only."""

    __tablename__ = "quote_status_history"

    __table_args__ = (
        Index("ix_quote_status_history_quote_changed", "quote_id", "changed_at"),
    )

    quote_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    previous_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    new_status: Mapped[str] = mapped_column(String(32), nullable=False)
    changed_by: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    observation: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<QuoteStatusHistory quote={self.quote_id} "
            f"{self.previous_status} -> {self.new_status}>"
        )

    def to_dto(self) -> StatusHistoryEntry:
        from fleet_kernel.domain.status import QuoteStatus, StatusHistoryEntry

        return StatusHistoryEntry(
            id=self.id,
            quote_id=self.quote_id,
            previous_status=(
                QuoteStatus(self.previous_status) if self.previous_status else None
            ),
            new_status=QuoteStatus(self.new_status),
            changed_by=self.changed_by,
            changed_at=self.changed_at,
            observation=self.observation,
        )

    @classmethod
    def from_dto(cls, dto: StatusHistoryEntry) -> QuoteStatusHistoryModel:
        return cls(
            id=dto.id,
            quote_id=dto.quote_id,
            previous_status=dto.previous_status.value if dto.previous_status else None,
            new_status=dto.new_status.value,
            changed_by=dto.changed_by,
            changed_at=dto.changed_at,
            observation=dto.observation,
        )


@event.listens_for(QuoteStatusHistoryModel, "before_update")
def prevent_status_history_update(mapper, connection, target):
    """Prevent updates to status history entries."""
    raise ImmutabilityViolationError(
        entity_type="QuoteStatusHistory",
        entity_id=str(target.id),
        reason="Status history entries are immutable -- cannot modify",
    )


@event.listens_for(QuoteStatusHistoryModel, "before_delete")
def prevent_status_history_delete(mapper, connection, target):
    """Prevent deletion of status history entries."""
    raise ImmutabilityViolationError(
        entity_type="QuoteStatusHistory",
        entity_id=str(target.id),
        reason="Status history entries are immutable -- cannot delete",
    )
