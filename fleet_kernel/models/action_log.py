"""
Module: fleet_kernel.models.action_log
Responsibility: ORM persistence for the quote action log (who created,
    repriced or deleted a quote, and when).  Status changes are recorded
    in the status history instead.

Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: ORM listeners reject UPDATE and DELETE.
    - A deletion entry carries a JSON snapshot of the deleted quote.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, CheckConstraint, Index, String, event
from sqlalchemy.orm import Mapped, mapped_column

from fleet_kernel.db.base import Base, UTCDateTime, UUIDString
from fleet_kernel.exceptions import ImmutabilityViolationError

if TYPE_CHECKING:
    from fleet_kernel.domain.quote import QuoteActionLog


class QuoteActionLogModel(Base):
    """One action performed on a quote. Append-only."""

    __tablename__ = "quote_action_logs"

    __table_args__ = (
        CheckConstraint(
            "action_type IN ('created', 'repriced', 'deleted')",
            name="ck_quote_action_logs_valid_type",
        ),
        Index("ix_quote_action_logs_quote_action_at", "quote_id", "action_at"),
    )

    quote_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    quote_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    action_type: Mapped[str] = mapped_column(String(20), nullable=False)
    actor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    actor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    action_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    deleted_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    def to_dto(self) -> QuoteActionLog:
        from fleet_kernel.domain.quote import QuoteActionLog, QuoteActionType

        return QuoteActionLog(
            id=self.id,
            quote_id=self.quote_id,
            action_type=QuoteActionType(self.action_type),
            actor_id=self.actor_id,
            actor_name=self.actor_name,
            action_at=self.action_at,
            quote_title=self.quote_title,
            details=dict(self.details or {}),
            deleted_data=self.deleted_data,
        )

    @classmethod
    def from_dto(cls, dto: QuoteActionLog) -> QuoteActionLogModel:
        return cls(
            id=dto.id,
            quote_id=dto.quote_id,
            quote_title=dto.quote_title,
            action_type=dto.action_type.value,
            actor_id=dto.actor_id,
            actor_name=dto.actor_name,
            action_at=dto.action_at,
            details=dto.details,
            deleted_data=dto.deleted_data,
        )


@event.listens_for(QuoteActionLogModel, "before_update")
def prevent_action_log_update(mapper, connection, target):
    """Prevent updates to action log entries."""
    raise ImmutabilityViolationError(
        entity_type="QuoteActionLog",
        entity_id=str(target.id),
        reason="Action log entries are immutable -- cannot modify",
    )


@event.listens_for(QuoteActionLogModel, "before_delete")
def prevent_action_log_delete(mapper, connection, target):
    """Prevent deletion of action log entries."""
    raise ImmutabilityViolationError(
        entity_type="QuoteActionLog",
        entity_id=str(target.id),
        reason="Action log entries are immutable -- cannot delete",
    )
