"""
Module: fleet_kernel.selectors.quote_selector
Responsibility: Read access to saved quotes, their status history and
    action logs.

Architecture position: Kernel > Selectors.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from fleet_kernel.domain.quote import Quote, QuoteActionLog
from fleet_kernel.domain.status import QuoteStatus, StatusHistoryEntry
from fleet_kernel.exceptions import QuoteNotFoundError
from fleet_kernel.models.action_log import QuoteActionLogModel
from fleet_kernel.models.quote import QuoteModel
from fleet_kernel.models.status_history import QuoteStatusHistoryModel
from fleet_kernel.selectors.base import BaseSelector


class QuoteSelector(BaseSelector[QuoteModel]):
    """Quote lookups returning domain DTOs."""

    def get(self, quote_id: UUID) -> Quote | None:
        model = self.session.get(QuoteModel, quote_id)
        return model.to_dto() if model is not None else None

    def require(self, quote_id: UUID) -> Quote:
        quote = self.get(quote_id)
        if quote is None:
            raise QuoteNotFoundError(str(quote_id))
        return quote

    def current_status(self, quote_id: UUID) -> QuoteStatus | None:
        """Status as stored right now, bypassing the identity map."""
        status = self.session.scalar(
            select(QuoteModel.status).where(QuoteModel.id == quote_id)
        )
        return QuoteStatus(status) if status is not None else None

    def list_for_client(self, client_id: UUID) -> list[Quote]:
        models = self.session.scalars(
            select(QuoteModel)
            .where(QuoteModel.client_id == client_id)
            .order_by(QuoteModel.created_at.desc())
        )
        return [m.to_dto() for m in models]

    def list_by_status(self, status: QuoteStatus) -> list[Quote]:
        models = self.session.scalars(
            select(QuoteModel)
            .where(QuoteModel.status == status.value)
            .order_by(QuoteModel.created_at.desc())
        )
        return [m.to_dto() for m in models]

    def status_history(self, quote_id: UUID) -> list[StatusHistoryEntry]:
        """History entries, newest first."""
        models = self.session.scalars(
            select(QuoteStatusHistoryModel)
            .where(QuoteStatusHistoryModel.quote_id == quote_id)
            .order_by(QuoteStatusHistoryModel.changed_at.desc())
        )
        return [m.to_dto() for m in models]

    def action_logs(self, quote_id: UUID) -> list[QuoteActionLog]:
        """Action log entries, oldest first."""
        models = self.session.scalars(
            select(QuoteActionLogModel)
            .where(QuoteActionLogModel.quote_id == quote_id)
            .order_by(QuoteActionLogModel.action_at)
        )
        return [m.to_dto() for m in models]
