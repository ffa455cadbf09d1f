"""
fleet_kernel.services.quote_admin_service -- Authorization-gated quote deletion.

Responsibility:
    Deletes a saved quote on behalf of an explicit actor, leaving an
    action log entry that keeps a snapshot of what was deleted.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - Only the creator, a manager or an admin may delete a quote.
    - The status history of a deleted quote is kept.

Failure modes:
    - QuoteNotFoundError if the quote does not exist.
    - UnauthorizedQuoteActionError if the actor may not delete it.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from fleet_engines.permissions import can_delete_quote
from fleet_kernel.domain.quote import Actor, QuoteActionLog, QuoteActionType
from fleet_kernel.exceptions import QuoteNotFoundError, UnauthorizedQuoteActionError
from fleet_kernel.logging_config import LogContext, get_logger
from fleet_kernel.models.action_log import QuoteActionLogModel
from fleet_kernel.models.quote import QuoteModel
from fleet_kernel.services.base import BaseService

logger = get_logger("services.quote_admin")


class QuoteAdminService(BaseService[QuoteModel]):
    """Administrative operations on saved quotes."""

    def delete_quote(self, quote_id: UUID, actor: Actor) -> QuoteActionLog:
        """Delete a quote and return the action log entry recording it."""
        model = self._session.get(QuoteModel, quote_id)
        if model is None:
            raise QuoteNotFoundError(str(quote_id))

        with LogContext.bind(quote_id=quote_id, actor_id=actor.id):
            if not can_delete_quote(model.created_by_id, actor):
                logger.warning("quote_action_denied", extra={"action": "delete"})
                raise UnauthorizedQuoteActionError(str(quote_id), str(actor.id), "delete")

            log_entry = QuoteActionLog(
                id=uuid4(),
                quote_id=quote_id,
                action_type=QuoteActionType.DELETED,
                actor_id=actor.id,
                actor_name=actor.name,
                action_at=self._clock.now(),
                quote_title=model.title,
                details={"status": model.status},
                deleted_data=model.deleted_snapshot(),
            )
            self._session.add(QuoteActionLogModel.from_dto(log_entry))
            self._session.delete(model)
            self._session.flush()

            logger.info("quote_deleted", extra={"status": log_entry.details["status"]})

        return log_entry
