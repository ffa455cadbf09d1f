"""
fleet_kernel.services.quote_status_service -- Persisting status transitions.

Responsibility:
    Moves a saved quote through the status workflow.  The pure engine
    (``fleet_engines.status_flow``) decides legality; this service applies
    the change with a compare-and-swap on the status column and appends
    the history entry.

Architecture position:
    Kernel > Services.  May import from domain/, models/, selectors/ and
    fleet_engines.

Invariants enforced:
    - Compare-and-swap: ``UPDATE quotes SET status = :new WHERE id = :id
      AND status = :expected``.  Zero rows updated means another actor
      moved the quote first; the result is a CONCURRENT_MODIFICATION
      rejection, never a silent overwrite.
    - Illegal transitions are returned as ILLEGAL_TRANSITION rejections
      carrying the legal alternatives.
    - The history entry is written inside a SAVEPOINT.  If that write
      fails the status change stands, the failure is logged as
      ``status_history_write_failed`` and the result reports
      ``history_recorded=False``.

Failure modes:
    - QuoteNotFoundError if the quote does not exist.
    - UnknownStatusError for a status code outside the workflow.
    - IllegalTransitionError / ConcurrentModificationError from
      ``transition_or_raise`` only.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from fleet_engines.status_flow import apply_transition, valid_next_statuses
from fleet_kernel.domain.status import (
    QuoteStatus,
    TransitionRejection,
    TransitionResult,
)
from fleet_kernel.exceptions import (
    ConcurrentModificationError,
    IllegalTransitionError,
    QuoteNotFoundError,
)
from fleet_kernel.logging_config import LogContext, get_logger
from fleet_kernel.models.quote import QuoteModel
from fleet_kernel.models.status_history import QuoteStatusHistoryModel
from fleet_kernel.selectors.quote_selector import QuoteSelector
from fleet_kernel.services.base import BaseService

logger = get_logger("services.quote_status")


class QuoteStatusService(BaseService[QuoteModel]):
    """Applies workflow transitions to saved quotes."""

    def _conflict(
        self,
        quote_id: UUID,
        expected: QuoteStatus,
        attempted: QuoteStatus,
        actual: QuoteStatus,
    ) -> TransitionResult:
        logger.warning(
            "status_transition_conflict",
            extra={
                "expected_status": expected.value,
                "actual_status": actual.value,
                "attempted_status": attempted.value,
            },
        )
        return TransitionResult(
            success=False,
            quote_id=quote_id,
            current_status=actual,
            attempted_status=attempted,
            rejection=TransitionRejection.CONCURRENT_MODIFICATION,
            reason=(
                f"Quote status changed from {expected.value} to {actual.value} "
                f"before the move to {attempted.value} was applied"
            ),
            allowed_next_statuses=valid_next_statuses(actual),
        )

    def transition(
        self,
        quote_id: UUID,
        expected_status: QuoteStatus | str,
        new_status: QuoteStatus | str,
        actor_id: UUID,
        observation: str | None = None,
    ) -> TransitionResult:
        """Move a quote from ``expected_status`` to ``new_status``.

        ``expected_status`` is the status the caller last read; the change
        is applied only if the quote is still in it.
        """
        expected = QuoteStatus.parse(expected_status)
        attempted = QuoteStatus.parse(new_status)
        selector = QuoteSelector(self._session)

        with LogContext.bind(quote_id=quote_id, actor_id=actor_id):
            stored = selector.current_status(quote_id)
            if stored is None:
                raise QuoteNotFoundError(str(quote_id))
            if stored is not expected:
                return self._conflict(quote_id, expected, attempted, stored)

            result = apply_transition(
                quote_id, expected, attempted, actor_id, observation, clock=self._clock,
            )
            if not result.success:
                return result

            entry = result.history_entry
            cursor = self._session.execute(
                update(QuoteModel)
                .where(QuoteModel.id == quote_id, QuoteModel.status == expected.value)
                .values(
                    status=attempted.value,
                    updated_at=entry.changed_at,
                    updated_by_id=actor_id,
                )
            )
            if cursor.rowcount == 0:
                actual = selector.current_status(quote_id)
                if actual is None:
                    raise QuoteNotFoundError(str(quote_id))
                return self._conflict(quote_id, expected, attempted, actual)

            history_recorded = True
            try:
                with self._session.begin_nested():
                    self._session.add(QuoteStatusHistoryModel.from_dto(entry))
            except SQLAlchemyError:
                history_recorded = False
                logger.error(
                    "status_history_write_failed",
                    extra={
                        "previous_status": expected.value,
                        "new_status": attempted.value,
                        "history_entry_id": str(entry.id),
                    },
                    exc_info=True,
                )

            logger.info(
                "status_transition_applied",
                extra={
                    "previous_status": expected.value,
                    "new_status": attempted.value,
                    "history_recorded": history_recorded,
                },
            )

        return replace(result, history_recorded=history_recorded)

    def transition_or_raise(
        self,
        quote_id: UUID,
        expected_status: QuoteStatus | str,
        new_status: QuoteStatus | str,
        actor_id: UUID,
        observation: str | None = None,
    ) -> TransitionResult:
        """Like ``transition`` but raises on rejection.

        Raises:
            IllegalTransitionError: The workflow rule forbids the move.
            ConcurrentModificationError: The quote left ``expected_status``.
        """
        result = self.transition(
            quote_id, expected_status, new_status, actor_id, observation,
        )
        if result.rejection is TransitionRejection.ILLEGAL_TRANSITION:
            raise IllegalTransitionError(
                str(quote_id),
                result.current_status.value,
                result.attempted_status.value,
                tuple(s.value for s in result.allowed_next_statuses),
            )
        if result.rejection is TransitionRejection.CONCURRENT_MODIFICATION:
            raise ConcurrentModificationError(
                str(quote_id),
                QuoteStatus.parse(expected_status).value,
                result.current_status.value,
            )
        return result
