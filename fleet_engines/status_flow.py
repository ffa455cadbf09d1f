"""
Module: fleet_engines.status_flow
Responsibility:
    The quote status state machine: which transitions are legal, which
    statuses a user may pick next, how far along the workflow a quote is,
    and the pure application of a transition.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Persisting the new status (compare-and-swap) and the history entry is
    the job of ``fleet_kernel.services.quote_status_service``.

Transition rule (evaluated in order):
    0. Staying in the same status is never a transition.
    1. Moving to CANCELADO is allowed from every other status.
    2. Nothing else leaves CANCELADO or CONCLUIDO.
    3. Moving back to any earlier status is allowed.
    4. Moving forward is allowed only to the immediately next status.
    5. Everything else is rejected (skips and self-transitions).

Invariants enforced:
    - Purity: the timestamp of a history entry comes from the injected
      clock, never from ``datetime.now()``.
    - An illegal transition is returned as a rejection, never raised and
      never coerced to the nearest legal status.

Usage:
    from fleet_engines.status_flow import apply_transition, valid_next_statuses

    result = apply_transition(quote_id, current, next_status, actor_id, clock=clock)
    if not result.success:
        show(result.reason, result.allowed_next_statuses)
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID, uuid4

from fleet_kernel.domain.clock import Clock
from fleet_kernel.domain.status import (
    WORKFLOW_ORDER,
    QuoteStatus,
    StatusHistoryEntry,
    TransitionRejection,
    TransitionResult,
)
from fleet_kernel.logging_config import get_logger

logger = get_logger("engines.status_flow")

_CLOSED = frozenset({QuoteStatus.CANCELADO, QuoteStatus.CONCLUIDO})
_INDEX: dict[QuoteStatus, int] = {s: i for i, s in enumerate(WORKFLOW_ORDER)}


def is_valid_transition(current: QuoteStatus | str, next_status: QuoteStatus | str) -> bool:
    """True when ``current`` may move to ``next_status``."""
    current = QuoteStatus.parse(current)
    next_status = QuoteStatus.parse(next_status)

    # A repeated CANCELADO would only duplicate the history entry
    if next_status is current:
        return False
    if next_status is QuoteStatus.CANCELADO:
        return True
    if current in _CLOSED:
        return False

    current_index = _INDEX[current]
    next_index = _INDEX[next_status]
    if next_index < current_index:
        return True
    return next_index == current_index + 1


def valid_next_statuses(current: QuoteStatus | str) -> tuple[QuoteStatus, ...]:
    """Statuses reachable from ``current``, in workflow order, CANCELADO last."""
    current = QuoteStatus.parse(current)
    candidates = (*WORKFLOW_ORDER, QuoteStatus.CANCELADO)
    return tuple(
        s for s in candidates if is_valid_transition(current, s)
    )


def calculate_progress(status: QuoteStatus | str) -> int:
    """Workflow completion percentage, 0 to 100."""
    status = QuoteStatus.parse(status)
    if status is QuoteStatus.CANCELADO:
        return 0
    if status is QuoteStatus.CONCLUIDO:
        return 100
    ratio = Decimal(_INDEX[status]) * 100 / Decimal(len(WORKFLOW_ORDER) - 1)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_transition(
    quote_id: UUID,
    current: QuoteStatus | str,
    next_status: QuoteStatus | str,
    actor_id: UUID,
    observation: str | None = None,
    *,
    clock: Clock,
) -> TransitionResult:
    """Validate a transition and build its history entry.

    The result carries either the new status and the history entry to
    append, or an ILLEGAL_TRANSITION rejection naming both statuses and
    the legal alternatives.
    """
    current = QuoteStatus.parse(current)
    next_status = QuoteStatus.parse(next_status)

    if not is_valid_transition(current, next_status):
        allowed = valid_next_statuses(current)
        reason = (
            f"Cannot move quote from {current.value} to {next_status.value}; "
            f"allowed: {', '.join(s.value for s in allowed) or 'none'}"
        )
        logger.info(
            "status_transition_rejected",
            extra={
                "quote_id": str(quote_id),
                "current_status": current.value,
                "attempted_status": next_status.value,
            },
        )
        return TransitionResult(
            success=False,
            quote_id=quote_id,
            current_status=current,
            attempted_status=next_status,
            rejection=TransitionRejection.ILLEGAL_TRANSITION,
            reason=reason,
            allowed_next_statuses=allowed,
        )

    entry = StatusHistoryEntry(
        id=uuid4(),
        quote_id=quote_id,
        previous_status=current,
        new_status=next_status,
        changed_by=actor_id,
        changed_at=clock.now(),
        observation=observation,
    )
    return TransitionResult(
        success=True,
        quote_id=quote_id,
        current_status=current,
        attempted_status=next_status,
        updated_status=next_status,
        history_entry=entry,
    )
