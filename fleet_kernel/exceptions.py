"""
Typed Exception Hierarchy for the Fleet Quote Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A quote that fails to price or a status change that is refused must tell
the caller precisely WHAT went wrong, so the UI can point at the offending
field or offer the legal next statuses instead of a generic failure.

Every error:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA (field names, statuses, reference ids)

Example:
    try:
        result = compute_vehicle_cost(vehicle, group, params, plan, taxes, config)
    except ValidationError as e:
        for err in e.field_errors:
            form.mark_invalid(err["field"], err["constraint"])

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FleetQuoteError (base)
    |
    +-- QuoteInputError
    |   +-- ValidationError
    |
    +-- ReferenceDataError
    |   +-- MissingReferenceDataError
    |
    +-- WorkflowError
    |   +-- IllegalTransitionError
    |   +-- UnknownStatusError
    |
    +-- ConcurrencyError
    |   +-- ConcurrentModificationError
    |
    +-- QuoteError
    |   +-- QuoteNotFoundError
    |   +-- UnauthorizedQuoteActionError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                       | When Raised
--------------|----------------------------|------------------------------------
Input         | VALIDATION_ERROR           | Out-of-range pricing input
--------------|----------------------------|------------------------------------
Reference     | MISSING_REFERENCE_DATA     | Group / tax snapshot / vehicle absent
--------------|----------------------------|------------------------------------
Workflow      | ILLEGAL_TRANSITION         | Status change violates the flow rule
              | UNKNOWN_STATUS             | Status code is not part of the flow
--------------|----------------------------|------------------------------------
Concurrency   | CONCURRENT_MODIFICATION    | Stored status no longer matches
--------------|----------------------------|------------------------------------
Quote         | QUOTE_NOT_FOUND            | Quote id does not exist
              | UNAUTHORIZED_QUOTE_ACTION  | Actor may not edit/delete the quote
--------------|----------------------------|------------------------------------
Immutability  | IMMUTABILITY_VIOLATION     | Update/delete of an audit record

The optional-component condition (protection plan set but not found) is
NOT an exception: it is recovered locally and reported as an
``OptionalComponentUnavailable`` warning on the pricing result (see
``fleet_kernel.domain.quote``).
"""

from __future__ import annotations

from typing import Any


class FleetQuoteError(Exception):
    """
    Base exception for all fleet quote errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "FLEET_QUOTE_ERROR"


# Input-related exceptions


class QuoteInputError(FleetQuoteError):
    """Base exception for malformed pricing input."""

    code: str = "QUOTE_INPUT_ERROR"


class ValidationError(QuoteInputError):
    """
    Pricing input is malformed or out of range.

    Carries every offending field so a form can flag all of them at once.
    Each entry in ``field_errors`` is a dict with ``field``, ``constraint``
    and ``value`` keys.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, field_errors: list[dict[str, Any]]):
        self.field_errors = field_errors
        details = "; ".join(
            f"{e['field']} {e['constraint']} (got {e['value']!r})"
            for e in field_errors
        )
        super().__init__(
            f"Invalid quote input, {len(field_errors)} error(s): {details}"
        )

    @property
    def fields(self) -> tuple[str, ...]:
        """Names of the offending fields, in detection order."""
        return tuple(e["field"] for e in self.field_errors)


# Reference data exceptions


class ReferenceDataError(FleetQuoteError):
    """Base exception for reference data problems."""

    code: str = "REFERENCE_DATA_ERROR"


class MissingReferenceDataError(ReferenceDataError):
    """
    A record required for a mandatory cost component is absent.

    Raised for a missing vehicle group (maintenance cannot be priced) or a
    missing tax snapshot when the financial cost is requested.  The
    computation aborts instead of defaulting to zero.
    """

    code: str = "MISSING_REFERENCE_DATA"

    def __init__(self, reference_type: str, reference_id: str | None, reason: str = ""):
        self.reference_type = reference_type
        self.reference_id = reference_id
        self.reason = reason
        message = f"Missing reference data: {reference_type}"
        if reference_id is not None:
            message += f" {reference_id}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


# Workflow exceptions


class WorkflowError(FleetQuoteError):
    """Base exception for status workflow errors."""

    code: str = "WORKFLOW_ERROR"


class IllegalTransitionError(WorkflowError):
    """
    Requested status change violates the workflow rule.

    Never coerced to the nearest legal transition: the caller receives the
    current status, the attempted status and the legal alternatives.
    """

    code: str = "ILLEGAL_TRANSITION"

    def __init__(
        self,
        quote_id: str,
        current_status: str,
        attempted_status: str,
        allowed_statuses: tuple[str, ...] = (),
    ):
        self.quote_id = quote_id
        self.current_status = current_status
        self.attempted_status = attempted_status
        self.allowed_statuses = allowed_statuses
        super().__init__(
            f"Illegal status transition for quote {quote_id}: "
            f"{current_status} -> {attempted_status} "
            f"(allowed: {', '.join(allowed_statuses) or 'none'})"
        )


class UnknownStatusError(WorkflowError):
    """Status code is not part of the quote workflow."""

    code: str = "UNKNOWN_STATUS"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Unknown quote status: {status!r}")


# Concurrency exceptions


class ConcurrencyError(FleetQuoteError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class ConcurrentModificationError(ConcurrencyError):
    """
    Compare-and-swap on the quote status failed.

    The stored status no longer matches the status the caller read, so
    another actor moved the quote first.  Distinct from
    ``IllegalTransitionError``: retrying after a re-read may succeed.
    """

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, quote_id: str, expected_status: str, actual_status: str | None):
        self.quote_id = quote_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(
            f"Concurrent modification on quote {quote_id}: "
            f"expected status {expected_status}, found {actual_status}"
        )


# Quote exceptions


class QuoteError(FleetQuoteError):
    """Base exception for quote aggregate errors."""

    code: str = "QUOTE_ERROR"


class QuoteNotFoundError(QuoteError):
    """Quote with given ID was not found."""

    code: str = "QUOTE_NOT_FOUND"

    def __init__(self, quote_id: str):
        self.quote_id = quote_id
        super().__init__(f"Quote not found: {quote_id}")


class UnauthorizedQuoteActionError(QuoteError):
    """Actor is not allowed to perform the action on the quote."""

    code: str = "UNAUTHORIZED_QUOTE_ACTION"

    def __init__(self, quote_id: str, actor_id: str, action: str):
        self.quote_id = quote_id
        self.actor_id = actor_id
        self.action = action
        super().__init__(
            f"Actor {actor_id} is not allowed to {action} quote {quote_id}"
        )


# Immutability exceptions


class ImmutabilityError(FleetQuoteError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an append-only record.

    Status history entries and action logs are never mutated or deleted.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
