"""
Module: fleet_engines.permissions
Responsibility:
    Decide whether an actor may edit or delete a quote.  The acting user
    is always passed in explicitly; there is no ambient current user.

Rule:
    The quote's creator may edit and delete it, and so may any manager or
    admin.  When the creator is unknown only managers and admins may.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
"""

from __future__ import annotations

from uuid import UUID

from fleet_kernel.domain.quote import Actor


def _is_owner_or_elevated(quote_created_by: UUID | None, actor: Actor) -> bool:
    if actor.is_elevated:
        return True
    return quote_created_by is not None and quote_created_by == actor.id


def can_edit_quote(quote_created_by: UUID | None, actor: Actor) -> bool:
    return _is_owner_or_elevated(quote_created_by, actor)


def can_delete_quote(quote_created_by: UUID | None, actor: Actor) -> bool:
    return _is_owner_or_elevated(quote_created_by, actor)
