"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer.  All concrete services receive a
    SQLAlchemy ``Session`` that they use via ``session.flush()`` -- never
    ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell around the pure engines.

Invariants enforced:
    Transaction boundaries: services flush within the caller's
    transaction and never commit or rollback themselves.  The caller
    (``session_scope()`` or the test harness) owns commit/rollback.
    Savepoints (``session.begin_nested()``) are allowed for isolating a
    best-effort write.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from fleet_kernel.db.base import Base
from fleet_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.  Time comes from the injected ``Clock``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    @property
    def session(self) -> Session:
        return self._session
