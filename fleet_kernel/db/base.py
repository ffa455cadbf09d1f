"""
Declarative base and column types shared by every quote table.

* Primary keys are uuid4 values stored as 36-character strings, so the
  same schema runs on PostgreSQL and SQLite.
* ``Decimal`` attributes map to Numeric(38, 9).  Money is never a float.
* Timestamps are always timezone-aware UTC.  They are written by the
  services from their injected clock, not by the database, so a test
  clock controls the stored values.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID stored as text; converted back to ``uuid.UUID`` on load."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class UTCDateTime(TypeDecorator):
    """Aware datetime column. Naive values are rejected on write."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"naive datetime not allowed: {value!r}")
        return value.astimezone(UTC)

    def process_result_value(self, value, dialect):
        # SQLite drops the offset
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: UTCDateTime(),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Mutable record that remembers who created it and who touched it last."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    created_by_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    updated_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
