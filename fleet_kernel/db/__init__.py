"""Database layer: declarative base and engine/session management."""

from fleet_kernel.db.base import Base, TrackedBase, UTCDateTime, UUIDString
from fleet_kernel.db.engine import (
    DatabaseSettings,
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine,
    init_engine_from_env,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "Base",
    "TrackedBase",
    "UUIDString",
    "UTCDateTime",
    "DatabaseSettings",
    "init_engine",
    "init_engine_from_env",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
]
