"""
Engine and session management for the quote database.

PostgreSQL is the production backend (``postgresql+psycopg://...``).  It
runs at READ COMMITTED, where the compare-and-swap status update in
QuoteStatusService is enough to serialize concurrent transitions.  SQLite
is accepted for tests and local runs.

Connection settings come from the environment unless a URL is passed in:

    FLEET_DATABASE_URL      database URL (required for init_engine_from_env)
    FLEET_DB_ECHO           "1"/"true" to log SQL
    FLEET_DB_POOL_SIZE      pooled connections (PostgreSQL only)

Usage:
    init_engine_from_env()
    with session_scope() as session:
        QuoteStatusService(session).transition(...)
"""

import atexit
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fleet_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

DATABASE_URL_ENV = "FLEET_DATABASE_URL"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        url = os.environ.get(DATABASE_URL_ENV)
        if not url:
            raise RuntimeError(f"{DATABASE_URL_ENV} is not set")
        return cls(
            url=url,
            echo=os.environ.get("FLEET_DB_ECHO", "").lower() in _TRUE_VALUES,
            pool_size=int(os.environ.get("FLEET_DB_POOL_SIZE", cls.pool_size)),
        )


class _State:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None


def _sqlite_options(url: URL) -> dict[str, Any]:
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    # One shared connection, otherwise every checkout sees an empty database
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


def _postgres_options(settings: DatabaseSettings) -> dict[str, Any]:
    return {
        "pool_size": settings.pool_size,
        "max_overflow": settings.max_overflow,
        "pool_timeout": settings.pool_timeout,
        "pool_recycle": settings.pool_recycle,
        "pool_pre_ping": True,
        "isolation_level": "READ COMMITTED",
    }


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    # pysqlite opens transactions lazily and breaks SAVEPOINT; emit BEGIN ourselves.
    @event.listens_for(engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


def init_engine(settings: DatabaseSettings) -> Engine:
    """Create the process-wide engine and session factory, replacing any previous one."""
    reset_engine()

    url = make_url(settings.url)
    backend = url.get_backend_name()
    if backend == "sqlite":
        engine = create_engine(url, echo=settings.echo, **_sqlite_options(url))
        _install_sqlite_transaction_hooks(engine)
    else:
        engine = create_engine(url, echo=settings.echo, **_postgres_options(settings))

    _State.engine = engine
    _State.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "backend": backend,
            "database": url.database,
            "pool_size": None if backend == "sqlite" else settings.pool_size,
        },
    )
    return engine


def init_engine_from_url(database_url: str, **options: Any) -> Engine:
    return init_engine(DatabaseSettings(url=database_url, **options))


def init_engine_from_env() -> Engine:
    return init_engine(DatabaseSettings.from_env())


def get_engine() -> Engine:
    if _State.engine is None:
        raise RuntimeError("Database engine not initialized; call init_engine() first.")
    return _State.engine


def get_session() -> Session:
    if _State.sessions is None:
        raise RuntimeError("Database engine not initialized; call init_engine() first.")
    return _State.sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    One unit of work: commit on success, roll back and re-raise on error.

    Services only flush, so everything done inside the block (quote lines,
    status, history and action log rows) lands in a single commit.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from fleet_kernel.db.base import Base
    import fleet_kernel.models  # noqa: F401  registers the tables

    return Base.metadata


def create_tables() -> None:
    _metadata().create_all(get_engine())


def drop_tables() -> None:
    _metadata().drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the current engine, if any."""
    if _State.engine is not None:
        _State.engine.dispose()
    _State.engine = None
    _State.sessions = None


atexit.register(reset_engine)
