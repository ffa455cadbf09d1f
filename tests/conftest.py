"""
Pytest fixtures for the fleet quote test suite.

Provides:
- Structured logging configured once per session, plus log capture
- A deterministic clock
- Database sessions wrapped in a rolled-back transaction
- Reference data rows (group, vehicle, plan, client, tax snapshot)

Environment Variables:
- FLEET_TEST_DATABASE_URL: database URL for service tests.
  If not set, an in-memory SQLite database is used.
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from fleet_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from fleet_kernel.domain.clock import DeterministicClock
from fleet_kernel.domain.contract import ContractParameters
from fleet_kernel.domain.quote import Actor, UserRole
from fleet_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from fleet_kernel.models.reference import (
    ClientModel,
    ProtectionPlanModel,
    TaxIndexModel,
    VehicleGroupModel,
    VehicleModel,
)

DEFAULT_TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Ensure LogContext is clean for each test."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture fleet_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "quote_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fleet_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 3, 1, 9, 0, 0, tzinfo=UTC))


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    engine = init_engine_from_url(
        os.environ.get("FLEET_TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)
    )
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine):
    """Session whose work is rolled back after each test.

    Commits inside the test become SAVEPOINT releases on the outer
    connection-level transaction.
    """
    connection = db_engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        join_transaction_mode="create_savepoint",
        expire_on_commit=False,
    )
    yield session
    session.close()
    transaction.rollback()
    connection.close()


# =============================================================================
# Actors
# =============================================================================


@pytest.fixture
def seller() -> Actor:
    return Actor(id=uuid4(), name="Ana Vendas", role=UserRole.USER)


@pytest.fixture
def other_seller() -> Actor:
    return Actor(id=uuid4(), name="Bruno Vendas", role=UserRole.USER)


@pytest.fixture
def manager() -> Actor:
    return Actor(id=uuid4(), name="Carla Gerente", role=UserRole.MANAGER)


# =============================================================================
# Reference data
# =============================================================================


@dataclass
class ReferenceRows:
    group_id: UUID
    vehicle_id: UUID
    second_vehicle_id: UUID
    plan_id: UUID
    client_id: UUID


@pytest.fixture
def reference_rows(session) -> ReferenceRows:
    """
    One group, two vehicles, one protection plan and one client.

    With default parameters (12 months, 3000 km, severity 3) the first
    vehicle (60 000.00) prices at 1 680.00 depreciation + 300.00
    maintenance = 1 980.00; the second (40 000.00) at 1 120.00 + 300.00 =
    1 420.00.
    """
    group = VehicleGroupModel(
        id=uuid4(),
        code="B",
        name="Compacto",
        revision_km=10000,
        revision_cost=Decimal("500.00"),
        tire_km=40000,
        tire_cost=Decimal("2000.00"),
        ipva_rate=Decimal("0.04"),
        licensing_cost=Decimal("240.00"),
    )
    vehicle = VehicleModel(
        id=uuid4(),
        brand="Fiat",
        model="Cronos",
        year=2024,
        value=Decimal("60000.00"),
        group_id=group.id,
    )
    second = VehicleModel(
        id=uuid4(),
        brand="Renault",
        model="Kwid",
        year=2024,
        value=Decimal("40000.00"),
        group_id=group.id,
    )
    plan = ProtectionPlanModel(
        id=uuid4(),
        name="Proteção Básica",
        type="basic",
        monthly_cost=Decimal("150.00"),
    )
    client = ClientModel(
        id=uuid4(),
        name="Transportes Sul Ltda",
        type="PJ",
        document="12345678000190",
    )
    session.add_all([group, vehicle, second, plan, client])
    session.flush()
    return ReferenceRows(
        group_id=group.id,
        vehicle_id=vehicle.id,
        second_vehicle_id=second.id,
        plan_id=plan.id,
        client_id=client.id,
    )


@pytest.fixture
def tax_snapshot_row(session) -> TaxIndexModel:
    """SELIC 9.9% for every bucket, spread 4%: 60 000.00 costs 695.00/month."""
    row = TaxIndexModel(
        ipca=Decimal("3.50"),
        igpm=Decimal("3.40"),
        spread=Decimal("4.0"),
        selic_month12=Decimal("9.9"),
        selic_month18=Decimal("9.9"),
        selic_month24=Decimal("9.9"),
        effective_at=datetime(2024, 1, 1, tzinfo=UTC),
    )
    session.add(row)
    session.flush()
    return row


@pytest.fixture
def default_params() -> ContractParameters:
    return ContractParameters()
