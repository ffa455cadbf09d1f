"""
Tests for the append-only audit records and quote persistence mapping.

Status history entries and action log entries reject UPDATE and DELETE
through the ORM.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from fleet_kernel.domain.quote import QuoteActionLog, QuoteActionType
from fleet_kernel.domain.status import QuoteStatus, StatusHistoryEntry
from fleet_kernel.exceptions import ImmutabilityViolationError
from fleet_kernel.models.action_log import QuoteActionLogModel
from fleet_kernel.models.reference import TaxIndexModel
from fleet_kernel.models.status_history import QuoteStatusHistoryModel
from fleet_kernel.selectors.reference_selector import ReferenceSelector

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def make_history_row() -> QuoteStatusHistoryModel:
    return QuoteStatusHistoryModel.from_dto(StatusHistoryEntry(
        id=uuid4(),
        quote_id=uuid4(),
        previous_status=QuoteStatus.ORCAMENTO,
        new_status=QuoteStatus.PROPOSTA_GERADA,
        changed_by=uuid4(),
        changed_at=NOW,
    ))


def make_action_row() -> QuoteActionLogModel:
    return QuoteActionLogModel.from_dto(QuoteActionLog(
        id=uuid4(),
        quote_id=uuid4(),
        action_type=QuoteActionType.CREATED,
        actor_id=uuid4(),
        actor_name="Ana Vendas",
        action_at=NOW,
        details={"total_value": "1980.00"},
    ))


class TestStatusHistoryImmutability:
    def test_update_rejected(self, session):
        row = make_history_row()
        session.add(row)
        session.flush()

        row.observation = "edited"
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()

        assert exc_info.value.entity_type == "QuoteStatusHistory"

    def test_delete_rejected(self, session):
        row = make_history_row()
        session.add(row)
        session.flush()

        session.delete(row)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_dto_round_trip(self, session):
        row = make_history_row()
        session.add(row)
        session.flush()

        entry = row.to_dto()

        assert entry.previous_status is QuoteStatus.ORCAMENTO
        assert entry.changed_at == NOW


class TestActionLogImmutability:
    def test_update_rejected(self, session):
        row = make_action_row()
        session.add(row)
        session.flush()

        row.actor_name = "Outro"
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()

        assert exc_info.value.entity_type == "QuoteActionLog"

    def test_delete_rejected(self, session):
        row = make_action_row()
        session.add(row)
        session.flush()

        session.delete(row)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()


class TestReferenceSelector:
    def test_latest_tax_snapshot_wins(self, session):
        for selic, effective in (("11.0", NOW.replace(month=1)), ("9.9", NOW)):
            session.add(TaxIndexModel(
                ipca=Decimal("3.5"),
                igpm=Decimal("3.4"),
                spread=Decimal("4"),
                selic_month12=Decimal(selic),
                selic_month18=Decimal(selic),
                selic_month24=Decimal(selic),
                effective_at=effective,
            ))
        session.flush()

        snapshot = ReferenceSelector(session).latest_tax_snapshot()

        assert snapshot.selic_rates.month24 == Decimal("9.9")

    def test_unknown_plans_are_absent(self, session, reference_rows):
        plans = ReferenceSelector(session).get_protection_plans(
            [reference_rows.plan_id, uuid4()]
        )

        assert list(plans) == [reference_rows.plan_id]

    def test_vehicles_in_group(self, session, reference_rows):
        vehicles = ReferenceSelector(session).vehicles_in_group(reference_rows.group_id)

        assert [v.model for v in vehicles] == ["Cronos", "Kwid"]

    def test_calculation_config_falls_back_to_yaml(self, session):
        config = ReferenceSelector(session).get_calculation_config()

        assert config.base_rate == Decimal("0.35")
