"""Tests for authorization-gated quote deletion."""

from uuid import uuid4

import pytest

from fleet_kernel.domain.contract import ContractParameters
from fleet_kernel.domain.quote import (
    QuoteActionType,
    QuoteRequest,
    QuoteVehicleRequest,
)
from fleet_kernel.domain.status import QuoteStatus
from fleet_kernel.exceptions import QuoteNotFoundError, UnauthorizedQuoteActionError
from fleet_kernel.selectors.quote_selector import QuoteSelector
from fleet_kernel.services.quote_admin_service import QuoteAdminService
from fleet_kernel.services.quote_pricing_service import QuotePricingService
from fleet_kernel.services.quote_status_service import QuoteStatusService


@pytest.fixture
def quote(session, reference_rows, seller, deterministic_clock):
    request = QuoteRequest(
        vehicles=(
            QuoteVehicleRequest(reference_rows.vehicle_id),
            QuoteVehicleRequest(reference_rows.second_vehicle_id),
        ),
        global_params=ContractParameters(),
    )
    created = QuotePricingService(session, clock=deterministic_clock).create_quote(
        reference_rows.client_id, request, seller, title="Frota Norte",
    )
    deterministic_clock.advance(1)
    return created


@pytest.fixture
def service(session, deterministic_clock) -> QuoteAdminService:
    return QuoteAdminService(session, clock=deterministic_clock)


class TestDeleteQuote:
    def test_creator_deletes(self, session, service, quote, seller):
        entry = service.delete_quote(quote.id, seller)

        assert QuoteSelector(session).get(quote.id) is None
        assert entry.action_type is QuoteActionType.DELETED
        assert entry.actor_id == seller.id
        assert entry.quote_title == "Frota Norte"
        assert entry.details == {"status": "ORCAMENTO"}

    def test_snapshot_of_deleted_quote(self, service, quote, seller):
        entry = service.delete_quote(quote.id, seller)

        snapshot = entry.deleted_data
        assert snapshot["id"] == str(quote.id)
        assert snapshot["status"] == "ORCAMENTO"
        assert len(snapshot["vehicles"]) == 2
        assert snapshot["global_params"]["contract_months"] == 12

    def test_history_and_action_log_survive(self, session, service, quote, seller):
        QuoteStatusService(session).transition(
            quote.id, QuoteStatus.ORCAMENTO, QuoteStatus.CANCELADO, seller.id,
        )

        service.delete_quote(quote.id, seller)

        selector = QuoteSelector(session)
        assert len(selector.status_history(quote.id)) == 2
        assert [e.action_type for e in selector.action_logs(quote.id)] == [
            QuoteActionType.CREATED, QuoteActionType.DELETED,
        ]

    def test_manager_deletes(self, session, service, quote, manager):
        service.delete_quote(quote.id, manager)

        assert QuoteSelector(session).get(quote.id) is None

    def test_other_seller_is_denied(self, session, service, quote, other_seller, captured_logs):
        with pytest.raises(UnauthorizedQuoteActionError) as exc_info:
            service.delete_quote(quote.id, other_seller)

        assert exc_info.value.action == "delete"
        assert QuoteSelector(session).get(quote.id) is not None
        denied = [r for r in captured_logs() if r["message"] == "quote_action_denied"]
        assert denied[0]["actor_id"] == str(other_seller.id)

    def test_unknown_quote(self, service, seller):
        with pytest.raises(QuoteNotFoundError):
            service.delete_quote(uuid4(), seller)
