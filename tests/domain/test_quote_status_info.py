"""Tests for status display metadata and parsing."""

import pytest

from fleet_kernel.domain.status import (
    INITIAL_STATUSES,
    STATUS_INFO,
    TERMINAL_STATUSES,
    WORKFLOW_ORDER,
    QuoteStatus,
    translate_status,
)
from fleet_kernel.exceptions import UnknownStatusError


class TestStatusInfo:
    def test_every_status_has_metadata(self):
        assert set(STATUS_INFO) == set(QuoteStatus)

    def test_steps_follow_workflow_order(self):
        assert [STATUS_INFO[s].step for s in WORKFLOW_ORDER] == list(
            range(len(WORKFLOW_ORDER))
        )

    def test_cancelled_has_no_step(self):
        assert STATUS_INFO[QuoteStatus.CANCELADO].step == -1
        assert QuoteStatus.CANCELADO not in WORKFLOW_ORDER

    def test_initial_and_terminal_sets(self):
        assert INITIAL_STATUSES == {QuoteStatus.DRAFT, QuoteStatus.ORCAMENTO}
        assert TERMINAL_STATUSES == {QuoteStatus.CONCLUIDO, QuoteStatus.CANCELADO}


class TestTranslateStatus:
    def test_known_code(self):
        assert translate_status("EM_VERIFICACAO") == "Em Verificação"
        assert translate_status(QuoteStatus.CONCLUIDO) == "Concluído"

    def test_unknown_code_passes_through(self):
        assert translate_status("ARQUIVADO") == "ARQUIVADO"


class TestParse:
    def test_stored_code(self):
        assert QuoteStatus.parse("draft") is QuoteStatus.DRAFT

    def test_enum_is_returned_as_is(self):
        assert QuoteStatus.parse(QuoteStatus.ENTREGA) is QuoteStatus.ENTREGA

    @pytest.mark.parametrize("code", ["DRAFT", "orcamento", ""])
    def test_codes_are_case_sensitive(self, code):
        with pytest.raises(UnknownStatusError):
            QuoteStatus.parse(code)
