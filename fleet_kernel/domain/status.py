"""
Quote status workflow types (``fleet_kernel.domain.status``).

Responsibility
--------------
Pure value objects for the quote lifecycle: the ordered status list,
display metadata, the append-only history entry and the result of a
transition attempt.  The transition rule itself lives in
``fleet_engines.status_flow``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``WORKFLOW_ORDER`` is the single source of status ordering.
  ``CANCELADO`` is deliberately absent from it: it has no position.
* ``StatusHistoryEntry`` is created exactly once per successful
  transition and is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from fleet_kernel.exceptions import UnknownStatusError


class QuoteStatus(str, Enum):
    """Quote lifecycle states."""

    DRAFT = "draft"
    ORCAMENTO = "ORCAMENTO"
    PROPOSTA_GERADA = "PROPOSTA_GERADA"
    EM_VERIFICACAO = "EM_VERIFICACAO"
    APROVADA = "APROVADA"
    CONTRATO_GERADO = "CONTRATO_GERADO"
    ASSINATURA_CLIENTE = "ASSINATURA_CLIENTE"
    ASSINATURA_DIRETORIA = "ASSINATURA_DIRETORIA"
    AGENDAMENTO_ENTREGA = "AGENDAMENTO_ENTREGA"
    ENTREGA = "ENTREGA"
    CONCLUIDO = "CONCLUIDO"
    CANCELADO = "CANCELADO"

    @classmethod
    def parse(cls, value: str | QuoteStatus) -> QuoteStatus:
        """Strict conversion from a stored or submitted status code."""
        if isinstance(value, QuoteStatus):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownStatusError(str(value)) from None


WORKFLOW_ORDER: tuple[QuoteStatus, ...] = (
    QuoteStatus.DRAFT,
    QuoteStatus.ORCAMENTO,
    QuoteStatus.PROPOSTA_GERADA,
    QuoteStatus.EM_VERIFICACAO,
    QuoteStatus.APROVADA,
    QuoteStatus.CONTRATO_GERADO,
    QuoteStatus.ASSINATURA_CLIENTE,
    QuoteStatus.ASSINATURA_DIRETORIA,
    QuoteStatus.AGENDAMENTO_ENTREGA,
    QuoteStatus.ENTREGA,
    QuoteStatus.CONCLUIDO,
)

INITIAL_STATUSES: frozenset[QuoteStatus] = frozenset({
    QuoteStatus.DRAFT,
    QuoteStatus.ORCAMENTO,
})

TERMINAL_STATUSES: frozenset[QuoteStatus] = frozenset({
    QuoteStatus.CONCLUIDO,
    QuoteStatus.CANCELADO,
})


@dataclass(frozen=True)
class StatusInfo:
    """Display metadata for a status."""

    label: str
    short_label: str
    description: str
    step: int


STATUS_INFO: dict[QuoteStatus, StatusInfo] = {
    QuoteStatus.DRAFT: StatusInfo(
        "Rascunho", "Rascunho", "Orçamento em estado de rascunho", 0,
    ),
    QuoteStatus.ORCAMENTO: StatusInfo(
        "Orçamento", "Orçamento", "Orçamento inicial criado", 1,
    ),
    QuoteStatus.PROPOSTA_GERADA: StatusInfo(
        "Proposta Gerada", "Proposta",
        "Proposta formal gerada e pronta para envio", 2,
    ),
    QuoteStatus.EM_VERIFICACAO: StatusInfo(
        "Em Verificação", "Verificação", "Proposta em análise pelo cliente", 3,
    ),
    QuoteStatus.APROVADA: StatusInfo(
        "Aprovada", "Aprovada", "Proposta aprovada pelo cliente", 4,
    ),
    QuoteStatus.CONTRATO_GERADO: StatusInfo(
        "Contrato Gerado", "Contrato",
        "Contrato formal gerado e pronto para assinatura", 5,
    ),
    QuoteStatus.ASSINATURA_CLIENTE: StatusInfo(
        "Assinatura do Cliente", "Ass. Cliente",
        "Aguardando assinatura do cliente", 6,
    ),
    QuoteStatus.ASSINATURA_DIRETORIA: StatusInfo(
        "Assinatura da Diretoria", "Ass. Diretoria",
        "Aguardando assinatura da diretoria", 7,
    ),
    QuoteStatus.AGENDAMENTO_ENTREGA: StatusInfo(
        "Agendamento de Entrega", "Agendamento",
        "Entrega sendo agendada com o cliente", 8,
    ),
    QuoteStatus.ENTREGA: StatusInfo(
        "Entrega", "Entrega", "Veículos em processo de entrega", 9,
    ),
    QuoteStatus.CONCLUIDO: StatusInfo(
        "Concluído", "Concluído", "Processo concluído com sucesso", 10,
    ),
    QuoteStatus.CANCELADO: StatusInfo(
        "Cancelado", "Cancelado", "Orçamento cancelado", -1,
    ),
}


def translate_status(status: str | QuoteStatus) -> str:
    """Human-readable label for a status code; unknown codes pass through."""
    try:
        return STATUS_INFO[QuoteStatus(status)].label
    except ValueError:
        return str(status)


@dataclass(frozen=True)
class StatusHistoryEntry:
    """Append-only audit record of one status transition."""

    id: UUID
    quote_id: UUID
    previous_status: QuoteStatus | None
    new_status: QuoteStatus
    changed_by: UUID
    changed_at: datetime
    observation: str | None = None


class TransitionRejection(str, Enum):
    """Why a transition attempt did not succeed."""

    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a status transition attempt.

    On success ``updated_status`` and ``history_entry`` are set.  On
    rejection ``rejection`` identifies the category, ``reason`` carries a
    message naming the current and attempted status, and
    ``allowed_next_statuses`` lists what the caller may choose instead.
    ``history_recorded`` is False only when the status changed but the
    audit entry could not be written.
    """

    success: bool
    quote_id: UUID
    current_status: QuoteStatus
    attempted_status: QuoteStatus
    updated_status: QuoteStatus | None = None
    history_entry: StatusHistoryEntry | None = None
    history_recorded: bool = True
    rejection: TransitionRejection | None = None
    reason: str = ""
    allowed_next_statuses: tuple[QuoteStatus, ...] = ()
