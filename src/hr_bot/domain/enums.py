"""Enums de domínio do bot de RH."""

from __future__ import annotations

from enum import StrEnum


class StatusType(StrEnum):
    """Tipos de status que um colaborador pode reportar."""

    LATE = "late"
    REMOTE = "remote"
    SICK = "sick"

    @property
    def label(self) -> str:
        """Nome exibido ao usuário e gravado na planilha."""
        return _STATUS_LABELS[self]


class VacationStatus(StrEnum):
    """Ciclo de vida de uma solicitação de férias (pendente até o RH decidir)."""

    PENDING_HR = "pending_hr"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return _VACATION_LABELS[self]


class FailPolicy(StrEnum):
    """Política aplicada quando um store de dedupe falha.

    CLOSED: o update é tratado como duplicado (descartado) e gera alerta.
    OPEN: o store com erro conta como "não visto"; os demais seguem consultados.
    """

    CLOSED = "closed"
    OPEN = "open"


class UpdateOutcome(StrEnum):
    """Estado terminal do ciclo de vida de um update."""

    DROPPED_BUSY = "dropped_busy"
    DROPPED_MALFORMED = "dropped_malformed"
    DROPPED_DUPLICATE = "dropped_duplicate"
    DISPATCHED = "dispatched"
    FAILED = "failed"


_STATUS_LABELS = {
    StatusType.LATE: "Спізнення",
    StatusType.REMOTE: "Ремоут",
    StatusType.SICK: "Лікарняний",
}

_VACATION_LABELS = {
    VacationStatus.PENDING_HR: "Очікує HR",
    VacationStatus.APPROVED: "Затверджено",
    VacationStatus.REJECTED: "Відхилено",
}
