"""Modelos de domínio: updates do Telegram e registros do RH.

Responsabilidade:
- Estruturar o payload do webhook (apenas os campos que o bot usa)
- Garantir imutabilidade do update depois de recebido
- Representar os registros gravados nas planilhas (status, colaboradores, férias)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from hr_bot.domain.enums import StatusType, VacationStatus

PROCESSED_STATUS = "processed"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class TelegramUser(_Frozen):
    """Autor de uma mensagem ou de um clique."""

    id: int
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None


class TelegramChat(_Frozen):
    id: int
    type: str | None = None


class TelegramMessage(_Frozen):
    """Mensagem de texto (outros tipos chegam sem `text`)."""

    message_id: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    date: int | None = None
    text: str | None = None


class TelegramCallbackQuery(_Frozen):
    """Clique em botão inline."""

    id: str
    from_user: TelegramUser = Field(alias="from")
    message: TelegramMessage | None = None
    data: str | None = None


class TelegramUpdate(_Frozen):
    """Evento inbound do Telegram; imutável depois de recebido."""

    update_id: int
    message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None
    received_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def kind(self) -> str:
        """message | callback_query | other."""
        if self.message is not None:
            return "message"
        if self.callback_query is not None:
            return "callback_query"
        return "other"


@dataclass(frozen=True, slots=True)
class ProcessedMarker:
    """Marca de que um update_id já foi tratado."""

    update_id: int
    processed_at: datetime
    status: str = PROCESSED_STATUS

    def as_row(self) -> list[str | int]:
        """Linha do log durável: UpdateID, Timestamp, Status."""
        return [self.update_id, self.processed_at.isoformat(), self.status]


@dataclass(frozen=True, slots=True)
class Sender:
    """Quem interagiu com o bot e onde responder."""

    user_id: int
    chat_id: int
    first_name: str
    last_name: str = ""
    username: str = ""

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        if self.username:
            return f"{name} (@{self.username})"
        return name

    @classmethod
    def from_user(cls, user: TelegramUser | None, chat_id: int) -> Sender:
        if user is None:
            return cls(user_id=chat_id, chat_id=chat_id, first_name="Невідомий")
        return cls(
            user_id=user.id,
            chat_id=chat_id,
            first_name=user.first_name or "Невідомий",
            last_name=user.last_name or "",
            username=user.username or "",
        )


@dataclass(frozen=True, slots=True)
class StatusRecord:
    """Status reportado por um colaborador (atraso, remoto, doença)."""

    sender: Sender
    status: StatusType
    status_date: date
    details: str
    recorded_at: datetime


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    """Erro registrado na planilha de erros."""

    function: str
    message: str
    occurred_at: datetime


APPROVER_DEPARTMENTS = frozenset({"HR", "CEO"})


@dataclass(frozen=True, slots=True)
class Employee:
    """Linha do diretório de colaboradores (aba Employees)."""

    telegram_id: int
    full_name: str
    department: str
    team: str
    position: str
    work_mode: str = "Hybrid"
    registered_at: datetime | None = None

    @property
    def can_approve(self) -> bool:
        """RH e CEO decidem solicitações de férias."""
        return self.department in APPROVER_DEPARTMENTS


@dataclass(frozen=True, slots=True)
class VacationRequest:
    """Solicitação de férias; dias corridos a partir de `start_date`."""

    request_id: str
    telegram_id: int
    full_name: str
    department: str
    team: str
    start_date: date
    days: int
    created_at: datetime
    status: VacationStatus = VacationStatus.PENDING_HR
    decided_by: str = ""
    decided_at: datetime | None = None

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=self.days - 1)

    @property
    def is_pending(self) -> bool:
        return self.status is VacationStatus.PENDING_HR

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.end_date

    def decide(self, approved: bool, decided_by: str, decided_at: datetime) -> VacationRequest:
        status = VacationStatus.APPROVED if approved else VacationStatus.REJECTED
        return replace(self, status=status, decided_by=decided_by, decided_at=decided_at)


@dataclass(frozen=True, slots=True)
class VacationBalance:
    """Saldo anual: dias aprovados no ano contra o total permitido."""

    total: int
    used: int

    @property
    def available(self) -> int:
        return max(0, self.total - self.used)
