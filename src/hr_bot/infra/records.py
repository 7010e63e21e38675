"""Registros de negócio na planilha: status dos colaboradores e erros.

A ordem das colunas é dado de apresentação; só quem grava depende dela.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from hr_bot.domain.models import ErrorRecord, StatusRecord
from hr_bot.observability.logging import get_logger
from hr_bot.utils.dates import format_date, format_datetime, format_time, to_local

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings
    from hr_bot.infra.sheets import SheetsClient

logger: logging.Logger = get_logger(__name__)

STATUS_HEADERS = (
    "ID",
    "Telegram_ID",
    "FirstName",
    "LastName",
    "Username",
    "Status",
    "Details",
    "StatusDate",
    "RecordedAt",
)
ERROR_HEADERS = ("Date", "Time", "Function", "Error")


class StatusRecordStore(ABC):
    """Contrato: gravar um status; levanta exceção em falha."""

    @abstractmethod
    def append(self, record: StatusRecord) -> None:
        """Grava o status no fim da aba."""


class ErrorLogStore(ABC):
    """Contrato: registrar um erro; nunca propaga falha de gravação."""

    @abstractmethod
    def record(self, entry: ErrorRecord) -> None:
        """Registra o erro; falhas de gravação são apenas logadas."""


class MemoryStatusRecordStore(StatusRecordStore):
    """Store em memória (apenas dev/testes)."""

    def __init__(self) -> None:
        self.records: list[StatusRecord] = []

    def append(self, record: StatusRecord) -> None:
        self.records.append(record)


class MemoryErrorLogStore(ErrorLogStore):
    """Store em memória (apenas dev/testes)."""

    def __init__(self) -> None:
        self.entries: list[ErrorRecord] = []

    def record(self, entry: ErrorRecord) -> None:
        self.entries.append(entry)


class SheetsStatusRecordStore(StatusRecordStore):
    """Aba de status; ID é o número da linha anterior ao append."""

    def __init__(self, sheets: SheetsClient, *, sheet_name: str, timezone: str) -> None:
        self._sheets = sheets
        self._sheet_name = sheet_name
        self._timezone = timezone

    def append(self, record: StatusRecord) -> None:
        worksheet = self._sheets.worksheet(self._sheet_name, STATUS_HEADERS)
        next_id = len(worksheet.col_values(1))
        sender = record.sender
        worksheet.append_row(
            [
                next_id,
                sender.user_id,
                sender.first_name,
                sender.last_name,
                sender.username,
                record.status.label,
                record.details,
                format_date(record.status_date),
                format_datetime(to_local(record.recorded_at, self._timezone)),
            ],
            value_input_option="USER_ENTERED",
        )


class SheetsErrorLogStore(ErrorLogStore):
    """Aba de erros (Date | Time | Function | Error)."""

    def __init__(self, sheets: SheetsClient, *, sheet_name: str, timezone: str) -> None:
        self._sheets = sheets
        self._sheet_name = sheet_name
        self._timezone = timezone

    def record(self, entry: ErrorRecord) -> None:
        local = to_local(entry.occurred_at, self._timezone)
        try:
            worksheet = self._sheets.worksheet(self._sheet_name, ERROR_HEADERS)
            worksheet.append_row(
                [format_date(local), format_time(local), entry.function, entry.message[:500]],
                value_input_option="RAW",
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "error_log_write_failed",
                extra={"function": entry.function, "error_type": type(exc).__name__},
            )


def create_record_stores(
    settings: Settings, sheets_client: SheetsClient | None = None
) -> tuple[StatusRecordStore, ErrorLogStore]:
    """Factory dos stores de status e de erros (settings.records_backend)."""
    backend = settings.records_backend.lower()

    if backend == "memory":
        return MemoryStatusRecordStore(), MemoryErrorLogStore()

    if backend == "sheets":
        if sheets_client is None:
            raise ValueError("RECORDS_BACKEND=sheets requer cliente de planilha")
        return (
            SheetsStatusRecordStore(
                sheets_client, sheet_name=settings.statuses_sheet, timezone=settings.timezone
            ),
            SheetsErrorLogStore(
                sheets_client, sheet_name=settings.errors_sheet, timezone=settings.timezone
            ),
        )

    raise ValueError(f"Backend de registros não reconhecido: {backend}")
