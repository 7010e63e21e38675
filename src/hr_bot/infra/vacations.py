"""Solicitações de férias (aba Vacations da planilha).

Datas em ISO (`2025-10-06`) para que a releitura da aba seja exata; a
decisão do RH reescreve a linha inteira da solicitação.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from hr_bot.domain.enums import VacationStatus
from hr_bot.domain.models import VacationRequest
from hr_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings
    from hr_bot.infra.sheets import SheetsClient

logger: logging.Logger = get_logger(__name__)

VACATION_HEADERS = (
    "RequestID",
    "TelegramID",
    "FullName",
    "Department",
    "Team",
    "StartDate",
    "EndDate",
    "Days",
    "Status",
    "CreatedAt",
    "DecidedBy",
    "DecidedAt",
)


class VacationStore(ABC):
    """Contrato: persistir solicitações de férias; falhas propagam."""

    @abstractmethod
    def add(self, request: VacationRequest) -> None:
        """Grava uma nova solicitação."""

    @abstractmethod
    def get(self, request_id: str) -> VacationRequest | None:
        """Solicitação pelo ID, ou None."""

    @abstractmethod
    def list_all(self) -> list[VacationRequest]:
        """Todas as solicitações, na ordem de criação."""

    @abstractmethod
    def update(self, request: VacationRequest) -> None:
        """Regrava uma solicitação existente (mesmo request_id)."""


class MemoryVacationStore(VacationStore):
    """Store em memória (apenas dev/testes)."""

    def __init__(self) -> None:
        self.requests: dict[str, VacationRequest] = {}
        self._lock = threading.Lock()

    def add(self, request: VacationRequest) -> None:
        with self._lock:
            self.requests[request.request_id] = request

    def get(self, request_id: str) -> VacationRequest | None:
        return self.requests.get(request_id)

    def list_all(self) -> list[VacationRequest]:
        return list(self.requests.values())

    def update(self, request: VacationRequest) -> None:
        with self._lock:
            if request.request_id not in self.requests:
                raise KeyError(request.request_id)
            self.requests[request.request_id] = request


def _as_row(request: VacationRequest) -> list[Any]:
    return [
        request.request_id,
        request.telegram_id,
        request.full_name,
        request.department,
        request.team,
        request.start_date.isoformat(),
        request.end_date.isoformat(),
        request.days,
        request.status.value,
        request.created_at.isoformat(),
        request.decided_by,
        request.decided_at.isoformat() if request.decided_at else "",
    ]


def _parse_row(row: list[Any]) -> VacationRequest | None:
    cells = [str(value).strip() for value in row] + [""] * len(VACATION_HEADERS)
    try:
        request = VacationRequest(
            request_id=cells[0],
            telegram_id=int(cells[1]),
            full_name=cells[2],
            department=cells[3],
            team=cells[4],
            start_date=date.fromisoformat(cells[5]),
            days=int(cells[7]),
            created_at=datetime.fromisoformat(cells[9]),
            status=VacationStatus(cells[8]),
            decided_by=cells[10],
        )
    except ValueError:
        logger.warning("vacation_row_unreadable", extra={"request_id": cells[0]})
        return None
    if cells[11]:
        request = replace(request, decided_at=datetime.fromisoformat(cells[11]))
    return request


class SheetsVacationStore(VacationStore):
    """Aba Vacations; linha 1 é o cabeçalho, coluna A é o RequestID."""

    def __init__(self, sheets: SheetsClient, *, sheet_name: str = "Vacations") -> None:
        self._sheets = sheets
        self._sheet_name = sheet_name

    def _worksheet(self) -> Any:
        return self._sheets.worksheet(self._sheet_name, VACATION_HEADERS)

    def add(self, request: VacationRequest) -> None:
        self._worksheet().append_row(_as_row(request), value_input_option="RAW")
        logger.info("vacation_request_saved", extra={"request_id": request.request_id})

    def get(self, request_id: str) -> VacationRequest | None:
        for request in self.list_all():
            if request.request_id == request_id:
                return request
        return None

    def list_all(self) -> list[VacationRequest]:
        requests = []
        for row in self._worksheet().get_all_values()[1:]:
            parsed = _parse_row(row)
            if parsed is not None:
                requests.append(parsed)
        return requests

    def update(self, request: VacationRequest) -> None:
        worksheet = self._worksheet()
        ids = [value.strip() for value in worksheet.col_values(1)]
        if request.request_id not in ids[1:]:
            raise KeyError(request.request_id)
        row_number = ids.index(request.request_id, 1) + 1
        worksheet.update(
            values=[_as_row(request)], range_name=f"A{row_number}:L{row_number}", raw=True
        )
        logger.info(
            "vacation_request_updated",
            extra={"request_id": request.request_id, "status": request.status.value},
        )


def create_vacation_store(
    settings: Settings, sheets_client: SheetsClient | None = None
) -> VacationStore:
    """Factory das férias (mesmo backend dos registros: settings.records_backend)."""
    backend = settings.records_backend.lower()

    if backend == "memory":
        return MemoryVacationStore()

    if backend == "sheets":
        if sheets_client is None:
            raise ValueError("RECORDS_BACKEND=sheets requer cliente de planilha")
        return SheetsVacationStore(sheets_client, sheet_name=settings.vacations_sheet)

    raise ValueError(f"Backend de férias não reconhecido: {backend}")
