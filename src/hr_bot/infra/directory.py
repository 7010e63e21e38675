"""Diretório de colaboradores (aba Employees da planilha).

Quem não está no diretório precisa se registrar antes de usar o bot.
Consultas ao Sheets passam por um cache curto por processo; o registro
invalida a entrada do colaborador.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from hr_bot.domain.models import Employee
from hr_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings
    from hr_bot.infra.sheets import SheetsClient

logger: logging.Logger = get_logger(__name__)

EMPLOYEE_HEADERS = (
    "TelegramID",
    "FullName",
    "Department",
    "Team",
    "Position",
    "WorkMode",
    "RegisteredAt",
)


class EmployeeDirectory(ABC):
    """Contrato: consultar e registrar colaboradores; falhas propagam."""

    @abstractmethod
    def find(self, telegram_id: int) -> Employee | None:
        """Colaborador registrado com esse Telegram ID, ou None."""

    @abstractmethod
    def register(self, employee: Employee) -> None:
        """Insere ou atualiza o colaborador (chave = Telegram ID)."""


class MemoryEmployeeDirectory(EmployeeDirectory):
    """Diretório em memória (apenas dev/testes)."""

    def __init__(self) -> None:
        self.employees: dict[int, Employee] = {}

    def find(self, telegram_id: int) -> Employee | None:
        return self.employees.get(telegram_id)

    def register(self, employee: Employee) -> None:
        self.employees[employee.telegram_id] = employee


def _parse_row(row: list[Any]) -> Employee | None:
    cells = [str(value).strip() for value in row] + [""] * len(EMPLOYEE_HEADERS)
    try:
        telegram_id = int(cells[0])
    except ValueError:
        return None
    registered_at = None
    if cells[6]:
        try:
            registered_at = datetime.fromisoformat(cells[6])
        except ValueError:
            registered_at = None
    return Employee(
        telegram_id=telegram_id,
        full_name=cells[1],
        department=cells[2],
        team=cells[3],
        position=cells[4],
        work_mode=cells[5] or "Hybrid",
        registered_at=registered_at,
    )


def _as_row(employee: Employee) -> list[Any]:
    return [
        employee.telegram_id,
        employee.full_name,
        employee.department,
        employee.team,
        employee.position,
        employee.work_mode,
        employee.registered_at.isoformat() if employee.registered_at else "",
    ]


class SheetsEmployeeDirectory(EmployeeDirectory):
    """Aba Employees; linha 1 é o cabeçalho."""

    def __init__(
        self,
        sheets: SheetsClient,
        *,
        sheet_name: str = "Employees",
        cache_ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sheets = sheets
        self._sheet_name = sheet_name
        self._cache_ttl = cache_ttl_seconds
        self._clock = clock
        self._cache: dict[int, tuple[float, Employee | None]] = {}
        self._lock = threading.Lock()

    def _worksheet(self) -> Any:
        return self._sheets.worksheet(self._sheet_name, EMPLOYEE_HEADERS)

    def _cached(self, telegram_id: int) -> tuple[bool, Employee | None]:
        with self._lock:
            entry = self._cache.get(telegram_id)
            if entry is None or self._clock() - entry[0] > self._cache_ttl:
                return False, None
            return True, entry[1]

    def find(self, telegram_id: int) -> Employee | None:
        hit, employee = self._cached(telegram_id)
        if hit:
            return employee

        employee = None
        for row in self._worksheet().get_all_values()[1:]:
            parsed = _parse_row(row)
            if parsed is not None and parsed.telegram_id == telegram_id:
                employee = parsed
                break

        with self._lock:
            self._cache[telegram_id] = (self._clock(), employee)
        return employee

    def register(self, employee: Employee) -> None:
        worksheet = self._worksheet()
        ids = [value.strip() for value in worksheet.col_values(1)]
        row = _as_row(employee)
        key = str(employee.telegram_id)

        if key in ids[1:]:
            row_number = ids.index(key, 1) + 1
            worksheet.update(
                values=[row], range_name=f"A{row_number}:G{row_number}", raw=True
            )
            logger.info("employee_updated", extra={"row": row_number})
        else:
            worksheet.append_row(row, value_input_option="RAW")
            logger.info("employee_registered", extra={"department": employee.department})

        with self._lock:
            self._cache.pop(employee.telegram_id, None)


def create_directory(
    settings: Settings, sheets_client: SheetsClient | None = None
) -> EmployeeDirectory:
    """Factory do diretório (mesmo backend dos registros: settings.records_backend)."""
    backend = settings.records_backend.lower()

    if backend == "memory":
        return MemoryEmployeeDirectory()

    if backend == "sheets":
        if sheets_client is None:
            raise ValueError("RECORDS_BACKEND=sheets requer cliente de planilha")
        return SheetsEmployeeDirectory(sheets_client, sheet_name=settings.employees_sheet)

    raise ValueError(f"Backend de diretório não reconhecido: {backend}")
