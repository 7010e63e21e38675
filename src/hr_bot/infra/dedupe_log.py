"""Log durável de updates processados (append-only, com retenção limitada).

Cada marca é uma linha `UpdateID | Timestamp | Status`. Após cada append o
log é podado para as N entradas mais recentes (linha 1 é o cabeçalho; as
mais antigas começam na linha 2).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from hr_bot.domain.models import ProcessedMarker
from hr_bot.infra.dedupe import BoundedDedupeStore, DedupeError
from hr_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings
    from hr_bot.infra.sheets import SheetsClient

logger: logging.Logger = get_logger(__name__)

PROCESSED_UPDATES_HEADERS = ("UpdateID", "Timestamp", "Status")
_FIRST_DATA_ROW = 2


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class InMemoryDedupeLog(BoundedDedupeStore):
    """Log durável simulado em memória (dev/testes)."""

    name = "memory_log"

    def __init__(self, retention: int = 1000, clock: Callable[[], datetime] = _utcnow) -> None:
        self._retention = retention
        self._clock = clock
        self._entries: list[ProcessedMarker] = []
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._retention

    @property
    def entries(self) -> list[ProcessedMarker]:
        """Cópia das marcas retidas, da mais antiga para a mais recente."""
        return list(self._entries)

    def _ids(self) -> set[str]:
        return {str(marker.update_id) for marker in self._entries}

    def is_duplicate(self, key: str) -> bool:
        return key in self._ids()

    def mark_if_new(self, key: str) -> bool:
        with self._lock:
            if key in self._ids():
                return False
            self._entries.append(ProcessedMarker(update_id=int(key), processed_at=self._clock()))
            self._trim_locked()
            return True

    def trim(self) -> int:
        with self._lock:
            return self._trim_locked()

    def _trim_locked(self) -> int:
        excess = len(self._entries) - self._retention
        if excess <= 0:
            return 0
        del self._entries[:excess]
        return excess

    def clear(self, key: str) -> bool:
        with self._lock:
            before = len(self._entries)
            self._entries = [m for m in self._entries if str(m.update_id) != key]
            return len(self._entries) != before


class SheetsDedupeLog(BoundedDedupeStore):
    """Log durável na aba ProcessedUpdates da planilha.

    Sem transação: appends concorrentes de várias instâncias podem intercalar,
    mas não corrompem (append-only). A poda usa a contagem lida logo antes.
    """

    name = "sheets_log"

    def __init__(
        self,
        sheets: SheetsClient,
        *,
        sheet_name: str = "ProcessedUpdates",
        retention: int = 1000,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._sheets = sheets
        self._sheet_name = sheet_name
        self._retention = retention
        self._clock = clock

    @property
    def max_entries(self) -> int:
        return self._retention

    def _worksheet(self) -> Any:
        return self._sheets.worksheet(self._sheet_name, PROCESSED_UPDATES_HEADERS)

    def _read_ids(self, worksheet: Any) -> list[str]:
        """IDs retidos na ordem da aba (sem o cabeçalho)."""
        values = worksheet.col_values(1)
        return [str(value).strip() for value in values[_FIRST_DATA_ROW - 1 :]]

    def _call(self, operation: str, func: Callable[[], Any]) -> Any:
        try:
            return func()
        except DedupeError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "sheets_dedupe_error",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise DedupeError(f"Falha no log durável ({operation}): {exc}") from exc

    def is_duplicate(self, key: str) -> bool:
        return self._call("is_duplicate", lambda: key in self._read_ids(self._worksheet()))

    def mark_if_new(self, key: str) -> bool:
        def _mark() -> bool:
            worksheet = self._worksheet()
            ids = self._read_ids(worksheet)
            if key in ids:
                return False
            marker = ProcessedMarker(update_id=int(key), processed_at=self._clock())
            row = marker.as_row()
            row[0] = key
            worksheet.append_row(row, value_input_option="RAW")
            self._trim_worksheet(worksheet, len(ids) + 1)
            return True

        return self._call("mark_if_new", _mark)

    def trim(self) -> int:
        def _trim() -> int:
            worksheet = self._worksheet()
            return self._trim_worksheet(worksheet, len(self._read_ids(worksheet)))

        return self._call("trim", _trim)

    def _trim_worksheet(self, worksheet: Any, entry_count: int) -> int:
        excess = entry_count - self._retention
        if excess <= 0:
            return 0
        worksheet.delete_rows(_FIRST_DATA_ROW, _FIRST_DATA_ROW + excess - 1)
        logger.info(
            "processed_updates_trimmed",
            extra={"removed": excess, "retention": self._retention},
        )
        return excess

    def clear(self, key: str) -> bool:
        try:
            worksheet = self._worksheet()
            ids = self._read_ids(worksheet)
            if key not in ids:
                return False
            worksheet.delete_rows(_FIRST_DATA_ROW + ids.index(key))
            return True
        except Exception as exc:  # noqa: BLE001
            logger.warning("sheets_dedupe_clear_failed", extra={"error_type": type(exc).__name__})
            return False


def create_durable_log(
    settings: Settings, sheets_client: SheetsClient | None = None
) -> BoundedDedupeStore:
    """Factory do log durável conforme settings.dedupe_durable_backend."""
    backend = settings.dedupe_durable_backend.lower()
    retention = settings.dedupe_durable_retention

    if backend == "memory":
        return InMemoryDedupeLog(retention=retention)

    if backend == "sheets":
        if sheets_client is None:
            raise ValueError("DEDUPE_DURABLE_BACKEND=sheets requer cliente de planilha")
        return SheetsDedupeLog(
            sheets_client, sheet_name=settings.processed_updates_sheet, retention=retention
        )

    raise ValueError(f"Backend de log durável não reconhecido: {backend}")
