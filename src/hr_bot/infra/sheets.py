"""Acesso à planilha Google (banco de dados do RH) via gspread.

As abas são acessadas por nome e criadas com cabeçalho no primeiro uso.
A ordem das colunas de cada aba é contrato de quem escreve nela.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import gspread

from hr_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

_NEW_SHEET_ROWS = 1000


class SheetsClient:
    """Wrapper fino sobre gspread.Spreadsheet com cache de abas."""

    def __init__(self, spreadsheet: Any) -> None:
        self._spreadsheet = spreadsheet
        self._worksheets: dict[str, Any] = {}
        self._lock = threading.Lock()

    def worksheet(self, title: str, headers: Sequence[str]) -> Any:
        """Retorna a aba `title`, criando-a com `headers` se não existir."""
        with self._lock:
            cached = self._worksheets.get(title)
            if cached is not None:
                return cached

            try:
                worksheet = self._spreadsheet.worksheet(title)
            except gspread.WorksheetNotFound:
                worksheet = self._create_worksheet(title, headers)

            self._worksheets[title] = worksheet
            return worksheet

    def _create_worksheet(self, title: str, headers: Sequence[str]) -> Any:
        worksheet = self._spreadsheet.add_worksheet(
            title=title, rows=_NEW_SHEET_ROWS, cols=max(len(headers), 1)
        )
        worksheet.append_row(list(headers), value_input_option="RAW")
        worksheet.format("1:1", {"textFormat": {"bold": True}})
        worksheet.freeze(rows=1)
        logger.info("sheet_created", extra={"sheet": title, "columns": len(headers)})
        return worksheet


def _authorize(settings: Settings) -> gspread.Client:
    if settings.google_service_account_json:
        info = json.loads(settings.google_service_account_json)
        return gspread.service_account_from_dict(info)
    if settings.google_service_account_file:
        return gspread.service_account(filename=settings.google_service_account_file)
    raise ValueError(
        "Credenciais Google ausentes: defina GOOGLE_SERVICE_ACCOUNT_JSON "
        "ou GOOGLE_SERVICE_ACCOUNT_FILE"
    )


def create_sheets_client(settings: Settings) -> SheetsClient:
    """Abre a planilha configurada em SPREADSHEET_ID."""
    if not settings.spreadsheet_id:
        raise ValueError("SPREADSHEET_ID é obrigatório para backends sheets")

    client = _authorize(settings)
    spreadsheet = client.open_by_key(settings.spreadsheet_id)
    logger.info("spreadsheet_opened", extra={"sheets_backend": "gspread"})
    return SheetsClient(spreadsheet)
