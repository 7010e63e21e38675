"""Testes do acesso à planilha (criação de abas e autenticação)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from hr_bot.config.settings import Settings
from hr_bot.infra.sheets import SheetsClient, create_sheets_client


class TestSheetsClient:
    def test_creates_missing_sheet_once(self, fake_spreadsheet) -> None:
        client = SheetsClient(fake_spreadsheet)

        first = client.worksheet("ProcessedUpdates", ("UpdateID", "Timestamp", "Status"))
        second = client.worksheet("ProcessedUpdates", ("UpdateID", "Timestamp", "Status"))

        assert first is second
        assert first.rows == [["UpdateID", "Timestamp", "Status"]]
        assert first.formats == [("1:1", {"textFormat": {"bold": True}})]
        assert first.frozen_rows == 1

    def test_existing_sheet_is_reused(self, fake_spreadsheet) -> None:
        existing = fake_spreadsheet.add_worksheet("Statuses", rows=10, cols=9)
        assert SheetsClient(fake_spreadsheet).worksheet("Statuses", ("ID",)) is existing
        assert existing.rows == []


class TestCreateSheetsClient:
    def test_requires_spreadsheet_id(self) -> None:
        with pytest.raises(ValueError, match="SPREADSHEET_ID"):
            create_sheets_client(Settings(spreadsheet_id=None))

    def test_requires_credentials(self) -> None:
        with pytest.raises(ValueError, match="Credenciais"):
            create_sheets_client(Settings(spreadsheet_id="sheet-1"))

    def test_authorizes_with_service_account_json(self) -> None:
        gc = MagicMock()
        settings = Settings(
            spreadsheet_id="sheet-1",
            google_service_account_json='{"type": "service_account"}',
        )
        target = "hr_bot.infra.sheets.gspread.service_account_from_dict"
        with patch(target, return_value=gc) as auth:
            client = create_sheets_client(settings)

        auth.assert_called_once_with({"type": "service_account"})
        gc.open_by_key.assert_called_once_with("sheet-1")
        assert isinstance(client, SheetsClient)

    def test_authorizes_with_service_account_file(self) -> None:
        settings = Settings(
            spreadsheet_id="sheet-1", google_service_account_file="/secrets/sa.json"
        )
        with patch("hr_bot.infra.sheets.gspread.service_account", return_value=MagicMock()) as auth:
            create_sheets_client(settings)

        auth.assert_called_once_with(filename="/secrets/sa.json")
