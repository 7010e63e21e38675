from __future__ import annotations

from datetime import date
from typing import Any

import gspread
import pytest
from fastapi.testclient import TestClient

from hr_bot.api.app import create_app
from hr_bot.config.settings import Settings, get_settings
from hr_bot.domain.models import Employee

REGISTERED_IDS = (1001, 55500111)


class FakeWorksheet:
    """Aba em memória com a API de gspread usada pelo bot (linhas 1-based)."""

    def __init__(self, title: str) -> None:
        self.title = title
        self.rows: list[list[Any]] = []
        self.fail_reads = False
        self.fail_writes = False
        self.frozen_rows = 0
        self.formats: list[tuple[str, dict[str, Any]]] = []

    def col_values(self, col: int) -> list[str]:
        if self.fail_reads:
            raise ConnectionError("sheets read timeout")
        return [str(row[col - 1]) for row in self.rows if len(row) >= col]

    def get_all_values(self) -> list[list[str]]:
        if self.fail_reads:
            raise ConnectionError("sheets read timeout")
        return [[str(value) for value in row] for row in self.rows]

    def update(
        self, values: list[list[Any]] | None = None, range_name: str | None = None, raw: bool = True
    ) -> None:
        """Só o formato usado pelo bot: uma linha inteira, `A<n>:<col><n>`."""
        if self.fail_writes:
            raise RuntimeError("quota exceeded")
        row_number = int((range_name or "").split(":", 1)[0][1:])
        self.rows[row_number - 1] = list((values or [[]])[0])

    def append_row(self, values: list[Any], value_input_option: str = "RAW") -> None:
        if self.fail_writes:
            raise RuntimeError("quota exceeded")
        self.rows.append(list(values))

    def delete_rows(self, start_index: int, end_index: int | None = None) -> None:
        end_index = end_index or start_index
        del self.rows[start_index - 1 : end_index]

    def format(self, ranges: str, fmt: dict[str, Any]) -> None:  # noqa: A003
        self.formats.append((ranges, fmt))

    def freeze(self, rows: int | None = None, cols: int | None = None) -> None:
        self.frozen_rows = rows or 0


class FakeSpreadsheet:
    def __init__(self) -> None:
        self.sheets: dict[str, FakeWorksheet] = {}

    def worksheet(self, title: str) -> FakeWorksheet:
        try:
            return self.sheets[title]
        except KeyError:
            raise gspread.WorksheetNotFound(title) from None

    def add_worksheet(self, title: str, rows: int, cols: int) -> FakeWorksheet:
        sheet = FakeWorksheet(title)
        self.sheets[title] = sheet
        return sheet


class FakeTelegramClient:
    """Registra chamadas em vez de falar com a Bot API."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.answered: list[str] = []
        self.fail_sends = False
        self.closed = False

    async def send_message(
        self,
        chat_id: int | str,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> bool:
        if self.fail_sends:
            return False
        self.sent.append({"chat_id": chat_id, "text": text, "reply_markup": reply_markup})
        return True

    async def answer_callback_query(self, callback_query_id: str) -> bool:
        self.answered.append(callback_query_id)
        return True

    async def close(self) -> None:
        self.closed = True

    def texts_for(self, chat_id: int | str) -> list[str]:
        return [item["text"] for item in self.sent if item["chat_id"] == chat_id]


@pytest.fixture()
def fake_spreadsheet() -> FakeSpreadsheet:
    return FakeSpreadsheet()


@pytest.fixture()
def fake_telegram() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture()
def fixed_today() -> date:
    return date(2025, 9, 25)


@pytest.fixture()
def make_update():
    """Constrói payloads de update (mensagem ou callback)."""

    def _make(
        update_id: int = 42,
        *,
        text: str | None = "/start",
        callback_data: str | None = None,
        user_id: int = 1001,
        chat_id: int = 1001,
    ) -> dict[str, Any]:
        user = {"id": user_id, "first_name": "Olena", "last_name": "Koval", "username": "okoval"}
        chat = {"id": chat_id, "type": "private"}
        if callback_data is not None:
            return {
                "update_id": update_id,
                "callback_query": {
                    "id": f"cb-{update_id}",
                    "from": user,
                    "message": {"message_id": 7, "chat": chat, "date": 1758790000},
                    "data": callback_data,
                },
            }
        return {
            "update_id": update_id,
            "message": {
                "message_id": 7,
                "from": user,
                "chat": chat,
                "date": 1758790000,
                "text": text,
            },
        }

    return _make


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch, fake_telegram: FakeTelegramClient):
    monkeypatch.setenv("HR_CHAT_ID", "-100500")
    monkeypatch.setenv("PROCESS_IN_BACKGROUND", "false")
    monkeypatch.setenv("INTERNAL_TASK_TOKEN", "internal-token")
    get_settings.cache_clear()
    app = create_app(telegram_client=fake_telegram)  # type: ignore[arg-type]
    for telegram_id in REGISTERED_IDS:
        app.state.directory.register(_employee(telegram_id))
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()


@pytest.fixture()
def settings() -> Settings:
    return Settings(hr_chat_id="-100500")


def _employee(
    telegram_id: int = 1001,
    *,
    full_name: str = "Olena Koval",
    department: str = "Marketing",
    team: str = "PPC",
    position: str = "PPC",
) -> Employee:
    return Employee(
        telegram_id=telegram_id,
        full_name=full_name,
        department=department,
        team=team,
        position=position,
    )


@pytest.fixture()
def make_employee():
    """Colaborador registrado (padrão: Marketing / PPC)."""
    return _employee
