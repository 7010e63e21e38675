"""Testes do armazenamento de solicitações de férias (aba Vacations)."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from hr_bot.config.settings import Settings
from hr_bot.domain.enums import VacationStatus
from hr_bot.domain.models import VacationRequest
from hr_bot.infra.sheets import SheetsClient
from hr_bot.infra.vacations import (
    VACATION_HEADERS,
    MemoryVacationStore,
    SheetsVacationStore,
    create_vacation_store,
)

CREATED_AT = datetime(2025, 9, 25, 9, 0, tzinfo=UTC)
DECIDED_AT = datetime(2025, 9, 25, 10, 30, tzinfo=UTC)


def _request(request_id: str = "VAC_1758790800000_1001", **overrides) -> VacationRequest:
    fields = {
        "request_id": request_id,
        "telegram_id": 1001,
        "full_name": "Olena Koval",
        "department": "Marketing",
        "team": "PPC",
        "start_date": date(2025, 10, 6),
        "days": 5,
        "created_at": CREATED_AT,
    }
    fields.update(overrides)
    return VacationRequest(**fields)


def _store(fake_spreadsheet) -> SheetsVacationStore:
    return SheetsVacationStore(SheetsClient(fake_spreadsheet), sheet_name="Vacations")


class TestVacationRequest:
    def test_end_date_counts_start_day(self) -> None:
        assert _request(days=5).end_date == date(2025, 10, 10)
        assert _request(days=1).end_date == date(2025, 10, 6)

    def test_overlaps(self) -> None:
        request = _request()
        assert request.overlaps(date(2025, 10, 10), date(2025, 10, 12))
        assert request.overlaps(date(2025, 10, 1), date(2025, 10, 6))
        assert not request.overlaps(date(2025, 10, 11), date(2025, 10, 15))

    def test_decide_returns_decided_copy(self) -> None:
        request = _request()
        rejected = request.decide(False, "Iryna HR", DECIDED_AT)

        assert request.is_pending
        assert rejected.status is VacationStatus.REJECTED
        assert rejected.decided_by == "Iryna HR"
        assert rejected.decided_at == DECIDED_AT


class TestSheetsVacationStore:
    def test_add_writes_iso_row(self, fake_spreadsheet) -> None:
        store = _store(fake_spreadsheet)
        store.add(_request())

        sheet = fake_spreadsheet.sheets["Vacations"]
        assert sheet.rows[0] == list(VACATION_HEADERS)
        assert sheet.rows[1] == [
            "VAC_1758790800000_1001",
            1001,
            "Olena Koval",
            "Marketing",
            "PPC",
            "2025-10-06",
            "2025-10-10",
            5,
            "pending_hr",
            "2025-09-25T09:00:00+00:00",
            "",
            "",
        ]

    def test_list_and_get_read_back_requests(self, fake_spreadsheet) -> None:
        store = _store(fake_spreadsheet)
        store.add(_request("VAC_1_1001"))
        store.add(_request("VAC_2_2002", telegram_id=2002, days=2))

        assert [item.request_id for item in store.list_all()] == ["VAC_1_1001", "VAC_2_2002"]
        found = store.get("VAC_2_2002")
        assert found == _request("VAC_2_2002", telegram_id=2002, days=2)
        assert store.get("VAC_404") is None

    def test_update_rewrites_the_request_row(self, fake_spreadsheet) -> None:
        store = _store(fake_spreadsheet)
        store.add(_request("VAC_1_1001"))
        store.add(_request("VAC_2_1001"))

        store.update(_request("VAC_2_1001").decide(True, "Iryna HR", DECIDED_AT))

        sheet = fake_spreadsheet.sheets["Vacations"]
        assert sheet.rows[1][8] == "pending_hr"
        assert sheet.rows[2][8] == "approved"
        decided = store.get("VAC_2_1001")
        assert decided is not None
        assert decided.status is VacationStatus.APPROVED
        assert decided.decided_at == DECIDED_AT

    def test_update_of_unknown_request_raises(self, fake_spreadsheet) -> None:
        store = _store(fake_spreadsheet)
        store.add(_request("VAC_1_1001"))

        with pytest.raises(KeyError):
            store.update(_request("VAC_404"))

    def test_unreadable_rows_are_skipped(self, fake_spreadsheet) -> None:
        store = _store(fake_spreadsheet)
        store.add(_request("VAC_1_1001"))
        fake_spreadsheet.sheets["Vacations"].rows.append(["VAC_bad", "x", "?"])

        assert [item.request_id for item in store.list_all()] == ["VAC_1_1001"]

    def test_write_failure_propagates(self, fake_spreadsheet) -> None:
        store = _store(fake_spreadsheet)
        store.list_all()
        fake_spreadsheet.sheets["Vacations"].fail_writes = True

        with pytest.raises(RuntimeError):
            store.add(_request())


class TestMemoryVacationStore:
    def test_update_requires_existing_request(self) -> None:
        store = MemoryVacationStore()
        with pytest.raises(KeyError):
            store.update(_request())

        store.add(_request())
        store.update(_request().decide(True, "CEO", DECIDED_AT))
        assert store.requests[_request().request_id].status is VacationStatus.APPROVED


class TestCreateVacationStore:
    def test_memory_backend(self) -> None:
        assert isinstance(create_vacation_store(Settings()), MemoryVacationStore)

    def test_sheets_backend(self, fake_spreadsheet) -> None:
        settings = Settings(records_backend="sheets")
        store = create_vacation_store(settings, SheetsClient(fake_spreadsheet))
        assert isinstance(store, SheetsVacationStore)
