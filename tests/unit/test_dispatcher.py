"""Testes de roteamento: resolvers puros e UpdateDispatcher."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from hr_bot.application import texts
from hr_bot.application.dispatcher import (
    Route,
    RouteKind,
    UpdateDispatcher,
    resolve_callback,
    resolve_message,
)
from hr_bot.application.handlers.registration import RegistrationService
from hr_bot.application.handlers.status import StatusService
from hr_bot.application.handlers.vacation import VacationService
from hr_bot.domain.enums import StatusType
from hr_bot.domain.models import TelegramUpdate
from hr_bot.infra.directory import MemoryEmployeeDirectory
from hr_bot.infra.records import MemoryErrorLogStore, MemoryStatusRecordStore
from hr_bot.infra.vacations import MemoryVacationStore

NOW = datetime(2025, 9, 25, 9, 0, tzinfo=UTC)


class TestResolveMessage:
    @pytest.mark.parametrize("text", ["/start", "/menu", "/start@hr_helper_bot", " /START "])
    def test_menu_commands(self, text: str) -> None:
        assert resolve_message(text).kind is RouteKind.MAIN_MENU

    def test_help_command(self) -> None:
        assert resolve_message("/help").kind is RouteKind.HELP

    @pytest.mark.parametrize(
        ("text", "status"),
        [
            ("Спізнюю на 15 хвилин", StatusType.LATE),
            ("сьогодні працюю ремоут", StatusType.REMOTE),
            ("Working remote today", StatusType.REMOTE),
            ("я захворів, температура", StatusType.SICK),
        ],
    )
    def test_free_text_status(self, text: str, status: StatusType) -> None:
        route = resolve_message(text)
        assert route.kind is RouteKind.REPORT
        assert route.status is status

    @pytest.mark.parametrize("text", ["Хочу у відпустку", "vacation please"])
    def test_vacation_keywords(self, text: str) -> None:
        assert resolve_message(text).kind is RouteKind.VACATION_MENU

    def test_status_wins_over_vacation_keyword(self) -> None:
        assert resolve_message("після відпустки працюю ремоут").status is StatusType.REMOTE

    @pytest.mark.parametrize("text", ["привіт", "", None])
    def test_anything_else_is_help(self, text: str | None) -> None:
        assert resolve_message(text).kind is RouteKind.HELP


class TestResolveCallback:
    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            ("main_menu", Route(RouteKind.MAIN_MENU)),
            ("late", Route(RouteKind.STATUS_MENU, status=StatusType.LATE)),
            ("remote_menu", Route(RouteKind.STATUS_MENU, status=StatusType.REMOTE)),
            ("sick_today", Route(RouteKind.REPORT, status=StatusType.SICK)),
            ("late_tomorrow", Route(RouteKind.REPORT, status=StatusType.LATE, day_offset=1)),
            ("remote_other", Route(RouteKind.CALENDAR, status=StatusType.REMOTE)),
            (
                "sick_date_2025-09-30",
                Route(RouteKind.REPORT, status=StatusType.SICK, target_date=date(2025, 9, 30)),
            ),
            ("late_date_2025-02-30", Route(RouteKind.INVALID_DATE, status=StatusType.LATE)),
            ("vacation_menu", Route(RouteKind.VACATION_MENU)),
            ("reg_start", Route(RouteKind.REGISTRATION_DEPARTMENTS)),
            ("reg_dep_2", Route(RouteKind.REGISTRATION_TEAMS, choice=(2,))),
            ("reg_team_0_1", Route(RouteKind.REGISTRATION_POSITIONS, choice=(0, 1))),
            ("reg_pos_0_1_0", Route(RouteKind.REGISTRATION_COMPLETE, choice=(0, 1, 0))),
            ("reg_dep_x", Route(RouteKind.UNKNOWN)),
            (
                "vacation_start_2025-10-06",
                Route(RouteKind.VACATION_DURATION, target_date=date(2025, 10, 6)),
            ),
            (
                "vacation_days_2025-10-06_5",
                Route(RouteKind.VACATION_REQUEST, target_date=date(2025, 10, 6), days=5),
            ),
            ("vacation_start_2025-13-01", Route(RouteKind.INVALID_DATE)),
            (
                "vacation_approve_VAC_1758790000000_1001",
                Route(
                    RouteKind.VACATION_DECISION,
                    request_id="VAC_1758790000000_1001",
                    approved=True,
                ),
            ),
            (
                "vacation_reject_VAC_1_2",
                Route(RouteKind.VACATION_DECISION, request_id="VAC_1_2", approved=False),
            ),
            ("vacation_start_", Route(RouteKind.UNKNOWN)),
            (None, Route(RouteKind.UNKNOWN)),
        ],
    )
    def test_routes(self, data: str | None, expected: Route) -> None:
        assert resolve_callback(data) == expected

    def test_route_dates(self) -> None:
        today = date(2025, 9, 25)
        assert resolve_callback("late_today").resolve_date(today) == today
        assert resolve_callback("late_tomorrow").resolve_date(today) == date(2025, 9, 26)
        assert resolve_callback("late_date_2025-10-01").resolve_date(today) == date(2025, 10, 1)


@pytest.fixture()
def records() -> MemoryStatusRecordStore:
    return MemoryStatusRecordStore()


@pytest.fixture()
def directory(make_employee) -> MemoryEmployeeDirectory:
    directory = MemoryEmployeeDirectory()
    directory.register(make_employee(1001))
    return directory


@pytest.fixture()
def vacations() -> MemoryVacationStore:
    return MemoryVacationStore()


def _dispatcher(
    fake_telegram, records, directory, vacations, fixed_today, *, registration_required=True
) -> UpdateDispatcher:
    error_log = MemoryErrorLogStore()
    status_service = StatusService(
        fake_telegram,  # type: ignore[arg-type]
        records,
        error_log,
        hr_chat_id="-100500",
        timezone="Europe/Kyiv",
    )
    registration = RegistrationService(
        fake_telegram,  # type: ignore[arg-type]
        directory,
        error_log,
        clock=lambda: NOW,
    )
    vacation_service = VacationService(
        fake_telegram,  # type: ignore[arg-type]
        vacations,
        error_log,
        hr_chat_id="-100500",
        timezone="Europe/Kyiv",
        clock=lambda: NOW,
    )
    return UpdateDispatcher(
        fake_telegram,  # type: ignore[arg-type]
        status_service,
        registration,
        vacation_service,
        timezone="Europe/Kyiv",
        registration_required=registration_required,
        today=lambda: fixed_today,
    )


@pytest.fixture()
def dispatcher(fake_telegram, records, directory, vacations, fixed_today) -> UpdateDispatcher:
    return _dispatcher(fake_telegram, records, directory, vacations, fixed_today)



class TestUpdateDispatcher:
    @pytest.mark.asyncio
    async def test_start_sends_main_menu(self, dispatcher, fake_telegram, make_update) -> None:
        await dispatcher.dispatch(TelegramUpdate.model_validate(make_update(text="/start")))

        sent = fake_telegram.sent[0]
        assert sent["chat_id"] == 1001
        assert sent["text"] == texts.WELCOME
        callbacks = [row[0]["callback_data"] for row in sent["reply_markup"]["inline_keyboard"]]
        assert callbacks == ["late_menu", "remote_menu", "sick_menu", "vacation_menu"]

    @pytest.mark.asyncio
    async def test_free_text_status_is_recorded_with_text_as_details(
        self, dispatcher, fake_telegram, records, make_update, fixed_today
    ) -> None:
        update = TelegramUpdate.model_validate(make_update(text="Спізнююсь на 10 хв"))
        await dispatcher.dispatch(update)

        record = records.records[0]
        assert record.status is StatusType.LATE
        assert record.status_date == fixed_today
        assert record.details == "Спізнююсь на 10 хв"
        assert fake_telegram.texts_for(1001)[0].startswith("✅ Спізнення зафіксовано!")
        assert fake_telegram.texts_for("-100500")[0].startswith(texts.HR_PREFIX)

    @pytest.mark.asyncio
    async def test_callback_is_answered_before_routing(
        self, dispatcher, fake_telegram, make_update
    ) -> None:
        update = TelegramUpdate.model_validate(make_update(7, callback_data="late_menu"))
        await dispatcher.dispatch(update)

        assert fake_telegram.answered == ["cb-7"]
        assert "Спізнення" in fake_telegram.sent[0]["text"]

    @pytest.mark.asyncio
    async def test_tomorrow_button_records_next_day(
        self, dispatcher, records, make_update, fixed_today
    ) -> None:
        update = TelegramUpdate.model_validate(make_update(callback_data="remote_tomorrow"))
        await dispatcher.dispatch(update)

        assert records.records[0].status is StatusType.REMOTE
        assert records.records[0].status_date == date(2025, 9, 26)
        assert records.records[0].details == texts.BUTTON_DETAILS

    @pytest.mark.asyncio
    async def test_other_shows_seven_day_calendar(
        self, dispatcher, fake_telegram, make_update
    ) -> None:
        update = TelegramUpdate.model_validate(make_update(callback_data="sick_other"))
        await dispatcher.dispatch(update)

        rows = fake_telegram.sent[0]["reply_markup"]["inline_keyboard"]
        assert len(rows) == 8
        assert rows[0][0]["callback_data"] == "sick_date_2025-09-25"
        assert rows[6][0]["callback_data"] == "sick_date_2025-10-01"
        assert rows[-1][0]["callback_data"] == "sick_menu"

    @pytest.mark.asyncio
    async def test_unknown_callback_sends_unknown_command_and_menu(
        self, dispatcher, fake_telegram, make_update
    ) -> None:
        update = TelegramUpdate.model_validate(make_update(callback_data="bogus"))
        await dispatcher.dispatch(update)

        assert fake_telegram.sent[0]["text"] == texts.UNKNOWN_COMMAND
        assert fake_telegram.sent[0]["reply_markup"]["inline_keyboard"]

    @pytest.mark.asyncio
    async def test_update_without_message_or_callback_does_nothing(
        self, dispatcher, fake_telegram
    ) -> None:
        await dispatcher.dispatch(TelegramUpdate(update_id=9))
        assert fake_telegram.sent == []


class TestRegistrationCheck:
    @pytest.mark.asyncio
    async def test_unregistered_start_prompts_registration(
        self, dispatcher, fake_telegram, make_update
    ) -> None:
        await dispatcher.dispatch(TelegramUpdate.model_validate(make_update(user_id=2002)))

        sent = fake_telegram.sent[0]
        assert "Для початку роботи потрібна реєстрація" in sent["text"]
        assert sent["reply_markup"]["inline_keyboard"][0][0]["callback_data"] == "reg_start"

    @pytest.mark.asyncio
    async def test_unregistered_status_is_not_recorded(
        self, dispatcher, fake_telegram, records, make_update
    ) -> None:
        update = make_update(text="Спізнююсь на 10 хв", user_id=2002)
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        assert records.records == []
        assert fake_telegram.texts_for("-100500") == []
        assert "реєстрація" in fake_telegram.sent[0]["text"]

    @pytest.mark.asyncio
    async def test_help_needs_no_registration(self, dispatcher, fake_telegram, make_update) -> None:
        update = make_update(text="/help", user_id=2002)
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        assert fake_telegram.sent[0]["text"] == texts.HELP

    @pytest.mark.asyncio
    async def test_status_without_registration_when_check_disabled(
        self, fake_telegram, records, directory, vacations, fixed_today, make_update
    ) -> None:
        dispatcher = _dispatcher(
            fake_telegram, records, directory, vacations, fixed_today, registration_required=False
        )
        update = make_update(callback_data="sick_today", user_id=2002)
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        assert records.records[0].status is StatusType.SICK

    @pytest.mark.asyncio
    async def test_vacation_always_needs_registration(
        self, fake_telegram, records, directory, vacations, fixed_today, make_update
    ) -> None:
        dispatcher = _dispatcher(
            fake_telegram, records, directory, vacations, fixed_today, registration_required=False
        )
        update = make_update(callback_data="vacation_days_2025-10-06_3", user_id=2002)
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        assert vacations.requests == {}
        assert "реєстрація" in fake_telegram.sent[0]["text"]

    @pytest.mark.asyncio
    async def test_directory_failure_propagates(
        self, dispatcher, directory, make_update
    ) -> None:
        def _broken(telegram_id: int):
            raise ConnectionError("sheets read timeout")

        directory.find = _broken  # type: ignore[method-assign]
        with pytest.raises(ConnectionError):
            await dispatcher.dispatch(TelegramUpdate.model_validate(make_update(text="/start")))

    @pytest.mark.asyncio
    async def test_registration_buttons_register_the_user(
        self, dispatcher, fake_telegram, directory, make_update
    ) -> None:
        for data in ("reg_start", "reg_dep_4", "reg_team_4_0", "reg_pos_4_0_0"):
            update = make_update(callback_data=data, user_id=2002, chat_id=2002)
            await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        employee = directory.find(2002)
        assert employee is not None
        assert (employee.department, employee.team, employee.position) == ("HR", "HR", "HR")
        assert employee.full_name == "Olena Koval"
        assert fake_telegram.texts_for(2002)[-1].startswith("✅ <b>Реєстрацію завершено!</b>")


class TestVacationRoutes:
    @pytest.mark.asyncio
    async def test_vacation_menu_shows_balance_and_start_dates(
        self, dispatcher, fake_telegram, make_update
    ) -> None:
        update = make_update(callback_data="vacation_menu")
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        sent = fake_telegram.sent[0]
        assert "0/24" in sent["text"]
        rows = sent["reply_markup"]["inline_keyboard"]
        assert rows[0][0]["callback_data"] == "vacation_start_2025-09-26"

    @pytest.mark.asyncio
    async def test_duration_button_creates_pending_request(
        self, dispatcher, fake_telegram, vacations, make_update
    ) -> None:
        update = make_update(callback_data="vacation_days_2025-10-06_5")
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        (request,) = vacations.requests.values()
        assert request.is_pending
        assert request.days == 5
        hr_message = fake_telegram.sent[-1]
        assert hr_message["chat_id"] == "-100500"
        approve = hr_message["reply_markup"]["inline_keyboard"][0][0]["callback_data"]
        assert approve == f"vacation_approve_{request.request_id}"

    @pytest.mark.asyncio
    async def test_decision_by_non_approver_is_denied(
        self, dispatcher, fake_telegram, vacations, make_update
    ) -> None:
        await dispatcher.dispatch(
            TelegramUpdate.model_validate(make_update(callback_data="vacation_days_2025-10-06_2"))
        )
        (request_id,) = vacations.requests
        fake_telegram.sent.clear()

        update = make_update(callback_data=f"vacation_approve_{request_id}")
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        assert vacations.requests[request_id].is_pending
        assert fake_telegram.sent[0]["text"] == texts.VACATION_ACCESS_DENIED

    @pytest.mark.asyncio
    async def test_hr_approves_from_the_notification(
        self, dispatcher, fake_telegram, directory, vacations, make_update, make_employee
    ) -> None:
        directory.register(make_employee(3003, full_name="Iryna HR", department="HR", team="HR"))
        await dispatcher.dispatch(
            TelegramUpdate.model_validate(make_update(callback_data="vacation_days_2025-10-06_2"))
        )
        (request_id,) = vacations.requests

        update = make_update(
            callback_data=f"vacation_approve_{request_id}", user_id=3003, chat_id=3003
        )
        await dispatcher.dispatch(TelegramUpdate.model_validate(update))

        decided = vacations.requests[request_id]
        assert decided.decided_by == "Iryna HR"
        assert fake_telegram.texts_for(1001)[-1].startswith("✅ <b>Вашу заявку на відпустку")
