"""Teclados inline (reply_markup) do bot."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from hr_bot.domain.enums import StatusType
from hr_bot.utils.dates import short_day_label

CALENDAR_DAYS = 7

STATUS_ICONS = {
    StatusType.LATE: "⏰",
    StatusType.REMOTE: "🏠",
    StatusType.SICK: "🤒",
}

MAIN_MENU_CALLBACK = "main_menu"
VACATION_ICON = "🏖️"
VACATION_MENU_CALLBACK = "vacation_menu"
REGISTRATION_START_CALLBACK = "reg_start"


def _button(text: str, callback_data: str) -> dict[str, str]:
    return {"text": text, "callback_data": callback_data}


def _status_title(status: StatusType) -> str:
    return f"{STATUS_ICONS[status]} {status.label}"


def _markup(rows: list[list[dict[str, str]]]) -> dict[str, Any]:
    return {"inline_keyboard": rows}


def main_menu_keyboard() -> dict[str, Any]:
    rows = [[_button(_status_title(status), f"{status.value}_menu")] for status in StatusType]
    rows.append([_button(f"{VACATION_ICON} Відпустка", VACATION_MENU_CALLBACK)])
    return _markup(rows)


def help_keyboard() -> dict[str, Any]:
    return _markup([[_button(_status_title(status), status.value)] for status in StatusType])


def status_menu_keyboard(status: StatusType) -> dict[str, Any]:
    """Hoje / amanhã / outra data / voltar."""
    return _markup(
        [
            [_button("📅 Сьогодні", f"{status.value}_today")],
            [_button("📅 Завтра", f"{status.value}_tomorrow")],
            [_button("📅 Інша дата", f"{status.value}_other")],
            [_button("🔙 Назад", MAIN_MENU_CALLBACK)],
        ]
    )


def calendar_keyboard(status: StatusType, today: date) -> dict[str, Any]:
    """Próximos 7 dias a partir de hoje, um por linha, e botão de voltar."""
    rows = []
    for offset in range(CALENDAR_DAYS):
        day = today + timedelta(days=offset)
        rows.append([_button(short_day_label(day), f"{status.value}_date_{day.isoformat()}")])
    rows.append([_button("🔙 Назад", f"{status.value}_menu")])
    return _markup(rows)


def registration_keyboard() -> dict[str, Any]:
    return _markup([[_button("📝 Почати реєстрацію", REGISTRATION_START_CALLBACK)]])


def departments_keyboard(names: list[str]) -> dict[str, Any]:
    """Botões carregam o índice do departamento (`reg_dep_<i>`)."""
    return _markup([[_button(name, f"reg_dep_{i}")] for i, name in enumerate(names)])


def teams_keyboard(department: int, names: list[str]) -> dict[str, Any]:
    rows = [[_button(name, f"reg_team_{department}_{i}")] for i, name in enumerate(names)]
    rows.append([_button("🔙 Назад", REGISTRATION_START_CALLBACK)])
    return _markup(rows)


def positions_keyboard(department: int, team: int, names: list[str]) -> dict[str, Any]:
    rows = [
        [_button(name, f"reg_pos_{department}_{team}_{i}")] for i, name in enumerate(names)
    ]
    rows.append([_button("🔙 Назад", f"reg_dep_{department}")])
    return _markup(rows)


def vacation_start_keyboard(today: date) -> dict[str, Any]:
    """Próximos 7 dias a partir de amanhã; férias não começam no mesmo dia."""
    rows = []
    for offset in range(1, CALENDAR_DAYS + 1):
        day = today + timedelta(days=offset)
        rows.append([_button(short_day_label(day), f"vacation_start_{day.isoformat()}")])
    rows.append([_button("🔙 Назад", MAIN_MENU_CALLBACK)])
    return _markup(rows)


def vacation_days_keyboard(start: date, max_days: int) -> dict[str, Any]:
    """Duração em dias corridos, até `max_days`, em linhas de quatro."""
    buttons = [
        _button(str(days), f"vacation_days_{start.isoformat()}_{days}")
        for days in range(1, max_days + 1)
    ]
    rows = [buttons[i : i + 4] for i in range(0, len(buttons), 4)]
    rows.append([_button("🔙 Назад", VACATION_MENU_CALLBACK)])
    return _markup(rows)


def vacation_decision_keyboard(request_id: str) -> dict[str, Any]:
    return _markup(
        [
            [
                _button("✅ Підтвердити", f"vacation_approve_{request_id}"),
                _button("❌ Відхилити", f"vacation_reject_{request_id}"),
            ]
        ]
    )
