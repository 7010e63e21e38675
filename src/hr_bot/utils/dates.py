"""Datas no fuso do escritório e formatos usados nas planilhas e mensagens."""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

DATE_FORMAT = "%d.%m.%Y"
TIME_FORMAT = "%H:%M:%S"
DATETIME_FORMAT = "%d.%m.%Y %H:%M"

_WEEKDAYS_UK = ("Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Нд")


def local_now(timezone: str) -> datetime:
    return datetime.now(tz=ZoneInfo(timezone))


def local_today(timezone: str) -> date:
    return local_now(timezone).date()


def to_local(moment: datetime, timezone: str) -> datetime:
    return moment.astimezone(ZoneInfo(timezone))


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def format_time(moment: datetime) -> str:
    return moment.strftime(TIME_FORMAT)


def format_datetime(moment: datetime) -> str:
    return moment.strftime(DATETIME_FORMAT)


def short_day_label(value: date) -> str:
    """Rótulo curto de botão de calendário: `25.09 (Чт)`."""
    return f"{value.strftime('%d.%m')} ({_WEEKDAYS_UK[value.weekday()]})"


def parse_iso_date(raw: str) -> date | None:
    """`2025-09-25` -> date; None se inválida."""
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None
