"""Roteamento de updates para os handlers do bot.

A decisão de rota é pura (`resolve_message` / `resolve_callback`) e a
execução fica no UpdateDispatcher, que delega aos serviços de status,
registro e férias. Rotas de status exigem colaborador registrado quando
`registration_required` está ligado; rotas de férias exigem sempre.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum

from hr_bot.adapters.telegram import keyboards
from hr_bot.adapters.telegram.client import TelegramClient
from hr_bot.application import texts
from hr_bot.application.handlers.registration import RegistrationService
from hr_bot.application.handlers.status import StatusService, detect_status
from hr_bot.application.handlers.vacation import VacationService
from hr_bot.domain.enums import StatusType
from hr_bot.domain.models import (
    Employee,
    Sender,
    TelegramCallbackQuery,
    TelegramMessage,
    TelegramUpdate,
)
from hr_bot.observability.logging import get_logger
from hr_bot.utils.dates import local_today, parse_iso_date

logger: logging.Logger = get_logger(__name__)

_CALLBACK_PATTERN = re.compile(
    r"^(?P<status>late|remote|sick)"
    r"(?:_(?P<action>menu|today|tomorrow|other|date_(?P<date>\d{4}-\d{2}-\d{2})))?$"
)
_REGISTRATION_PATTERN = re.compile(
    r"^reg_(?:dep_(?P<dep>\d+)|team_(?P<team>\d+_\d+)|pos_(?P<pos>\d+_\d+_\d+))$"
)
_VACATION_PATTERN = re.compile(
    r"^vacation_(?:start_(?P<start>\d{4}-\d{2}-\d{2})"
    r"|days_(?P<from>\d{4}-\d{2}-\d{2})_(?P<days>\d+)"
    r"|(?P<decision>approve|reject)_(?P<request_id>[A-Za-z0-9_]+))$"
)
_VACATION_KEYWORDS = re.compile(r"відпустк|vacation")
_MAIN_MENU_COMMANDS = {"/start", "/menu"}
_HELP_COMMANDS = {"/help"}


class RouteKind(StrEnum):
    MAIN_MENU = "main_menu"
    HELP = "help"
    STATUS_MENU = "status_menu"
    CALENDAR = "calendar"
    REPORT = "report"
    INVALID_DATE = "invalid_date"
    REGISTRATION_DEPARTMENTS = "registration_departments"
    REGISTRATION_TEAMS = "registration_teams"
    REGISTRATION_POSITIONS = "registration_positions"
    REGISTRATION_COMPLETE = "registration_complete"
    VACATION_MENU = "vacation_menu"
    VACATION_DURATION = "vacation_duration"
    VACATION_REQUEST = "vacation_request"
    VACATION_DECISION = "vacation_decision"
    UNKNOWN = "unknown"


# Rotas liberadas apenas para quem está no diretório.
_STATUS_ROUTES = frozenset(
    {RouteKind.MAIN_MENU, RouteKind.STATUS_MENU, RouteKind.CALENDAR, RouteKind.REPORT}
)
_VACATION_ROUTES = frozenset(
    {RouteKind.VACATION_MENU, RouteKind.VACATION_DURATION, RouteKind.VACATION_REQUEST}
)


@dataclass(frozen=True, slots=True)
class Route:
    """Destino resolvido para um texto ou payload de botão.

    Em REPORT, a data é `target_date` (explícita) ou hoje + `day_offset`.
    Registro carrega os índices escolhidos em `choice`; férias usam
    `target_date` como início, `days`, `request_id` e `approved`.
    """

    kind: RouteKind
    status: StatusType | None = None
    day_offset: int = 0
    target_date: date | None = None
    choice: tuple[int, ...] = ()
    days: int = 0
    request_id: str | None = None
    approved: bool = False

    def resolve_date(self, today: date) -> date:
        if self.target_date is not None:
            return self.target_date
        return today + timedelta(days=self.day_offset)


def resolve_message(text: str | None) -> Route:
    """Comandos primeiro, depois status, depois férias; padrão = ajuda."""
    stripped = (text or "").strip()
    command = stripped.split(maxsplit=1)[0].split("@", 1)[0].lower() if stripped else ""

    if command in _MAIN_MENU_COMMANDS:
        return Route(RouteKind.MAIN_MENU)
    if command in _HELP_COMMANDS:
        return Route(RouteKind.HELP)

    status = detect_status(stripped)
    if status is not None:
        return Route(RouteKind.REPORT, status=status)
    if _VACATION_KEYWORDS.search(stripped.lower()):
        return Route(RouteKind.VACATION_MENU)
    return Route(RouteKind.HELP)


def _indices(raw: str) -> tuple[int, ...]:
    return tuple(int(part) for part in raw.split("_"))


def _resolve_registration(data: str) -> Route | None:
    if data == keyboards.REGISTRATION_START_CALLBACK:
        return Route(RouteKind.REGISTRATION_DEPARTMENTS)
    match = _REGISTRATION_PATTERN.match(data)
    if match is None:
        return None
    if match["dep"] is not None:
        return Route(RouteKind.REGISTRATION_TEAMS, choice=_indices(match["dep"]))
    if match["team"] is not None:
        return Route(RouteKind.REGISTRATION_POSITIONS, choice=_indices(match["team"]))
    return Route(RouteKind.REGISTRATION_COMPLETE, choice=_indices(match["pos"]))


def _resolve_vacation(data: str) -> Route | None:
    if data == keyboards.VACATION_MENU_CALLBACK:
        return Route(RouteKind.VACATION_MENU)
    match = _VACATION_PATTERN.match(data)
    if match is None:
        return None
    if match["decision"] is not None:
        return Route(
            RouteKind.VACATION_DECISION,
            request_id=match["request_id"],
            approved=match["decision"] == "approve",
        )

    start = parse_iso_date(match["start"] or match["from"])
    if start is None:
        return Route(RouteKind.INVALID_DATE)
    if match["days"] is None:
        return Route(RouteKind.VACATION_DURATION, target_date=start)
    return Route(RouteKind.VACATION_REQUEST, target_date=start, days=int(match["days"]))


def resolve_callback(data: str | None) -> Route:
    """Mapeia callback_data dos teclados inline para uma rota."""
    data = data or ""
    if data == keyboards.MAIN_MENU_CALLBACK:
        return Route(RouteKind.MAIN_MENU)

    route = _resolve_registration(data) or _resolve_vacation(data)
    if route is not None:
        return route

    match = _CALLBACK_PATTERN.match(data)
    if match is None:
        return Route(RouteKind.UNKNOWN)

    status = StatusType(match["status"])
    action = match["action"]

    if action is None or action == "menu":
        return Route(RouteKind.STATUS_MENU, status=status)
    if action == "today":
        return Route(RouteKind.REPORT, status=status)
    if action == "tomorrow":
        return Route(RouteKind.REPORT, status=status, day_offset=1)
    if action == "other":
        return Route(RouteKind.CALENDAR, status=status)

    target = parse_iso_date(match["date"])
    if target is None:
        return Route(RouteKind.INVALID_DATE, status=status)
    return Route(RouteKind.REPORT, status=status, target_date=target)


class UpdateDispatcher:
    """Executa a rota de cada update (mensagem ou clique)."""

    def __init__(
        self,
        telegram: TelegramClient,
        status_service: StatusService,
        registration: RegistrationService,
        vacations: VacationService,
        *,
        timezone: str,
        registration_required: bool = True,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._telegram = telegram
        self._status = status_service
        self._registration = registration
        self._vacations = vacations
        self._registration_required = registration_required
        self._today = today or (lambda: local_today(timezone))

    async def dispatch(self, update: TelegramUpdate) -> None:
        if update.message is not None:
            await self._on_message(update.message)
        elif update.callback_query is not None:
            await self._on_callback(update.callback_query)
        else:
            logger.info("update_without_handler", extra={"update_id": update.update_id})

    async def _on_message(self, message: TelegramMessage) -> None:
        sender = Sender.from_user(message.from_user, message.chat.id)
        route = resolve_message(message.text)
        logger.info("message_routed", extra={"route": route.kind.value})
        await self._execute(route, sender, message.text or "")

    async def _on_callback(self, callback: TelegramCallbackQuery) -> None:
        await self._telegram.answer_callback_query(callback.id)

        chat_id = callback.message.chat.id if callback.message else callback.from_user.id
        sender = Sender.from_user(callback.from_user, chat_id)
        route = resolve_callback(callback.data)
        logger.info("callback_routed", extra={"route": route.kind.value})
        await self._execute(route, sender, texts.BUTTON_DETAILS)

    def _requires_employee(self, kind: RouteKind) -> bool:
        if kind in _VACATION_ROUTES:
            return True
        return self._registration_required and kind in _STATUS_ROUTES

    async def _execute(self, route: Route, sender: Sender, details: str) -> None:
        if await self._register(route, sender):
            return

        if route.kind is RouteKind.VACATION_DECISION and route.request_id is not None:
            approver = await self._registration.lookup(sender.user_id)
            await self._vacations.decide(
                approver, sender.chat_id, route.request_id, route.approved
            )
            return

        employee: Employee | None = None
        if self._requires_employee(route.kind):
            employee = await self._registration.lookup(sender.user_id)
            if employee is None:
                logger.info("unregistered_user", extra={"route": route.kind.value})
                await self._registration.prompt(sender)
                return

        if route.kind is RouteKind.REPORT and route.status is not None:
            await self._status.report(
                sender, route.status, route.resolve_date(self._today()), details
            )
        elif employee is not None and route.kind in _VACATION_ROUTES:
            await self._vacation(route, employee, sender.chat_id)
        else:
            await self._render(route, sender.chat_id)

    async def _register(self, route: Route, sender: Sender) -> bool:
        """Passos do registro; True se a rota era de registro."""
        chat_id = sender.chat_id
        if route.kind is RouteKind.REGISTRATION_DEPARTMENTS:
            await self._registration.show_departments(chat_id)
        elif route.kind is RouteKind.REGISTRATION_TEAMS:
            await self._registration.show_teams(chat_id, *route.choice)
        elif route.kind is RouteKind.REGISTRATION_POSITIONS:
            await self._registration.show_positions(chat_id, *route.choice)
        elif route.kind is RouteKind.REGISTRATION_COMPLETE:
            await self._registration.complete(sender, *route.choice)
        else:
            return False
        return True

    async def _vacation(self, route: Route, employee: Employee, chat_id: int) -> None:
        if route.kind is RouteKind.VACATION_MENU:
            await self._vacations.show_menu(employee, chat_id)
        elif route.target_date is None:
            await self._telegram.send_message(chat_id, texts.INVALID_DATE)
        elif route.kind is RouteKind.VACATION_DURATION:
            await self._vacations.show_durations(chat_id, route.target_date)
        else:
            await self._vacations.request(employee, chat_id, route.target_date, route.days)

    async def _render(self, route: Route, chat_id: int) -> None:
        """Rotas que apenas respondem com texto e teclado."""
        send = self._telegram.send_message
        status = route.status

        if route.kind is RouteKind.MAIN_MENU:
            await send(chat_id, texts.WELCOME, keyboards.main_menu_keyboard())
        elif route.kind is RouteKind.HELP:
            await send(chat_id, texts.HELP, keyboards.help_keyboard())
        elif route.kind is RouteKind.STATUS_MENU and status is not None:
            await send(chat_id, texts.status_menu(status), keyboards.status_menu_keyboard(status))
        elif route.kind is RouteKind.CALENDAR and status is not None:
            await send(
                chat_id,
                texts.calendar_prompt(status),
                keyboards.calendar_keyboard(status, self._today()),
            )
        elif route.kind is RouteKind.INVALID_DATE:
            await send(chat_id, texts.INVALID_DATE)
        else:
            await send(chat_id, texts.UNKNOWN_COMMAND, keyboards.main_menu_keyboard())
