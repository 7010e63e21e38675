"""Registro do colaborador no diretório (departamento -> equipe -> cargo).

Os botões carregam índices da estrutura organizacional; o nome vem do
perfil do Telegram. Só o último passo grava no diretório.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

import anyio

from hr_bot.adapters.telegram import keyboards
from hr_bot.adapters.telegram.client import TelegramClient
from hr_bot.application import texts
from hr_bot.domain import org
from hr_bot.domain.models import Employee, ErrorRecord, Sender
from hr_bot.infra.directory import EmployeeDirectory
from hr_bot.infra.records import ErrorLogStore
from hr_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class RegistrationService:
    def __init__(
        self,
        telegram: TelegramClient,
        directory: EmployeeDirectory,
        error_log: ErrorLogStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._telegram = telegram
        self._directory = directory
        self._error_log = error_log
        self._clock = clock

    async def lookup(self, telegram_id: int) -> Employee | None:
        """Consulta o diretório; falhas propagam para o pipeline."""
        return await anyio.to_thread.run_sync(self._directory.find, telegram_id)

    async def prompt(self, sender: Sender) -> None:
        await self._telegram.send_message(
            sender.chat_id,
            texts.registration_welcome(sender.first_name),
            keyboards.registration_keyboard(),
        )

    async def show_departments(self, chat_id: int) -> None:
        await self._telegram.send_message(
            chat_id,
            texts.REGISTRATION_STEP_DEPARTMENT,
            keyboards.departments_keyboard(org.departments()),
        )

    async def show_teams(self, chat_id: int, department: int) -> None:
        names = org.teams(department)
        if names is None:
            await self._invalid_choice(chat_id)
            return
        await self._telegram.send_message(
            chat_id,
            texts.registration_step_team(org.departments()[department]),
            keyboards.teams_keyboard(department, names),
        )

    async def show_positions(self, chat_id: int, department: int, team: int) -> None:
        team_names = org.teams(department)
        names = org.positions(department, team)
        if team_names is None or names is None:
            await self._invalid_choice(chat_id)
            return
        team_name = team_names[team]
        await self._telegram.send_message(
            chat_id,
            texts.registration_step_position(team_name),
            keyboards.positions_keyboard(department, team, names),
        )

    async def complete(
        self, sender: Sender, department: int, team: int, position: int
    ) -> Employee | None:
        """Grava o colaborador. Retorna None se a escolha é inválida ou a gravação falhou."""
        resolved = org.resolve(department, team, position)
        if resolved is None:
            await self._invalid_choice(sender.chat_id)
            return None

        dept_name, team_name, position_name = resolved
        registered_at = self._clock()
        employee = Employee(
            telegram_id=sender.user_id,
            full_name=f"{sender.first_name} {sender.last_name}".strip(),
            department=dept_name,
            team=team_name,
            position=position_name,
            registered_at=registered_at,
        )

        try:
            await anyio.to_thread.run_sync(self._directory.register, employee)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "employee_registration_failed", extra={"error_type": type(exc).__name__}
            )
            error = ErrorRecord(
                function="RegistrationService.complete",
                message=str(exc),
                occurred_at=registered_at,
            )
            await anyio.to_thread.run_sync(self._error_log.record, error)
            await self._telegram.send_message(sender.chat_id, texts.REGISTRATION_FAILED)
            return None

        await self._telegram.send_message(
            sender.chat_id, texts.registration_complete(employee), keyboards.main_menu_keyboard()
        )
        logger.info("employee_registration_completed", extra={"department": dept_name})
        return employee

    async def _invalid_choice(self, chat_id: int) -> None:
        await self._telegram.send_message(
            chat_id, texts.INVALID_CHOICE, keyboards.registration_keyboard()
        )
