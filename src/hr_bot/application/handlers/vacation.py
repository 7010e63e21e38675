"""Solicitação de férias com aprovação do RH.

Fluxo: data de início -> duração -> validação (saldo, limite, conflito na
equipe) -> grava como pendente -> RH aprova ou rejeita pelo botão. Só RH e
CEO decidem; cada solicitação é decidida uma única vez.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

import anyio

from hr_bot.adapters.telegram import keyboards
from hr_bot.adapters.telegram.client import TelegramClient
from hr_bot.application import texts
from hr_bot.domain.enums import VacationStatus
from hr_bot.domain.models import Employee, ErrorRecord, VacationBalance, VacationRequest
from hr_bot.infra.records import ErrorLogStore
from hr_bot.infra.vacations import VacationStore
from hr_bot.observability.logging import get_logger
from hr_bot.utils.dates import to_local

logger: logging.Logger = get_logger(__name__)

_BLOCKING_STATUSES = frozenset({VacationStatus.PENDING_HR, VacationStatus.APPROVED})


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def used_days(requests: list[VacationRequest], telegram_id: int, year: int) -> int:
    """Dias aprovados do colaborador com início no ano informado."""
    return sum(
        item.days
        for item in requests
        if item.telegram_id == telegram_id
        and item.status is VacationStatus.APPROVED
        and item.start_date.year == year
    )


def team_conflicts(
    requests: list[VacationRequest], employee: Employee, start: date, end: date
) -> list[VacationRequest]:
    """Férias pendentes ou aprovadas de colegas da mesma equipe que cruzam o período."""
    return [
        item
        for item in requests
        if item.telegram_id != employee.telegram_id
        and item.department == employee.department
        and item.team == employee.team
        and item.status in _BLOCKING_STATUSES
        and item.overlaps(start, end)
    ]


class VacationService:
    def __init__(
        self,
        telegram: TelegramClient,
        vacations: VacationStore,
        error_log: ErrorLogStore,
        *,
        hr_chat_id: str | None,
        timezone: str,
        annual_days: int = 24,
        max_days: int = 7,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._telegram = telegram
        self._vacations = vacations
        self._error_log = error_log
        self._hr_chat_id = hr_chat_id
        self._timezone = timezone
        self._annual_days = annual_days
        self._max_days = max_days
        self._clock = clock

    def _today(self) -> date:
        return to_local(self._clock(), self._timezone).date()

    def _balance(self, requests: list[VacationRequest], employee: Employee) -> VacationBalance:
        used = used_days(requests, employee.telegram_id, self._today().year)
        return VacationBalance(total=self._annual_days, used=used)

    async def balance(self, employee: Employee) -> VacationBalance:
        requests = await anyio.to_thread.run_sync(self._vacations.list_all)
        return self._balance(requests, employee)

    async def show_menu(self, employee: Employee, chat_id: int) -> None:
        balance = await self.balance(employee)
        await self._telegram.send_message(
            chat_id,
            texts.vacation_menu(balance, self._max_days),
            keyboards.vacation_start_keyboard(self._today()),
        )

    async def show_durations(self, chat_id: int, start: date) -> None:
        if start <= self._today():
            await self._telegram.send_message(chat_id, texts.VACATION_PAST_DATE)
            return
        await self._telegram.send_message(
            chat_id,
            texts.vacation_pick_days(start),
            keyboards.vacation_days_keyboard(start, self._max_days),
        )

    async def request(
        self, employee: Employee, chat_id: int, start: date, days: int
    ) -> VacationRequest | None:
        """Valida e grava a solicitação pendente; None se recusada ou não gravada."""
        send = self._telegram.send_message
        if start <= self._today():
            await send(chat_id, texts.VACATION_PAST_DATE)
            return None
        if not 1 <= days <= self._max_days:
            await send(chat_id, texts.VACATION_DAYS_OUT_OF_RANGE)
            return None

        existing = await anyio.to_thread.run_sync(self._vacations.list_all)
        balance = self._balance(existing, employee)
        if days > balance.available:
            await send(chat_id, texts.vacation_insufficient(balance, days))
            return None

        end = start + timedelta(days=days - 1)
        conflicts = team_conflicts(existing, employee, start, end)
        if conflicts:
            logger.info("vacation_team_conflict", extra={"conflicts": len(conflicts)})
            await send(chat_id, texts.vacation_conflict(conflicts))
            return None

        created_at = self._clock()
        request = VacationRequest(
            request_id=f"VAC_{int(created_at.timestamp() * 1000)}_{employee.telegram_id}",
            telegram_id=employee.telegram_id,
            full_name=employee.full_name,
            department=employee.department,
            team=employee.team,
            start_date=start,
            days=days,
            created_at=created_at,
        )
        if not await self._save(self._vacations.add, request, chat_id, "VacationService.request"):
            return None

        await send(chat_id, texts.vacation_submitted(request))
        if self._hr_chat_id:
            await send(
                self._hr_chat_id,
                texts.vacation_hr_request(request, balance),
                keyboards.vacation_decision_keyboard(request.request_id),
            )
        else:
            logger.warning("hr_chat_not_configured", extra={"request_id": request.request_id})

        logger.info(
            "vacation_requested", extra={"request_id": request.request_id, "days": days}
        )
        return request

    async def decide(
        self, approver: Employee | None, chat_id: int, request_id: str, approved: bool
    ) -> VacationRequest | None:
        """Aprova ou rejeita uma solicitação pendente; None se nada mudou."""
        send = self._telegram.send_message
        if approver is None or not approver.can_approve:
            logger.warning("vacation_decision_denied", extra={"request_id": request_id})
            await send(chat_id, texts.VACATION_ACCESS_DENIED)
            return None

        request = await anyio.to_thread.run_sync(self._vacations.get, request_id)
        if request is None:
            await send(chat_id, texts.vacation_not_found(request_id))
            return None
        if not request.is_pending:
            await send(chat_id, texts.vacation_already_decided(request))
            return None

        decided = request.decide(approved, approver.full_name, self._clock())
        if not await self._save(self._vacations.update, decided, chat_id, "VacationService.decide"):
            return None

        await send(chat_id, texts.vacation_decision_for_hr(decided))
        await send(decided.telegram_id, texts.vacation_decision_for_employee(decided))
        logger.info(
            "vacation_decided",
            extra={"request_id": request_id, "status": decided.status.value},
        )
        return decided

    async def _save(
        self,
        write: Callable[[VacationRequest], None],
        request: VacationRequest,
        chat_id: int,
        function: str,
    ) -> bool:
        try:
            await anyio.to_thread.run_sync(write, request)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "vacation_save_failed",
                extra={"request_id": request.request_id, "error_type": type(exc).__name__},
            )
            error = ErrorRecord(function=function, message=str(exc), occurred_at=self._clock())
            await anyio.to_thread.run_sync(self._error_log.record, error)
            await self._telegram.send_message(chat_id, texts.SAVE_FAILED)
            return False
        return True
