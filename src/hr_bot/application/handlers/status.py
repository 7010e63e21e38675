"""Registro de status do colaborador (atraso, remoto, doença).

Fluxo: grava linha na aba de status -> confirma ao colaborador -> avisa o
chat do RH. Falha ao gravar vira mensagem de erro ao usuário e linha na aba
de erros; nenhum aviso ao RH é enviado nesse caso.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, date, datetime

import anyio

from hr_bot.adapters.telegram.client import TelegramClient
from hr_bot.application import texts
from hr_bot.domain.enums import StatusType
from hr_bot.domain.models import ErrorRecord, Sender, StatusRecord
from hr_bot.infra.records import ErrorLogStore, StatusRecordStore
from hr_bot.observability.logging import get_logger
from hr_bot.utils.dates import to_local

logger: logging.Logger = get_logger(__name__)

# Ordem importa: o primeiro padrão que casar define o status.
_STATUS_PATTERNS: tuple[tuple[StatusType, re.Pattern[str]], ...] = (
    (StatusType.LATE, re.compile(r"спізн|запізн|пізн")),
    (StatusType.REMOTE, re.compile(r"ремоут|віддален|дома|remote")),
    (StatusType.SICK, re.compile(r"лікарн|хвор|sick|температур")),
)


def detect_status(text: str) -> StatusType | None:
    """Reconhece o status em texto livre (case-insensitive)."""
    lowered = text.lower()
    for status, pattern in _STATUS_PATTERNS:
        if pattern.search(lowered):
            return status
    return None


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class StatusService:
    def __init__(
        self,
        telegram: TelegramClient,
        records: StatusRecordStore,
        error_log: ErrorLogStore,
        *,
        hr_chat_id: str | None,
        timezone: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._telegram = telegram
        self._records = records
        self._error_log = error_log
        self._hr_chat_id = hr_chat_id
        self._timezone = timezone
        self._clock = clock

    async def report(
        self,
        sender: Sender,
        status: StatusType,
        target_date: date,
        details: str,
    ) -> bool:
        """Grava e notifica. Retorna False se a gravação falhou."""
        recorded_at = self._clock()
        record = StatusRecord(
            sender=sender,
            status=status,
            status_date=target_date,
            details=details,
            recorded_at=recorded_at,
        )

        try:
            await anyio.to_thread.run_sync(self._records.append, record)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "status_record_failed",
                extra={"status": status.value, "error_type": type(exc).__name__},
            )
            error = ErrorRecord(
                function="StatusService.report", message=str(exc), occurred_at=recorded_at
            )
            await anyio.to_thread.run_sync(self._error_log.record, error)
            await self._telegram.send_message(sender.chat_id, texts.SAVE_FAILED)
            return False

        local_time = to_local(recorded_at, self._timezone)
        await self._telegram.send_message(
            sender.chat_id, texts.status_confirmation(status, target_date, local_time)
        )
        if self._hr_chat_id:
            await self._telegram.send_message(
                self._hr_chat_id,
                texts.hr_notification(sender, status, target_date, details, local_time),
            )
        else:
            logger.warning("hr_chat_not_configured", extra={"status": status.value})

        logger.info(
            "status_recorded",
            extra={"status": status.value, "status_date": target_date.isoformat()},
        )
        return True
