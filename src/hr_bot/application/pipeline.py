"""Ciclo de vida de um update recebido pelo webhook.

RECEIVED -> (guarda ocupada: dropped_busy) -> (malformado: dropped_malformed)
-> (duplicado: dropped_duplicate) -> MARKED -> dispatched | failed

Roda depois do ack HTTP. Nunca levanta e nunca faz retry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

import anyio

from hr_bot.adapters.telegram.parser import parse_update
from hr_bot.application.dedupe.deduplicator import UpdateDeduplicator
from hr_bot.application.dispatcher import UpdateDispatcher
from hr_bot.application.single_flight import SingleFlightGuard
from hr_bot.domain.enums import UpdateOutcome
from hr_bot.domain.models import ErrorRecord
from hr_bot.infra.records import ErrorLogStore
from hr_bot.observability.logging import get_logger
from hr_bot.observability.middleware import set_correlation_id
from hr_bot.observability.timing import timed

logger: logging.Logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class UpdatePipeline:
    def __init__(
        self,
        deduplicator: UpdateDeduplicator,
        dispatcher: UpdateDispatcher,
        guard: SingleFlightGuard,
        error_log: ErrorLogStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._deduplicator = deduplicator
        self._dispatcher = dispatcher
        self._guard = guard
        self._error_log = error_log
        self._clock = clock

    async def process(self, raw_body: bytes, correlation_id: str | None = None) -> UpdateOutcome:
        """Processa um corpo de webhook até um estado terminal."""
        if correlation_id:
            set_correlation_id(correlation_id)

        async with self._guard.try_hold() as held:
            if not held:
                logger.info("update_dropped_busy")
                return UpdateOutcome.DROPPED_BUSY

            try:
                outcome = await self._process_held(raw_body)
            except Exception as exc:  # noqa: BLE001
                logger.exception("update_processing_failed")
                await self._record_error(exc)
                outcome = UpdateOutcome.FAILED

        logger.info("update_finished", extra={"outcome": outcome.value})
        return outcome

    async def _process_held(self, raw_body: bytes) -> UpdateOutcome:
        update = parse_update(raw_body)
        if update is None:
            return UpdateOutcome.DROPPED_MALFORMED

        update_id = update.update_id
        with timed("dedupe_claim", update_id=update_id):
            claimed = await anyio.to_thread.run_sync(self._deduplicator.claim, update_id)

        if not claimed:
            logger.info("update_duplicate_dropped", extra={"update_id": update_id})
            return UpdateOutcome.DROPPED_DUPLICATE

        with timed("dispatch", update_id=update_id, kind=update.kind):
            await self._dispatcher.dispatch(update)
        return UpdateOutcome.DISPATCHED

    async def _record_error(self, exc: Exception) -> None:
        entry = ErrorRecord(
            function="UpdatePipeline.process",
            message=f"{type(exc).__name__}: {exc}",
            occurred_at=self._clock(),
        )
        try:
            await anyio.to_thread.run_sync(self._error_log.record, entry)
        except Exception:  # noqa: BLE001
            logger.exception("error_log_unavailable")
