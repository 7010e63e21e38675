"""Detecção e registro de updates já processados.

Três stores, consultados sempre na mesma ordem:

1. cache efêmero (TTL, insert-if-absent atômico)
2. log durável (append-only, retenção limitada)
3. janela rolante (últimos M ids)

A política de falha (DEDUPE_FAIL_POLICY) é decidida aqui, uma única vez, e
vale para detect e claim. Stores apenas levantam DedupeError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from hr_bot.domain.enums import FailPolicy
from hr_bot.domain.models import ErrorRecord
from hr_bot.infra.dedupe import BoundedDedupeStore, DedupeError, DedupeStore
from hr_bot.infra.records import ErrorLogStore
from hr_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class CleanupResult:
    """Resultado da manutenção: entradas removidas por store e falhas."""

    removed: dict[str, int] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class UpdateDeduplicator:
    """Idempotência de updates do Telegram sobre os três stores."""

    def __init__(
        self,
        cache: DedupeStore,
        durable: BoundedDedupeStore,
        rolling: BoundedDedupeStore,
        *,
        policy: FailPolicy = FailPolicy.CLOSED,
        error_log: ErrorLogStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._cache = cache
        self._durable = durable
        self._rolling = rolling
        self._policy = policy
        self._error_log = error_log
        self._clock = clock

    @property
    def policy(self) -> FailPolicy:
        return self._policy

    @property
    def stores(self) -> tuple[DedupeStore, ...]:
        """Ordem de consulta: efêmero, durável, rolante."""
        return (self._cache, self._durable, self._rolling)

    def detect(self, update_id: int) -> bool:
        """True se o update já foi visto (ou se fail-closed disparou).

        Para no primeiro store positivo.
        """
        key = str(update_id)
        for store in self.stores:
            try:
                seen = store.is_duplicate(key)
            except DedupeError as exc:
                if self._policy is FailPolicy.CLOSED:
                    self._alert(store, "detect", update_id, exc)
                    return True
                logger.warning(
                    "dedupe_store_unavailable_fail_open",
                    extra={"store": store.name, "update_id": update_id},
                )
                continue

            if seen:
                logger.info(
                    "update_seen",
                    extra={"store": store.name, "update_id": update_id},
                )
                return True
        return False

    def record(self, update_id: int) -> list[str]:
        """Marca o update nos três stores.

        Falha em um store não impede os outros. Retorna os nomes dos stores
        que falharam (lista vazia = tudo gravado).
        """
        return self._record_in(self.stores, str(update_id), update_id)

    def claim(self, update_id: int) -> bool:
        """Reivindica o processamento do update.

        detect -> insert-if-absent atômico no cache efêmero -> record nos
        demais. Só a invocação que venceu o insert recebe True.
        """
        if self.detect(update_id):
            return False

        key = str(update_id)
        try:
            won = self._cache.mark_if_new(key)
        except DedupeError as exc:
            if self._policy is FailPolicy.CLOSED:
                self._alert(self._cache, "claim", update_id, exc)
                return False
            logger.warning(
                "dedupe_claim_unavailable_fail_open",
                extra={"store": self._cache.name, "update_id": update_id},
            )
            won = True

        if not won:
            logger.info("update_claim_lost", extra={"update_id": update_id})
            return False

        self._record_in((self._durable, self._rolling), key, update_id)
        return True

    def cleanup(self) -> CleanupResult:
        """Poda log durável e janela rolante aos seus limites."""
        result = CleanupResult()
        for store in (self._durable, self._rolling):
            try:
                result.removed[store.name] = store.trim()
            except DedupeError as exc:
                logger.error(
                    "dedupe_cleanup_failed",
                    extra={"store": store.name, "error_type": type(exc).__name__},
                )
                self._write_error("UpdateDeduplicator.cleanup", f"{store.name}: {exc}")
                result.failed.append(store.name)

        logger.info(
            "dedupe_cleanup_finished",
            extra={"removed": result.removed, "failed": result.failed},
        )
        return result

    def _record_in(self, stores: Sequence[DedupeStore], key: str, update_id: int) -> list[str]:
        failed: list[str] = []
        for store in stores:
            try:
                store.mark_if_new(key)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "dedupe_record_partial_failure",
                    extra={
                        "store": store.name,
                        "update_id": update_id,
                        "error_type": type(exc).__name__,
                    },
                )
                failed.append(store.name)
        return failed

    def _alert(self, store: DedupeStore, operation: str, update_id: int, exc: Exception) -> None:
        """Fail-closed: update descartado; alerta em log e na aba de erros."""
        logger.error(
            "dedupe_fail_closed_alert",
            extra={
                "store": store.name,
                "operation": operation,
                "update_id": update_id,
                "error_type": type(exc).__name__,
            },
        )
        self._write_error(
            f"UpdateDeduplicator.{operation}",
            f"{store.name} indisponível; update {update_id} descartado: {exc}",
        )

    def _write_error(self, function: str, message: str) -> None:
        if self._error_log is None:
            return
        self._error_log.record(
            ErrorRecord(function=function, message=message, occurred_at=self._clock())
        )
