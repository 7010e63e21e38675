"""Janela rolante dos update_ids mais recentes em um slot chave-valor.

O slot guarda uma lista JSON (ex.: `["41", "42"]`) com no máximo M entradas.
Leitura-modificação-escrita não é atômica entre instâncias; dentro do
processo um lock serializa as escritas.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Any, Protocol

from hr_bot.infra.dedupe import BoundedDedupeStore, DedupeError
from hr_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

RECENT_UPDATES_SLOT = "recent_updates"


class PropertySlot(Protocol):
    """Pequeno armazenamento chave-valor persistente."""

    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str) -> None: ...


class InMemoryPropertySlot:
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value


class RedisPropertySlot:
    """Slot em uma chave Redis simples (sem TTL)."""

    def __init__(self, redis_client: Any, *, key_prefix: str = "hr_bot:props:") -> None:
        self._redis = redis_client
        self._prefix = key_prefix

    def get(self, name: str) -> str | None:
        value = self._redis.get(f"{self._prefix}{name}")
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, name: str, value: str) -> None:
        self._redis.set(f"{self._prefix}{name}", value)


class RollingDedupeStore(BoundedDedupeStore):
    """Últimos M update_ids vistos."""

    name = "rolling_window"

    def __init__(
        self,
        slot: PropertySlot,
        *,
        size: int = 50,
        slot_name: str = RECENT_UPDATES_SLOT,
    ) -> None:
        self._slot = slot
        self._size = size
        self._slot_name = slot_name
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._size

    def recent(self) -> list[str]:
        """IDs retidos, do mais antigo para o mais recente."""
        return self._load()

    def _load(self) -> list[str]:
        try:
            raw = self._slot.get(self._slot_name)
        except Exception as exc:  # noqa: BLE001
            logger.error("rolling_slot_read_failed", extra={"error_type": type(exc).__name__})
            raise DedupeError(f"Falha ao ler janela rolante: {exc}") from exc

        if not raw:
            return []
        try:
            values = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DedupeError("Janela rolante corrompida (JSON inválido)") from exc
        if not isinstance(values, list):
            raise DedupeError("Janela rolante corrompida (esperado lista)")
        return [str(value) for value in values]

    def _save(self, ids: list[str]) -> None:
        try:
            self._slot.set(self._slot_name, json.dumps(ids))
        except Exception as exc:  # noqa: BLE001
            logger.error("rolling_slot_write_failed", extra={"error_type": type(exc).__name__})
            raise DedupeError(f"Falha ao gravar janela rolante: {exc}") from exc

    def is_duplicate(self, key: str) -> bool:
        return key in self._load()

    def mark_if_new(self, key: str) -> bool:
        with self._lock:
            ids = self._load()
            if key in ids:
                return False
            ids.append(key)
            self._save(ids[-self._size :])
            return True

    def trim(self) -> int:
        with self._lock:
            ids = self._load()
            excess = len(ids) - self._size
            if excess <= 0:
                return 0
            self._save(ids[-self._size :])
            return excess

    def clear(self, key: str) -> bool:
        with self._lock:
            ids = self._load()
            if key not in ids:
                return False
            ids.remove(key)
            self._save(ids)
            return True


def create_rolling_store(settings: Settings, redis_client: Any = None) -> RollingDedupeStore:
    """Factory da janela rolante conforme settings.dedupe_rolling_backend."""
    backend = settings.dedupe_rolling_backend.lower()

    if backend == "memory":
        slot: PropertySlot = InMemoryPropertySlot()
    elif backend == "redis":
        if redis_client is None:
            raise ValueError("DEDUPE_ROLLING_BACKEND=redis requer cliente Redis")
        slot = RedisPropertySlot(redis_client)
    else:
        raise ValueError(f"Backend de janela rolante não reconhecido: {backend}")

    return RollingDedupeStore(slot, size=settings.dedupe_rolling_size)
