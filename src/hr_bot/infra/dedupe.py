"""Stores de deduplicação de updates do Telegram.

Este módulo define o contrato comum e o cache efêmero:
- DedupeStore: contrato (mark_if_new / is_duplicate / clear)
- BoundedDedupeStore: stores com limite de entradas (log durável, janela rolante)
- InMemoryDedupeStore / RedisDedupeStore: cache efêmero com TTL

Regra: stores NUNCA decidem a política de falha. Qualquer erro de backend vira
DedupeError e quem decide (fail-closed ou fail-open) é o UpdateDeduplicator,
de forma única para todos os caminhos.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from hr_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

DEFAULT_CACHE_PREFIX = "processed_"


class DedupeError(Exception):
    """Falha de backend de dedupe (conexão, quota, formato inesperado)."""


class DedupeStore(ABC):
    """Contrato abstrato para stores de deduplicação.

    Chaves são o update_id em texto (ex.: "42").
    """

    name: str = "store"

    @abstractmethod
    def mark_if_new(self, key: str) -> bool:
        """Marca a chave se não existir.

        Returns:
            True se a chave foi marcada agora (update novo)
            False se a chave já existia (duplicado)

        Raises:
            DedupeError: falha no backend
        """

    @abstractmethod
    def is_duplicate(self, key: str) -> bool:
        """Apenas verifica se a chave existe, sem marcar.

        Raises:
            DedupeError: falha no backend
        """

    @abstractmethod
    def clear(self, key: str) -> bool:
        """Remove a chave (rollback/testes). Retorna True se existia."""


class BoundedDedupeStore(DedupeStore):
    """Store com número máximo de entradas; as mais antigas saem primeiro."""

    @property
    @abstractmethod
    def max_entries(self) -> int:
        """Limite de entradas retidas."""

    @abstractmethod
    def trim(self) -> int:
        """Remove excedentes acima do limite. Retorna quantas entradas saíram."""


@dataclass(slots=True)
class InMemoryDedupeStore(DedupeStore):
    """Cache efêmero em memória para desenvolvimento e testes.

    Não persiste entre restarts e não é compartilhado entre instâncias.
    """

    name = "memory_cache"

    ttl_seconds: int = 10800
    _seen: dict[str, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def mark_if_new(self, key: str) -> bool:
        with self._lock:
            self._cleanup_expired()
            if key in self._seen:
                return False
            self._seen[key] = time.time()
            return True

    def is_duplicate(self, key: str) -> bool:
        with self._lock:
            self._cleanup_expired()
            return key in self._seen

    def clear(self, key: str) -> bool:
        return self._seen.pop(key, None) is not None

    def _cleanup_expired(self) -> None:
        """Remove chaves expiradas (TTL simulado)."""
        now = time.time()
        expired = [k for k, ts in self._seen.items() if now - ts > self.ttl_seconds]
        for k in expired:
            del self._seen[k]


class RedisDedupeStore(DedupeStore):
    """Cache efêmero em Redis com TTL nativo.

    mark_if_new usa SET NX EX: é o insert-if-absent atômico que resolve a
    corrida entre instâncias.
    """

    name = "redis_cache"

    def __init__(
        self,
        redis_url: str | None = None,
        ttl_seconds: int = 10800,
        key_prefix: str = DEFAULT_CACHE_PREFIX,
        client: Any = None,
    ) -> None:
        self._redis_url = redis_url
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix
        self._client = client

    def _get_client(self):
        """Retorna cliente Redis (lazy loading)."""
        if self._client is None:
            import redis

            try:
                self._client = redis.from_url(
                    self._redis_url,
                    decode_responses=True,
                    socket_timeout=5.0,
                    socket_connect_timeout=5.0,
                )
            except Exception as exc:  # noqa: BLE001
                raise DedupeError(f"Não foi possível conectar ao Redis: {exc}") from exc
            logger.info(
                "redis_dedupe_client_created",
                extra={"url": (self._redis_url or "").split("@")[-1]},
            )
        return self._client

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def mark_if_new(self, key: str) -> bool:
        client = self._get_client()
        try:
            was_set = client.set(self._make_key(key), "processed", nx=True, ex=self._ttl_seconds)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "redis_dedupe_error",
                extra={"operation": "mark_if_new", "error_type": type(exc).__name__},
            )
            raise DedupeError(f"Falha ao marcar dedupe: {exc}") from exc
        return bool(was_set)

    def is_duplicate(self, key: str) -> bool:
        client = self._get_client()
        try:
            return client.exists(self._make_key(key)) > 0
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "redis_dedupe_error",
                extra={"operation": "is_duplicate", "error_type": type(exc).__name__},
            )
            raise DedupeError(f"Falha ao verificar duplicata: {exc}") from exc

    def clear(self, key: str) -> bool:
        try:
            return self._get_client().delete(self._make_key(key)) > 0
        except Exception as exc:  # noqa: BLE001
            logger.warning("redis_dedupe_clear_failed", extra={"error_type": type(exc).__name__})
            return False


def create_dedupe_store(settings: Settings, redis_client: Any = None) -> DedupeStore:
    """Factory do cache efêmero conforme settings.dedupe_backend.

    - "memory": InMemoryDedupeStore (dev/testes)
    - "redis": RedisDedupeStore (produção)
    - "firestore": FirestoreDedupeStore (produção alternativa)

    Raises:
        ValueError: backend não reconhecido ou configuração ausente
    """
    backend = settings.dedupe_backend.lower()
    ttl = settings.dedupe_ttl_seconds

    if backend == "memory":
        logger.info("Usando InMemoryDedupeStore (apenas dev/testes)", extra={"ttl_seconds": ttl})
        return InMemoryDedupeStore(ttl_seconds=ttl)

    if backend == "redis":
        if not settings.redis_url and redis_client is None:
            raise ValueError("REDIS_URL é obrigatório quando dedupe_backend=redis")
        logger.info("Usando RedisDedupeStore", extra={"ttl_seconds": ttl})
        return RedisDedupeStore(redis_url=settings.redis_url, ttl_seconds=ttl, client=redis_client)

    if backend == "firestore":
        project_id = settings.firestore_project_id or settings.gcp_project
        if not project_id:
            raise ValueError("FIRESTORE_PROJECT_ID ou GCP_PROJECT é obrigatório para firestore")

        from google.cloud import firestore

        from hr_bot.infra.dedupe_firestore import FirestoreDedupeStore

        client = firestore.Client(project=project_id, database=settings.firestore_database_id)
        logger.info(
            "Usando FirestoreDedupeStore",
            extra={"ttl_seconds": ttl, "project_id": project_id},
        )
        return FirestoreDedupeStore(client=client, ttl_seconds=ttl)

    raise ValueError(f"Backend de dedupe não reconhecido: {backend}")
