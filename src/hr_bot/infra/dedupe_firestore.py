"""Cache de dedupe em Firestore (escrita condicional com expires_at).

Responsabilidade:
- Registrar update_ids com `document.create()`, que falha se o documento já
  existe: é o insert-if-absent atômico usado pelo claim
- Expirar marcas pelo campo expires_at (política TTL do Firestore + checagem local)
- Regravar marca expirada só com precondição em `update_time`, para que apenas
  uma instância vença a disputa pelo mesmo documento
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore

from hr_bot.infra.dedupe import DedupeError, DedupeStore
from hr_bot.observability.logging import get_logger

logger = get_logger(__name__)

_EXISTS_ERRORS = (gcp_exceptions.Conflict, gcp_exceptions.AlreadyExists)


class FirestoreDedupeStore(DedupeStore):
    """Cache efêmero de updates processados em Firestore."""

    name = "firestore_cache"

    def __init__(
        self,
        client: firestore.Client,
        *,
        collection: str = "telegram_processed_updates",
        ttl_seconds: int = 10800,
    ) -> None:
        self._client = client
        self._collection = collection
        self._ttl_seconds = ttl_seconds

    def _doc(self, key: str):
        return self._client.collection(self._collection).document(key)

    def _expires_at(self) -> datetime:
        return datetime.now(UTC) + timedelta(seconds=self._ttl_seconds)

    def mark_if_new(self, key: str) -> bool:
        """Cria documento com ID=update_id; False se já existia e está vivo.

        Raises:
            DedupeError: qualquer falha de backend, inclusive na regravação
        """
        try:
            return self._claim(key)
        except DedupeError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "firestore_dedupe_error",
                extra={"operation": "mark_if_new", "error": type(exc).__name__},
            )
            raise DedupeError(f"Falha ao gravar dedupe no Firestore: {exc}") from exc

    def _claim(self, key: str) -> bool:
        doc = self._doc(key)
        try:
            doc.create(
                {
                    "status": "processed",
                    "created_at": firestore.SERVER_TIMESTAMP,
                    "expires_at": self._expires_at(),
                }
            )
            return True
        except _EXISTS_ERRORS:
            pass

        snapshot = doc.get()
        if not snapshot.exists:
            # Coletado pelo TTL entre o create e o get: nova tentativa de insert.
            try:
                doc.create({"status": "processed", "expires_at": self._expires_at()})
            except _EXISTS_ERRORS:
                return False
            return True

        if self._is_live(snapshot):
            return False

        option = self._client.write_option(last_update_time=snapshot.update_time)
        try:
            doc.update({"status": "processed", "expires_at": self._expires_at()}, option=option)
        except gcp_exceptions.FailedPrecondition:
            logger.info("firestore_dedupe_claim_lost", extra={"update_id": key})
            return False
        return True

    @staticmethod
    def _is_live(snapshot: Any) -> bool:
        data = snapshot.to_dict() or {}
        expires_at = data.get("expires_at")
        if isinstance(expires_at, datetime) and expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return not (expires_at and expires_at < datetime.now(UTC))

    def is_duplicate(self, key: str) -> bool:
        """True se o documento existe e ainda não expirou."""
        try:
            snapshot = self._doc(key).get()
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "firestore_dedupe_error",
                extra={"operation": "is_duplicate", "error": type(exc).__name__},
            )
            raise DedupeError(f"Falha ao consultar dedupe: {exc}") from exc

        return bool(snapshot.exists) and self._is_live(snapshot)

    def clear(self, key: str) -> bool:
        try:
            self._doc(key).delete()
            return True
        except Exception as exc:  # noqa: BLE001
            logger.warning("firestore_dedupe_clear_failed", extra={"error": type(exc).__name__})
            return False
