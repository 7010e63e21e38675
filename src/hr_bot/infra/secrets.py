"""Leitura de segredos (env em dev, Google Secret Manager em staging/prod).

Nenhuma implementação pode logar o valor de um segredo, apenas o nome.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol

from hr_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class SecretProvider(Protocol):
    """Porta para leitura de segredos.

    get_secret levanta RuntimeError quando o segredo não existe.
    """

    def get_secret(self, name: str, version: str = "latest") -> str:
        """Obtém o valor do segredo."""

    def secret_exists(self, name: str) -> bool:
        """Verifica existência sem retornar o valor."""


class EnvSecretProvider:
    """Segredos via variáveis de ambiente (desenvolvimento, CI e testes)."""

    def get_secret(self, name: str, version: str = "latest") -> str:
        value = os.getenv(name)
        if not value:
            logger.warning("secret_not_found", extra={"secret_name": name, "provider": "env"})
            raise RuntimeError(f"Secret {name} não encontrado no ambiente")
        return value

    def secret_exists(self, name: str) -> bool:
        return os.getenv(name) is not None


class SecretManagerProvider:
    """Segredos no Google Cloud Secret Manager.

    Usa Application Default Credentials; o cliente é criado na primeira leitura.
    """

    def __init__(self, project_id: str | None = None) -> None:
        self._project_id = project_id or os.getenv("GOOGLE_CLOUD_PROJECT")
        self._client = None

    def _get_client(self):
        if self._client is None:
            from google.cloud import secretmanager

            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def _secret_path(self, name: str) -> str:
        if not self._project_id:
            raise RuntimeError("project_id não configurado (GOOGLE_CLOUD_PROJECT)")
        return f"projects/{self._project_id}/secrets/{name}"

    def get_secret(self, name: str, version: str = "latest") -> str:
        client = self._get_client()
        path = f"{self._secret_path(name)}/versions/{version}"
        try:
            response = client.access_secret_version(name=path)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "secret_manager_access_failed",
                extra={"secret_name": name, "error_type": type(exc).__name__},
            )
            raise RuntimeError(f"Não foi possível acessar secret {name}") from exc

        logger.info("secret_loaded", extra={"secret_name": name, "provider": "secret_manager"})
        return response.payload.data.decode("utf-8")

    def secret_exists(self, name: str) -> bool:
        try:
            self._get_client().get_secret(name=self._secret_path(name))
        except Exception:  # noqa: BLE001
            return False
        return True


def create_secret_provider(backend: str = "env", project_id: str | None = None) -> SecretProvider:
    """Factory do provider de segredos: env | secret_manager."""
    if backend == "env":
        return EnvSecretProvider()
    if backend == "secret_manager":
        logger.info("Usando SecretManagerProvider", extra={"project_id": project_id})
        return SecretManagerProvider(project_id=project_id)
    raise ValueError(f"Backend de secrets não reconhecido: {backend}")
