"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars ou do Secret Manager.
Nunca hardcode token do bot, ID da planilha ou chat do RH.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

from hr_bot.domain.enums import FailPolicy
from hr_bot.infra.secrets import create_secret_provider
from hr_bot.observability.logging import get_logger

TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"
TELEGRAM_SECRET_HEADER: str = "X-Telegram-Bot-Api-Secret-Token"

_CACHE_BACKENDS = {"memory", "redis", "firestore"}
_DURABLE_BACKENDS = {"memory", "sheets"}
_ROLLING_BACKENDS = {"memory", "redis"}
_FAIL_POLICIES = {policy.value for policy in FailPolicy}


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # Aplicação
    service_name: str = "hr_bot"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"  # json | text
    timezone: str = "Europe/Kyiv"
    correlation_id_header: str = "X-Correlation-ID"

    # Telegram Bot API
    telegram_bot_token: str | None = None
    telegram_webhook_secret: str | None = None  # Enviado pelo Telegram no header secreto
    telegram_webhook_url: str | None = None  # URL pública usada por setWebhook
    telegram_api_base_url: str = TELEGRAM_API_BASE_URL
    telegram_request_timeout_seconds: float = 10.0
    telegram_max_retries: int = 0  # Falhas de envio são logadas, não repetidas
    hr_chat_id: str | None = None  # Chat que recebe as notificações do RH

    # Planilha Google (banco de dados do RH)
    spreadsheet_id: str | None = None
    google_service_account_file: str | None = None
    google_service_account_json: str | None = None
    processed_updates_sheet: str = "ProcessedUpdates"
    statuses_sheet: str = "Statuses"
    errors_sheet: str = "Errors"
    employees_sheet: str = "Employees"
    vacations_sheet: str = "Vacations"
    records_backend: str = "memory"  # memory | sheets (status, erros, diretório, férias)

    # Colaboradores e férias
    registration_required: bool = True  # Status só para quem está no diretório
    vacation_annual_days: int = 24
    vacation_max_days: int = 7  # Máximo de dias por solicitação

    # Deduplicação de updates
    dedupe_backend: str = "memory"  # memory | redis | firestore (cache efêmero)
    redis_url: str | None = None
    dedupe_ttl_seconds: int = 10800  # 3 horas
    dedupe_durable_backend: str = "memory"  # memory | sheets
    dedupe_durable_retention: int = 1000
    dedupe_rolling_backend: str = "memory"  # memory | redis
    dedupe_rolling_size: int = 50
    dedupe_fail_policy: str = "closed"  # closed | open

    # Firestore (cache efêmero alternativo)
    firestore_project_id: str | None = None
    firestore_database_id: str = "(default)"
    gcp_project: str | None = None

    # Processamento do webhook
    single_flight_enabled: bool = True
    process_in_background: bool = True

    # Endpoints internos (manutenção)
    internal_task_token: str | None = None
    internal_token_header: str = "X-Internal-Token"

    # Segurança
    zero_trust_mode: bool = True  # Exige TELEGRAM_WEBHOOK_SECRET em staging/prod

    @property
    def telegram_api_endpoint(self) -> str:
        """URL base dos métodos do bot (sem o nome do método)."""
        return f"{self.telegram_api_base_url.rstrip('/')}/bot{self.telegram_bot_token}"

    @property
    def fail_policy(self) -> FailPolicy:
        """Política única do dedupe (valor validado em validate_fail_policy)."""
        return FailPolicy(self.dedupe_fail_policy.lower())

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")

    def _has_sheets_credentials(self) -> bool:
        return bool(self.google_service_account_file or self.google_service_account_json)

    def validate_dedupe_backend(self) -> list[str]:
        """Valida backend do cache efêmero de dedupe."""
        errors: list[str] = []
        backend = self.dedupe_backend.lower()
        if backend not in _CACHE_BACKENDS:
            errors.append("DEDUPE_BACKEND inválido: use memory | redis | firestore")

        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append(
                "DEDUPE_BACKEND=memory é proibido em staging/production. "
                "Configure Redis ou Firestore."
            )
        if backend == "redis" and not self.redis_url:
            errors.append("DEDUPE_BACKEND=redis requer REDIS_URL configurado")
        if backend == "firestore" and not (self.firestore_project_id or self.gcp_project):
            errors.append(
                "DEDUPE_BACKEND=firestore requer FIRESTORE_PROJECT_ID ou GCP_PROJECT configurado"
            )
        if self.dedupe_ttl_seconds <= 0:
            errors.append("DEDUPE_TTL_SECONDS deve ser > 0")
        return errors

    def validate_durable_log_backend(self) -> list[str]:
        """Valida o log durável de updates processados."""
        errors: list[str] = []
        backend = self.dedupe_durable_backend.lower()
        if backend not in _DURABLE_BACKENDS:
            errors.append("DEDUPE_DURABLE_BACKEND inválido: use memory | sheets")

        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append("DEDUPE_DURABLE_BACKEND=memory é proibido em staging/production")
        if backend == "sheets":
            errors.extend(self._validate_sheets_access("DEDUPE_DURABLE_BACKEND"))
        if self.dedupe_durable_retention < 1:
            errors.append("DEDUPE_DURABLE_RETENTION deve ser >= 1")
        return errors

    def validate_rolling_backend(self) -> list[str]:
        """Valida a janela rolante de IDs recentes."""
        errors: list[str] = []
        backend = self.dedupe_rolling_backend.lower()
        if backend not in _ROLLING_BACKENDS:
            errors.append("DEDUPE_ROLLING_BACKEND inválido: use memory | redis")
        if backend == "redis" and not self.redis_url:
            errors.append("DEDUPE_ROLLING_BACKEND=redis requer REDIS_URL configurado")
        if self.dedupe_rolling_size < 1:
            errors.append("DEDUPE_ROLLING_SIZE deve ser >= 1")
        return errors

    def validate_fail_policy(self) -> list[str]:
        """Valida a política única para erro de store durante o dedupe."""
        if self.dedupe_fail_policy.lower() not in _FAIL_POLICIES:
            return ["DEDUPE_FAIL_POLICY inválido: use closed | open"]
        return []

    def validate_vacation_limits(self) -> list[str]:
        """Valida saldo anual e limite por solicitação de férias."""
        errors: list[str] = []
        if self.vacation_annual_days < 1:
            errors.append("VACATION_ANNUAL_DAYS deve ser >= 1")
        if not 1 <= self.vacation_max_days <= self.vacation_annual_days:
            errors.append("VACATION_MAX_DAYS deve estar entre 1 e VACATION_ANNUAL_DAYS")
        return errors

    def validate_records_backend(self) -> list[str]:
        """Valida backend das planilhas de status e de erros."""
        errors: list[str] = []
        backend = self.records_backend.lower()
        if backend not in _DURABLE_BACKENDS:
            errors.append("RECORDS_BACKEND inválido: use memory | sheets")
        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append("RECORDS_BACKEND=memory é proibido em staging/production")
        if backend == "sheets":
            errors.extend(self._validate_sheets_access("RECORDS_BACKEND"))
        return errors

    def _validate_sheets_access(self, variable: str) -> list[str]:
        errors: list[str] = []
        if not self.spreadsheet_id:
            errors.append(f"{variable}=sheets requer SPREADSHEET_ID configurado")
        if not self._has_sheets_credentials():
            errors.append(
                f"{variable}=sheets requer GOOGLE_SERVICE_ACCOUNT_FILE "
                "ou GOOGLE_SERVICE_ACCOUNT_JSON"
            )
        return errors

    def validate_telegram_config(self) -> list[str]:
        """Valida configurações mínimas do Telegram.

        Em development o token pode faltar (envios viram no-op com log).
        """
        errors: list[str] = []
        if self.is_development:
            return errors
        if not self.telegram_bot_token:
            errors.append("TELEGRAM_BOT_TOKEN não configurado")
        if self.zero_trust_mode and not self.telegram_webhook_secret:
            errors.append("TELEGRAM_WEBHOOK_SECRET obrigatório em zero_trust_mode")
        return errors

    def collect_validation_errors(self) -> list[str]:
        """Agrega todas as validações de startup."""
        errors: list[str] = []
        errors.extend(self.validate_dedupe_backend())
        errors.extend(self.validate_durable_log_backend())
        errors.extend(self.validate_rolling_backend())
        errors.extend(self.validate_fail_policy())
        errors.extend(self.validate_records_backend())
        errors.extend(self.validate_vacation_limits())
        errors.extend(self.validate_telegram_config())
        return errors

    def model_post_init(self, __context: Any) -> None:
        """Carrega segredos do Secret Manager em staging/production.

        Development usa apenas env vars / .env. Em staging/prod a ausência do
        Secret Manager é erro de startup (fail-closed).
        """
        logger: logging.Logger = get_logger(__name__)

        if not (self.is_staging or self.is_production):
            return

        if os.getenv("SKIP_SECRET_MANAGER", "").lower() == "true":
            raise RuntimeError("SKIP_SECRET_MANAGER não é permitido em staging/production")

        # PYTEST_CURRENT_TEST é setado pelo pytest; evita chamada real ao GCP.
        if os.getenv("PYTEST_CURRENT_TEST"):
            return

        project_id = os.getenv("GOOGLE_CLOUD_PROJECT") or self.gcp_project
        if not project_id:
            raise RuntimeError("GOOGLE_CLOUD_PROJECT obrigatório em staging/production")

        provider = create_secret_provider(backend="secret_manager", project_id=project_id)
        secret_mappings = {
            "TELEGRAM_BOT_TOKEN": "telegram_bot_token",
            "TELEGRAM_WEBHOOK_SECRET": "telegram_webhook_secret",
            "GOOGLE_SERVICE_ACCOUNT_JSON": "google_service_account_json",
        }
        for secret_name, attr_name in secret_mappings.items():
            if not provider.secret_exists(secret_name):
                logger.warning(
                    "secret_missing_in_secret_manager",
                    extra={"secret_name": secret_name, "environment": self.environment},
                )
                continue
            setattr(self, attr_name, provider.get_secret(secret_name))

        errors = self.validate_telegram_config()
        if errors:
            raise RuntimeError(f"Configuração Telegram inválida: {'; '.join(errors)}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings."""
    return Settings()
