"""Camada de infraestrutura: adapters para serviços externos.

- Dedupe: cache efêmero, log durável e janela rolante de update_ids
- Registros: abas de status e de erros da planilha
- Diretório de colaboradores e solicitações de férias
- Secrets: EnvSecretProvider, SecretManagerProvider
- HTTP: HttpClient

Uso típico:
    from hr_bot.infra import create_dedupe_store, create_durable_log

Infraestrutura não decide regra de negócio; a política de falha do dedupe
fica no UpdateDeduplicator.
"""

from hr_bot.infra.dedupe import (
    BoundedDedupeStore,
    DedupeError,
    DedupeStore,
    InMemoryDedupeStore,
    RedisDedupeStore,
    create_dedupe_store,
)
from hr_bot.infra.dedupe_log import InMemoryDedupeLog, SheetsDedupeLog, create_durable_log
from hr_bot.infra.dedupe_rolling import RollingDedupeStore, create_rolling_store
from hr_bot.infra.directory import EmployeeDirectory, create_directory
from hr_bot.infra.http import HttpClient, HttpClientConfig, HttpError, create_http_client
from hr_bot.infra.records import ErrorLogStore, StatusRecordStore, create_record_stores
from hr_bot.infra.secrets import (
    EnvSecretProvider,
    SecretManagerProvider,
    SecretProvider,
    create_secret_provider,
)
from hr_bot.infra.vacations import VacationStore, create_vacation_store

__all__ = [
    "BoundedDedupeStore",
    "DedupeError",
    "DedupeStore",
    "InMemoryDedupeStore",
    "RedisDedupeStore",
    "create_dedupe_store",
    "InMemoryDedupeLog",
    "SheetsDedupeLog",
    "create_durable_log",
    "RollingDedupeStore",
    "create_rolling_store",
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "create_http_client",
    "ErrorLogStore",
    "StatusRecordStore",
    "create_record_stores",
    "EmployeeDirectory",
    "create_directory",
    "VacationStore",
    "create_vacation_store",
    "EnvSecretProvider",
    "SecretManagerProvider",
    "SecretProvider",
    "create_secret_provider",
]
