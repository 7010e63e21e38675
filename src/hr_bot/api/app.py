"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from hr_bot.adapters.telegram.client import TelegramClient, create_telegram_client
from hr_bot.api.routes import router
from hr_bot.application.dedupe.deduplicator import UpdateDeduplicator
from hr_bot.application.dispatcher import UpdateDispatcher
from hr_bot.application.handlers.registration import RegistrationService
from hr_bot.application.handlers.status import StatusService
from hr_bot.application.handlers.vacation import VacationService
from hr_bot.application.pipeline import UpdatePipeline
from hr_bot.application.single_flight import SingleFlightGuard
from hr_bot.config.settings import Settings, get_settings
from hr_bot.infra.dedupe import create_dedupe_store
from hr_bot.infra.dedupe_log import create_durable_log
from hr_bot.infra.dedupe_rolling import create_rolling_store
from hr_bot.infra.directory import create_directory
from hr_bot.infra.records import create_record_stores
from hr_bot.infra.sheets import SheetsClient, create_sheets_client
from hr_bot.infra.vacations import create_vacation_store
from hr_bot.observability.logging import configure_logging, get_logger
from hr_bot.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


def _uses_redis(settings: Settings) -> bool:
    return "redis" in (
        settings.dedupe_backend.lower(),
        settings.dedupe_rolling_backend.lower(),
    )


def _uses_sheets(settings: Settings) -> bool:
    return "sheets" in (
        settings.dedupe_durable_backend.lower(),
        settings.records_backend.lower(),
    )


def _create_redis_client(redis_url: str) -> Any:
    """Cliente Redis compartilhado por cache efêmero e janela rolante."""
    import redis

    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Fecha o cliente HTTP do Telegram no shutdown."""
    yield
    logger.info("app_shutdown")
    await app.state.telegram_client.close()


def create_app(
    settings: Settings | None = None,
    *,
    telegram_client: TelegramClient | None = None,
    sheets_client: SheetsClient | None = None,
    redis_client: Any = None,
) -> FastAPI:
    """Cria a aplicação FastAPI.

    Clientes externos podem ser injetados (testes); caso contrário são
    criados conforme os backends configurados.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.log_format)

    validation_errors = settings.collect_validation_errors()
    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    if redis_client is None and _uses_redis(settings) and settings.redis_url:
        redis_client = _create_redis_client(settings.redis_url)
    if sheets_client is None and _uses_sheets(settings):
        sheets_client = create_sheets_client(settings)

    status_records, error_log = create_record_stores(settings, sheets_client)
    deduplicator = UpdateDeduplicator(
        create_dedupe_store(settings, redis_client=redis_client),
        create_durable_log(settings, sheets_client=sheets_client),
        create_rolling_store(settings, redis_client=redis_client),
        policy=settings.fail_policy,
        error_log=error_log,
    )

    telegram = telegram_client or create_telegram_client(settings)
    status_service = StatusService(
        telegram,
        status_records,
        error_log,
        hr_chat_id=settings.hr_chat_id,
        timezone=settings.timezone,
    )
    directory = create_directory(settings, sheets_client)
    vacations = create_vacation_store(settings, sheets_client)
    registration = RegistrationService(telegram, directory, error_log)
    vacation_service = VacationService(
        telegram,
        vacations,
        error_log,
        hr_chat_id=settings.hr_chat_id,
        timezone=settings.timezone,
        annual_days=settings.vacation_annual_days,
        max_days=settings.vacation_max_days,
    )
    dispatcher = UpdateDispatcher(
        telegram,
        status_service,
        registration,
        vacation_service,
        timezone=settings.timezone,
        registration_required=settings.registration_required,
    )
    guard = SingleFlightGuard(enabled=settings.single_flight_enabled)

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.add_middleware(CorrelationIdMiddleware, header_name=settings.correlation_id_header)
    app.include_router(router)

    app.state.settings = settings
    app.state.telegram_client = telegram
    app.state.deduplicator = deduplicator
    app.state.status_records = status_records
    app.state.error_log = error_log
    app.state.directory = directory
    app.state.vacations = vacations
    app.state.pipeline = UpdatePipeline(deduplicator, dispatcher, guard, error_log)

    logger.info(
        "app_created",
        extra={
            "environment": settings.environment,
            "dedupe_backend": settings.dedupe_backend,
            "durable_backend": settings.dedupe_durable_backend,
            "rolling_backend": settings.dedupe_rolling_backend,
            "fail_policy": settings.fail_policy.value,
        },
    )
    return app


app = create_app()
