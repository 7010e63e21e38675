"""Rotas HTTP: healthcheck, webhook do Telegram e manutenção interna."""

from __future__ import annotations

import hmac
from typing import Any

import anyio
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from hr_bot.adapters.telegram.signature import verify_telegram_secret
from hr_bot.api.dependencies import get_deduplicator, get_pipeline, get_settings
from hr_bot.application.dedupe.deduplicator import UpdateDeduplicator
from hr_bot.application.pipeline import UpdatePipeline
from hr_bot.config.settings import Settings
from hr_bot.observability.logging import get_logger
from hr_bot.observability.middleware import get_correlation_id

logger = get_logger(__name__)

router = APIRouter()

WEBHOOK_ACK: dict[str, Any] = {"ok": True}


def _require_internal_token(request: Request, settings: Settings) -> None:
    """Valida token interno (Cloud Scheduler / operador)."""
    expected = settings.internal_task_token
    provided = request.headers.get(settings.internal_token_header)

    if expected and provided and hmac.compare_digest(provided, expected):
        return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="unauthorized_internal_call",
    )


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples para Cloud Run."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.post("/webhooks/telegram")
async def telegram_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    pipeline: UpdatePipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """Recebe updates do Telegram e responde o ack imediatamente.

    Nenhum resultado do processamento muda a resposta: o Telegram só
    reenvia quando não recebe 200.
    """
    secret_result = verify_telegram_secret(request.headers, settings.telegram_webhook_secret)
    if not secret_result.valid:
        logger.warning("webhook_secret_rejected", extra={"reason": secret_result.error})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_secret_token")

    raw_body = await request.body()
    correlation_id = get_correlation_id()

    if settings.process_in_background:
        background_tasks.add_task(pipeline.process, raw_body, correlation_id)
    else:
        await pipeline.process(raw_body, correlation_id)

    return dict(WEBHOOK_ACK)


@router.post("/internal/maintenance/cleanup")
async def maintenance_cleanup(
    request: Request,
    settings: Settings = Depends(get_settings),
    deduplicator: UpdateDeduplicator = Depends(get_deduplicator),
) -> dict[str, Any]:
    """Poda log durável e janela rolante (agendado, ex.: diário)."""
    _require_internal_token(request, settings)

    result = await anyio.to_thread.run_sync(deduplicator.cleanup)
    return {"ok": result.ok, "removed": result.removed, "failed": result.failed}
