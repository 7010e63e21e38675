"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from hr_bot.application.dedupe.deduplicator import UpdateDeduplicator
from hr_bot.application.pipeline import UpdatePipeline
from hr_bot.config.settings import Settings


def get_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_pipeline(request: Request) -> UpdatePipeline:
    """Retorna o pipeline de processamento de updates."""

    return request.app.state.pipeline


def get_deduplicator(request: Request) -> UpdateDeduplicator:
    """Retorna o deduplicador (manutenção)."""

    return request.app.state.deduplicator
