"""Parsing do corpo do webhook em TelegramUpdate."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from hr_bot.domain.models import TelegramUpdate
from hr_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


def parse_update(raw_body: bytes) -> TelegramUpdate | None:
    """Converte o corpo bruto em TelegramUpdate.

    Retorna None para JSON inválido, corpo que não é objeto ou update sem
    `update_id` inteiro. Nunca levanta.
    """
    try:
        payload = json.loads(raw_body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("update_malformed", extra={"reason": "invalid_json"})
        return None

    if not isinstance(payload, dict):
        logger.warning("update_malformed", extra={"reason": "not_an_object"})
        return None

    if isinstance(payload.get("update_id"), bool) or not isinstance(payload.get("update_id"), int):
        logger.warning("update_malformed", extra={"reason": "missing_update_id"})
        return None

    try:
        return TelegramUpdate.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "update_malformed",
            extra={"reason": "schema", "error_count": exc.error_count()},
        )
        return None
