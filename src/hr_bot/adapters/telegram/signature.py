"""Validação do secret token enviado pelo Telegram no webhook."""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass

from hr_bot.config.settings import TELEGRAM_SECRET_HEADER


@dataclass(slots=True)
class SignatureResult:
    """Resultado da validação do secret token."""

    valid: bool
    skipped: bool = False
    error: str | None = None


def verify_telegram_secret(
    headers: Mapping[str, str],
    secret: str | None,
) -> SignatureResult:
    """Compara o header X-Telegram-Bot-Api-Secret-Token com o secret configurado.

    Se o secret estiver ausente, a validação é ignorada (skipped).
    """

    if not secret:
        return SignatureResult(valid=True, skipped=True)

    received = headers.get(TELEGRAM_SECRET_HEADER.lower()) or headers.get(TELEGRAM_SECRET_HEADER)
    if not received:
        return SignatureResult(valid=False, error="missing_secret_token")

    if not hmac.compare_digest(received.encode("utf-8"), secret.encode("utf-8")):
        return SignatureResult(valid=False, error="secret_token_mismatch")

    return SignatureResult(valid=True)
