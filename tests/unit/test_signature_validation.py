"""Testes da validação do secret token do webhook."""

from __future__ import annotations

from hr_bot.adapters.telegram.signature import verify_telegram_secret

HEADER = "x-telegram-bot-api-secret-token"


def test_skipped_without_configured_secret() -> None:
    result = verify_telegram_secret({}, None)
    assert result.valid is True
    assert result.skipped is True


def test_valid_secret() -> None:
    assert verify_telegram_secret({HEADER: "s3cr3t"}, "s3cr3t").valid is True


def test_missing_header() -> None:
    result = verify_telegram_secret({}, "s3cr3t")
    assert result.valid is False
    assert result.error == "missing_secret_token"


def test_mismatch() -> None:
    result = verify_telegram_secret({HEADER: "wrong"}, "s3cr3t")
    assert result.valid is False
    assert result.error == "secret_token_mismatch"
