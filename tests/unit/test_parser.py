"""Testes do parsing do corpo do webhook."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from hr_bot.adapters.telegram.parser import parse_update

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def test_parses_message_fixture() -> None:
    update = parse_update((FIXTURES / "telegram_message.json").read_bytes())

    assert update is not None
    assert update.kind == "message"
    assert update.message.from_user.first_name == "Olena"
    assert update.message.text == "Спізнююсь на 15 хвилин"


def test_parses_callback_fixture() -> None:
    update = parse_update((FIXTURES / "telegram_callback.json").read_bytes())

    assert update is not None
    assert update.kind == "callback_query"
    assert update.callback_query.data == "late_today"


def test_unknown_fields_are_ignored() -> None:
    raw = json.dumps({"update_id": 5, "edited_message": {"text": "x"}}).encode()
    update = parse_update(raw)
    assert update is not None
    assert update.kind == "other"


def test_update_is_immutable() -> None:
    update = parse_update(b'{"update_id": 5}')
    with pytest.raises(ValidationError):
        update.update_id = 6  # type: ignore[misc, union-attr]


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"\xff\xfe",
        b"{broken",
        b'"just a string"',
        b'{"update_id": "42"}',
        b'{"update_id": true}',
        b'{"update_id": 1, "message": {"chat": {"id": 1}}}',
    ],
)
def test_malformed_returns_none(raw: bytes) -> None:
    assert parse_update(raw) is None
