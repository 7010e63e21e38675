"""Cliente da Bot API do Telegram.

Falhas de envio nunca propagam: são logadas e o método retorna False.
Sem token configurado (development) os envios viram no-op com log.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from hr_bot.infra.http import HttpClient, HttpError, create_http_client
from hr_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from hr_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

PARSE_MODE_HTML = "HTML"
ALLOWED_UPDATES = ("message", "callback_query")


class TelegramClient:
    """Chamadas de saída para a Bot API."""

    def __init__(self, http_client: HttpClient, *, api_endpoint: str | None) -> None:
        self._http = http_client
        self._endpoint = api_endpoint

    @property
    def enabled(self) -> bool:
        return self._endpoint is not None

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any] | None:
        """POST em /bot<token>/<method>; None em qualquer falha."""
        if self._endpoint is None:
            logger.warning("telegram_disabled_no_token", extra={"method": method})
            return None

        try:
            response = await self._http.post(f"{self._endpoint}/{method}", json=payload)
            body = response.json()
        except HttpError as exc:
            logger.error(
                "telegram_call_failed",
                extra={"method": method, "status_code": exc.status_code},
            )
            return None
        except ValueError:
            logger.error("telegram_invalid_response", extra={"method": method})
            return None

        if not body.get("ok"):
            logger.error(
                "telegram_call_rejected",
                extra={"method": method, "error_code": body.get("error_code")},
            )
            return None
        return body

    async def send_message(
        self,
        chat_id: int | str,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> bool:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text, "parse_mode": PARSE_MODE_HTML}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return await self._call("sendMessage", payload) is not None

    async def answer_callback_query(self, callback_query_id: str) -> bool:
        payload = {"callback_query_id": callback_query_id}
        return await self._call("answerCallbackQuery", payload) is not None

    async def set_webhook(self, url: str, *, secret_token: str | None = None) -> bool:
        payload: dict[str, Any] = {
            "url": url,
            "allowed_updates": list(ALLOWED_UPDATES),
            "drop_pending_updates": True,
        }
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload) is not None

    async def delete_webhook(self) -> bool:
        return await self._call("deleteWebhook", {"drop_pending_updates": True}) is not None

    async def get_webhook_info(self) -> dict[str, Any] | None:
        body = await self._call("getWebhookInfo", {})
        return None if body is None else body.get("result", {})

    async def close(self) -> None:
        await self._http.close()


def create_telegram_client(
    settings: Settings, http_client: HttpClient | None = None
) -> TelegramClient:
    """Factory do cliente do Telegram conforme settings."""
    endpoint = settings.telegram_api_endpoint if settings.telegram_bot_token else None
    return TelegramClient(http_client or create_http_client(settings), api_endpoint=endpoint)
