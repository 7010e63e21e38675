#!/usr/bin/env python
"""Gerencia o webhook do bot na Bot API do Telegram.

Lê TELEGRAM_BOT_TOKEN, TELEGRAM_WEBHOOK_URL e TELEGRAM_WEBHOOK_SECRET do
ambiente (mesmas variáveis do serviço).

Uso:
    python scripts/manage_webhook.py set [--url https://.../webhooks/telegram]
    python scripts/manage_webhook.py delete
    python scripts/manage_webhook.py info
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from hr_bot.adapters.telegram.client import create_telegram_client
from hr_bot.config.settings import get_settings
from hr_bot.observability.logging import configure_logging


async def _run(command: str, url: str | None) -> int:
    settings = get_settings()
    if not settings.telegram_bot_token:
        print("❌ TELEGRAM_BOT_TOKEN não configurado")
        return 2

    client = create_telegram_client(settings)
    try:
        if command == "set":
            target = url or settings.telegram_webhook_url
            if not target:
                print("❌ Informe --url ou TELEGRAM_WEBHOOK_URL")
                return 2
            ok = await client.set_webhook(target, secret_token=settings.telegram_webhook_secret)
            print(f"{'✅' if ok else '❌'} setWebhook -> {target}")
            return 0 if ok else 1

        if command == "delete":
            ok = await client.delete_webhook()
            print(f"{'✅' if ok else '❌'} deleteWebhook")
            return 0 if ok else 1

        info = await client.get_webhook_info()
        if info is None:
            print("❌ getWebhookInfo falhou")
            return 1
        print(json.dumps(info, indent=2, ensure_ascii=False))
        return 0
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("command", choices=("set", "delete", "info"))
    parser.add_argument("--url", default=None, help="URL pública do webhook (set)")
    args = parser.parse_args(argv)

    configure_logging("WARNING", "hr_bot-cli", log_format="text")
    return asyncio.run(_run(args.command, args.url))


if __name__ == "__main__":
    sys.exit(main())
