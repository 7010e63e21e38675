"""Configurações centralizadas do hr_bot.

Uso típico:
    from hr_bot.config import get_settings
"""

from hr_bot.config.settings import (
    TELEGRAM_API_BASE_URL,
    TELEGRAM_SECRET_HEADER,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "TELEGRAM_API_BASE_URL",
    "TELEGRAM_SECRET_HEADER",
]
