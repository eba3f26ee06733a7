"""Register the API webhook with Telegram.

Usage: ``python -m apps.bot.main`` (reads TELEGRAM_BOT_TOKEN, PUBLIC_URL and
TELEGRAM_WEBHOOK_SECRET from the environment).
"""

from __future__ import annotations

import asyncio
import logging
import sys

from telegram import Bot
from telegram.error import TelegramError

from libs.core.settings import Settings, get_settings
from libs.logging import setup_logging

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/telegram/webhook"
ALLOWED_UPDATES = ["message", "edited_message"]


def webhook_url(settings: Settings) -> str:
    return f"{settings.public_url.rstrip('/')}{WEBHOOK_PATH}"


async def register_webhook(bot: Bot, settings: Settings) -> bool:
    """Point Telegram at the API and tell it which secret header to send."""
    url = webhook_url(settings)
    ok = await bot.set_webhook(
        url=url,
        secret_token=settings.telegram_webhook_secret or None,
        allowed_updates=ALLOWED_UPDATES,
    )
    logger.info("webhook_registered", extra={"url": url, "ok": ok})
    return ok


async def _run(settings: Settings) -> bool:
    async with Bot(settings.telegram_bot_token) as bot:
        return await register_webhook(bot, settings)


def main() -> None:
    settings = get_settings()
    if not settings.telegram_bot_token:
        print("Missing TELEGRAM_BOT_TOKEN", file=sys.stderr)
        sys.exit(1)
    if not settings.public_url:
        print("Missing PUBLIC_URL", file=sys.stderr)
        sys.exit(1)
    try:
        ok = asyncio.run(_run(settings))
    except TelegramError as exc:
        logger.error("webhook_registration_failed", extra={"detail": str(exc)})
        sys.exit(1)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    setup_logging()
    main()
