"""Outbound calls to the Telegram Bot API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from telegram import Bot, LinkPreviewOptions
from telegram.constants import ParseMode


@dataclass(frozen=True)
class DownloadedFile:
    content: bytes
    file_path: str


class TelegramGateway:
    """Thin wrapper over :class:`telegram.Bot` used by the pipeline stages.

    The bot is created and initialised on first use, so a missing or
    invalid token surfaces as a :class:`telegram.error.TelegramError` inside
    the stage that needed it rather than at application start-up.
    """

    def __init__(self, token: str, bot: Optional[Bot] = None) -> None:
        self._token = token
        self._bot = bot
        self._lock = asyncio.Lock()

    async def _get_bot(self) -> Bot:
        if self._bot is not None:
            return self._bot
        async with self._lock:
            if self._bot is None:
                bot = Bot(self._token)
                await bot.initialize()
                self._bot = bot
        return self._bot

    async def download_file(self, file_id: str) -> DownloadedFile:
        """Resolve ``file_id`` via getFile, then download the bytes."""
        bot = await self._get_bot()
        tg_file = await bot.get_file(file_id)
        content = await tg_file.download_as_bytearray()
        return DownloadedFile(content=bytes(content), file_path=tg_file.file_path or "")

    async def send_message(self, chat_id: int, text: str) -> None:
        bot = await self._get_bot()
        await bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=ParseMode.HTML,
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )

    async def aclose(self) -> None:
        if self._bot is not None:
            await self._bot.shutdown()


__all__ = ["DownloadedFile", "TelegramGateway"]
