"""Telegram webhook schemas, payload normalisation and Bot API gateway."""

from .gateway import DownloadedFile, TelegramGateway
from .normalizer import normalize_update
from .schemas import TelegramMessage, TelegramUpdate

__all__ = [
    "DownloadedFile",
    "TelegramGateway",
    "normalize_update",
    "TelegramMessage",
    "TelegramUpdate",
]
