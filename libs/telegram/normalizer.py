from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from libs.core.models import InboundEvent, PhotoRef

from .schemas import TelegramMessage, TelegramPhotoSize, TelegramUpdate

logger = logging.getLogger(__name__)


def _largest_photo(message: TelegramMessage) -> Optional[TelegramPhotoSize]:
    sizes = [p for p in (message.photo or []) if p.file_id]
    return sizes[-1] if sizes else None


def normalize_update(payload: Any) -> Optional[InboundEvent]:
    """Extract the canonical inbound event from a raw webhook payload.

    Returns ``None`` when there is nothing to reply to (no chat id, not a
    message, unparseable body). A returned event may still lack content;
    callers check :attr:`InboundEvent.has_content`.
    """
    if not isinstance(payload, dict):
        return None
    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "telegram_update_invalid",
            extra={"update_id": payload.get("update_id"), "errors": exc.error_count()},
        )
        return None

    message = update.message or update.edited_message
    if message is None or message.chat is None or message.chat.id is None:
        return None

    user_id = message.from_user.id if message.from_user else None
    photo = _largest_photo(message)
    if photo is not None:
        return InboundEvent(
            chat_id=message.chat.id,
            user_id=user_id,
            text=message.caption or "",
            photo=PhotoRef(file_id=photo.file_id, width=photo.width, height=photo.height),
        )
    return InboundEvent(chat_id=message.chat.id, user_id=user_id, text=message.text or "")


__all__ = ["normalize_update"]
