from __future__ import annotations

import html
import logging
from typing import List, Optional

from telegram.error import TelegramError

from libs.core.exceptions import NotificationFailed
from libs.core.i18n import I18n
from libs.core.models import Note
from libs.telegram import TelegramGateway

logger = logging.getLogger(__name__)


def format_note_reply(
    i18n: I18n,
    note: Note,
    *,
    has_image: bool = False,
    classification_failed: bool = False,
    attachment_failed: bool = False,
    persisted: bool = True,
) -> str:
    """HTML acknowledgment: header, title, summary, tags and any hints."""
    tags = " ".join(f"#{html.escape(t)}" for t in note.tags) or i18n.t("no_tags")
    lines: List[str] = [
        i18n.t("note_saved_with_image" if has_image else "note_saved"),
        f"<b>{i18n.t('label_title')}</b>{html.escape(note.title)}",
        f"<b>{i18n.t('label_summary')}</b>{html.escape(note.summary)}",
        f"<b>{i18n.t('label_tags')}</b>{tags}",
    ]
    hints = []
    if classification_failed:
        hints.append(i18n.t("hint_classification_failed"))
    if attachment_failed:
        hints.append(i18n.t("hint_attachment_failed"))
    if not persisted:
        hints.append(i18n.t("hint_persistence_failed"))
    if hints:
        lines.append("")
        lines.extend(hints)
    return "\n".join(lines)


class NotifyChat:
    """Send replies to the originating chat; send errors are logged only."""

    def __init__(self, gateway: TelegramGateway, i18n: I18n) -> None:
        self.gateway = gateway
        self.i18n = i18n

    async def _send(self, chat_id: int, text: str, kind: str) -> Optional[NotificationFailed]:
        try:
            await self.gateway.send_message(chat_id, text)
        except TelegramError as exc:
            logger.warning(
                "notification_failed",
                extra={"chat_id": chat_id, "kind": kind, "error_type": type(exc).__name__, "detail": str(exc)},
            )
            return NotificationFailed(type(exc).__name__)
        except Exception:
            logger.exception("notification_error", extra={"chat_id": chat_id, "kind": kind})
            return NotificationFailed("unexpected")
        return None

    async def note_saved(self, chat_id: int, note: Note, **flags: bool) -> Optional[NotificationFailed]:
        return await self._send(chat_id, format_note_reply(self.i18n, note, **flags), "note")

    async def guidance(self, chat_id: int) -> Optional[NotificationFailed]:
        return await self._send(chat_id, html.escape(self.i18n.t("guidance")), "guidance")

    async def apology(self, chat_id: int) -> Optional[NotificationFailed]:
        return await self._send(chat_id, html.escape(self.i18n.t("internal_error")), "apology")


__all__ = ["NotifyChat", "format_note_reply"]
