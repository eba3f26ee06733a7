from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from libs.core.exceptions import PersistenceFailed
from libs.core.models import Note
from libs.core.types import Result
from libs.db import NoteRepo, get_session, models

logger = logging.getLogger(__name__)


class PersistNote:
    """Insert one note in its own transaction; failures are returned, not raised."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    async def __call__(self, note: Note) -> Result[models.Note]:
        try:
            async with get_session(self.sessionmaker) as session:
                stored = await NoteRepo(session).create(note)
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "note_persist_failed",
                extra={"chat_id": note.tg_chat_id, "error_type": type(exc).__name__, "detail": str(exc)[:300]},
            )
            return PersistenceFailed(type(exc).__name__)
        logger.info("note_persisted", extra={"note_id": stored.id, "chat_id": note.tg_chat_id})
        return stored


__all__ = ["PersistNote"]
