from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from libs.db import NoteRepo, get_session, models

DEFAULT_LIMIT = 50


class SearchNotes:
    """Read-side listing of notes filtered by substring and/or tag."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        limit: int = DEFAULT_LIMIT,
    ) -> None:
        self.sessionmaker = sessionmaker
        self.limit = limit

    async def __call__(self, q: str = "", tag: str = "") -> List[models.Note]:
        async with get_session(self.sessionmaker) as session:
            return await NoteRepo(session).search(q=q, tag=tag, limit=self.limit)
