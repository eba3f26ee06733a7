"""Repository classes for the ``notes`` table."""

from __future__ import annotations

from typing import List

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.core.models import Note as NoteDraft

from . import models


class NoteRepo:
    """Insert and query operations for :class:`models.Note`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, draft: NoteDraft) -> models.Note:
        note = models.Note(
            tg_chat_id=draft.tg_chat_id,
            tg_user_id=draft.tg_user_id,
            title=draft.title,
            summary=draft.summary,
            tags=list(draft.tags),
            raw_text=draft.raw_text,
            attachments=[a.model_dump() for a in draft.attachments],
            created_at=draft.created_at,
        )
        self.session.add(note)
        await self.session.flush()
        return note

    async def search(self, q: str = "", tag: str = "", limit: int = 50) -> List[models.Note]:
        """Newest notes matching a substring ``q`` and/or exact ``tag``."""
        stmt = select(models.Note).order_by(models.Note.created_at.desc()).limit(limit)
        q = q.strip()
        if q:
            stmt = stmt.where(
                or_(
                    models.Note.title.icontains(q, autoescape=True),
                    models.Note.summary.icontains(q, autoescape=True),
                    models.Note.raw_text.icontains(q, autoescape=True),
                )
            )
        tag = tag.strip()
        if tag:
            stmt = stmt.where(self._has_tag(tag))
        res = await self.session.execute(stmt)
        return list(res.scalars().all())

    def _has_tag(self, tag: str):  # type: ignore[no-untyped-def]
        if self.session.get_bind().dialect.name == "postgresql":
            return models.Note.tags.any(tag)
        each = func.json_each(models.Note.tags).table_valued("value")
        return select(each.c.value).where(each.c.value == tag).exists()


__all__ = ["NoteRepo"]
