"""SQLAlchemy ORM models for core entities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, BigInteger, DateTime, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base

# PostgreSQL types in production; SQLite stores both as JSON text
TagList = ARRAY(String).with_variant(JSON(), "sqlite")
AttachmentList = JSONB().with_variant(JSON(), "sqlite")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid4())
    )
    tg_chat_id: Mapped[int] = mapped_column(BigInteger, index=True)
    tg_user_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    title: Mapped[str] = mapped_column(String, nullable=False, default="")
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tags: Mapped[List[str]] = mapped_column(TagList, default=list)
    raw_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    attachments: Mapped[List[Dict[str, Any]]] = mapped_column(AttachmentList, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tg_chat_id": self.tg_chat_id,
            "tg_user_id": self.tg_user_id,
            "title": self.title,
            "summary": self.summary,
            "tags": list(self.tags or []),
            "raw_text": self.raw_text,
            "attachments": list(self.attachments or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


__all__ = ["Note"]
