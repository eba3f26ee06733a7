"""Pydantic models representing core domain entities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Raw text stored (and classified) for a photo sent without a caption
NO_CAPTION_PLACEHOLDER = "(這張圖片沒有附帶說明)"
FALLBACK_TITLE = "AI 解析失敗"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PhotoRef(BaseModel):
    """Opaque platform file handle of the largest photo variant."""

    model_config = ConfigDict(frozen=True)

    file_id: str
    width: Optional[int] = None
    height: Optional[int] = None


class InboundEvent(BaseModel):
    """Canonical shape of one inbound chat message."""

    model_config = ConfigDict(frozen=True)

    chat_id: int
    user_id: Optional[int] = None
    text: str = ""
    photo: Optional[PhotoRef] = None

    @property
    def has_content(self) -> bool:
        return bool(self.text.strip()) or self.photo is not None

    @property
    def classification_input(self) -> str:
        """Text handed to the classifier and stored as ``raw_text``."""
        if self.text.strip():
            return self.text
        if self.photo is not None:
            return NO_CAPTION_PLACEHOLDER
        return ""


class Attachment(BaseModel):
    """Stored image embedded in a note."""

    type: Literal["image"] = "image"
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class Classification(BaseModel):
    """Structured title/summary/tags derived from free text."""

    title: str = ""
    summary: str = ""
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def fallback(cls, text: str) -> "Classification":
        """Substitute used when the generative backend is unavailable."""
        return cls(title=FALLBACK_TITLE, summary=text, tags=[])


class Note(BaseModel):
    """Record persisted once per processed inbound event."""

    tg_chat_id: int
    tg_user_id: Optional[int] = None
    title: str
    summary: str
    tags: List[str] = Field(default_factory=list)
    raw_text: str
    attachments: List[Attachment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_event(
        cls,
        event: InboundEvent,
        classification: Classification,
        attachments: List[Attachment],
    ) -> "Note":
        return cls(
            tg_chat_id=event.chat_id,
            tg_user_id=event.user_id,
            title=classification.title,
            summary=classification.summary,
            tags=list(classification.tags),
            raw_text=event.classification_input,
            attachments=list(attachments),
        )


__all__ = [
    "NO_CAPTION_PLACEHOLDER",
    "FALLBACK_TITLE",
    "PhotoRef",
    "InboundEvent",
    "Attachment",
    "Classification",
    "Note",
]
