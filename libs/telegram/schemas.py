"""Pydantic models representing Telegram webhook payloads.

Only the fields the ingestion pipeline reads are modelled, and all of them
are optional: channel posts, service messages and stickers must parse
without errors so they can be acknowledged quietly.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TelegramUser(BaseModel):
    id: Optional[int] = None
    is_bot: bool = False
    first_name: Optional[str] = None
    username: Optional[str] = None


class TelegramChat(BaseModel):
    id: Optional[int] = None
    type: Optional[str] = None  # private, group, supergroup, channel
    title: Optional[str] = None


class TelegramPhotoSize(BaseModel):
    file_id: Optional[str] = None
    file_unique_id: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    file_size: Optional[int] = None


class TelegramMessage(BaseModel):
    message_id: Optional[int] = None
    date: Optional[int] = None
    chat: Optional[TelegramChat] = None
    from_user: Optional[TelegramUser] = Field(default=None, alias="from")
    text: Optional[str] = None
    caption: Optional[str] = None
    # Ascending resolution, per Bot API convention
    photo: Optional[List[TelegramPhotoSize]] = None

    model_config = ConfigDict(populate_by_name=True)


class TelegramUpdate(BaseModel):
    update_id: Optional[int] = None
    message: Optional[TelegramMessage] = None
    edited_message: Optional[TelegramMessage] = None
