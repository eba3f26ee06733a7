import asyncio
import os
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

# Keep the app from reaching real services while tests import it
os.environ["POSTGRES_URI"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_WEBHOOK_SECRET"] = ""
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""

from libs.core.i18n import I18n
from libs.core.security import WebhookAuthenticator
from libs.db import init_db, make_engine, make_sessionmaker
from libs.llm import LLMClient
from libs.storage import LocalObjectStorage
from libs.telegram import DownloadedFile
from libs.usecases import (
    ClassifyText,
    FetchAttachment,
    IngestMessage,
    NotifyChat,
    PersistNote,
    SearchNotes,
)


class FakeGateway:
    """Records Bot API calls instead of talking to Telegram."""

    def __init__(
        self,
        content: bytes = b"\x89PNG fake",
        file_path: str = "https://api.telegram.org/file/botTOKEN/photos/file_7.png",
        download_error: Optional[Exception] = None,
        send_error: Optional[Exception] = None,
    ) -> None:
        self.content = content
        self.file_path = file_path
        self.download_error = download_error
        self.send_error = send_error
        self.downloads: List[str] = []
        self.sent: List[Tuple[int, str]] = []

    async def download_file(self, file_id: str) -> DownloadedFile:
        self.downloads.append(file_id)
        if self.download_error is not None:
            raise self.download_error
        return DownloadedFile(content=self.content, file_path=self.file_path)

    async def send_message(self, chat_id: int, text: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((chat_id, text))


class FakeLLM(LLMClient):
    def __init__(self, output: str = "", error: Optional[Exception] = None) -> None:
        self.output = output
        self.error = error
        self.calls: List[str] = []

    def classify_note(self, text: str) -> str:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture()
def sessionmaker(tmp_path: Path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")
    asyncio.run(init_db(engine, max_attempts=1))
    yield make_sessionmaker(engine)
    asyncio.run(engine.dispose())


@pytest.fixture()
def fetch_notes(sessionmaker) -> Callable[..., list]:
    def _fetch(q: str = "", tag: str = "") -> list:
        return asyncio.run(SearchNotes(sessionmaker)(q=q, tag=tag))

    return _fetch


@pytest.fixture()
def i18n() -> I18n:
    return I18n("zh-tw")


@pytest.fixture()
def storage(tmp_path: Path) -> LocalObjectStorage:
    return LocalObjectStorage(tmp_path / "vault", "https://notes.example.com")


@pytest.fixture()
def make_pipeline(sessionmaker, storage, i18n):
    """Build an :class:`IngestMessage` wired to fakes and a SQLite datastore."""

    def _make(
        llm: Optional[LLMClient] = None,
        gateway: Optional[FakeGateway] = None,
        secret: str = "",
        persist: Optional[PersistNote] = None,
    ) -> Tuple[IngestMessage, FakeGateway, LLMClient]:
        gateway = gateway or FakeGateway()
        llm = llm or FakeLLM('{"title": "t", "summary": "s", "tags": ["生活"]}')
        pipeline = IngestMessage(
            authenticator=WebhookAuthenticator(secret),
            fetch_attachment=FetchAttachment(gateway, storage, clock=lambda: 1700000000.5),
            classify=ClassifyText(llm),
            persist=persist or PersistNote(sessionmaker),
            notify=NotifyChat(gateway, i18n),
        )
        return pipeline, gateway, llm

    return _make


def text_update(text: str, chat_id: int = 42, user_id: int = 7, key: str = "message") -> dict:
    return {
        "update_id": 1,
        key: {
            "message_id": 10,
            "date": 1700000000,
            "chat": {"id": chat_id, "type": "private"},
            "from": {"id": user_id, "is_bot": False, "first_name": "A"},
            "text": text,
        },
    }


def photo_update(caption: Optional[str] = None, chat_id: int = 42) -> dict:
    message = {
        "message_id": 11,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": 7, "is_bot": False, "first_name": "A"},
        "photo": [
            {"file_id": "small", "file_unique_id": "s", "width": 90, "height": 60},
            {"file_id": "big", "file_unique_id": "b", "width": 1280, "height": 853},
        ],
    }
    if caption is not None:
        message["caption"] = caption
    return {"update_id": 2, "message": message}

