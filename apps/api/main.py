from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from libs.core.i18n import I18n
from libs.core.security import SECRET_HEADER, WebhookAuthenticator
from libs.core.settings import Settings, get_settings
from libs.db import init_db, make_engine, make_sessionmaker
from libs.llm import LLMClient, ReplicateLLMClient
from libs.logging import setup_logging
from libs.storage import LocalObjectStorage, ObjectStorage, SupabaseObjectStorage
from libs.telegram import TelegramGateway
from libs.usecases import (
    ClassifyText,
    FetchAttachment,
    IngestMessage,
    NotifyChat,
    PersistNote,
    SearchNotes,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application container


@dataclass
class AppContainer:
    """Clients built once per process and shared by reference."""

    settings: Settings
    engine: AsyncEngine
    sessionmaker: async_sessionmaker[AsyncSession]
    gateway: TelegramGateway
    storage: ObjectStorage
    i18n: I18n
    llm: LLMClient

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContainer":
        engine = make_engine(settings.postgres_uri)
        return cls(
            settings=settings,
            engine=engine,
            sessionmaker=make_sessionmaker(engine),
            gateway=TelegramGateway(settings.telegram_bot_token),
            storage=build_storage(settings),
            i18n=I18n(settings.language),
            llm=ReplicateLLMClient(settings=settings),
        )

    async def aclose(self) -> None:
        await self.gateway.aclose()
        await self.engine.dispose()


def build_storage(settings: Settings) -> ObjectStorage:
    if settings.supabase_url and settings.supabase_service_role_key:
        return SupabaseObjectStorage(
            settings.supabase_url,
            settings.supabase_service_role_key,
            bucket=settings.storage_bucket,
            timeout=settings.http_timeout,
        )
    logger.warning("supabase_not_configured_using_local_storage")
    return LocalObjectStorage(settings.vault_dir, settings.public_url, bucket=settings.storage_bucket)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging(settings)
    if not settings.telegram_bot_token:
        logger.error("telegram_bot_token_missing")
    container = AppContainer.from_settings(settings)
    if settings.db_auto_create:
        await init_db(container.engine)
    app.state.container = container
    try:
        yield
    finally:
        await container.aclose()


# ---------------------------------------------------------------------------
# Dependency factories


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def ingest_message_uc(container: AppContainer = Depends(get_container)) -> IngestMessage:
    return IngestMessage(
        authenticator=WebhookAuthenticator(container.settings.telegram_webhook_secret),
        fetch_attachment=FetchAttachment(container.gateway, container.storage),
        classify=ClassifyText(container.llm),
        persist=PersistNote(container.sessionmaker),
        notify=NotifyChat(container.gateway, container.i18n),
    )


def search_notes_uc(container: AppContainer = Depends(get_container)) -> SearchNotes:
    return SearchNotes(container.sessionmaker, limit=container.settings.notes_page_size)


def get_storage(container: AppContainer = Depends(get_container)) -> ObjectStorage:
    return container.storage


# ---------------------------------------------------------------------------
# FastAPI application

app = FastAPI(title="Notes Inbox API", lifespan=lifespan)


@app.post("/telegram/webhook")
async def telegram_webhook(
    request: Request,
    secret_token: Optional[str] = Header(None, alias=SECRET_HEADER),
    uc: IngestMessage = Depends(ingest_message_uc),
) -> JSONResponse:
    try:
        payload: Any = await request.json()
    except ValueError:
        payload = None
    logger.debug("telegram_webhook_payload", extra={"payload": payload})

    report = await uc(payload, secret_token)
    if not report.outcome.acknowledged:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"ok": False, "error": "Invalid secret"},
        )
    return JSONResponse(content={"ok": True, "status": report.outcome.value})


@app.get("/api/notes")
async def list_notes(
    q: str = Query(""),
    tag: str = Query(""),
    uc: SearchNotes = Depends(search_notes_uc),
) -> JSONResponse:
    try:
        notes = await uc(q=q, tag=tag)
    except SQLAlchemyError:
        logger.exception("notes_query_failed", extra={"q": q, "tag": tag})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Datastore query error"},
        )
    data: list[Dict[str, Any]] = [n.to_dict() for n in notes]
    return JSONResponse(content={"data": data})


@app.get("/assets/{key:path}")
def get_asset(key: str, storage: ObjectStorage = Depends(get_storage)) -> FileResponse:
    if not isinstance(storage, LocalObjectStorage):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    path = storage.resolve(key)
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return FileResponse(path)


__all__ = ["app", "AppContainer"]
