from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from libs.core.exceptions import (
    AttachmentUnavailable,
    ClassificationUnavailable,
    DomainError,
    NoActionableContent,
    PersistenceFailed,
    UnhandledInternal,
)
from libs.core.models import Attachment, Classification, InboundEvent, Note
from libs.core.security import WebhookAuthenticator
from libs.core.types import is_error
from libs.telegram import normalize_update

from .attachments import FetchAttachment
from .classify import ClassifyText
from .notify import NotifyChat
from .persist import PersistNote

logger = logging.getLogger(__name__)


class PipelineOutcome(str, Enum):
    REJECTED = "rejected"
    IGNORED = "ignored"
    AWAITING_CONTENT = "awaiting_content"
    PROCESSED = "processed"
    DEGRADED = "degraded"
    FAILED = "failed"

    @property
    def acknowledged(self) -> bool:
        """Whether the webhook caller gets a success response."""
        return self is not PipelineOutcome.REJECTED


@dataclass
class IngestReport:
    outcome: PipelineOutcome
    note: Optional[Note] = None
    issues: List[DomainError] = field(default_factory=list)


class IngestMessage:
    """Run one webhook delivery through the ingestion pipeline.

    authenticate -> normalize -> (fetch photo) -> classify -> persist -> notify

    Every stage reports failure as a value. Apart from authentication
    rejection, each path ends in an acknowledged outcome so the platform
    does not redeliver the update.
    """

    def __init__(
        self,
        authenticator: WebhookAuthenticator,
        fetch_attachment: FetchAttachment,
        classify: ClassifyText,
        persist: PersistNote,
        notify: NotifyChat,
    ) -> None:
        self.authenticator = authenticator
        self.fetch_attachment = fetch_attachment
        self.classify = classify
        self.persist = persist
        self.notify = notify

    async def __call__(self, payload: Any, secret_token: Optional[str] = None) -> IngestReport:
        rejected = self.authenticator.authenticate(secret_token)
        if rejected is not None:
            logger.warning("webhook_rejected", extra={"reason": rejected.reason})
            return IngestReport(PipelineOutcome.REJECTED, issues=[rejected])

        event: Optional[InboundEvent] = None
        try:
            event = normalize_update(payload)
            if event is None:
                logger.debug("webhook_ignored")
                return IngestReport(PipelineOutcome.IGNORED)
            return await self._process(event)
        except Exception as exc:
            chat_id = event.chat_id if event is not None else None
            logger.exception("pipeline_unhandled_error", extra={"chat_id": chat_id})
            if chat_id is not None:
                await self.notify.apology(chat_id)
            return IngestReport(PipelineOutcome.FAILED, issues=[UnhandledInternal(type(exc).__name__)])

    async def _process(self, event: InboundEvent) -> IngestReport:
        if not event.has_content:
            logger.info("message_without_content", extra={"chat_id": event.chat_id})
            await self.notify.guidance(event.chat_id)
            return IngestReport(
                PipelineOutcome.AWAITING_CONTENT, issues=[NoActionableContent("no_text_or_photo")]
            )

        issues: List[DomainError] = []
        attachments: List[Attachment] = []
        if event.photo is not None:
            fetched = await self.fetch_attachment(event.photo)
            if is_error(fetched):
                issues.append(fetched)
            else:
                attachments.append(fetched)

        source_text = event.classification_input
        classified = await self.classify(source_text)
        if isinstance(classified, ClassificationUnavailable):
            issues.append(classified)
            classification = Classification.fallback(source_text)
        else:
            classification = classified

        note = Note.from_event(event, classification, attachments)
        stored = await self.persist(note)
        if is_error(stored):
            issues.append(stored)

        failed = {type(issue) for issue in issues}
        sent = await self.notify.note_saved(
            event.chat_id,
            note,
            has_image=bool(attachments),
            classification_failed=ClassificationUnavailable in failed,
            attachment_failed=AttachmentUnavailable in failed,
            persisted=PersistenceFailed not in failed,
        )
        if sent is not None:
            issues.append(sent)

        outcome = PipelineOutcome.DEGRADED if issues else PipelineOutcome.PROCESSED
        logger.info(
            "message_ingested",
            extra={
                "chat_id": event.chat_id,
                "outcome": outcome.value,
                "issues": [f"{type(i).__name__}:{i.reason}" for i in issues],
                "tags": note.tags,
            },
        )
        return IngestReport(outcome, note=note, issues=issues)


__all__ = ["IngestMessage", "IngestReport", "PipelineOutcome"]
