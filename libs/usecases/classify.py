from __future__ import annotations

import asyncio
import logging

from libs.core.exceptions import ClassificationUnavailable
from libs.core.models import Classification
from libs.core.types import Result
from libs.llm import LLMClient, LLMClientError
from libs.llm.contract import InvalidClassification, parse_classification

logger = logging.getLogger(__name__)


class ClassifyText:
    """Single-attempt classification of one message.

    No retries: the webhook has a bounded time budget, and the user is
    asked to resend instead.
    """

    def __init__(self, llm: LLMClient) -> None:
        self.llm = llm

    async def __call__(self, text: str) -> Result[Classification]:
        try:
            # Replicate's client is synchronous
            raw = await asyncio.to_thread(self.llm.classify_note, text)
        except LLMClientError as exc:
            logger.warning("classification_backend_failed", extra={"detail": str(exc)[:300]})
            return ClassificationUnavailable("backend_error")

        parsed = parse_classification(raw)
        if isinstance(parsed, InvalidClassification):
            logger.warning(
                "classification_invalid_output",
                extra={"reason": parsed.reason, "preview": parsed.preview},
            )
            return ClassificationUnavailable(parsed.reason)
        if not parsed.title or not parsed.summary:
            logger.info(
                "classification_missing_fields",
                extra={"has_title": bool(parsed.title), "has_summary": bool(parsed.summary)},
            )
        return parsed


__all__ = ["ClassifyText"]
