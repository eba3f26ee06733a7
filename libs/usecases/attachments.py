from __future__ import annotations

import logging
import mimetypes
import time
from pathlib import PurePosixPath
from typing import Callable

from telegram.error import TelegramError

from libs.core.exceptions import AttachmentUnavailable
from libs.core.models import Attachment, PhotoRef
from libs.core.types import Result
from libs.storage import ObjectStorage, ObjectStorageError
from libs.telegram import TelegramGateway

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"


def photo_object_key(file_id: str, file_path: str, now_ms: int) -> str:
    """Collision-resistant key ``photos/<unixMillis>_<fileId>.<ext>``."""
    ext = PurePosixPath(file_path).suffix.lstrip(".").lower() or DEFAULT_EXTENSION
    return f"photos/{now_ms}_{file_id}.{ext}"


def _content_type(key: str) -> str:
    guessed, _ = mimetypes.guess_type(key)
    return guessed or "image/jpeg"


class FetchAttachment:
    """Copy a Telegram photo into object storage.

    Never raises: every failure comes back as :class:`AttachmentUnavailable`
    so the note is still stored without the image.
    """

    def __init__(
        self,
        gateway: TelegramGateway,
        storage: ObjectStorage,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.gateway = gateway
        self.storage = storage
        self.clock = clock

    async def __call__(self, photo: PhotoRef) -> Result[Attachment]:
        try:
            downloaded = await self.gateway.download_file(photo.file_id)
        except TelegramError as exc:
            logger.warning(
                "attachment_download_failed",
                extra={"file_id": photo.file_id, "error_type": type(exc).__name__, "detail": str(exc)},
            )
            return AttachmentUnavailable("download_failed")
        except Exception:
            logger.exception("attachment_download_error", extra={"file_id": photo.file_id})
            return AttachmentUnavailable("download_failed")

        key = photo_object_key(photo.file_id, downloaded.file_path, int(self.clock() * 1000))
        try:
            url = await self.storage.upload(key, downloaded.content, _content_type(key))
        except ObjectStorageError as exc:
            logger.warning("attachment_upload_failed", extra={"key": key, "detail": str(exc)})
            return AttachmentUnavailable("upload_failed")
        except Exception:
            logger.exception("attachment_upload_error", extra={"key": key})
            return AttachmentUnavailable("upload_failed")

        logger.info("attachment_stored", extra={"key": key, "size": len(downloaded.content)})
        return Attachment(url=url, width=photo.width, height=photo.height)


__all__ = ["FetchAttachment", "photo_object_key"]
