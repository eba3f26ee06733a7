from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class ObjectStorageError(Exception):
    """Raised when an object cannot be written to storage."""


def _safe_key(key: str) -> PurePosixPath:
    path = PurePosixPath(key.lstrip("/"))
    if not path.parts or any(part in {"..", "."} for part in path.parts):
        raise ObjectStorageError(f"Invalid object key: {key!r}")
    return path


class ObjectStorage(ABC):
    """Durable storage for binary attachments addressed by key."""

    bucket: str

    @abstractmethod
    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``key`` and return its public URL."""


class LocalObjectStorage(ObjectStorage):
    """File system backed storage used for development and tests.

    Objects live under ``<root>/<bucket>/<key>`` and are served by the API
    at ``<public_url>/assets/<key>``.
    """

    def __init__(self, root: Path, public_url: str = "", bucket: str = "assets") -> None:
        self.root = Path(root)
        self.bucket = bucket
        self.bucket_dir = self.root / bucket
        self.public_url = public_url.rstrip("/")

    def path_for(self, key: str) -> Path:
        return self.bucket_dir.joinpath(*_safe_key(key).parts)

    def resolve(self, key: str) -> Optional[Path]:
        """Return the stored file for ``key`` or ``None`` if absent/outside the bucket."""
        try:
            path = self.path_for(key).resolve()
        except ObjectStorageError:
            return None
        if not path.is_relative_to(self.bucket_dir.resolve()) or not path.is_file():
            return None
        return path

    def _write(self, path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(self._write, path, content)
        except OSError as exc:
            raise ObjectStorageError(f"Failed to write {path}: {exc}") from exc
        return f"{self.public_url}/assets/{_safe_key(key)}"


class SupabaseObjectStorage(ObjectStorage):
    """Supabase Storage REST backend."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str = "assets",
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self._transport = transport

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"

    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        _safe_key(key)
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(key)}"
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
            "Content-Type": content_type,
            "x-upsert": "false",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, content=content, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            body = exc.response.text[:200]
            raise ObjectStorageError(
                f"Storage upload rejected ({exc.response.status_code}): {body}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ObjectStorageError(f"Storage upload failed: {exc}") from exc
        logger.debug("object_uploaded", extra={"bucket": self.bucket, "key": key, "size": len(content)})
        return self.public_url(key)


__all__ = [
    "ObjectStorage",
    "ObjectStorageError",
    "LocalObjectStorage",
    "SupabaseObjectStorage",
]
