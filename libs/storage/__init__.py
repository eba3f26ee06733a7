"""Object storage backends for note attachments."""

from .object_storage import (
    LocalObjectStorage,
    ObjectStorage,
    ObjectStorageError,
    SupabaseObjectStorage,
)

__all__ = [
    "LocalObjectStorage",
    "ObjectStorage",
    "ObjectStorageError",
    "SupabaseObjectStorage",
]
