"""Core library exposing domain models, settings, exceptions and types."""

from .settings import Settings, get_settings
from .exceptions import (
    DomainError,
    AuthRejected,
    NoActionableContent,
    AttachmentUnavailable,
    ClassificationUnavailable,
    PersistenceFailed,
    NotificationFailed,
    UnhandledInternal,
    Error,
)
from .models import Attachment, Classification, InboundEvent, Note, PhotoRef
from .security import WebhookAuthenticator
from .types import Result, is_error

__all__ = [
    "Settings",
    "get_settings",
    "DomainError",
    "AuthRejected",
    "NoActionableContent",
    "AttachmentUnavailable",
    "ClassificationUnavailable",
    "PersistenceFailed",
    "NotificationFailed",
    "UnhandledInternal",
    "Error",
    "Attachment",
    "Classification",
    "InboundEvent",
    "Note",
    "PhotoRef",
    "WebhookAuthenticator",
    "Result",
    "is_error",
]
