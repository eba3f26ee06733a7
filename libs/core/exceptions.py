"""Base exceptions for the domain layer.

Pipeline stages return these as values (see :mod:`libs.core.types`) rather
than raising them, so the orchestrator can decide how each one degrades.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain level exceptions."""

    def __init__(self, reason: str = "", *args: object) -> None:
        super().__init__(reason, *args)
        self.reason = reason


class AuthRejected(DomainError):
    """Inbound webhook did not carry the expected secret token."""


class NoActionableContent(DomainError):
    """Message has neither text nor photo (stickers, voice, ...)."""


class AttachmentUnavailable(DomainError):
    """Photo could not be resolved, downloaded or uploaded."""


class ClassificationUnavailable(DomainError):
    """Generative backend failed or returned an unusable payload."""


class PersistenceFailed(DomainError):
    """Note insert into the datastore failed."""


class NotificationFailed(DomainError):
    """Reply to the chat could not be delivered."""


class UnhandledInternal(DomainError):
    """Unexpected failure caught at the pipeline boundary."""


# Alias to keep a generic name for error type hints
Error = DomainError

__all__ = [
    "DomainError",
    "AuthRejected",
    "NoActionableContent",
    "AttachmentUnavailable",
    "ClassificationUnavailable",
    "PersistenceFailed",
    "NotificationFailed",
    "UnhandledInternal",
    "Error",
]
