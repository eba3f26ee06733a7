"""Webhook origin check."""

from __future__ import annotations

import hmac
from typing import Optional

from .exceptions import AuthRejected

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


class WebhookAuthenticator:
    """Compare the Telegram secret header against the configured secret.

    An empty configured secret accepts every request.
    """

    def __init__(self, expected_secret: str = "") -> None:
        self.expected_secret = expected_secret or ""

    def accepts(self, received: Optional[str]) -> bool:
        if not self.expected_secret:
            return True
        if not received:
            return False
        return hmac.compare_digest(received.encode(), self.expected_secret.encode())

    def authenticate(self, received: Optional[str]) -> Optional[AuthRejected]:
        if self.accepts(received):
            return None
        reason = "missing_secret" if not received else "secret_mismatch"
        return AuthRejected(reason)


__all__ = ["SECRET_HEADER", "WebhookAuthenticator"]
