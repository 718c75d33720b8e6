"""Security helpers (webhook shared secret, generated codes and credentials)."""

from __future__ import annotations

import logging
import secrets

from .errors import AuthError, ForbiddenError

logger = logging.getLogger(__name__)

WEBHOOK_KEY_HEADER = "X-Api-Key"


def verify_webhook_key(supplied: str | None, expected: str) -> None:
    """Reject a webhook call whose shared secret is missing or wrong."""
    if not expected:
        logger.error("[webhook] Webhook secret is not configured; rejecting call")
        raise ForbiddenError("Webhook is not configured")
    value = (supplied or "").strip()
    if not value:
        raise AuthError("Missing API key")
    if not secrets.compare_digest(value.encode(), expected.encode()):
        raise ForbiddenError("Invalid API key")


def generate_code() -> str:
    """Four digit confirmation code, 1000-9999."""
    return str(1000 + secrets.randbelow(9000))


def generate_password(length: int = 12) -> str:
    return secrets.token_urlsafe(length)[:length]


def generate_reset_token() -> str:
    return secrets.token_urlsafe(24)
