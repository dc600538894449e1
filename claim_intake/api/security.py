"""Webhook authenticity checks (Meta HMAC signature and subscription challenge)."""

import hashlib
import hmac
from typing import Optional

from fastapi import HTTPException, status


def compute_signature(body: bytes, app_secret: str) -> str:
    """Value Meta sends in ``X-Hub-Signature-256`` for ``body``."""
    return "sha256=" + hmac.new(
        key=app_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).hexdigest()


def verify_signature(body: bytes, signature: Optional[str], app_secret: str) -> None:
    """Verify the HMAC-SHA256 signature of a webhook body.

    Raises:
        HTTPException(401): Missing signature
        HTTPException(403): Invalid signature
    """
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Hub-Signature-256 header",
        )

    # Constant-time compare
    if not hmac.compare_digest(signature, compute_signature(body, app_secret)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid signature",
        )


def verify_webhook_challenge(
    hub_mode: Optional[str],
    hub_challenge: Optional[str],
    hub_verify_token: Optional[str],
    expected_token: str,
) -> str:
    """Check a subscription request and return the challenge to echo.

    Raises:
        HTTPException(400): Mode is not ``subscribe``
        HTTPException(403): Token does not match
    """
    if hub_mode != "subscribe":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid hub.mode",
        )
    if not expected_token or not hmac.compare_digest(hub_verify_token or "", expected_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid hub.verify_token",
        )
    return hub_challenge or ""
