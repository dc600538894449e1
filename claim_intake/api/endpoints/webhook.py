"""WhatsApp webhook endpoints."""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from ...domain.errors import InvalidMessageError, StorageUnavailableError
from ...domain.models.inbound_message import InboundMessage, extract_messages
from ...domain.services.message_router import MessageRouter
from ...infrastructure.settings import IntakeSettings
from ..dependencies import get_message_router, get_settings
from ..security import verify_signature, verify_webhook_challenge

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhook"])


@router.get("/whatsapp", response_class=PlainTextResponse)
async def whatsapp_webhook_challenge(
    hub_mode: Optional[str] = Query(None, alias="hub.mode"),
    hub_challenge: Optional[str] = Query(None, alias="hub.challenge"),
    hub_verify_token: Optional[str] = Query(None, alias="hub.verify_token"),
    settings: IntakeSettings = Depends(get_settings),
) -> str:
    """Answer Meta's webhook subscription challenge."""
    return verify_webhook_challenge(hub_mode, hub_challenge, hub_verify_token, settings.verify_token)


@router.post("/whatsapp")
async def whatsapp_webhook_receiver(
    request: Request,
    settings: IntakeSettings = Depends(get_settings),
    message_router: MessageRouter = Depends(get_message_router),
) -> Dict[str, Any]:
    """Receive a WhatsApp webhook callback and route every message in it.

    Malformed messages are logged and skipped. A storage outage answers 503
    so WhatsApp redelivers the callback later.

    Raises:
        HTTPException(401/403): Bad or missing signature
        HTTPException(422): Body is not a JSON object
        HTTPException(503): Claim store unavailable
    """
    body = await request.body()
    if settings.app_secret:
        verify_signature(body, request.headers.get("X-Hub-Signature-256"), settings.app_secret)

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid JSON payload",
        )
    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Webhook payload must be an object",
        )

    outcomes: List[Dict[str, Any]] = []
    for raw_message in extract_messages(payload):
        try:
            message = InboundMessage.from_webhook(raw_message)
        except InvalidMessageError as e:
            logger.warning(f"⚠️ Skipping malformed message: {e}")
            continue

        try:
            outcome = await message_router.route(message)
        except StorageUnavailableError as e:
            logger.error(f"❌ Storage unavailable while handling {message.delivery_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Claim store unavailable",
            )
        outcomes.append(outcome.model_dump(mode="json"))

    return {"status": "ok", "outcomes": outcomes}
