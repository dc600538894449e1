"""Test configuration and common fixtures."""

from typing import Any, Callable, Dict, Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from claim_intake.domain.ports.media_storage import MediaStorage
from claim_intake.domain.ports.messaging_gateway import MessagingGateway
from claim_intake.domain.services.claim_registry import ClaimRegistry
from claim_intake.domain.services.command_handler import CommandHandler
from claim_intake.domain.services.fingerprinter import ContentFingerprinter
from claim_intake.domain.services.instance_recorder import InstanceRecorder
from claim_intake.domain.services.message_router import MessageRouter
from claim_intake.domain.services.response_catalog import ResponseCatalog
from claim_intake.domain.services.system_parameters import SystemParameters
from claim_intake.domain.services.type_policy import TypePolicy
from claim_intake.infrastructure.storage.in_memory_store import InMemoryClaimStore


@pytest_asyncio.fixture
async def claim_store() -> InMemoryClaimStore:
    """Provide an initialized in-memory claim store."""
    store = InMemoryClaimStore()
    await store.initialize()
    yield store
    await store.shutdown()


@pytest.fixture
def parameter_store(claim_store):
    """Parameter store sharing the claim store's backend."""
    return claim_store.parameter_store()


@pytest.fixture
def gateway() -> AsyncMock:
    """Mock WhatsApp gateway whose media downloads return fixed bytes."""
    mock = AsyncMock(spec=MessagingGateway)
    mock.download_media.return_value = b"\x89PNG fake image bytes"
    return mock


@pytest.fixture
def media_storage() -> AsyncMock:
    """Mock media storage."""
    return AsyncMock(spec=MediaStorage)


@pytest.fixture
def system_parameters(parameter_store) -> SystemParameters:
    """Uncached parameters so policy changes apply immediately."""
    return SystemParameters(parameter_store, ttl=0)


@pytest.fixture
def make_router(claim_store, gateway, media_storage, system_parameters) -> Callable[..., MessageRouter]:
    """Build a message router over the shared fixtures."""

    def _make(debug_commands: bool = False) -> MessageRouter:
        responses = ResponseCatalog(system_parameters)
        registry = ClaimRegistry(claim_store)
        recorder = InstanceRecorder(claim_store)
        command_handler = None
        if debug_commands:
            command_handler = CommandHandler(gateway, registry, recorder, responses)
        return MessageRouter(
            type_policy=TypePolicy(system_parameters),
            responses=responses,
            fingerprinter=ContentFingerprinter(),
            registry=registry,
            recorder=recorder,
            gateway=gateway,
            media_storage=media_storage,
            command_handler=command_handler,
        )

    return _make


@pytest.fixture
def router(make_router) -> MessageRouter:
    """Router with debug commands disabled."""
    return make_router()


@pytest.fixture
def webhook_message() -> Callable[..., Dict[str, Any]]:
    """Build a raw WhatsApp message object."""

    def _build(
        message_type: str = "text",
        body: Optional[str] = "Vaccines cause X",
        sender: str = "+111",
        delivery_id: str = "wamid.1",
        timestamp: str = "1700000000",
        media_id: str = "media-1",
        mime_type: str = "image/jpeg",
        caption: Optional[str] = None,
        forwarded: Optional[bool] = None,
        frequently_forwarded: Optional[bool] = None,
    ) -> Dict[str, Any]:
        message: Dict[str, Any] = {
            "from": sender,
            "id": delivery_id,
            "timestamp": timestamp,
            "type": message_type,
        }
        if message_type == "text" and body is not None:
            message["text"] = {"body": body}
        if message_type == "image":
            message["image"] = {"id": media_id, "mime_type": mime_type}
            if caption is not None:
                message["image"]["caption"] = caption
        if message_type == "sticker":
            message["sticker"] = {"id": media_id, "mime_type": "image/webp"}
        context = {}
        if forwarded is not None:
            context["forwarded"] = forwarded
        if frequently_forwarded is not None:
            context["frequently_forwarded"] = frequently_forwarded
        if context:
            message["context"] = context
        return message

    return _build


@pytest.fixture
def webhook_payload() -> Callable[..., Dict[str, Any]]:
    """Wrap message objects in a webhook envelope."""

    def _wrap(*messages: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "object": "whatsapp_business_account",
            "entry": [
                {
                    "id": "business-account-id",
                    "changes": [
                        {
                            "field": "messages",
                            "value": {
                                "messaging_product": "whatsapp",
                                "metadata": {"phone_number_id": "user-number-id"},
                                "messages": list(messages),
                            },
                        }
                    ],
                }
            ],
        }

    return _wrap
