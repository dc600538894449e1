"""Tests for debug slash commands."""

import pytest

from claim_intake.domain.errors import MessagingError
from claim_intake.domain.models.inbound_message import InboundMessage
from claim_intake.domain.services.claim_registry import ClaimRegistry
from claim_intake.domain.services.command_handler import MOCK_CLAIMS, CommandHandler
from claim_intake.domain.services.instance_recorder import InstanceRecorder
from claim_intake.domain.services.response_catalog import ResponseCatalog


@pytest.fixture
def handler(claim_store, gateway, system_parameters) -> CommandHandler:
    return CommandHandler(
        gateway,
        ClaimRegistry(claim_store),
        InstanceRecorder(claim_store),
        ResponseCatalog(system_parameters),
    )


def command(webhook_message, text: str) -> InboundMessage:
    return InboundMessage.from_webhook(webhook_message(body=text, delivery_id="wamid.cmd"))


def test_is_command():
    assert CommandHandler.is_command("/getid")
    assert not CommandHandler.is_command("getid /")


@pytest.mark.asyncio
async def test_getid_replies_with_delivery_id(handler, gateway, webhook_message):
    assert await handler.handle(command(webhook_message, "/GetID")) == "getid"

    gateway.send_text.assert_awaited_once_with("user", "+111", "wamid.cmd", "wamid.cmd")


@pytest.mark.asyncio
async def test_mockdb_seeds_claims_idempotently(handler, claim_store, gateway, webhook_message):
    assert await handler.handle(command(webhook_message, "/mockdb")) == "mockdb"
    await handler.handle(command(webhook_message, "/mockdb"))

    assert await claim_store.count_claims() == len(MOCK_CLAIMS)
    reply = gateway.send_text.await_args.args[2]
    assert str(len(MOCK_CLAIMS)) in reply


@pytest.mark.asyncio
async def test_unknown_command_does_nothing(handler, claim_store, gateway, webhook_message):
    assert await handler.handle(command(webhook_message, "/dropall")) == "unknown"

    assert await claim_store.count_claims() == 0
    gateway.send_text.assert_not_awaited()


@pytest.mark.asyncio
async def test_reply_failure_is_only_logged(handler, gateway, webhook_message):
    gateway.send_text.side_effect = MessagingError("offline")

    assert await handler.handle(command(webhook_message, "/getid")) == "getid"
