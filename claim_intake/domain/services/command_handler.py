"""Debug-only slash commands.

Reachable from untrusted input, so the router only wires this in when
``ENABLE_DEBUG_COMMANDS`` is set. Never enable it for the production number.
"""

import logging
from typing import List

from ..errors import MessagingError
from ..models.claim import ClaimDefaults, ClaimType
from ..models.inbound_message import InboundMessage
from ..models.instance import Instance
from ..ports.messaging_gateway import MessagingGateway
from .claim_registry import ClaimRegistry
from .instance_recorder import InstanceRecorder
from .response_catalog import ResponseCatalog

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "/"

MOCK_CLAIMS: List[str] = [
    "Drinking hot water every 15 minutes kills the virus.",
    "Banks will close all accounts without a new ID by Friday.",
    "You have won a $1000 voucher, click the link to claim it.",
]


class CommandHandler:
    """Executes ``/getid`` and ``/mockdb``."""

    def __init__(
        self,
        gateway: MessagingGateway,
        registry: ClaimRegistry,
        recorder: InstanceRecorder,
        responses: ResponseCatalog,
        channel: str = "user",
    ):
        self._gateway = gateway
        self._registry = registry
        self._recorder = recorder
        self._responses = responses
        self._channel = channel

    @staticmethod
    def is_command(text: str) -> bool:
        return text.startswith(COMMAND_PREFIX)

    async def handle(self, message: InboundMessage) -> str:
        """Run the command in ``message.text_body``.

        Returns:
            The command that ran, or ``"unknown"``
        """
        command = (message.text_body or "").strip().lower()
        logger.info(f"🛠️ Debug command {command!r} from {message.sender_id}")

        if command == "/getid":
            await self._reply(message, message.delivery_id)
            return "getid"

        if command == "/mockdb":
            count = await self._seed_mock_claims(message)
            reply = await self._responses.get("MOCK_DB_SEEDED", count=count)
            await self._reply(message, reply)
            return "mockdb"

        logger.info(f"Ignoring unknown debug command {command!r}")
        return "unknown"

    async def _reply(self, message: InboundMessage, body: str) -> None:
        try:
            await self._gateway.send_text(self._channel, message.sender_id, body, message.delivery_id)
        except MessagingError as e:
            logger.error(f"❌ Failed to answer debug command: {e}")

    async def _seed_mock_claims(self, message: InboundMessage) -> int:
        for text in MOCK_CLAIMS:
            claim_id, _ = await self._registry.find_or_create(
                ClaimType.TEXT,
                text,
                ClaimDefaults(first_seen_at=message.timestamp, content=text),
            )
            await self._recorder.append(
                claim_id,
                Instance(
                    delivery_id=None,
                    timestamp=message.timestamp,
                    type=ClaimType.TEXT,
                    content=text,
                    sender=message.sender_id,
                ),
            )
        return len(MOCK_CLAIMS)
