"""Routes inbound deliveries through the claim pipeline."""

import asyncio
import logging
from typing import Optional, Set

from ..errors import MediaDownloadError, MessagingError
from ..models.claim import ClaimDefaults, ClaimType
from ..models.inbound_message import InboundMessage
from ..models.instance import Instance
from ..models.route_outcome import OutcomeReason, RouteOutcome
from ..ports.media_storage import MediaStorage
from ..ports.messaging_gateway import MessagingGateway
from .claim_registry import ClaimRegistry
from .command_handler import CommandHandler
from .fingerprinter import ContentFingerprinter
from .instance_recorder import InstanceRecorder
from .response_catalog import ResponseCatalog
from .type_policy import TypePolicy

logger = logging.getLogger(__name__)


class MessageRouter:
    """Dispatches a delivery by type and acknowledges it.

    Flow: type policy check, fingerprint, find-or-create claim, append
    instance, then mark the delivery read. Mark-read happens after every
    handled branch (recorded, rejected, ignored, command, media failure) and
    is skipped only when routing raises, which leaves the delivery to the
    transport's redelivery.
    """

    def __init__(
        self,
        type_policy: TypePolicy,
        responses: ResponseCatalog,
        fingerprinter: ContentFingerprinter,
        registry: ClaimRegistry,
        recorder: InstanceRecorder,
        gateway: MessagingGateway,
        media_storage: Optional[MediaStorage] = None,
        command_handler: Optional[CommandHandler] = None,
        channel: str = "user",
    ):
        """Initialize the router.

        Args:
            type_policy: Supported message types
            responses: Bot response strings
            fingerprinter: Content fingerprinter
            registry: Claim registry
            recorder: Instance recorder
            gateway: WhatsApp gateway for replies, read receipts and media
            media_storage: Blob storage for new image claims
            command_handler: Debug command handler; ``None`` disables slash commands
            channel: Bot channel used for replies and read receipts
        """
        self._type_policy = type_policy
        self._responses = responses
        self._fingerprinter = fingerprinter
        self._registry = registry
        self._recorder = recorder
        self._gateway = gateway
        self._media_storage = media_storage
        self._command_handler = command_handler
        self._channel = channel
        self._uploads: Set[asyncio.Task] = set()

    async def route(self, message: InboundMessage) -> RouteOutcome:
        """Process one delivery.

        Raises:
            StorageUnavailableError: The claim store failed; nothing is acknowledged
        """
        outcome = await self._dispatch(message)
        await self._acknowledge(message)
        logger.info(
            f"✅ Delivery {message.delivery_id} ({message.type}) -> {outcome.kind.value}"
            + (f" [{outcome.reason.value}]" if outcome.reason else "")
        )
        return outcome

    async def _dispatch(self, message: InboundMessage) -> RouteOutcome:
        supported = await self._type_policy.supported_types()
        if message.type not in supported:
            return await self._reject_unsupported(message, supported)

        if message.type == ClaimType.TEXT.value:
            return await self._handle_text(message)
        if message.type == ClaimType.IMAGE.value:
            return await self._handle_image(message)

        logger.warning(f"⚠️ Type '{message.type}' is allowed but has no handler")
        return RouteOutcome.ignored(message.delivery_id, OutcomeReason.NO_HANDLER)

    async def _reject_unsupported(self, message: InboundMessage, supported) -> RouteOutcome:
        reply = await self._responses.get(
            "UNSUPPORTED_TYPE", supported_types=" and ".join(sorted(supported))
        )
        logger.info(f"🚫 Rejecting unsupported type '{message.type}' from {message.sender_id}")
        await self._send_best_effort(message.sender_id, reply, message.delivery_id)
        return RouteOutcome.rejected(message.delivery_id, reply)

    async def _handle_text(self, message: InboundMessage) -> RouteOutcome:
        text = message.text_body
        if not text:
            return RouteOutcome.ignored(message.delivery_id, OutcomeReason.EMPTY_BODY)

        if self._command_handler is not None and CommandHandler.is_command(text):
            command = await self._command_handler.handle(message)
            return RouteOutcome.command_executed(message.delivery_id, command)

        fingerprint = self._fingerprinter.fingerprint(ClaimType.TEXT, text)
        claim_id, was_new = await self._registry.find_or_create(
            ClaimType.TEXT,
            fingerprint.value,
            ClaimDefaults(first_seen_at=message.timestamp, content=text),
        )
        instance_id = await self._recorder.append(
            claim_id,
            Instance(
                delivery_id=message.delivery_id,
                timestamp=message.timestamp,
                type=ClaimType.TEXT,
                content=text,
                sender=message.sender_id,
                forwarded=message.forwarded,
                frequently_forwarded=message.frequently_forwarded,
            ),
        )
        return RouteOutcome.recorded(message.delivery_id, claim_id, instance_id, was_new)

    async def _handle_image(self, message: InboundMessage) -> RouteOutcome:
        image = message.image
        try:
            if image is None or not image.media_id:
                raise MediaDownloadError("Image message has no media id")
            data = await self._gateway.download_media(image.media_id, image.mime_type)
        except MediaDownloadError as e:
            logger.error(f"❌ Media download failed for delivery {message.delivery_id}: {e}")
            return RouteOutcome.failed(message.delivery_id, OutcomeReason.MEDIA_DOWNLOAD_FAILURE)

        fingerprint = self._fingerprinter.fingerprint(ClaimType.IMAGE, data)
        storage_location = media_object_path(image.media_id, image.mime_type)
        claim_id, was_new = await self._registry.find_or_create(
            ClaimType.IMAGE,
            fingerprint.value,
            ClaimDefaults(
                first_seen_at=message.timestamp,
                content=image.caption,
                fingerprint=fingerprint.value,
                media_ref=image.media_id,
                mime_type=image.mime_type,
                storage_location=storage_location,
            ),
        )
        if was_new:
            self._upload_in_background(storage_location, data)

        instance_id = await self._recorder.append(
            claim_id,
            Instance(
                delivery_id=message.delivery_id,
                timestamp=message.timestamp,
                type=ClaimType.IMAGE,
                content=image.caption,
                sender=message.sender_id,
                forwarded=message.forwarded,
                frequently_forwarded=message.frequently_forwarded,
                fingerprint=fingerprint.value,
                media_ref=image.media_id,
                mime_type=image.mime_type,
            ),
        )
        return RouteOutcome.recorded(message.delivery_id, claim_id, instance_id, was_new)

    def _upload_in_background(self, path: str, data: bytes) -> None:
        if self._media_storage is None:
            logger.warning(f"⚠️ No media storage configured, {path} not uploaded")
            return
        task = asyncio.create_task(self._upload(path, data))
        self._uploads.add(task)
        task.add_done_callback(self._uploads.discard)

    async def _upload(self, path: str, data: bytes) -> None:
        # Claim metadata is already written; a failed upload leaves it without a blob.
        try:
            await self._media_storage.store_object(path, data)
            logger.info(f"📦 {path} has been uploaded")
        except Exception as e:
            logger.error(f"❌ Upload of {path} failed: {e}")

    async def drain_uploads(self) -> None:
        """Wait for pending background uploads."""
        if self._uploads:
            await asyncio.gather(*list(self._uploads))

    async def _send_best_effort(self, recipient: str, body: str, reply_to_id: Optional[str]) -> None:
        try:
            await self._gateway.send_text(self._channel, recipient, body, reply_to_id)
        except MessagingError as e:
            logger.error(f"❌ Failed to reply to {recipient}: {e}")

    async def _acknowledge(self, message: InboundMessage) -> None:
        try:
            await self._gateway.mark_read(self._channel, message.delivery_id)
        except MessagingError as e:
            logger.error(f"❌ Failed to mark {message.delivery_id} as read: {e}")


def media_object_path(media_id: str, mime_type: Optional[str]) -> str:
    """Object path for a media blob, e.g. ``images/<id>.jpeg``."""
    extension = mime_type.split("/")[-1].split(";")[0].strip() if mime_type else "bin"
    return f"images/{media_id}.{extension or 'bin'}"
