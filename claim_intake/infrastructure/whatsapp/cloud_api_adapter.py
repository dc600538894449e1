"""WhatsApp Cloud API implementation of the messaging gateway."""

import logging
from typing import Dict, Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import MediaDownloadError, MessagingError
from ...domain.ports.messaging_gateway import MessagingGateway

logger = logging.getLogger(__name__)


class WhatsAppConfig(BaseModel):
    """Configuration for the WhatsApp Cloud API adapter."""

    token: str = Field(default="", description="Graph API access token")
    phone_number_ids: Dict[str, str] = Field(
        default_factory=dict,
        description="Sending phone number id per bot channel ('user', 'factChecker')",
    )
    api_version: str = Field(default="v17.0", description="Graph API version")
    base_url: str = Field(default="https://graph.facebook.com", description="Graph API host")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")


class WhatsAppCloudAdapter(MessagingGateway):
    """Talks to the Graph API with one shared ``httpx.AsyncClient``.

    No retries: a failed call raises and the caller decides whether it matters.
    """

    def __init__(
        self,
        config: Optional[WhatsAppConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            client: Preconfigured HTTP client (tests); created lazily otherwise
        """
        self._config = config or WhatsAppConfig()
        self._client = client

    @property
    def api_root(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/{self._config.api_version}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                headers={"Authorization": f"Bearer {self._config.token}"},
            )
        return self._client

    def _phone_number_id(self, channel: str) -> str:
        phone_number_id = self._config.phone_number_ids.get(channel)
        if not phone_number_id:
            raise MessagingError(f"No phone number id configured for channel '{channel}'")
        return phone_number_id

    async def _post_message(self, channel: str, payload: Dict) -> Dict:
        url = f"{self.api_root}/{self._phone_number_id(channel)}/messages"
        try:
            response = await self._get_client().post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"WhatsApp API error: {e.response.status_code} - {e.response.text}")
            raise MessagingError(f"WhatsApp API returned {e.response.status_code}")
        except httpx.RequestError as e:
            raise MessagingError(f"HTTP request failed: {e}")
        return response.json()

    async def send_text(
        self,
        channel: str,
        recipient: str,
        body: str,
        reply_to_id: Optional[str] = None,
    ) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": recipient,
            "type": "text",
            "text": {"preview_url": False, "body": body},
        }
        if reply_to_id:
            payload["context"] = {"message_id": reply_to_id}
        await self._post_message(channel, payload)
        logger.info(f"💬 Sent text to {recipient} on channel '{channel}'")

    async def mark_read(self, channel: str, delivery_id: str) -> None:
        await self._post_message(
            channel,
            {
                "messaging_product": "whatsapp",
                "status": "read",
                "message_id": delivery_id,
            },
        )
        logger.debug(f"Marked {delivery_id} as read")

    async def download_media(self, media_id: str, mime_type: Optional[str] = None) -> bytes:
        """Resolve the media URL, then fetch the bytes with the same token."""
        client = self._get_client()
        try:
            meta = await client.get(f"{self.api_root}/{media_id}")
            meta.raise_for_status()
            media_url = meta.json().get("url")
            if not media_url:
                raise MediaDownloadError(f"No download URL for media {media_id}")

            response = await client.get(media_url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MediaDownloadError(
                f"Media {media_id} download returned {e.response.status_code}"
            )
        except (httpx.RequestError, ValueError) as e:
            raise MediaDownloadError(f"Media {media_id} download failed: {e}")

        logger.info(f"📥 Downloaded media {media_id} ({len(response.content)} bytes, {mime_type})")
        return response.content

    async def shutdown(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
