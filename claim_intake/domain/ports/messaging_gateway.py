"""Port interface for the WhatsApp messaging collaborator."""

from abc import ABC, abstractmethod
from typing import Optional


class MessagingGateway(ABC):
    """Outbound calls to WhatsApp.

    ``channel`` names which bot number is speaking (``"user"`` for the public
    tipline, ``"factChecker"`` for the checkers' bot).
    """

    @abstractmethod
    async def send_text(
        self,
        channel: str,
        recipient: str,
        body: str,
        reply_to_id: Optional[str] = None,
    ) -> None:
        """Send a text message, optionally quoting ``reply_to_id``.

        Raises:
            MessagingError: The API call failed
        """
        pass

    @abstractmethod
    async def mark_read(self, channel: str, delivery_id: str) -> None:
        """Mark a delivery as read (blue ticks).

        Raises:
            MessagingError: The API call failed
        """
        pass

    @abstractmethod
    async def download_media(self, media_id: str, mime_type: Optional[str] = None) -> bytes:
        """Fetch the decoded bytes of a media object.

        Raises:
            MediaDownloadError: The media could not be fetched
        """
        pass

    async def shutdown(self) -> None:
        """Release resources."""
        pass
