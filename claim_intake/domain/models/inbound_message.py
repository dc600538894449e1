"""Validated boundary model for inbound WhatsApp messages.

The raw webhook message is loosely typed. Everything the pipeline reads is
pulled out here once, with absent optional fields set to ``None``.

ref: https://developers.facebook.com/docs/whatsapp/cloud-api/webhooks/payload-examples
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..errors import InvalidMessageError


class ImageBody(BaseModel):
    """Image part of a message."""

    media_id: Optional[str] = None
    mime_type: Optional[str] = None
    caption: Optional[str] = None

    class Config:
        frozen = True


class InboundMessage(BaseModel):
    """A single delivery, normalized for routing."""

    sender_id: str = Field(..., description="Sender phone number")
    delivery_id: str = Field(..., description="WhatsApp message id (wamid)")
    type: str = Field(..., description="Declared message type, supported or not")
    timestamp: datetime = Field(..., description="Delivery time, UTC")
    text_body: Optional[str] = Field(None, description="text.body for text messages")
    image: Optional[ImageBody] = Field(None, description="Image metadata for image messages")
    forwarded: Optional[bool] = None
    frequently_forwarded: Optional[bool] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @classmethod
    def from_webhook(cls, message: Dict[str, Any]) -> "InboundMessage":
        """Build from one entry of ``value.messages`` in a webhook payload.

        Raises:
            InvalidMessageError: A required field is missing or malformed
        """
        if not isinstance(message, dict):
            raise InvalidMessageError(f"Message must be an object, got {type(message).__name__}")

        try:
            sender_id = message["from"]
            delivery_id = message["id"]
            message_type = message["type"]
            timestamp = datetime.fromtimestamp(int(message["timestamp"]), tz=timezone.utc)
        except KeyError as e:
            raise InvalidMessageError(f"Message missing required field {e}")
        except (TypeError, ValueError, OverflowError) as e:
            raise InvalidMessageError(f"Invalid message timestamp: {e}")

        text = _section(message, "text")
        context = _section(message, "context")
        raw_image = message.get("image")

        try:
            image = None
            if isinstance(raw_image, dict):
                image = ImageBody(
                    media_id=raw_image.get("id"),
                    mime_type=raw_image.get("mime_type"),
                    caption=raw_image.get("caption"),
                )

            inbound = cls(
                sender_id=str(sender_id),
                delivery_id=str(delivery_id),
                type=str(message_type),
                timestamp=timestamp,
                text_body=text.get("body"),
                image=image,
                forwarded=context.get("forwarded"),
                frequently_forwarded=context.get("frequently_forwarded"),
            )
        except ValidationError as e:
            raise InvalidMessageError(f"Malformed message {delivery_id}: {e}")

        inbound._check_encodable()
        return inbound

    def _check_encodable(self) -> None:
        # Lone surrogates survive json.loads but cannot be stored or hashed.
        fields = {
            "from": self.sender_id,
            "id": self.delivery_id,
            "type": self.type,
            "text.body": self.text_body,
        }
        if self.image is not None:
            fields.update({
                "image.id": self.image.media_id,
                "image.mime_type": self.image.mime_type,
                "image.caption": self.image.caption,
            })
        for name, value in fields.items():
            if value is None:
                continue
            try:
                value.encode("utf-8")
            except UnicodeEncodeError:
                raise InvalidMessageError(f"Field {name} is not valid UTF-8")


def _section(message: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Optional object-valued part of a message, ``{}`` when absent."""
    value = message.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidMessageError(f"Message field {name} must be an object, got {type(value).__name__}")
    return value


def extract_messages(payload: Dict[str, Any]) -> List[Any]:
    """Collect every message object from a webhook envelope.

    Status callbacks (sent, delivered, read) carry no ``messages`` and
    contribute nothing. Envelope parts that are not objects are skipped.
    """
    if not isinstance(payload, dict):
        return []
    messages = []
    for entry in _objects(payload.get("entry")):
        for change in _objects(entry.get("changes")):
            value = change.get("value")
            if not isinstance(value, dict):
                continue
            batch = value.get("messages")
            if isinstance(batch, list):
                messages.extend(batch)
    return messages


def _objects(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]
