"""Domain model for claim instances (one per accepted delivery)."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .claim import ClaimType


class Instance(BaseModel):
    """A single delivery of a claim's content.

    Appended once under its claim. Only ``replied`` is ever changed afterwards,
    and not by this service.
    """

    id: Optional[str] = Field(None, description="Store-assigned identifier")
    claim_id: Optional[str] = Field(None, description="Owning claim")
    source: str = Field(default="whatsapp", description="Channel the delivery came from")
    delivery_id: Optional[str] = Field(None, description="WhatsApp message id, needed to reply")
    timestamp: datetime = Field(..., description="Delivery timestamp")
    type: ClaimType
    content: Optional[str] = Field(None, description="Text or caption as delivered")
    sender: Optional[str] = Field(None, description="Sender phone number")
    forwarded: Optional[bool] = None
    frequently_forwarded: Optional[bool] = None
    replied: bool = False

    fingerprint: Optional[str] = None
    media_ref: Optional[str] = None
    mime_type: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True
