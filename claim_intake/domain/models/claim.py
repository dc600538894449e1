"""Domain model for canonical claims."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_CATEGORY = "fake news"


class ClaimType(str, Enum):
    """Content types the claim pipeline can group."""

    TEXT = "text"
    IMAGE = "image"


class ClaimDefaults(BaseModel):
    """Field values for a claim created by the first delivery of its content."""

    first_seen_at: datetime = Field(..., description="Timestamp of the creating delivery")
    category: str = Field(default=DEFAULT_CATEGORY, description="'fake news' or 'scam'")
    content: Optional[str] = Field(None, description="Text, or caption for images")
    fingerprint: Optional[str] = Field(None, description="Digest of the image bytes")
    media_ref: Optional[str] = Field(None, description="WhatsApp media id")
    mime_type: Optional[str] = Field(None, description="Media MIME type")
    storage_location: Optional[str] = Field(None, description="Object path of the stored media")


class Claim(BaseModel):
    """One distinct piece of reported content.

    Assessment fields start out empty and are only ever written by the
    assessment side of the bot. Ingestion creates claims and never updates them.
    """

    id: Optional[str] = Field(None, description="Store-assigned identifier")
    type: ClaimType
    category: str = DEFAULT_CATEGORY
    content: Optional[str] = None
    fingerprint: Optional[str] = None
    first_seen_at: datetime

    poll_started: bool = False
    assessed: bool = False
    truth_score: Optional[float] = None
    is_irrelevant: Optional[bool] = None
    is_scam: Optional[bool] = None
    custom_reply: Optional[str] = None

    media_ref: Optional[str] = None
    mime_type: Optional[str] = None
    storage_location: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "3f1c9a0e2b7d4e6f8a1b2c3d4e5f6a7b",
                "type": "text",
                "category": "fake news",
                "content": "Vaccines cause X",
                "first_seen_at": "2023-11-14T22:13:20Z",
                "poll_started": False,
                "assessed": False,
            }
        }

    @property
    def dedup_key(self) -> Optional[str]:
        """Value the registry matches on: the text, or the image fingerprint."""
        if self.type == ClaimType.IMAGE:
            return self.fingerprint
        return self.content

    @classmethod
    def from_defaults(cls, claim_type: ClaimType, defaults: ClaimDefaults) -> "Claim":
        """Build a fresh, unassessed claim."""
        if claim_type == ClaimType.TEXT:
            return cls(
                type=claim_type,
                category=defaults.category,
                content=defaults.content,
                first_seen_at=defaults.first_seen_at,
            )
        return cls(
            type=claim_type,
            category=defaults.category,
            content=defaults.content,
            fingerprint=defaults.fingerprint,
            first_seen_at=defaults.first_seen_at,
            media_ref=defaults.media_ref,
            mime_type=defaults.mime_type,
            storage_location=defaults.storage_location,
        )

    def with_id(self, claim_id: str) -> "Claim":
        return self.model_copy(update={"id": claim_id})
