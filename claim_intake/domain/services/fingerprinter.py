"""Content fingerprinting for deduplication."""

import hashlib
from dataclasses import dataclass
from typing import Union

from ..models.claim import ClaimType


@dataclass(frozen=True)
class FingerprintResult:
    """Dedup key computed for a piece of content."""

    type: ClaimType
    value: str


class ContentFingerprinter:
    """Computes the key claims are matched on.

    Text is matched exactly: case, whitespace and punctuation differences make
    different claims. Images are matched on a SHA-256 digest of their decoded
    bytes, so only byte-identical images group together.
    """

    def fingerprint(self, claim_type: ClaimType, payload: Union[str, bytes]) -> FingerprintResult:
        """Fingerprint ``payload`` according to its type.

        Args:
            claim_type: Type of the content
            payload: The text body, or the raw image bytes

        Returns:
            Fingerprint result

        Raises:
            TypeError: Payload does not match the type
            ValueError: ``claim_type`` is not a claim type
        """
        claim_type = ClaimType(claim_type)
        if claim_type == ClaimType.TEXT:
            if not isinstance(payload, str):
                raise TypeError("Text fingerprint requires a str payload")
            return FingerprintResult(type=claim_type, value=payload)

        if claim_type == ClaimType.IMAGE:
            if not isinstance(payload, (bytes, bytearray)):
                raise TypeError("Image fingerprint requires a bytes payload")
            return FingerprintResult(type=claim_type, value=hashlib.sha256(payload).hexdigest())
