"""Error taxonomy for the claim intake pipeline."""

from typing import List


class IntakeError(Exception):
    """Base class for all intake errors."""


class InvalidMessageError(IntakeError):
    """Inbound webhook message could not be validated."""


class MediaDownloadError(IntakeError):
    """Media could not be fetched from the WhatsApp CDN."""


class MessagingError(IntakeError):
    """A WhatsApp Cloud API call failed."""


class StorageUnavailableError(IntakeError):
    """The backing store rejected or could not serve a request.

    Retryable: callers let the delivery fail so the transport redelivers it.
    """


class DuplicateClaimAnomaly:
    """More than one claim matched a dedup lookup.

    Not raised. The registry builds one of these for the log record and
    carries on with the first match.
    """

    def __init__(self, claim_type: str, dedup_key: str, claim_ids: List[str]):
        self.claim_type = claim_type
        self.dedup_key = dedup_key
        self.claim_ids = list(claim_ids)

    @property
    def chosen_id(self) -> str:
        return self.claim_ids[0]

    def __str__(self) -> str:
        return (
            f"{len(self.claim_ids)} {self.claim_type} claims share dedup key "
            f"{self.dedup_key[:80]!r}: {', '.join(self.claim_ids)}"
        )
