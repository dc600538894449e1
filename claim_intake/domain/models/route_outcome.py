"""Result of routing one inbound delivery."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class OutcomeKind(str, Enum):
    """What the router did with a delivery."""

    RECORDED = "recorded"
    REJECTED = "rejected"
    IGNORED = "ignored"
    COMMAND_EXECUTED = "command_executed"
    FAILED = "failed"


class OutcomeReason(str, Enum):
    """Why a delivery was not recorded."""

    UNSUPPORTED_TYPE = "unsupported_type"
    EMPTY_BODY = "empty_body"
    NO_HANDLER = "no_handler"
    MEDIA_DOWNLOAD_FAILURE = "media_download_failure"


class RouteOutcome(BaseModel):
    """Outcome of ``MessageRouter.route``."""

    kind: OutcomeKind
    delivery_id: Optional[str] = None
    reason: Optional[OutcomeReason] = None
    claim_id: Optional[str] = None
    instance_id: Optional[str] = None
    was_new_claim: Optional[bool] = None
    reply: Optional[str] = None
    command: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def recorded(
        cls, delivery_id: str, claim_id: str, instance_id: str, was_new_claim: bool
    ) -> "RouteOutcome":
        return cls(
            kind=OutcomeKind.RECORDED,
            delivery_id=delivery_id,
            claim_id=claim_id,
            instance_id=instance_id,
            was_new_claim=was_new_claim,
        )

    @classmethod
    def rejected(cls, delivery_id: str, reply: str) -> "RouteOutcome":
        return cls(
            kind=OutcomeKind.REJECTED,
            delivery_id=delivery_id,
            reason=OutcomeReason.UNSUPPORTED_TYPE,
            reply=reply,
        )

    @classmethod
    def ignored(cls, delivery_id: str, reason: OutcomeReason) -> "RouteOutcome":
        return cls(kind=OutcomeKind.IGNORED, delivery_id=delivery_id, reason=reason)

    @classmethod
    def command_executed(cls, delivery_id: str, command: str) -> "RouteOutcome":
        return cls(kind=OutcomeKind.COMMAND_EXECUTED, delivery_id=delivery_id, command=command)

    @classmethod
    def failed(cls, delivery_id: str, reason: OutcomeReason) -> "RouteOutcome":
        return cls(kind=OutcomeKind.FAILED, delivery_id=delivery_id, reason=reason)
