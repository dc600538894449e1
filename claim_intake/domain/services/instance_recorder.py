"""Append-only recording of claim instances."""

import logging

from ..models.instance import Instance
from ..ports.claim_store import ClaimStore

logger = logging.getLogger(__name__)


class InstanceRecorder:
    """Appends one instance per accepted delivery.

    No uniqueness check: a replayed delivery is recorded again.
    """

    def __init__(self, store: ClaimStore):
        self._store = store

    async def append(self, claim_id: str, instance: Instance) -> str:
        """Append ``instance`` under ``claim_id``.

        Store errors propagate unchanged.

        Returns:
            The new instance id
        """
        instance = instance.model_copy(update={"claim_id": claim_id})
        instance_id = await self._store.append_instance(claim_id, instance)
        logger.info(f"📝 Recorded instance {instance_id} of claim {claim_id} from delivery {instance.delivery_id}")
        return instance_id
