"""Find-or-create over canonical claims."""

import logging
from typing import Tuple

from ..errors import DuplicateClaimAnomaly
from ..models.claim import Claim, ClaimDefaults, ClaimType
from ..ports.claim_store import ClaimStore

logger = logging.getLogger(__name__)


class ClaimRegistry:
    """Resolves incoming content to a canonical claim.

    The lookup-then-insert sequence is racy on its own. Correctness comes from
    ``ClaimStore.insert_claim_if_absent``: when two deliveries of new content
    race, the loser receives the winner's id and reports ``was_new=False``.
    """

    def __init__(self, store: ClaimStore):
        """Initialize the registry.

        Args:
            store: Claim store
        """
        self._store = store

    async def find_or_create(
        self,
        claim_type: ClaimType,
        dedup_key: str,
        defaults: ClaimDefaults,
    ) -> Tuple[str, bool]:
        """Return the claim for ``(claim_type, dedup_key)``, creating it if new.

        Existing claims are never modified.

        Args:
            claim_type: Text or image
            dedup_key: Exact text, or image fingerprint
            defaults: Field values used only if a claim is created

        Returns:
            ``(claim_id, was_new)``

        Raises:
            StorageUnavailableError: The store could not be reached
        """
        claim_type = ClaimType(claim_type)
        matches = await self._store.find_claims(claim_type, dedup_key)

        if matches:
            if len(matches) > 1:
                anomaly = DuplicateClaimAnomaly(
                    claim_type.value, dedup_key, [claim.id for claim in matches]
                )
                logger.warning(f"⚠️ Duplicate claim anomaly, using {anomaly.chosen_id}: {anomaly}")
            return matches[0].id, False

        claim = Claim.from_defaults(claim_type, defaults)
        if claim.dedup_key != dedup_key:
            raise ValueError("Claim defaults do not match the dedup key")

        claim_id, created = await self._store.insert_claim_if_absent(claim)
        if created:
            logger.info(f"🆕 Created {claim_type.value} claim {claim_id}")
        else:
            logger.info(f"🔁 Concurrent insert resolved to existing {claim_type.value} claim {claim_id}")
        return claim_id, created
