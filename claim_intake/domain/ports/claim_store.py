"""Port interfaces for the claim and parameter stores."""

from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..models.claim import Claim, ClaimType
from ..models.instance import Instance


class ClaimStore(Protocol):
    """Protocol for the document store holding claims and their instances.

    Implementations raise ``StorageUnavailableError`` when the backend cannot
    serve a request. Every write is a single atomic record creation.
    """

    async def initialize(self) -> None:
        """Open connections and create schema if needed."""
        ...

    async def shutdown(self) -> None:
        """Release connections."""
        ...

    async def find_claims(self, claim_type: ClaimType, dedup_key: str) -> List[Claim]:
        """Claims matching ``(type, dedup_key)``, oldest first."""
        ...

    async def insert_claim_if_absent(self, claim: Claim) -> Tuple[str, bool]:
        """Insert ``claim`` unless one with the same ``(type, dedup_key)`` exists.

        This is the concurrency control point for find-or-create: of any
        number of concurrent inserts with the same key, exactly one creates.

        Returns:
            ``(claim_id, created)``; on conflict the id of the existing claim
        """
        ...

    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        """Fetch a claim by id."""
        ...

    async def append_instance(self, claim_id: str, instance: Instance) -> str:
        """Append an instance under ``claim_id`` and return its id."""
        ...

    async def list_instances(self, claim_id: str) -> List[Instance]:
        """Instances of a claim in creation order."""
        ...

    async def count_claims(self) -> int:
        """Total number of claims."""
        ...

    def parameter_store(self) -> "ParameterStore":
        """Parameter store living in the same backend."""
        ...

    @property
    def provider_name(self) -> str:
        """Backend name."""
        ...


class ParameterStore(Protocol):
    """Protocol for runtime configuration documents (``systemParameters``)."""

    async def get_parameters(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the named document, or ``None`` when it does not exist."""
        ...

    async def set_parameters(self, name: str, values: Dict[str, Any]) -> None:
        """Create or replace the named document."""
        ...
