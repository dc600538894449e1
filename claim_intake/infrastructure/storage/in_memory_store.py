"""In-process implementations of the claim and parameter stores."""

import asyncio
import copy
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ...domain.models.claim import Claim, ClaimType
from ...domain.models.instance import Instance


class InMemoryClaimStore:
    """Claim store held in process memory.

    Conditional inserts are serialized with an ``asyncio.Lock``, which is
    enough inside one event loop. Data does not survive a restart; use the
    SQL store for anything shared between workers.
    """

    def __init__(self, provider_name: str = "memory"):
        self._name = provider_name
        self._claims: Dict[str, Claim] = {}
        self._instances: Dict[str, List[Instance]] = {}
        self._lock = asyncio.Lock()
        self._parameters = InMemoryParameterStore()
        self._initialized = False

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        self._initialized = False

    def parameter_store(self) -> "InMemoryParameterStore":
        return self._parameters

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def is_available(self) -> bool:
        return self._initialized

    async def find_claims(self, claim_type: ClaimType, dedup_key: str) -> List[Claim]:
        # dicts keep insertion order, which is creation order here
        return [
            claim
            for claim in self._claims.values()
            if claim.type == claim_type and claim.dedup_key == dedup_key
        ]

    async def insert_claim_if_absent(self, claim: Claim) -> Tuple[str, bool]:
        async with self._lock:
            existing = await self.find_claims(claim.type, claim.dedup_key)
            if existing:
                return existing[0].id, False
            claim_id = uuid4().hex
            self._claims[claim_id] = claim.with_id(claim_id)
            self._instances[claim_id] = []
            return claim_id, True

    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        return self._claims.get(claim_id)

    async def append_instance(self, claim_id: str, instance: Instance) -> str:
        if claim_id not in self._claims:
            raise KeyError(f"Claim {claim_id} not found")
        instance_id = uuid4().hex
        self._instances[claim_id].append(
            instance.model_copy(update={"id": instance_id, "claim_id": claim_id})
        )
        return instance_id

    async def list_instances(self, claim_id: str) -> List[Instance]:
        return list(self._instances.get(claim_id, []))

    async def count_claims(self) -> int:
        return len(self._claims)


class InMemoryParameterStore:
    """Parameter documents held in process memory."""

    def __init__(self, documents: Optional[Dict[str, Dict[str, Any]]] = None):
        self._documents: Dict[str, Dict[str, Any]] = copy.deepcopy(documents or {})

    async def get_parameters(self, name: str) -> Optional[Dict[str, Any]]:
        document = self._documents.get(name)
        return copy.deepcopy(document) if document is not None else None

    async def set_parameters(self, name: str, values: Dict[str, Any]) -> None:
        self._documents[name] = copy.deepcopy(values)
