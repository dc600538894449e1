"""Cached access to runtime configuration documents."""

import logging
from typing import Any, Dict, Optional

from cachetools import TTLCache

from ..errors import StorageUnavailableError
from ..ports.claim_store import ParameterStore

logger = logging.getLogger(__name__)


class SystemParameters:
    """Reads ``systemParameters`` documents with a bounded staleness window.

    A document is re-read at most ``ttl`` seconds after it was last fetched.
    With ``ttl <= 0`` every call goes to the store. An unreachable store reads
    as a missing document so callers fall back to their built-in defaults.
    """

    def __init__(self, store: ParameterStore, ttl: float = 30.0, maxsize: int = 32):
        self._store = store
        self._ttl = ttl
        self._cache: Optional[TTLCache] = TTLCache(maxsize=maxsize, ttl=ttl) if ttl > 0 else None

    @property
    def ttl(self) -> float:
        return self._ttl

    async def get(self, name: str) -> Optional[Dict[str, Any]]:
        """Return the named document, or ``None`` if missing or unreachable."""
        if self._cache is not None and name in self._cache:
            return self._cache[name]

        try:
            document = await self._store.get_parameters(name)
        except StorageUnavailableError as e:
            logger.warning(f"⚠️ Could not read system parameters '{name}', using defaults: {e}")
            return None

        if self._cache is not None:
            self._cache[name] = document
        return document

    def invalidate(self) -> None:
        """Drop all cached documents."""
        if self._cache is not None:
            self._cache.clear()
