"""Factory for creating and managing claim store backends."""

from typing import Dict, Optional, Type

from ...domain.ports.claim_store import ClaimStore
from .in_memory_store import InMemoryClaimStore
from .sql_store import SqlClaimStore


class StoreFactory:
    """Registry of claim store backends and their lifecycle.

    Backends are created and initialized once and kept until shutdown.
    """

    def __init__(self):
        """Initialize the factory."""
        self._store_registry: Dict[str, Type[ClaimStore]] = {}
        self._active_stores: Dict[str, ClaimStore] = {}

        # Register default backends
        self.register_store("memory", InMemoryClaimStore)
        self.register_store("sql", SqlClaimStore)

    def register_store(self, name: str, store_class: Type[ClaimStore]) -> None:
        """Register a new store backend.

        Args:
            name: Unique identifier for the backend
            store_class: The store class to register

        Raises:
            ValueError: If the name is already registered
        """
        if name in self._store_registry:
            raise ValueError(f"Store {name} already registered")
        self._store_registry[name] = store_class

    async def create_store(self, name: str, **config) -> ClaimStore:
        """Create and initialize a store backend.

        Args:
            name: Name of the backend
            **config: Backend-specific configuration

        Returns:
            Initialized store

        Raises:
            ValueError: If the backend is not registered
            RuntimeError: If initialization fails
        """
        if name not in self._store_registry:
            raise ValueError(f"Store {name} not registered")

        store = self._store_registry[name](**config)
        try:
            await store.initialize()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize store {name}: {e}")
        self._active_stores[name] = store
        return store

    def get_store(self, name: str) -> Optional[ClaimStore]:
        """Get an active store by name, or ``None``."""
        return self._active_stores.get(name)

    async def shutdown_store(self, name: str) -> None:
        store = self._active_stores.pop(name, None)
        if store:
            await store.shutdown()

    async def shutdown_all(self) -> None:
        """Shutdown all active stores."""
        for name in list(self._active_stores.keys()):
            await self.shutdown_store(name)

    @property
    def available_stores(self) -> Dict[str, bool]:
        """Registered backends and whether each is active."""
        return {
            name: name in self._active_stores
            for name in self._store_registry
        }
