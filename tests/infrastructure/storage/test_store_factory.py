"""Tests for the store factory."""

import pytest

from claim_intake.infrastructure.storage.factory import StoreFactory
from claim_intake.infrastructure.storage.in_memory_store import InMemoryClaimStore
from claim_intake.infrastructure.storage.sql_store import SqlClaimStore


class FailingStore(InMemoryClaimStore):
    async def initialize(self) -> None:
        raise RuntimeError("Initialization failed")


@pytest.fixture
def store_factory() -> StoreFactory:
    return StoreFactory()


@pytest.mark.asyncio
async def test_default_backends_registered(store_factory):
    assert store_factory.available_stores == {"memory": False, "sql": False}


@pytest.mark.asyncio
async def test_create_memory_store(store_factory):
    store = await store_factory.create_store("memory")

    assert isinstance(store, InMemoryClaimStore)
    assert store.is_available
    assert store_factory.get_store("memory") is store
    assert store_factory.available_stores["memory"] is True


@pytest.mark.asyncio
async def test_create_sql_store(store_factory, tmp_path):
    store = await store_factory.create_store("sql", database_url=f"sqlite:///{tmp_path / 'f.db'}")

    assert isinstance(store, SqlClaimStore)
    assert store.is_available
    await store_factory.shutdown_all()
    assert not store.is_available


@pytest.mark.asyncio
async def test_register_duplicate_store(store_factory):
    with pytest.raises(ValueError):
        store_factory.register_store("memory", InMemoryClaimStore)


@pytest.mark.asyncio
async def test_create_unknown_store(store_factory):
    with pytest.raises(ValueError):
        await store_factory.create_store("firestore")


@pytest.mark.asyncio
async def test_initialization_failure(store_factory):
    store_factory.register_store("failing", FailingStore)

    with pytest.raises(RuntimeError):
        await store_factory.create_store("failing")
    assert store_factory.get_store("failing") is None


@pytest.mark.asyncio
async def test_shutdown_all(store_factory):
    store = await store_factory.create_store("memory")

    await store_factory.shutdown_all()

    assert not store.is_available
    assert store_factory.get_store("memory") is None
