"""Tests for the claim registry."""

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from claim_intake.domain.errors import StorageUnavailableError
from claim_intake.domain.models.claim import Claim, ClaimDefaults, ClaimType
from claim_intake.domain.services.claim_registry import ClaimRegistry

NOW = datetime(2023, 11, 14, tzinfo=timezone.utc)


@pytest.fixture
def registry(claim_store) -> ClaimRegistry:
    return ClaimRegistry(claim_store)


def text_defaults(text: str) -> ClaimDefaults:
    return ClaimDefaults(first_seen_at=NOW, content=text)


@pytest.mark.asyncio
async def test_creates_then_finds(registry, claim_store):
    claim_id, was_new = await registry.find_or_create(ClaimType.TEXT, "claim", text_defaults("claim"))
    again_id, again_new = await registry.find_or_create(ClaimType.TEXT, "claim", text_defaults("claim"))

    assert was_new is True
    assert again_new is False
    assert again_id == claim_id
    assert await claim_store.count_claims() == 1


@pytest.mark.asyncio
async def test_same_key_different_type_is_distinct(registry, claim_store):
    text_id, _ = await registry.find_or_create(ClaimType.TEXT, "abc", text_defaults("abc"))
    image_id, was_new = await registry.find_or_create(
        ClaimType.IMAGE, "abc", ClaimDefaults(first_seen_at=NOW, fingerprint="abc")
    )

    assert was_new is True
    assert image_id != text_id


@pytest.mark.asyncio
async def test_existing_claim_fields_are_untouched(registry, claim_store):
    claim_id, _ = await registry.find_or_create(ClaimType.TEXT, "x", text_defaults("x"))
    stored = await claim_store.get_claim(claim_id)
    assessed = stored.model_copy(update={"assessed": True, "truth_score": 4.5})
    claim_store._claims[claim_id] = assessed

    await registry.find_or_create(
        ClaimType.TEXT, "x", ClaimDefaults(first_seen_at=NOW, content="x", category="scam")
    )

    after = await claim_store.get_claim(claim_id)
    assert after.assessed is True
    assert after.truth_score == 4.5
    assert after.category == "fake news"


@pytest.mark.asyncio
async def test_duplicate_anomaly_picks_first_and_logs(registry, claim_store, caplog):
    older = Claim.from_defaults(ClaimType.TEXT, text_defaults("dup")).with_id("older")
    newer = Claim.from_defaults(ClaimType.TEXT, text_defaults("dup")).with_id("newer")
    claim_store._claims["older"] = older
    claim_store._claims["newer"] = newer

    with caplog.at_level(logging.WARNING):
        claim_id, was_new = await registry.find_or_create(ClaimType.TEXT, "dup", text_defaults("dup"))

    assert claim_id == "older"
    assert was_new is False
    assert "Duplicate claim anomaly" in caplog.text
    assert await claim_store.count_claims() == 2


@pytest.mark.asyncio
async def test_concurrent_first_deliveries_create_one_claim(registry, claim_store):
    original_find = claim_store.find_claims

    async def slow_find(*args):
        # Let every delivery observe "no match" before anyone inserts
        await asyncio.sleep(0)
        return await original_find(*args)

    claim_store.find_claims = slow_find

    results = await asyncio.gather(
        *[registry.find_or_create(ClaimType.TEXT, "race", text_defaults("race")) for _ in range(10)]
    )

    assert len({claim_id for claim_id, _ in results}) == 1
    assert sum(1 for _, was_new in results if was_new) == 1
    assert await claim_store.count_claims() == 1


@pytest.mark.asyncio
async def test_defaults_must_match_key(registry):
    with pytest.raises(ValueError):
        await registry.find_or_create(ClaimType.TEXT, "one", text_defaults("two"))


@pytest.mark.asyncio
async def test_storage_errors_propagate(claim_store):
    async def unavailable(*args, **kwargs):
        raise StorageUnavailableError("db down")

    claim_store.find_claims = unavailable
    registry = ClaimRegistry(claim_store)

    with pytest.raises(StorageUnavailableError):
        await registry.find_or_create(ClaimType.TEXT, "x", text_defaults("x"))
