"""Tests for filesystem media storage."""

import pytest

from claim_intake.infrastructure.media.local_storage import LocalMediaStorage


@pytest.mark.asyncio
async def test_store_object_writes_file(tmp_path):
    storage = LocalMediaStorage(str(tmp_path))

    await storage.store_object("images/m-1.jpeg", b"bytes")

    assert (tmp_path / "images" / "m-1.jpeg").read_bytes() == b"bytes"


@pytest.mark.asyncio
async def test_store_object_overwrites(tmp_path):
    storage = LocalMediaStorage(str(tmp_path))

    await storage.store_object("images/m-1.jpeg", b"old")
    await storage.store_object("images/m-1.jpeg", b"new")

    assert (tmp_path / "images" / "m-1.jpeg").read_bytes() == b"new"


@pytest.mark.asyncio
async def test_path_cannot_escape_root(tmp_path):
    storage = LocalMediaStorage(str(tmp_path / "media"))

    with pytest.raises(ValueError):
        await storage.store_object("../outside.bin", b"x")
