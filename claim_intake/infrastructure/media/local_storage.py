"""Filesystem implementation of media storage."""

import asyncio
import os

from ...domain.ports.media_storage import MediaStorage


class LocalMediaStorage(MediaStorage):
    """Stores media objects as files under a base directory."""

    def __init__(self, base_dir: str = "./media"):
        self._base_dir = os.path.abspath(base_dir)

    @property
    def base_dir(self) -> str:
        return self._base_dir

    def resolve(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self._base_dir, path))
        if os.path.commonpath([full_path, self._base_dir]) != self._base_dir:
            raise ValueError(f"Object path escapes storage root: {path}")
        return full_path

    async def store_object(self, path: str, data: bytes) -> None:
        await asyncio.to_thread(self._write, self.resolve(path), data)

    @staticmethod
    def _write(full_path: str, data: bytes) -> None:
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(data)
