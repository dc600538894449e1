"""Port interface for object storage of media blobs."""

from abc import ABC, abstractmethod


class MediaStorage(ABC):
    """Blob storage for images attached to claims."""

    @abstractmethod
    async def store_object(self, path: str, data: bytes) -> None:
        """Write ``data`` at ``path``, replacing any existing object."""
        pass
