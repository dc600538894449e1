"""Allow-list of message types the bot accepts."""

import logging
from typing import FrozenSet

from .system_parameters import SystemParameters

logger = logging.getLogger(__name__)

SUPPORTED_TYPES_DOCUMENT = "supportedTypes"
SUPPORTED_TYPES_FIELD = "whatsapp"
DEFAULT_SUPPORTED_TYPES: FrozenSet[str] = frozenset({"text", "image"})


class TypePolicy:
    """Supported message types, read from the ``supportedTypes`` document.

    Falls back to ``{"text", "image"}`` when the document or its ``whatsapp``
    field is absent, or the store is unreachable.
    """

    def __init__(self, parameters: SystemParameters):
        self._parameters = parameters

    async def supported_types(self) -> FrozenSet[str]:
        document = await self._parameters.get(SUPPORTED_TYPES_DOCUMENT)
        configured = (document or {}).get(SUPPORTED_TYPES_FIELD)
        if configured is None:
            return DEFAULT_SUPPORTED_TYPES
        if isinstance(configured, str) or not hasattr(configured, "__iter__"):
            logger.warning(f"⚠️ Ignoring malformed supported types {configured!r}")
            return DEFAULT_SUPPORTED_TYPES
        return frozenset(str(message_type) for message_type in configured)

    async def is_supported(self, message_type: str) -> bool:
        return message_type in await self.supported_types()
