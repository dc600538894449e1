"""Localizable bot responses."""

from typing import Dict

from .system_parameters import SystemParameters

USER_BOT_RESPONSES_DOCUMENT = "userBotResponses"

USER_BOT_RESPONSES: Dict[str, str] = {
    "UNSUPPORTED_TYPE": (
        "Sorry, this bot currently only supports {{supported_types}} messages. "
        "Please send your message again in one of these formats."
    ),
    "MOCK_DB_SEEDED": "Mock database seeded with {{count}} sample claims.",
}


class ResponseCatalog:
    """Bot response strings with per-key fallback to the built-in English set.

    Templates use ``{{name}}`` placeholders filled from keyword arguments.
    """

    def __init__(self, parameters: SystemParameters):
        self._parameters = parameters

    async def get(self, key: str, **values) -> str:
        document = await self._parameters.get(USER_BOT_RESPONSES_DOCUMENT) or {}
        template = document.get(key) or USER_BOT_RESPONSES.get(key)
        if template is None:
            raise KeyError(f"Unknown bot response '{key}'")
        for name, value in values.items():
            template = template.replace("{{" + name + "}}", str(value))
        return template
