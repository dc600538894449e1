"""Tests for settings and the service container."""

import pytest

from claim_intake.infrastructure.dependencies import ServiceContainer
from claim_intake.infrastructure.settings import IntakeSettings


def test_settings_defaults(monkeypatch):
    for name in ("WHATSAPP_TOKEN", "STORE_BACKEND", "POLICY_CACHE_TTL", "ENABLE_DEBUG_COMMANDS"):
        monkeypatch.delenv(name, raising=False)

    settings = IntakeSettings.from_env()

    assert settings.store_backend == "memory"
    assert settings.policy_cache_ttl == 30.0
    assert settings.whatsapp_api_version == "v17.0"
    assert settings.enable_debug_commands is False


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("WHATSAPP_USER_PHONE_NUMBER_ID", "111")
    monkeypatch.setenv("WHATSAPP_CHECKERS_PHONE_NUMBER_ID", "222")
    monkeypatch.setenv("STORE_BACKEND", "sql")
    monkeypatch.setenv("POLICY_CACHE_TTL", "5")
    monkeypatch.setenv("ENABLE_DEBUG_COMMANDS", "TRUE")

    settings = IntakeSettings.from_env()

    assert settings.phone_number_ids == {"user": "111", "factChecker": "222"}
    assert settings.store_backend == "sql"
    assert settings.policy_cache_ttl == 5.0
    assert settings.enable_debug_commands is True


@pytest.mark.asyncio
async def test_container_lifecycle(gateway, media_storage):
    container = ServiceContainer(IntakeSettings(), gateway=gateway, media_storage=media_storage)

    with pytest.raises(RuntimeError):
        container.router

    await container.start()
    router = container.router
    await container.start()
    assert container.router is router
    assert container.health()["stores"] == {"memory": True, "sql": False}

    await container.stop()
    assert not container.is_started
    gateway.shutdown.assert_awaited_once()
    assert container.health()["stores"]["memory"] is False


@pytest.mark.asyncio
async def test_container_unknown_backend(gateway, media_storage):
    container = ServiceContainer(
        IntakeSettings(store_backend="mongo"), gateway=gateway, media_storage=media_storage
    )

    with pytest.raises(ValueError):
        await container.start()
