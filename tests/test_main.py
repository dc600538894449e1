"""Tests for the payload replay CLI."""

import json

import pytest

from claim_intake.infrastructure.dependencies import ServiceContainer
from claim_intake.infrastructure.settings import IntakeSettings
from claim_intake.main import replay


@pytest.mark.asyncio
async def test_replay_routes_payload_files(tmp_path, capsys, gateway, media_storage, webhook_message, webhook_payload):
    broken = webhook_message(delivery_id="wamid.bad")
    del broken["id"]
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(webhook_payload(webhook_message(), broken, webhook_message(delivery_id="wamid.2"))))
    container = ServiceContainer(IntakeSettings(), gateway=gateway, media_storage=media_storage)

    skipped = await replay([str(path)], container)

    assert skipped == 1
    out = capsys.readouterr().out
    outcomes = [json.loads(line) for line in out.splitlines() if line.startswith("{")]
    assert [o["kind"] for o in outcomes] == ["recorded", "recorded"]
    assert "Claims in store: 1" in out
    assert not container.is_started
