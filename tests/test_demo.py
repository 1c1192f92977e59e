"""Smoke tests for the console demo without network access."""

import pytest

from conftest import FakeOpenAIClient
from gadget_risk.assistant import SERVICE_UNAVAILABLE_REPLY
from gadget_risk.config import Settings
from gadget_risk.demo import DEMO_CHAT_PROMPT, DEMO_USER_ID, run
from gadget_risk.storage import JsonFileProgressStore


@pytest.mark.asyncio
async def test_demo_runs_offline(tmp_path, capsys):
    settings = Settings(openai_api_key=None, data_dir=str(tmp_path))

    await run(settings)

    output = capsys.readouterr().out
    assert "high_risk: level=High Addiction Risk probability=0.85" in output
    assert "entries=4" in output
    assert f"assistant: {SERVICE_UNAVAILABLE_REPLY}" in output
    assert "chat_messages=0" in output
    assert len(JsonFileProgressStore(tmp_path).list_entries(DEMO_USER_ID)) == 4


@pytest.mark.asyncio
async def test_demo_chat_turn_is_logged(tmp_path, capsys, monkeypatch):
    client = FakeOpenAIClient(content="Put the phone in another room at night.")
    monkeypatch.setattr("openai.AsyncOpenAI", lambda api_key: client)
    settings = Settings(openai_api_key="sk-test", data_dir=str(tmp_path))

    await run(settings)

    output = capsys.readouterr().out
    assert f"you: {DEMO_CHAT_PROMPT}" in output
    assert "assistant: Put the phone in another room at night." in output
    assert "chat_messages=2" in output
    # the analysis requests got plain text back, so results fall back to the templates
    assert "high_risk: level=High Addiction Risk probability=0.85" in output
