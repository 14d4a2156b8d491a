from __future__ import annotations

import pytest

from exam_studio.core import ai


def test_load_client_uses_environment_key(openai_factory):
    client = ai.load_client()

    assert client is openai_factory.last
    assert client.init_kwargs == {"api_key": "test-key"}


def test_load_client_passes_overrides(openai_factory):
    ai.load_client(api_base="https://proxy.test/v1", timeout=12.5)

    assert openai_factory.last.init_kwargs == {
        "api_key": "test-key",
        "base_url": "https://proxy.test/v1",
        "timeout": 12.5,
    }


def test_load_client_reads_dotenv_first(monkeypatch, openai_factory):
    monkeypatch.delenv("OPENAI_API_KEY")
    calls = []

    def fake_load_dotenv(*args, **kwargs):
        calls.append(True)
        monkeypatch.setenv("OPENAI_API_KEY", "from-dotenv")
        return True

    monkeypatch.setattr(ai, "load_dotenv", fake_load_dotenv)

    client = ai.load_client()

    assert calls == [True]
    assert client.init_kwargs["api_key"] == "from-dotenv"


def test_load_client_requires_api_key(monkeypatch, openai_factory):
    monkeypatch.delenv("OPENAI_API_KEY")

    with pytest.raises(RuntimeError, match="OPENAI_API_KEY"):
        ai.load_client()
