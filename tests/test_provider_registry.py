# FILE: tests/test_provider_registry.py
"""Tests for provider routing, circuit breaking and I/O capture"""
import json

import pytest

from conftest import FakeProvider

from assignment_hub.config import Settings
from assignment_hub.errors import LLMUnavailableError
from assignment_hub.governance.redaction import redact_pii
from assignment_hub.providers.registry import CircuitBreaker, ProviderRegistry


def test_redact_pii():
    text = "Contact jane.doe@example.com or 555-123-4567, born 2014-03-09."
    redacted = redact_pii(text)

    assert "jane.doe@example.com" not in redacted
    assert "[EMAIL]" in redacted
    assert "[PHONE]" in redacted
    assert "[DOB]" in redacted
    assert redact_pii("") == ""


def test_circuit_breaker_opens_after_threshold():
    breaker = CircuitBreaker(threshold=2, timeout_seconds=60)

    breaker.record_failure("gemini")
    assert not breaker.is_open("gemini")
    breaker.record_failure("gemini")
    assert breaker.is_open("gemini")

    breaker.record_success("gemini")
    assert not breaker.is_open("gemini")


@pytest.mark.asyncio
async def test_failover_to_next_provider(settings):
    primary = FakeProvider([ConnectionError("down")])
    backup = FakeProvider(["hello"], model="backup-model")
    registry = ProviderRegistry(settings, providers={"primary": primary, "backup": backup})

    response = await registry.generate("Say hello", correlation_id="test")

    assert response["text"] == "hello"
    assert response["provider"] == "backup"
    assert [e["provider"] for e in registry.get_recent_io()] == ["primary", "backup"]
    assert registry.get_recent_io()[0]["error"] == "down"


@pytest.mark.asyncio
async def test_no_fallback_stops_after_first_failure(tmp_path):
    settings = Settings(
        data_dir=str(tmp_path / "data"), logs_dir=str(tmp_path / "logs"),
        provider_io_capture=False, router_fallback=False,
    )
    backup = FakeProvider(["never used"])
    registry = ProviderRegistry(settings, providers={"primary": FakeProvider([ValueError("bad")]), "backup": backup})

    with pytest.raises(LLMUnavailableError):
        await registry.generate("prompt")
    assert backup.prompts == []


@pytest.mark.asyncio
async def test_open_circuit_is_skipped(registry, fake_provider):
    for _ in range(3):
        registry.circuit_breaker.record_failure("fake")

    with pytest.raises(LLMUnavailableError):
        await registry.generate("prompt")
    assert fake_provider.prompts == []


@pytest.mark.asyncio
async def test_no_providers_is_unavailable(settings):
    registry = ProviderRegistry(settings, providers={})
    with pytest.raises(LLMUnavailableError):
        await registry.generate("prompt")


@pytest.mark.asyncio
async def test_captured_prompts_are_redacted(tmp_path):
    settings = Settings(
        data_dir=str(tmp_path / "data"), logs_dir=str(tmp_path / "logs"),
        provider_io_capture=True, redaction_enabled=True,
    )
    registry = ProviderRegistry(settings, providers={"fake": FakeProvider(["ok"])})

    await registry.generate("Parent email is mom@example.com", correlation_id="cid-1")

    entry = registry.get_recent_io()[-1]
    assert "mom@example.com" not in entry["prompt"]
    assert entry["correlation_id"] == "cid-1"

    log_files = list((tmp_path / "logs" / "provider_io").glob("*.jsonl"))
    assert len(log_files) == 1
    persisted = json.loads(log_files[0].read_text(encoding="utf-8").splitlines()[-1])
    assert "[EMAIL]" in persisted["prompt"]


@pytest.mark.asyncio
async def test_clear_io_log(registry, fake_provider):
    fake_provider.queue("one")
    await registry.generate("prompt")
    assert registry.get_recent_io()

    registry.clear_io_log()
    assert registry.get_recent_io() == []


def test_offline_mode_only_allows_local_providers(tmp_path):
    settings = Settings(
        data_dir=str(tmp_path / "data"), logs_dir=str(tmp_path / "logs"),
        provider_io_capture=False, llm_mode="offline", gemini_api_key="key",
    )
    registry = ProviderRegistry(settings)

    assert list(registry.providers) == ["ollama"]
