"""Tests for prompt building and provider dispatch."""

from __future__ import annotations

import asyncio

import pytest

from duochat.config.settings import AgentIdentity, SystemConfig
from duochat.debate_engine.models import TranscriptEntry
from duochat.models.gateway import ProviderGateway, build_prompt, format_transcript
from duochat.models.providers.base_text_provider import BaseTextProvider, TextRequest
from duochat.models.providers.exceptions import (
    ProviderRateLimitError,
    ProviderRequestError,
)


class RecordingProvider(BaseTextProvider):
    """Provider that replays queued outcomes and records requests."""

    def __init__(self, *outcomes):
        super().__init__(SystemConfig())
        self._outcomes = list(outcomes)
        self.requests: list[TextRequest] = []

    @property
    def provider_name(self) -> str:
        return "recording"

    async def generate(self, request: TextRequest) -> str:
        self.requests.append(request)
        item = self._outcomes.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def make_identity(**overrides) -> AgentIdentity:
    values = dict(
        name="Nova",
        color="#818cf8",
        voice="Kore",
        provider="google",
        model="gemini-2.5-flash",
        system_persona="You argue IN FAVOR. \n\nCURRENT MOOD: Be calm.",
    )
    values.update(overrides)
    return AgentIdentity(**values)


def test_format_transcript_lines() -> None:
    transcript = [
        TranscriptEntry(sender="Nova", text="Commutes waste time."),
        TranscriptEntry(sender="Sage", text="Offices build culture."),
    ]

    assert format_transcript(transcript) == (
        "Nova: Commutes waste time.\nSage: Offices build culture."
    )


def test_build_prompt_embeds_context() -> None:
    identity = make_identity()
    transcript = [TranscriptEntry(sender="Sage", text="Offices build culture.")]

    prompt = build_prompt(transcript, "Remote work", "French", identity)

    assert prompt.startswith("You are Nova.")
    assert identity.system_persona in prompt
    assert "Debate Topic: Remote work" in prompt
    assert "Language: French" in prompt
    assert "Sage: Offices build culture." in prompt
    assert prompt.endswith("Keep it concise (2-3 sentences).")


def test_build_prompt_for_opening_turn() -> None:
    prompt = build_prompt([], "Remote work", "English", make_identity())

    assert "(no messages yet" in prompt


def test_generate_text_dispatches_identity_fields() -> None:
    provider = RecordingProvider("We should all work from home.")
    gateway = ProviderGateway(SystemConfig())
    gateway.register_provider("anthropic", provider)
    identity = make_identity(
        provider="anthropic",
        model="claude-3-5-sonnet-20240620",
        api_key="sk-ant",
        api_endpoint="https://proxy.example/v1",
    )

    text = asyncio.run(gateway.generate_text([], "Remote work", "English", identity))

    assert text == "We should all work from home."
    request = provider.requests[0]
    assert request.model == "claude-3-5-sonnet-20240620"
    assert request.api_key == "sk-ant"
    assert request.api_endpoint == "https://proxy.example/v1"
    assert request.system_persona == identity.system_persona
    assert "Remote work" in request.prompt


def test_generate_text_retries_with_configured_policy(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sleeps: list[float] = []

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    monkeypatch.setattr("duochat.models.retry.asyncio.sleep", fake_sleep)

    provider = RecordingProvider(
        ProviderRateLimitError("429", status_code=429),
        ProviderRateLimitError("429", status_code=429),
        "Third time lucky.",
    )
    gateway = ProviderGateway(SystemConfig())
    gateway.register_provider("google", provider)

    text = asyncio.run(
        gateway.generate_text([], "Remote work", "English", make_identity())
    )

    assert text == "Third time lucky."
    assert sleeps == [2.0, 4.0]


def test_complete_without_retry_raises_first_error() -> None:
    provider = RecordingProvider(ProviderRateLimitError("429", status_code=429), "unused")
    gateway = ProviderGateway(SystemConfig())
    gateway.register_provider("google", provider)

    with pytest.raises(ProviderRateLimitError):
        asyncio.run(
            gateway.complete(
                "google", TextRequest(model="m", prompt="p"), retry=False
            )
        )

    assert len(provider.requests) == 1


def test_fatal_error_propagates() -> None:
    provider = RecordingProvider(ProviderRequestError("invalid model", status_code=404))
    gateway = ProviderGateway(SystemConfig())
    gateway.register_provider("google", provider)

    with pytest.raises(ProviderRequestError, match="invalid model"):
        asyncio.run(gateway.generate_text([], "Remote work", "English", make_identity()))


def test_unknown_provider_selector() -> None:
    gateway = ProviderGateway(SystemConfig())

    with pytest.raises(ValueError):
        asyncio.run(
            gateway.generate_text(
                [], "Remote work", "English", make_identity(provider="cohere")
            )
        )
