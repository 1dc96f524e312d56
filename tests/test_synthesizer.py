"""Tests for Gemini speech synthesis."""

from __future__ import annotations

import asyncio
import base64
import json
import struct

import httpx
import pytest

from duochat.audio.exceptions import NoAudioDataError
from duochat.audio.synthesizer import SpeechSynthesizer, tts_key_for
from duochat.config.settings import AgentIdentity, SystemConfig, TTSConfig
from duochat.models.providers.exceptions import (
    ProviderRateLimitError,
    ProviderRequestError,
)


def audio_reply(samples: list[int], mime_type: str = "audio/L16;codec=pcm;rate=24000") -> dict:
    data = base64.b64encode(struct.pack(f"<{len(samples)}h", *samples)).decode()
    return {
        "candidates": [
            {
                "content": {
                    "parts": [{"inlineData": {"mimeType": mime_type, "data": data}}]
                }
            }
        ]
    }


def synthesize(handler, text="Hello", voice="Kore", api_key="tts-key", tts_config=None):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            synthesizer = SpeechSynthesizer(
                tts_config or TTSConfig(), SystemConfig(), http_client=client
            )
            return await synthesizer.synthesize(text, voice, api_key)

    return asyncio.run(run())


def identity(provider: str, api_key: str | None) -> AgentIdentity:
    return AgentIdentity(
        name="Nova",
        color="#818cf8",
        voice="Kore",
        provider=provider,
        model="m",
        system_persona="p",
        api_key=api_key,
    )


def test_synthesize_decodes_inline_audio() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=audio_reply([0, 32767, -32768]))

    waveform = synthesize(handler, text="Remote work wins.", voice="Fenrir")

    assert len(waveform) == 3
    assert waveform.sample_rate == 24000
    assert waveform.samples[1] == 1.0
    assert seen[0].url.path.endswith("/models/gemini-2.5-flash-preview-tts:generateContent")
    assert seen[0].headers["x-goog-api-key"] == "tts-key"
    body = json.loads(seen[0].content)
    assert body["contents"][0]["parts"][0]["text"] == "Remote work wins."
    assert body["generationConfig"]["responseModalities"] == ["AUDIO"]
    voice = body["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]
    assert voice == {"voiceName": "Fenrir"}


def test_sample_rate_follows_mime_type() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=audio_reply([1, 2], mime_type="audio/L16;rate=16000"))

    assert synthesize(handler).sample_rate == 16000


def test_missing_audio_part_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "no audio"}]}}]}
        )

    with pytest.raises(NoAudioDataError):
        synthesize(handler)


def test_rate_limits_are_retried(monkeypatch: pytest.MonkeyPatch) -> None:
    sleeps: list[float] = []

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    monkeypatch.setattr("duochat.models.retry.asyncio.sleep", fake_sleep)
    responses = [
        httpx.Response(429, json={"error": {"message": "quota"}}),
        httpx.Response(200, json=audio_reply([5])),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    assert len(synthesize(handler)) == 1
    assert sleeps == [2.0]


def test_exhausted_rate_limit_surfaces(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_sleep(delay: float) -> None:
        return None

    monkeypatch.setattr("duochat.models.retry.asyncio.sleep", fake_sleep)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "quota"}})

    with pytest.raises(ProviderRateLimitError):
        synthesize(handler)


def test_missing_key_is_request_error(clear_api_keys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ProviderRequestError):
        synthesize(handler, api_key=None)


def test_google_agent_key_is_used_for_speech(clear_api_keys) -> None:
    assert tts_key_for(identity("google", "agent-key"), TTSConfig()) == "agent-key"


def test_non_google_key_falls_back_to_shared_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "shared-key")

    assert tts_key_for(identity("openai", "sk-openai"), TTSConfig()) == "shared-key"
    assert tts_key_for(identity("google", None), TTSConfig(api_key="cfg")) == "cfg"
