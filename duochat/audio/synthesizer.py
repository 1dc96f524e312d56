"""Text to speech through the Gemini TTS model."""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from duochat.config.settings import AgentIdentity, SystemConfig, TTSConfig
from duochat.models.providers.exceptions import ProviderRequestError
from duochat.models.providers.google_provider import extract_candidate_parts
from duochat.models.providers.http_utils import post_json
from duochat.models.retry import retry_with_backoff

from .exceptions import NoAudioDataError
from .pcm import Waveform, decode_base64_audio, pcm16_to_waveform

logger = logging.getLogger(__name__)

_RATE_PATTERN = re.compile(r"rate=(\d+)")


def tts_key_for(identity: AgentIdentity, tts_config: TTSConfig) -> str | None:
    """An agent's own key only counts when it is a Google key."""
    if identity.provider == "google" and identity.api_key:
        return identity.api_key
    return tts_config.resolve_api_key()


def extract_inline_audio(data: dict[str, Any]) -> tuple[str, str | None] | None:
    """Return ``(base64_data, mime_type)`` of the first audio part, if any."""
    for part in extract_candidate_parts(data):
        inline = part.get("inlineData")
        if isinstance(inline, dict) and inline.get("data"):
            return inline["data"], inline.get("mimeType")
    return None


class SpeechSynthesizer:
    """Turns a line of debate into a playable waveform."""

    def __init__(
        self,
        tts_config: TTSConfig,
        system_config: SystemConfig,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.tts_config = tts_config
        self.system_config = system_config
        self._http_client = http_client

    def _sample_rate(self, mime_type: str | None) -> int:
        if mime_type:
            match = _RATE_PATTERN.search(mime_type)
            if match:
                return int(match.group(1))
        return self.tts_config.sample_rate

    async def _request(self, text: str, voice: str, api_key: str) -> dict[str, Any]:
        base = self.system_config.google_base_url.rstrip("/")
        payload = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}}
                },
            },
        }
        return await post_json(
            f"{base}/models/{self.tts_config.model}:generateContent",
            payload,
            provider="google",
            headers={"x-goog-api-key": api_key},
            client=self._http_client,
            timeout=self.system_config.request_timeout,
        )

    async def synthesize(
        self, text: str, voice: str, api_key: str | None = None
    ) -> Waveform:
        """Synthesize ``text`` in ``voice``; retried like text generation."""
        key = api_key or self.tts_config.resolve_api_key()
        if not key:
            raise ProviderRequestError(
                "No Gemini API key configured for speech synthesis", provider="google"
            )

        policy = self.system_config.retry
        data = await retry_with_backoff(
            lambda: self._request(text, voice, key),
            max_attempts=policy.max_attempts,
            base_delay=policy.base_delay_ms / 1000,
            description=f"tts ({voice})",
        )

        audio = extract_inline_audio(data)
        if audio is None:
            raise NoAudioDataError("No audio data")

        encoded, mime_type = audio
        waveform = pcm16_to_waveform(
            decode_base64_audio(encoded), self._sample_rate(mime_type)
        )
        logger.debug(f"Synthesized {waveform.duration:.2f}s of audio with voice {voice}")
        return waveform
