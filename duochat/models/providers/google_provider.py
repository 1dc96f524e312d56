"""Google Gemini text provider using the REST generateContent endpoint."""

from __future__ import annotations

import logging
import os
from typing import Any

from .base_text_provider import BaseTextProvider, TextRequest
from .exceptions import ProviderRequestError, ProviderUnknownError
from .http_utils import post_json

logger = logging.getLogger(__name__)

DEFAULT_GOOGLE_MODEL = "gemini-2.5-flash"


def google_api_key(explicit: str | None) -> str | None:
    """Agent key first, then the shared environment key."""
    return explicit or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")


def extract_candidate_parts(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the parts of the first candidate, or an empty list."""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return []
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        return []
    parts = content.get("parts")
    if not isinstance(parts, list):
        return []
    return [part for part in parts if isinstance(part, dict)]


class GoogleTextProvider(BaseTextProvider):
    """Gemini text generation."""

    @property
    def provider_name(self) -> str:
        return "google"

    def _url(self, request: TextRequest) -> str:
        base = (request.api_endpoint or self.system_config.google_base_url).rstrip("/")
        model = request.model or DEFAULT_GOOGLE_MODEL
        return f"{base}/models/{model}:generateContent"

    async def generate(self, request: TextRequest) -> str:
        api_key = google_api_key(request.api_key)
        if not api_key:
            raise ProviderRequestError(
                "No Google API key configured. Set GEMINI_API_KEY or an agent key.",
                provider=self.provider_name,
            )

        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": request.prompt}]}],
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_tokens,
            },
        }

        data = await post_json(
            self._url(request),
            payload,
            provider=self.provider_name,
            headers={"x-goog-api-key": api_key},
            client=self._http_client,
            timeout=self.system_config.request_timeout,
        )

        parts = extract_candidate_parts(data)
        if not parts:
            feedback = data.get("promptFeedback")
            if isinstance(feedback, dict) and feedback.get("blockReason"):
                raise ProviderRequestError(
                    f"Prompt blocked: {feedback['blockReason']}",
                    provider=self.provider_name,
                )
            if "candidates" not in data:
                raise ProviderUnknownError(
                    "Gemini response had no candidates", provider=self.provider_name
                )

        text = "".join(
            part["text"] for part in parts if isinstance(part.get("text"), str)
        )
        logger.debug(f"Generated {len(text)} chars from Gemini model {request.model}")
        return text.strip()
