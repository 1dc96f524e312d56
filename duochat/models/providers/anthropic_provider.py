"""Anthropic provider implementation using OpenAI SDK."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import httpx

from .base_text_provider import TextRequest
from .exceptions import ProviderRequestError
from .openai_provider import OpenAITextProvider, endpoint_to_base_url

if TYPE_CHECKING:
    from duochat.config.settings import SystemConfig

logger = logging.getLogger(__name__)


class AnthropicTextProvider(OpenAITextProvider):
    """Claude models through Anthropic's OpenAI-compatible endpoint."""

    def __init__(
        self,
        system_config: "SystemConfig",
        http_client: httpx.AsyncClient | None = None,
        client: Any | None = None,
    ):
        super().__init__(
            system_config, http_client, provider_name="anthropic", client=client
        )

    def _get_base_url(self, request: TextRequest) -> str:
        return endpoint_to_base_url(
            request.api_endpoint or self.system_config.anthropic_base_url
        )

    def _get_api_key(self, request: TextRequest) -> str:
        api_key = request.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ProviderRequestError(
                "No Anthropic API key configured. Set ANTHROPIC_API_KEY or an agent key.",
                provider=self.provider_name,
            )
        return api_key
