from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from .anthropic_provider import AnthropicTextProvider
from .base_text_provider import BaseTextProvider
from .google_provider import GoogleTextProvider
from .openai_provider import OpenAITextProvider

if TYPE_CHECKING:
    from duochat.config.settings import SystemConfig


class ProviderFactory:
    """Factory for creating text providers."""

    _providers: dict[str, type[BaseTextProvider]] = {
        "google": GoogleTextProvider,
        "openai": OpenAITextProvider,
        "anthropic": AnthropicTextProvider,
        "custom": OpenAITextProvider,
    }

    @classmethod
    def create_provider(
        cls,
        provider_name: str,
        system_config: "SystemConfig",
        http_client: httpx.AsyncClient | None = None,
    ) -> BaseTextProvider:
        """Create a provider instance by name."""
        if provider_name not in cls._providers:
            raise ValueError(
                f"Unknown provider: {provider_name}. Available: {list(cls._providers.keys())}"
            )

        provider_class = cls._providers[provider_name]
        if provider_class is OpenAITextProvider:
            return OpenAITextProvider(
                system_config, http_client, provider_name=provider_name
            )
        return provider_class(system_config, http_client)

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of available provider names."""
        return list(cls._providers.keys())
