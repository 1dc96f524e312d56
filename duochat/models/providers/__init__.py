"""Text provider adapters."""

from .anthropic_provider import AnthropicTextProvider
from .base_text_provider import BaseTextProvider, TextRequest
from .exceptions import (
    ProviderError,
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderRequestError,
    ProviderUnknownError,
)
from .google_provider import GoogleTextProvider
from .openai_provider import OpenAITextProvider
from .providers import ProviderFactory

__all__ = [
    "ProviderFactory",
    "BaseTextProvider",
    "TextRequest",
    "GoogleTextProvider",
    "OpenAITextProvider",
    "AnthropicTextProvider",
    "ProviderError",
    "ProviderRateLimitError",
    "ProviderOverloadedError",
    "ProviderRequestError",
    "ProviderUnknownError",
]
