"""Text generation: provider adapters, retry policy and the gateway."""

from .gateway import ProviderGateway, build_prompt, format_transcript
from .retry import retry_with_backoff

__all__ = [
    "ProviderGateway",
    "build_prompt",
    "format_transcript",
    "retry_with_backoff",
]
