"""Provider error taxonomy shared by the text adapters and the synthesizer."""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for failures talking to an AI provider."""

    retryable: bool = False

    def __init__(
        self, message: str, *, provider: str | None = None, status_code: int | None = None
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code


class ProviderRateLimitError(ProviderError):
    """HTTP 429 from the provider."""

    retryable = True


class ProviderOverloadedError(ProviderError):
    """HTTP 503 (or Anthropic's 529) from the provider."""

    retryable = True


class ProviderRequestError(ProviderError):
    """Any other non-success response; carries the provider's message."""


class ProviderUnknownError(ProviderError):
    """Network failure or an unparseable response."""


def error_for_status(
    status_code: int, message: str, *, provider: str | None = None
) -> ProviderError:
    """Map an HTTP status to the matching provider error."""
    if status_code == 429:
        return ProviderRateLimitError(message, provider=provider, status_code=status_code)
    if status_code in (503, 529):
        return ProviderOverloadedError(message, provider=provider, status_code=status_code)
    return ProviderRequestError(message, provider=provider, status_code=status_code)
