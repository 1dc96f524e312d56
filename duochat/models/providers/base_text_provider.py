from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from duochat.config.settings import SystemConfig


@dataclass(frozen=True)
class TextRequest:
    """One provider-neutral text generation request."""

    model: str
    prompt: str
    system_persona: str | None = None
    api_key: str | None = None
    api_endpoint: str | None = None
    temperature: float = 0.7
    max_tokens: int = 1024


class BaseTextProvider(ABC):
    """Abstract base class for text providers."""

    def __init__(
        self,
        system_config: "SystemConfig",
        http_client: httpx.AsyncClient | None = None,
    ):
        self.system_config = system_config
        self._http_client = http_client

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        pass

    @abstractmethod
    async def generate(self, request: TextRequest) -> str:
        """Resolve a request to plain text or raise a ``ProviderError``."""
        pass
