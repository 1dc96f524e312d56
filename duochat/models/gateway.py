"""Provider gateway: one text-generation contract over every provider."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import httpx

from duochat.config.settings import AgentIdentity, SystemConfig

from .providers.base_text_provider import BaseTextProvider, TextRequest
from .providers.providers import ProviderFactory
from .retry import retry_with_backoff

if TYPE_CHECKING:
    from duochat.debate_engine.models import TranscriptEntry

logger = logging.getLogger(__name__)


def format_transcript(transcript: Sequence["TranscriptEntry"]) -> str:
    """Flatten the transcript into ``sender: text`` lines."""
    return "\n".join(f"{entry.sender}: {entry.text}" for entry in transcript)


def build_prompt(
    transcript: Sequence["TranscriptEntry"],
    topic: str,
    language: str,
    identity: AgentIdentity,
) -> str:
    """Build the single turn prompt for an agent."""
    history = format_transcript(transcript) or "(no messages yet - you open the debate)"
    return f"""You are {identity.name}.
{identity.system_persona}

Debate Topic: {topic}
Language: {language}

Conversation History:
{history}

Respond to the last message as {identity.name}, in {language}. Keep it concise (2-3 sentences)."""


class ProviderGateway:
    """Dispatches text generation to the configured provider with backoff."""

    def __init__(
        self,
        system_config: SystemConfig,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._system_config = system_config
        self._http_client = http_client
        self._providers: dict[str, BaseTextProvider] = {}

    def _get_provider(self, provider_name: str) -> BaseTextProvider:
        """Return (and cache) the provider instance identified by name."""
        if provider_name not in self._providers:
            self._providers[provider_name] = ProviderFactory.create_provider(
                provider_name, self._system_config, self._http_client
            )
        return self._providers[provider_name]

    def register_provider(self, provider_name: str, provider: BaseTextProvider) -> None:
        """Install a provider instance for a selector, replacing the default."""
        self._providers[provider_name] = provider

    async def complete(
        self,
        provider_name: str,
        request: TextRequest,
        *,
        retry: bool = True,
        description: str | None = None,
    ) -> str:
        """Resolve one request through the named provider."""
        provider = self._get_provider(provider_name)
        label = description or f"{provider_name}:{request.model}"

        if not retry:
            return await provider.generate(request)

        policy = self._system_config.retry
        return await retry_with_backoff(
            lambda: provider.generate(request),
            max_attempts=policy.max_attempts,
            base_delay=policy.base_delay_ms / 1000,
            description=label,
        )

    async def generate_text(
        self,
        transcript: Sequence["TranscriptEntry"],
        topic: str,
        language: str,
        identity: AgentIdentity,
    ) -> str:
        """Generate the next argument for ``identity``."""
        request = TextRequest(
            model=identity.model,
            prompt=build_prompt(transcript, topic, language, identity),
            system_persona=identity.system_persona,
            api_key=identity.api_key,
            api_endpoint=identity.api_endpoint,
        )
        text = await self.complete(
            identity.provider, request, description=f"{identity.name} ({identity.provider})"
        )
        logger.debug(f"Generated {len(text)} chars for {identity.name}")
        return text
