"""OpenAI-compatible chat completions provider (OpenAI, Groq, local servers)."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from .base_text_provider import BaseTextProvider, TextRequest
from .exceptions import ProviderUnknownError, error_for_status

if TYPE_CHECKING:
    from duochat.config.settings import SystemConfig

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_SUFFIX = "/chat/completions"


def endpoint_to_base_url(endpoint: str) -> str:
    """Turn a full chat-completions URL into the SDK's base URL."""
    endpoint = endpoint.rstrip("/")
    if endpoint.endswith(CHAT_COMPLETIONS_SUFFIX):
        return endpoint[: -len(CHAT_COMPLETIONS_SUFFIX)]
    return endpoint


def _status_message(exc: APIStatusError) -> str:
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return exc.message


class OpenAITextProvider(BaseTextProvider):
    """Chat completions through the OpenAI SDK.

    Serves both the ``openai`` and ``custom`` selectors; the only difference is
    that custom/local servers are expected to supply their own endpoint.
    """

    def __init__(
        self,
        system_config: "SystemConfig",
        http_client: httpx.AsyncClient | None = None,
        provider_name: str = "openai",
        client: Any | None = None,
    ):
        super().__init__(system_config, http_client)
        self._name = provider_name
        # injected client (tests) bypasses per-endpoint construction
        self._client = client
        self._clients: dict[tuple[str, str], AsyncOpenAI] = {}

    @property
    def provider_name(self) -> str:
        return self._name

    def _get_base_url(self, request: TextRequest) -> str:
        return endpoint_to_base_url(
            request.api_endpoint or self.system_config.openai_endpoint
        )

    def _get_api_key(self, request: TextRequest) -> str:
        # local servers usually ignore the key, but the SDK insists on one
        return request.api_key or os.getenv("OPENAI_API_KEY") or "no-key"

    def _get_client(self, request: TextRequest) -> Any:
        if self._client is not None:
            return self._client

        base_url = self._get_base_url(request)
        api_key = self._get_api_key(request)
        cache_key = (base_url, api_key)
        if cache_key not in self._clients:
            self._clients[cache_key] = AsyncOpenAI(
                base_url=base_url,
                api_key=api_key,
                timeout=self.system_config.request_timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._clients[cache_key]

    async def generate(self, request: TextRequest) -> str:
        client = self._get_client(request)
        messages = []
        if request.system_persona:
            messages.append({"role": "system", "content": request.system_persona})
        messages.append({"role": "user", "content": request.prompt})

        try:
            response = await client.chat.completions.create(
                model=request.model,
                messages=messages,
                temperature=request.temperature,
            )
        except APIStatusError as e:
            raise error_for_status(
                e.status_code, _status_message(e), provider=self.provider_name
            ) from e
        except APIConnectionError as e:
            raise ProviderUnknownError(
                f"{self.provider_name} connection failed: {e}", provider=self.provider_name
            ) from e
        except OpenAIError as e:
            raise ProviderUnknownError(str(e), provider=self.provider_name) from e

        try:
            content = response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderUnknownError(
                f"{self.provider_name} returned an unexpected completion shape",
                provider=self.provider_name,
            ) from e

        logger.debug(
            f"Generated {len(content)} chars from {self.provider_name} model {request.model}"
        )
        return content.strip()
