"""JSON-over-HTTP helper shared by the httpx based providers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from .exceptions import ProviderUnknownError, error_for_status

logger = logging.getLogger(__name__)


def extract_error_message(response: httpx.Response) -> str:
    """Pull the provider's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase

    if isinstance(body, Mapping):
        error = body.get("error")
        if isinstance(error, Mapping):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message
        elif isinstance(error, str) and error:
            return error
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return response.reason_phrase or f"HTTP {response.status_code}"


async def post_json(
    url: str,
    payload: Mapping[str, Any],
    *,
    provider: str,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """POST a JSON payload and return the decoded JSON body.

    Raises a ``ProviderError`` subclass for every failure: status codes are
    mapped with ``error_for_status``, transport and decode problems become
    ``ProviderUnknownError``.
    """
    try:
        if client is not None:
            response = await client.post(url, json=payload, headers=headers, params=params)
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.post(
                    url, json=payload, headers=headers, params=params
                )
    except httpx.HTTPError as e:
        raise ProviderUnknownError(
            f"{provider} request failed: {e or type(e).__name__}", provider=provider
        ) from e

    if response.is_error:
        message = extract_error_message(response)
        logger.debug(f"{provider} returned HTTP {response.status_code}: {message}")
        raise error_for_status(response.status_code, message, provider=provider)

    try:
        data = response.json()
    except ValueError as e:
        raise ProviderUnknownError(
            f"{provider} returned a non-JSON response", provider=provider
        ) from e

    if not isinstance(data, dict):
        raise ProviderUnknownError(
            f"{provider} returned an unexpected payload", provider=provider
        )
    return data
