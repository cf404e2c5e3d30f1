"""JSON-over-HTTP transport for REST providers."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.errors import ProviderError

logger = logging.getLogger(__name__)


def post_json(
    provider_id: str,
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """POST a JSON body and return the decoded reply.

    Error replies with a JSON body are returned as-is so the adapter can read
    the provider's own error payload. Timeouts and connection problems raise
    ProviderError.
    """
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(url, json=payload, headers=headers)
    except httpx.TimeoutException as e:
        raise ProviderError(
            provider_id, "timeout", f"Request timed out after {timeout:g} seconds"
        ) from e
    except httpx.HTTPError as e:
        raise ProviderError(provider_id, "transport", f"Request failed: {e}") from e

    logger.debug("%s responded with HTTP %d", provider_id, response.status_code)

    try:
        data = response.json()
    except ValueError as e:
        if response.is_error:
            raise ProviderError(
                provider_id, "provider_error", f"HTTP {response.status_code}: {response.text[:200]}"
            ) from e
        raise ProviderError(provider_id, "transport", "Reply was not valid JSON") from e

    if not isinstance(data, dict):
        return {"error": {"message": f"Unexpected reply: {str(data)[:200]}"}}
    if response.is_error and "error" not in data:
        data["error"] = {"message": f"HTTP {response.status_code}"}
    return data
