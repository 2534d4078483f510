"""Shared async HTTP helpers for the place-search adapters.

Every adapter goes through :func:`http_get_json`, which turns the httpx
failure modes into the domain error taxonomy. Callers pass the base URL
and the query parameters separately so that logs only ever show the
base URL; API keys travel in the parameters.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ...config import HttpConfig, get_config
from ...domain.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

_AUTH_STATUSES = (401, 403)


def build_http_client(
    config: Optional[HttpConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the AsyncClient shared by all adapters.

    Args:
        config: HTTP settings, defaults to the global configuration.
        transport: Optional transport override (tests use MockTransport).
    """
    config = config or get_config().http
    timeout = httpx.Timeout(
        config.request_timeout_seconds, connect=config.connect_timeout_seconds
    )
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": config.user_agent},
        transport=transport,
    )


async def http_get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    *,
    provider: str,
) -> Dict[str, Any]:
    """GET a URL and return the decoded JSON object.

    Args:
        client: Shared AsyncClient (carries the timeouts).
        url: Endpoint without query string.
        params: Query parameters, API key included.
        headers: Extra request headers.
        provider: Backend name for errors and logs.

    Returns:
        The decoded JSON body.

    Raises:
        ConfigurationError: The server rejected the credential (401/403).
        ProviderError: Timeout, transport failure, other HTTP status or a
            body that is not a JSON object.
    """
    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        payload = response.json()

    except httpx.TimeoutException as error:
        logger.warning("HTTP request timed out", extra={"provider": provider, "url": url})
        raise ProviderError(
            "Request timed out", cause=error, provider=provider, is_timeout=True
        ) from error

    except httpx.HTTPStatusError as error:
        status = error.response.status_code
        logger.warning(
            "HTTP error response",
            extra={"provider": provider, "url": url, "status": status},
        )
        if status in _AUTH_STATUSES:
            raise ConfigurationError(
                f"Credential rejected (HTTP {status})",
                setting_name="api_key",
                provider=provider,
            ) from error
        raise ProviderError(
            f"API error: HTTP {status}", provider=provider, status_code=status
        ) from error

    except httpx.RequestError as error:
        logger.warning(
            "HTTP connection failed",
            extra={"provider": provider, "url": url, "error": type(error).__name__},
        )
        raise ProviderError("Connection failed", cause=error, provider=provider) from error

    except ValueError as error:
        raise ProviderError(
            "Response body is not valid JSON", cause=error, provider=provider
        ) from error

    if not isinstance(payload, dict):
        raise ProviderError(
            f"Expected a JSON object, got {type(payload).__name__}", provider=provider
        )
    return payload
