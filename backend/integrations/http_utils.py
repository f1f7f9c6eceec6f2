"""Shared HTTP helpers for provider clients built on httpx."""

import logging
import time as time_module

import httpx

from integrations.exceptions import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderDataError,
)

logger = logging.getLogger(__name__)

# Max attempts for rate-limited requests
MAX_RETRIES = 3
BASE_DELAY_SECONDS = 1.0


def request_with_retry(
    client: httpx.Client,
    method: str,
    path: str,
    provider_name: str,
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY_SECONDS,
    **kwargs,
) -> httpx.Response:
    """Make an HTTP request, retrying 429 responses with exponential backoff.

    Errors are mapped onto the provider exception hierarchy so callers
    only ever see :class:`~integrations.exceptions.ProviderError`.

    Raises:
        ProviderAuthError: HTTP 401/403.
        ProviderAPIError: Any other HTTP error status, or 429 after the
            final retry.
        ProviderConnectionError: Timeouts and transport failures.
    """
    for attempt in range(max_retries):
        try:
            response = client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderConnectionError(
                f"{provider_name} request timed out: {exc}",
                provider_name=provider_name,
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderConnectionError(
                f"{provider_name} connection failed: {exc}",
                provider_name=provider_name,
            ) from exc

        status = response.status_code
        if status == 429 and attempt < max_retries - 1:
            delay = base_delay * (2 ** attempt)
            logger.warning(
                "%s: rate limited, retrying in %.1fs (attempt %d/%d)",
                provider_name, delay, attempt + 1, max_retries,
            )
            time_module.sleep(delay)
            continue
        if status in (401, 403):
            raise ProviderAuthError(
                f"{provider_name} authentication failed (HTTP {status})",
                provider_name=provider_name,
            )
        if status >= 400:
            raise ProviderAPIError(
                f"{provider_name} API error (HTTP {status})",
                provider_name=provider_name,
                status_code=status,
            )
        return response

    raise ProviderAPIError(
        f"{provider_name}: max retries exceeded",
        provider_name=provider_name,
        status_code=429,
    )


def parse_json(response: httpx.Response, provider_name: str):
    """Decode a JSON body, raising ProviderDataError on garbage."""
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderDataError(
            f"{provider_name} returned a non-JSON response",
            provider_name=provider_name,
        ) from exc
