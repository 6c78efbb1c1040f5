"""Internal connectivity probe used before user-initiated refreshes."""

from __future__ import annotations

import logging

import httpx

from episode_browser.models import DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS, RICK_AND_MORTY_API_URL

logger = logging.getLogger(__name__)


async def check_connectivity(
    *,
    client: httpx.AsyncClient | None,
    url: str = RICK_AND_MORTY_API_URL,
    timeout_seconds: float = DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
) -> bool:
    """Return True if the API host answers at all.

    Any HTTP response, error statuses included, proves the network path
    works. Only transport failures count as offline. Never raises.
    """
    try:
        if client is not None:
            await client.head(url, timeout=timeout_seconds)
        else:
            async with httpx.AsyncClient() as tmp_client:
                await tmp_client.head(url, timeout=timeout_seconds)
    except (httpx.HTTPError, OSError) as exc:
        logger.info("Connectivity check failed: %s", exc)
        return False
    return True


__all__ = [
    "check_connectivity",
]
