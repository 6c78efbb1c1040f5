"""Internal Rick and Morty API helpers for episode pages and character batches."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from episode_browser.errors import NetworkError
from episode_browser.models import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    RICK_AND_MORTY_API_URL,
    CatalogPage,
    Character,
)
from episode_browser.parsing import parse_catalog_page, parse_characters_payload

logger = logging.getLogger(__name__)

API_USER_AGENT = "episode-browser/0.1"


async def _get_json(
    client: httpx.AsyncClient | None,
    url: str,
    *,
    params: dict[str, Any] | None,
    timeout_seconds: int,
    user_agent: str,
    label: str,
) -> Any:
    """GET a URL and decode its JSON body.

    Raises:
        NetworkError: On transport failure, non-2xx status, or invalid JSON.
    """
    headers = {"User-Agent": user_agent}
    try:
        if client is not None:
            response = await client.get(url, params=params, headers=headers, timeout=timeout_seconds)
        else:
            async with httpx.AsyncClient() as tmp_client:
                response = await tmp_client.get(
                    url, params=params, headers=headers, timeout=timeout_seconds
                )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        raise NetworkError(f"{label} returned HTTP {status_code}", status_code=status_code) from exc
    except httpx.HTTPError as exc:
        raise NetworkError(f"{label} failed: {exc.__class__.__name__}") from exc

    try:
        return response.json()
    except ValueError as exc:
        raise NetworkError(f"{label} returned invalid JSON") from exc


async def fetch_page(
    *,
    client: httpx.AsyncClient | None,
    page_number: int,
    base_url: str = RICK_AND_MORTY_API_URL,
    timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    user_agent: str = API_USER_AGENT,
) -> CatalogPage:
    """Fetch one page of the episode catalog.

    A 404 means the page lies past the end of the catalog; it becomes an
    empty page without a next cursor.

    Raises:
        NetworkError: On any other request failure.
    """
    label = f"Episode page {page_number}"
    try:
        payload = await _get_json(
            client,
            f"{base_url.rstrip('/')}/episode",
            params={"page": page_number},
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
            label=label,
        )
    except NetworkError as exc:
        if exc.status_code == 404:
            logger.info("%s not found, treating as end of catalog", label)
            return CatalogPage(number=page_number, episodes=(), next_cursor=None)
        raise

    try:
        return parse_catalog_page(payload, page_number)
    except ValueError as exc:
        raise NetworkError(f"{label} returned an unexpected payload") from exc


def unique_ids(ids: Iterable[int]) -> list[int]:
    """Deduplicate ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


async def fetch_characters(
    *,
    client: httpx.AsyncClient | None,
    ids: Iterable[int],
    base_url: str = RICK_AND_MORTY_API_URL,
    timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    user_agent: str = API_USER_AGENT,
) -> list[Character]:
    """Fetch characters by id in one request.

    Returns [] for an empty id list without making a request. The API
    answers a single id with an object instead of an array; both shapes
    are normalized to a list.

    Raises:
        NetworkError: On request failure (404 yields []).
    """
    id_list = unique_ids(ids)
    if not id_list:
        return []
    joined = ",".join(str(i) for i in id_list)
    label = f"Characters {joined}"
    try:
        payload = await _get_json(
            client,
            f"{base_url.rstrip('/')}/character/{joined}",
            params=None,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
            label=label,
        )
    except NetworkError as exc:
        if exc.status_code == 404:
            logger.info("%s not found", label)
            return []
        raise
    return parse_characters_payload(payload)


__all__ = [
    "API_USER_AGENT",
    "fetch_characters",
    "fetch_page",
    "unique_ids",
]
