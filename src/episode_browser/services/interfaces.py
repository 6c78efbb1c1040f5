"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from episode_browser.models import CatalogPage, Character
from episode_browser.services import connectivity_service as _connectivity
from episode_browser.services import episode_api_service as _episode_api


@runtime_checkable
class EpisodeApiService(Protocol):
    """Interface for catalog and character fetches."""

    async def fetch_page(
        self,
        *,
        client: httpx.AsyncClient | None,
        page_number: int,
        base_url: str,
        timeout_seconds: int,
    ) -> CatalogPage:
        """Fetch one catalog page. Raises NetworkError on failure."""
        ...

    async def fetch_characters(
        self,
        *,
        client: httpx.AsyncClient | None,
        ids: Iterable[int],
        base_url: str,
        timeout_seconds: int,
    ) -> list[Character]:
        """Fetch a batch of characters. Raises NetworkError on failure."""
        ...


@runtime_checkable
class ConnectivityService(Protocol):
    """Interface for the pre-refresh connectivity check."""

    async def is_connected(
        self,
        *,
        client: httpx.AsyncClient | None,
        url: str,
        timeout_seconds: float,
    ) -> bool:
        """Return whether the network is reachable. Never raises."""
        ...


class DefaultEpisodeApiService:
    """Default adapter that delegates to function-based API services."""

    async def fetch_page(
        self,
        *,
        client: httpx.AsyncClient | None,
        page_number: int,
        base_url: str,
        timeout_seconds: int,
    ) -> CatalogPage:
        return await _episode_api.fetch_page(
            client=client,
            page_number=page_number,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    async def fetch_characters(
        self,
        *,
        client: httpx.AsyncClient | None,
        ids: Iterable[int],
        base_url: str,
        timeout_seconds: int,
    ) -> list[Character]:
        return await _episode_api.fetch_characters(
            client=client,
            ids=ids,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )


class DefaultConnectivityService:
    """Default adapter that probes the API host over HTTP."""

    async def is_connected(
        self,
        *,
        client: httpx.AsyncClient | None,
        url: str,
        timeout_seconds: float,
    ) -> bool:
        return await _connectivity.check_connectivity(
            client=client,
            url=url,
            timeout_seconds=timeout_seconds,
        )


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the engine and app layer."""

    episode_api: EpisodeApiService
    connectivity: ConnectivityService


def build_default_app_services() -> AppServices:
    """Build default app services backed by the function-based modules."""
    return AppServices(
        episode_api=DefaultEpisodeApiService(),
        connectivity=DefaultConnectivityService(),
    )


__all__ = [
    "AppServices",
    "ConnectivityService",
    "DefaultConnectivityService",
    "DefaultEpisodeApiService",
    "EpisodeApiService",
    "build_default_app_services",
]
