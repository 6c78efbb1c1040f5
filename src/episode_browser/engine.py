"""Catalog & favourites synchronization engine.

Ties the catalog cache, favourites store, removal reconciler, freshness
classification and search filter to the fetch collaborators, and exposes the
projections and actions the UI consumes.

All methods run on the event loop; there is no locking. The hazards are
logical races between awaits, handled as follows:

- Every request records the cache generation it was issued under. A refresh
  advances the generation, so a page fetch that resolves after it is dropped.
- Only one page fetch runs at a time, and none while a refresh is running.
- ``toggle_favourite`` is synchronous; the in-memory favourites set is
  authoritative the moment it returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import httpx

from episode_browser.catalog import FIRST_PAGE, CatalogCache, CatalogState
from episode_browser.errors import Exhausted, NetworkError, OutOfOrderPage
from episode_browser.favourites import FavouritesStore
from episode_browser.freshness import (
    RefreshOutcome,
    RefreshResult,
    classify_refresh,
    freshness_mark,
)
from episode_browser.models import (
    DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    RICK_AND_MORTY_API_URL,
    CatalogPage,
    Character,
    Episode,
    View,
)
from episode_browser.reconciler import RemovalReconciler
from episode_browser.search import filter_episodes
from episode_browser.services.interfaces import AppServices, build_default_app_services

logger = logging.getLogger(__name__)


class LoadOutcome(str, Enum):
    LOADED = "loaded"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    BUSY = "busy"  # another page fetch or a refresh is running
    STALE = "stale"  # a refresh superseded this fetch; its result was dropped
    BLOCKED = "blocked"  # an out-of-order page broke the sequence; refresh required


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of one ``load_next_page`` call."""

    outcome: LoadOutcome
    page_number: int | None = None
    added: int = 0
    error: str | None = None


class CatalogEngine:
    """Owns catalog and favourites state for both episode views."""

    def __init__(
        self,
        *,
        favourites: FavouritesStore,
        services: AppServices | None = None,
        cache: CatalogCache | None = None,
        base_url: str = RICK_AND_MORTY_API_URL,
        timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        connectivity_timeout_seconds: float = DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
    ) -> None:
        self._favourites = favourites
        self._reconciler = RemovalReconciler(favourites)
        self._cache = cache if cache is not None else CatalogCache()
        self._services = services or build_default_app_services()
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._connectivity_timeout_seconds = connectivity_timeout_seconds

        # Shared HTTP client, owned by the caller (the app opens and closes it)
        self.client: httpx.AsyncClient | None = None

        self._queries: dict[View, str] = {View.EPISODES: "", View.FAVOURITES: ""}
        self._page_fetch_inflight = False
        self._refresh_inflight = False
        self._needs_reset = False

    # ── Read-only projections ───────────────────────────────────────────

    @property
    def cache(self) -> CatalogCache:
        return self._cache

    @property
    def favourites(self) -> FavouritesStore:
        return self._favourites

    @property
    def reconciler(self) -> RemovalReconciler:
        return self._reconciler

    @property
    def state(self) -> CatalogState:
        return self._cache.state

    @property
    def episodes(self) -> tuple[Episode, ...]:
        return self._cache.episodes

    @property
    def loading(self) -> bool:
        return self._cache.state.loading

    @property
    def loading_more(self) -> bool:
        return self._page_fetch_inflight

    @property
    def refreshing(self) -> bool:
        return self._refresh_inflight

    @property
    def error(self) -> str | None:
        return self._cache.state.error

    @property
    def has_more(self) -> bool:
        return not self._needs_reset and self._cache.has_more()

    @property
    def needs_reset(self) -> bool:
        return self._needs_reset

    def search_query(self, view: View = View.EPISODES) -> str:
        return self._queries[view]

    def episodes_view(self) -> list[Episode]:
        """Rows for the all-episodes view."""
        return filter_episodes(self.episodes, self._queries[View.EPISODES])

    def favourites_view(self) -> list[Episode]:
        """Rows for the favourites view, pending removals included."""
        return filter_episodes(
            self._reconciler.project(self.episodes), self._queries[View.FAVOURITES]
        )

    @property
    def favourite_count(self) -> int:
        """Favourites-view size ignoring the search query."""
        return len(self._reconciler.project(self.episodes))

    def is_favourite(self, episode_id: int) -> bool:
        return self._favourites.is_favourite(episode_id)

    def is_rendered_as_favourite(self, episode_id: int, view: View = View.EPISODES) -> bool:
        """Favourite indicator state for a row in the given view."""
        if view is View.FAVOURITES:
            return self._reconciler.is_rendered_as_favourite(episode_id)
        return self._favourites.is_favourite(episode_id)

    def find_episode(self, episode_id: int) -> Episode | None:
        for episode in self.episodes:
            if episode.id == episode_id:
                return episode
        return None

    # ── Synchronous actions ─────────────────────────────────────────────

    def set_search_query(self, text: str, view: View = View.EPISODES) -> None:
        self._queries[view] = text

    def activate_view(self, view: View) -> None:
        """Re-read favourites when a view becomes active."""
        self._favourites.reload()
        self._reconciler.sync()
        logger.debug("Activated %s view, %d favourites", view.value, len(self._favourites))

    def toggle_favourite(self, episode_id: int, view: View = View.EPISODES) -> bool:
        """Toggle a favourite and return the new membership.

        Switching off a favourite that the favourites view currently shows
        starts a pending removal; the row stays until ``complete_removal``.
        """
        visible = view is View.FAVOURITES and any(
            episode.id == episode_id for episode in self.favourites_view()
        )
        return self._reconciler.toggle(episode_id, visible=visible)

    def complete_removal(self, episode_id: int, ticket: int | None = None) -> bool:
        """Exit-transition completion signal from the UI."""
        return self._reconciler.complete(episode_id, ticket)

    # ── Asynchronous actions ────────────────────────────────────────────

    def _sync_loading(self) -> None:
        self._cache.set_loading(self._page_fetch_inflight or self._refresh_inflight)

    async def _fetch_page(self, page_number: int) -> CatalogPage:
        return await self._services.episode_api.fetch_page(
            client=self.client,
            page_number=page_number,
            base_url=self._base_url,
            timeout_seconds=self._timeout_seconds,
        )

    async def load_next_page(self) -> LoadResult:
        """Fetch and append the next catalog page (the first one when empty)."""
        if self._needs_reset:
            return LoadResult(LoadOutcome.BLOCKED, error=self.error)
        if self._page_fetch_inflight or self._refresh_inflight:
            return LoadResult(LoadOutcome.BUSY)
        try:
            page_number = self._cache.next_cursor()
        except Exhausted:
            return LoadResult(LoadOutcome.EXHAUSTED)

        generation = self._cache.generation
        self._page_fetch_inflight = True
        self._sync_loading()
        try:
            page = await self._fetch_page(page_number)
        except NetworkError as exc:
            if not self._cache.is_current(generation):
                return LoadResult(LoadOutcome.STALE, page_number=page_number)
            message = str(exc)
            logger.warning("Loading page %d failed: %s", page_number, message)
            self._cache.set_error(message)
            return LoadResult(LoadOutcome.FAILED, page_number=page_number, error=message)
        finally:
            if self._cache.is_current(generation):
                self._page_fetch_inflight = False
                self._sync_loading()

        if not self._cache.is_current(generation):
            logger.debug("Discarding stale page %d (generation %d)", page_number, generation)
            return LoadResult(LoadOutcome.STALE, page_number=page_number)

        before = len(self._cache.episodes)
        try:
            self._cache.append_page(page)
        except OutOfOrderPage as exc:
            self._needs_reset = True
            message = str(exc)
            logger.error("Catalog page sequence broken: %s", message)
            self._cache.set_error(message)
            return LoadResult(LoadOutcome.BLOCKED, page_number=page.number, error=message)

        self._cache.set_error(None)
        added = len(self._cache.episodes) - before
        logger.info("Loaded page %d (%d new episodes)", page.number, added)
        return LoadResult(LoadOutcome.LOADED, page_number=page.number, added=added)

    async def refresh(self, *, check_connectivity: bool = True) -> RefreshResult:
        """Re-fetch the first page and replace the catalog with it.

        The old pages stay visible until the new first page arrives. A
        failed refresh leaves the catalog untouched. When the connectivity
        check fails no request is made and no state changes.
        """
        before = freshness_mark(self._cache.episodes)
        if check_connectivity:
            connected = await self._services.connectivity.is_connected(
                client=self.client,
                url=self._base_url,
                timeout_seconds=self._connectivity_timeout_seconds,
            )
            if not connected:
                logger.info("Refresh refused: offline")
                return RefreshResult(RefreshOutcome.OFFLINE, before=before)

        generation = self._cache.invalidate()
        # The invalidated page fetch, if any, no longer owns the loading flag.
        self._page_fetch_inflight = False
        self._refresh_inflight = True
        self._sync_loading()
        try:
            page = await self._fetch_page(FIRST_PAGE)
        except NetworkError as exc:
            if not self._cache.is_current(generation):
                return RefreshResult(RefreshOutcome.SUPERSEDED, before=before)
            message = str(exc)
            logger.warning("Refresh failed: %s", message)
            return RefreshResult(
                classify_refresh(before, None, failed=True), before=before, error=message
            )
        finally:
            if self._cache.is_current(generation):
                self._refresh_inflight = False
                self._sync_loading()

        if not self._cache.is_current(generation):
            logger.debug("Discarding superseded refresh (generation %d)", generation)
            return RefreshResult(RefreshOutcome.SUPERSEDED, before=before)

        # Drop page fetches issued while the refresh was running.
        self._cache.invalidate()
        self._cache.reset()
        try:
            self._cache.append_page(page)
        except OutOfOrderPage as exc:
            self._needs_reset = True
            message = str(exc)
            logger.error("Refresh returned an unexpected page: %s", message)
            self._cache.set_error(message)
            return RefreshResult(RefreshOutcome.FAILED, before=before, error=message)

        self._needs_reset = False
        self._cache.set_error(None)
        after = freshness_mark(self._cache.episodes)
        outcome = classify_refresh(before, after)
        logger.info("Refresh complete: %s (before=%s, after=%s)", outcome.value, before, after)
        return RefreshResult(outcome, before=before, after=after)

    async def fetch_characters(self, episode: Episode, ids: list[int]) -> list[Character]:
        """Fetch the characters of an episode.

        Raises:
            NetworkError: On request failure.
        """
        characters = await self._services.episode_api.fetch_characters(
            client=self.client,
            ids=ids,
            base_url=self._base_url,
            timeout_seconds=self._timeout_seconds,
        )
        logger.debug("Fetched %d characters for episode %d", len(characters), episode.id)
        return characters


__all__ = [
    "CatalogEngine",
    "LoadOutcome",
    "LoadResult",
]
