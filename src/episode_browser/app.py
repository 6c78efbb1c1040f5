"""Episode Browser TUI: browse the episode catalog and keep favourites.

Key bindings:
    enter   - Open episode details (characters, air date)
    f       - Toggle favourite on the highlighted episode
    n       - Load the next catalog page
    r       - Refresh the catalog from page 1
    /       - Focus the search box of the current view
    escape  - Clear the search of the current view
    1 / 2   - Switch to Episodes / Favourites
    j/k     - Navigate down/up (vim-style)
    q       - Quit
"""

from __future__ import annotations

import asyncio
import logging
import sys
from functools import partial
from typing import Any

import httpx
from textual import on
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.widgets import (
    Header,
    Input,
    Label,
    ListView,
    Static,
    TabbedContent,
    TabPane,
)

from episode_browser.action_messages import (
    FAVOURITES_EMPTY_HINT,
    FAVOURITES_EMPTY_TITLE,
    build_blocked_message,
    build_episodes_footer,
    build_favourites_header,
    build_load_error_message,
    build_no_results_message,
    build_refresh_notice,
)
from episode_browser.cli import main as _cli_main
from episode_browser.engine import CatalogEngine, LoadOutcome
from episode_browser.favourites import FavouritesStore
from episode_browser.models import Episode, UserConfig, View
from episode_browser.modals import EpisodeDetailScreen
from episode_browser.services.interfaces import AppServices
from episode_browser.storage import FileKeyValueStore
from episode_browser.themes import TEXTUAL_THEME, THEME_NAME
from episode_browser.ui_constants import APP_BINDINGS, APP_CSS, STATUS_HINT
from episode_browser.widgets import EpisodeListItem, set_ascii_icons

logger = logging.getLogger(__name__)

_TAB_IDS = {View.EPISODES: "episodes-tab", View.FAVOURITES: "favourites-tab"}
_VIEW_BY_TAB = {tab_id: view for view, tab_id in _TAB_IDS.items()}


class EpisodeBrowser(App):
    """Two-view episode browser: the full catalog and the user's favourites."""

    TITLE = "Episode Browser"
    CSS = APP_CSS
    BINDINGS = APP_BINDINGS

    def __init__(
        self,
        *,
        config: UserConfig | None = None,
        favourites: FavouritesStore | None = None,
        services: AppServices | None = None,
        engine: CatalogEngine | None = None,
    ) -> None:
        super().__init__()
        self.register_theme(TEXTUAL_THEME)
        self._config = config or UserConfig()
        if engine is None:
            engine = CatalogEngine(
                favourites=favourites or FavouritesStore(FileKeyValueStore()),
                services=services,
                base_url=self._config.api_base_url,
                timeout_seconds=self._config.request_timeout_seconds,
                connectivity_timeout_seconds=self._config.connectivity_timeout_seconds,
            )
        self._engine = engine
        self._active_view = View.EPISODES

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[None]] = set()

        # List rebuilds await widget removal/mount; one at a time per view
        self._render_locks = {view: asyncio.Lock() for view in View}

        # Shared HTTP client for connection pooling (created in on_mount)
        self._http_client: httpx.AsyncClient | None = None

        set_ascii_icons(self._config.ascii_icons)

    def get_theme_variable_defaults(self) -> dict[str, str]:
        """Fallback $th-* values so CSS resolves before the portal theme is active."""
        return dict(TEXTUAL_THEME.variables)

    @property
    def engine(self) -> CatalogEngine:
        return self._engine

    @property
    def active_view(self) -> View:
        return self._active_view

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(initial=_TAB_IDS[View.EPISODES], id="views"):
            with TabPane("Episodes", id=_TAB_IDS[View.EPISODES]):
                yield Input(
                    placeholder=" Search episodes by name",
                    id="episodes-search",
                    classes="search-input",
                )
                yield ListView(id="episodes-list", classes="episode-list")
                yield Static("", id="episodes-empty", classes="empty-state")
                yield Label("", id="episodes-footer", classes="list-footer")
            with TabPane("Favourites", id=_TAB_IDS[View.FAVOURITES]):
                yield Label("", id="favourites-header", classes="list-header")
                yield Input(
                    placeholder=" Search favourites by name",
                    id="favourites-search",
                    classes="search-input",
                )
                yield ListView(id="favourites-list", classes="episode-list")
                yield Static("", id="favourites-empty", classes="empty-state")
        yield Label(STATUS_HINT, id="status-bar")

    async def on_mount(self) -> None:
        """Open the HTTP client, read favourites and start the first page load."""
        self.theme = THEME_NAME
        self._http_client = httpx.AsyncClient()
        self._engine.client = self._http_client
        self._engine.activate_view(View.EPISODES)
        await self._render_list(View.EPISODES)
        await self._render_list(View.FAVOURITES)
        self._get_list(View.EPISODES).focus()
        self._start_page_load()
        logger.debug("App mounted: %d favourites", self._engine.favourite_count)

    async def on_unmount(self) -> None:
        """Cancel background work and close the shared HTTP client."""
        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

        client = self._http_client
        self._http_client = None
        self._engine.client = None
        if client is not None:
            try:
                await client.aclose()
            except Exception as e:
                logger.debug(
                    "Failed to close shared HTTP client during shutdown: %s", e, exc_info=True
                )

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    # ── Widget access ───────────────────────────────────────────────────

    def _get_list(self, view: View) -> ListView:
        return self.query_one(f"#{view.value}-list", ListView)

    def _get_search(self, view: View) -> Input:
        return self.query_one(f"#{view.value}-search", Input)

    def _highlighted_item(self) -> EpisodeListItem | None:
        try:
            child = self._get_list(self._active_view).highlighted_child
        except NoMatches:
            return None
        return child if isinstance(child, EpisodeListItem) else None

    def _find_item(self, view: View, episode_id: int) -> EpisodeListItem | None:
        for child in self._get_list(view).children:
            if isinstance(child, EpisodeListItem) and child.episode_id == episode_id:
                return child
        return None

    # ── Rendering ───────────────────────────────────────────────────────

    async def _render_list(self, view: View) -> None:
        """Rebuild one list from the engine's projection, keeping the highlight."""
        async with self._render_locks[view]:
            try:
                list_view = self._get_list(view)
            except NoMatches:
                return
            previous = list_view.highlighted_child
            previous_id = previous.episode_id if isinstance(previous, EpisodeListItem) else None
            previous_index = list_view.index or 0

            episodes = (
                self._engine.episodes_view()
                if view is View.EPISODES
                else self._engine.favourites_view()
            )
            items = [
                EpisodeListItem(
                    episode,
                    is_favourite=self._engine.is_rendered_as_favourite(episode.id, view),
                )
                for episode in episodes
            ]
            await list_view.clear()
            if items:
                await list_view.extend(items)
                ids = [episode.id for episode in episodes]
                if previous_id in ids:
                    list_view.index = ids.index(previous_id)
                else:
                    list_view.index = min(previous_index, len(items) - 1)
            if view is View.FAVOURITES:
                for item in items:
                    self._start_exit_animation(item)
            self._update_chrome(view)

    def _schedule_render(self, view: View) -> None:
        self._track_task(self._render_list(view))

    def _update_chrome(self, view: View) -> None:
        """Refresh header, footer and empty-state text for a view."""
        try:
            empty = self.query_one(f"#{view.value}-empty", Static)
        except NoMatches:
            return
        query = self._engine.search_query(view)
        if view is View.EPISODES:
            rows = self._engine.episodes_view()
            if rows:
                empty.remove_class("visible")
            else:
                if query.strip() and self._engine.episodes:
                    empty.update(build_no_results_message(query))
                elif self._engine.loading:
                    empty.update("Loading episodes...")
                else:
                    empty.update("No episodes loaded yet. Press n to load, r to refresh.")
                empty.add_class("visible")
            self._update_episodes_footer()
            return

        self.query_one("#favourites-header", Label).update(
            build_favourites_header(self._engine.favourite_count)
        )
        if self._engine.favourites_view():
            empty.remove_class("visible")
        else:
            if query.strip() and self._engine.favourite_count:
                empty.update(build_no_results_message(query))
            else:
                empty.update(f"[bold]{FAVOURITES_EMPTY_TITLE}[/]\n{FAVOURITES_EMPTY_HINT}")
            empty.add_class("visible")

    def _update_episodes_footer(self, *, loading: bool | None = None) -> None:
        try:
            footer = self.query_one("#episodes-footer", Label)
        except NoMatches:
            return
        engine = self._engine
        if engine.needs_reset:
            footer.update(build_blocked_message(engine.error))
            footer.add_class("error")
        elif engine.error and not engine.loading:
            footer.update(build_load_error_message(engine.error))
            footer.add_class("error")
        else:
            footer.update(
                build_episodes_footer(
                    loading=engine.loading if loading is None else loading,
                    has_more=engine.has_more,
                )
            )
            footer.remove_class("error")

    # ── Exit animation for removed favourites ───────────────────────────

    def _start_exit_animation(self, item: EpisodeListItem) -> None:
        """Fade out an item whose removal is pending, once per ticket."""
        ticket = self._engine.reconciler.ticket_for(item.episode_id)
        if ticket is None or item.removal_ticket == ticket:
            return
        item.removal_ticket = ticket
        item.add_class("-removing")
        on_complete = partial(self._on_exit_complete, item.episode_id, ticket)
        duration = self._config.removal_animation_seconds
        if duration <= 0:
            self.call_later(on_complete)
            return
        item.styles.animate("opacity", value=0.0, duration=duration, on_complete=on_complete)

    def _on_exit_complete(self, episode_id: int, ticket: int) -> None:
        removed = self._engine.complete_removal(episode_id, ticket)
        logger.debug("Exit animation done for %d (ticket %d, removed=%s)", episode_id, ticket, removed)
        # A stale ticket means the item was refavourited; rebuild restores its opacity.
        self._schedule_render(View.FAVOURITES)

    # ── Paging and refresh ──────────────────────────────────────────────

    def _start_page_load(self) -> None:
        engine = self._engine
        if engine.loading or not engine.has_more:
            return
        self._update_episodes_footer(loading=True)
        self._track_task(self._load_next_page())

    async def _load_next_page(self) -> None:
        result = await self._engine.load_next_page()
        outcome = result.outcome
        if outcome is LoadOutcome.LOADED:
            await self._render_list(View.EPISODES)
            await self._render_list(View.FAVOURITES)
            return
        if outcome is LoadOutcome.FAILED:
            self.notify(
                build_load_error_message(result.error or "request failed"),
                title="Episodes",
                severity="error",
            )
        elif outcome is LoadOutcome.BLOCKED:
            self.notify(build_blocked_message(result.error), title="Episodes", severity="warning")
        self._update_chrome(View.EPISODES)

    async def _refresh_catalog(self) -> None:
        self._update_episodes_footer(loading=True)
        result = await self._engine.refresh()
        notice = build_refresh_notice(result)
        if notice is not None:
            self.notify(notice.message, title=notice.title, severity=notice.severity)
        await self._render_list(View.EPISODES)
        await self._render_list(View.FAVOURITES)

    # ── Actions ─────────────────────────────────────────────────────────

    def action_load_more(self) -> None:
        if not self._engine.has_more and not self._engine.needs_reset:
            self.notify("No more episodes", title="Episodes")
            return
        if self._engine.needs_reset:
            self.notify(build_blocked_message(self._engine.error), severity="warning")
            return
        self._start_page_load()

    def action_refresh_catalog(self) -> None:
        if self._engine.refreshing:
            return
        self._track_task(self._refresh_catalog())

    def action_toggle_favourite(self) -> None:
        item = self._highlighted_item()
        if item is None:
            return
        view = self._active_view
        is_favourite = self._engine.toggle_favourite(item.episode_id, view)
        if view is View.FAVOURITES:
            if self._engine.reconciler.ticket_for(item.episode_id) is not None:
                item.set_favourite(False)
                self._start_exit_animation(item)
            else:
                item.set_favourite(is_favourite)
                item.removal_ticket = None
                item.remove_class("-removing")
                item.styles.opacity = 1.0
            self._update_chrome(View.FAVOURITES)
            self._schedule_render(View.EPISODES)
        else:
            item.set_favourite(is_favourite)
            self._schedule_render(View.FAVOURITES)

    def action_focus_search(self) -> None:
        self._get_search(self._active_view).focus()

    def action_clear_search(self) -> None:
        search = self._get_search(self._active_view)
        if search.value:
            search.value = ""
        self._get_list(self._active_view).focus()

    def action_show_view(self, view_name: str) -> None:
        view = View(view_name)
        self.query_one("#views", TabbedContent).active = _TAB_IDS[view]

    def action_cursor_down(self) -> None:
        self._get_list(self._active_view).action_cursor_down()

    def action_cursor_up(self) -> None:
        self._get_list(self._active_view).action_cursor_up()

    def open_episode_detail(self, episode: Episode) -> None:
        self.push_screen(
            EpisodeDetailScreen(
                episode,
                partial(self._engine.fetch_characters, episode),
                characters_per_page=self._config.characters_per_page,
            )
        )

    # ── Events ──────────────────────────────────────────────────────────

    @on(TabbedContent.TabActivated, "#views")
    async def on_view_activated(self, event: TabbedContent.TabActivated) -> None:
        pane_id = event.pane.id if event.pane is not None else None
        view = _VIEW_BY_TAB.get(pane_id or "")
        if view is None:
            return
        self._active_view = view
        self._engine.activate_view(view)
        await self._render_list(view)
        self._get_list(view).focus()

    @on(Input.Changed, "#episodes-search")
    async def on_episodes_search_changed(self, event: Input.Changed) -> None:
        self._engine.set_search_query(event.value, View.EPISODES)
        await self._render_list(View.EPISODES)

    @on(Input.Changed, "#favourites-search")
    async def on_favourites_search_changed(self, event: Input.Changed) -> None:
        self._engine.set_search_query(event.value, View.FAVOURITES)
        await self._render_list(View.FAVOURITES)

    @on(Input.Submitted, ".search-input")
    def on_search_submitted(self, event: Input.Submitted) -> None:
        self._get_list(self._active_view).focus()

    @on(ListView.Selected, ".episode-list")
    def on_episode_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, EpisodeListItem):
            self.open_episode_detail(event.item.episode)

    @on(ListView.Highlighted, "#episodes-list")
    def on_episode_highlighted(self, event: ListView.Highlighted) -> None:
        """Load the next page when the cursor reaches the last row."""
        list_view = event.list_view
        if list_view.index is None or not list_view.children:
            return
        if self._engine.search_query(View.EPISODES).strip():
            return
        if list_view.index >= len(list_view.children) - 1:
            self._start_page_load()


def main() -> int:
    """Main entry point wrapper for CLI/bootstrap logic."""
    return _cli_main(app_factory=EpisodeBrowser)


if __name__ == "__main__":
    sys.exit(main())
