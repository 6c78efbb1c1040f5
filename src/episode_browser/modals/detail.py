"""Episode and character detail modals."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from rich.markup import escape as escape_markup
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, ListItem, ListView, Static

from episode_browser.action_messages import build_actionable_error
from episode_browser.errors import NetworkError
from episode_browser.models import DEFAULT_CHARACTERS_PER_PAGE, Character, Episode
from episode_browser.parsing import (
    character_ids_from_urls,
    format_created_date,
    split_episode_code,
)
from episode_browser.themes import THEME_COLORS, status_color

logger = logging.getLogger(__name__)

CharacterFetcher = Callable[[list[int]], Awaitable[list[Character]]]


def format_status(status: str) -> str:
    """Capitalize a status for display: "alive" -> "Alive"."""
    cleaned = status.strip()
    return cleaned[:1].upper() + cleaned[1:].lower() if cleaned else "Unknown"


def format_appearances(count: int) -> str:
    if count <= 0:
        return "No episodes data available"
    return f"Appears in {count} episode{'s' if count != 1 else ''}"


def render_episode_info(episode: Episode) -> str:
    """Season/episode numbers, air date and creation date as Rich markup."""
    season, number = split_episode_code(episode.episode)
    lines = [
        f"[{THEME_COLORS['accent']}]Season {season}[/]  ·  "
        f"[{THEME_COLORS['accent']}]Episode {number}[/]",
        f"[dim]Air date:[/] {escape_markup(episode.air_date or 'Unknown')}",
    ]
    created = format_created_date(episode.created)
    if created:
        lines.append(f"[dim]Created:[/] {escape_markup(created)}")
    return "\n".join(lines)


def render_character_row(character: Character) -> str:
    color = status_color(character.status)
    return (
        f"[bold]{escape_markup(character.name)}[/]  "
        f"[{color}]● {escape_markup(format_status(character.status))}[/]"
        f"  [dim]{escape_markup(character.species)}[/]"
    )


class CharacterListItem(ListItem):
    """A list item that stores a character reference."""

    def __init__(self, character: Character, *children, **kwargs) -> None:
        super().__init__(*children, **kwargs)
        self.character = character


class EpisodeDetailScreen(ModalScreen[None]):
    """Episode details plus its characters, shown a page at a time."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("m", "load_more", "Load more", show=False),
        Binding("enter", "open_character", "Character", show=False),
    ]

    CSS = """
    EpisodeDetailScreen {
        align: center middle;
    }

    #episode-detail-dialog {
        width: 80%;
        height: 85%;
        min-width: 50;
        min-height: 18;
        background: $th-background;
        border: tall $th-accent;
        padding: 0 2;
    }

    #episode-detail-title {
        text-style: bold;
        color: $th-accent;
    }

    #episode-detail-info {
        margin: 1 0;
    }

    #characters-title {
        text-style: bold;
        color: $th-accent-alt;
    }

    #characters-list {
        height: 1fr;
        background: $th-panel;
        border: none;
    }

    #characters-list > ListItem {
        padding: 0 1;
    }

    #characters-list > ListItem.--highlight {
        background: $th-highlight;
    }

    #characters-status {
        color: $th-muted;
        height: auto;
    }

    #episode-detail-buttons {
        height: auto;
        margin-top: 1;
        align: right middle;
    }

    #episode-detail-buttons Button {
        margin-left: 1;
    }
    """

    def __init__(
        self,
        episode: Episode,
        fetch_characters: CharacterFetcher,
        *,
        characters_per_page: int = DEFAULT_CHARACTERS_PER_PAGE,
    ) -> None:
        super().__init__()
        self._episode = episode
        self._fetch_characters = fetch_characters
        self._per_page = max(1, characters_per_page)
        self._character_ids = character_ids_from_urls(episode.characters)
        self._characters: list[Character] = []
        self._displayed = self._per_page
        self._loading = False
        self._error: str | None = None
        self._load_task: asyncio.Task[None] | None = None

    @property
    def characters(self) -> list[Character]:
        return list(self._characters)

    @property
    def displayed_characters(self) -> list[Character]:
        return self._characters[: self._displayed]

    @property
    def has_more_characters(self) -> bool:
        return self._displayed < len(self._characters)

    def compose(self) -> ComposeResult:
        with Vertical(id="episode-detail-dialog"):
            yield Label(escape_markup(self._episode.name), id="episode-detail-title")
            yield Static(render_episode_info(self._episode), id="episode-detail-info")
            yield Label("Characters", id="characters-title")
            yield ListView(id="characters-list")
            yield Static("", id="characters-status")
            with Horizontal(id="episode-detail-buttons"):
                yield Button("Close (Esc)", variant="default", id="episode-close-btn")
                yield Button("Load more (m)", variant="primary", id="characters-more-btn")

    def on_mount(self) -> None:
        self._update_status()
        if self._character_ids:
            self._load_task = asyncio.create_task(self._load_characters())

    def on_unmount(self) -> None:
        task = self._load_task
        self._load_task = None
        if task is not None and not task.done():
            task.cancel()

    async def _load_characters(self) -> None:
        self._loading = True
        self._update_status()
        try:
            self._characters = await self._fetch_characters(self._character_ids)
        except NetworkError as exc:
            logger.warning("Character fetch failed for episode %d: %s", self._episode.id, exc)
            self._error = str(exc)
        finally:
            self._loading = False
        if not self.is_attached:
            return
        await self._populate_list()
        self._update_status()

    async def _populate_list(self) -> None:
        list_view = self.query_one("#characters-list", ListView)
        previous = list_view.index
        await list_view.clear()
        await list_view.extend(
            CharacterListItem(character, Static(render_character_row(character)))
            for character in self.displayed_characters
        )
        if list_view.children:
            list_view.index = min(previous or 0, len(list_view.children) - 1)
            list_view.focus()

    def _update_status(self) -> None:
        status = self.query_one("#characters-status", Static)
        more_button = self.query_one("#characters-more-btn", Button)
        more_button.display = self.has_more_characters
        if not self._character_ids:
            status.update("[dim]No characters listed for this episode.[/]")
        elif self._loading:
            status.update("[dim]Loading characters...[/]")
        elif self._error is not None:
            status.update(
                escape_markup(
                    build_actionable_error(
                        "load characters",
                        why=self._error,
                        next_step="close this view and open it again",
                    )
                )
            )
        else:
            shown = len(self.displayed_characters)
            status.update(f"[dim]Showing {shown} of {len(self._characters)} characters[/]")

    async def action_load_more(self) -> None:
        if not self.has_more_characters:
            return
        self._displayed += self._per_page
        await self._populate_list()
        self._update_status()

    def action_open_character(self) -> None:
        list_view = self.query_one("#characters-list", ListView)
        if isinstance(list_view.highlighted_child, CharacterListItem):
            self.app.push_screen(CharacterDetailScreen(list_view.highlighted_child.character))

    def action_close(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#episode-close-btn")
    def on_close_pressed(self) -> None:
        self.action_close()

    @on(Button.Pressed, "#characters-more-btn")
    async def on_more_pressed(self) -> None:
        await self.action_load_more()

    @on(ListView.Selected, "#characters-list")
    def on_character_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, CharacterListItem):
            self.app.push_screen(CharacterDetailScreen(event.item.character))


class CharacterDetailScreen(ModalScreen[None]):
    """Read-only profile of a single character."""

    BINDINGS = [
        Binding("escape", "close", "Close"),
    ]

    CSS = """
    CharacterDetailScreen {
        align: center middle;
    }

    #character-dialog {
        width: 60;
        height: auto;
        background: $th-background;
        border: tall $th-accent-alt;
        padding: 0 2;
    }

    #character-name {
        text-style: bold;
        color: $th-accent-alt;
    }

    #character-body {
        margin: 1 0;
    }

    #character-buttons {
        height: auto;
        align: right middle;
    }
    """

    def __init__(self, character: Character) -> None:
        super().__init__()
        self._character = character

    def _render_body(self) -> str:
        c = self._character
        color = status_color(c.status)
        rows = [
            f"[{color}]● {escape_markup(format_status(c.status))}[/]",
            f"[dim]Species:[/]  {escape_markup(c.species or 'Unknown')}",
            f"[dim]Gender:[/]   {escape_markup(c.gender or 'Unknown')}",
            f"[dim]Origin:[/]   {escape_markup(c.origin or 'Unknown')}",
            f"[dim]Location:[/] {escape_markup(c.location or 'Unknown')}",
        ]
        if c.type:
            rows.append(f"[dim]Type:[/]     {escape_markup(c.type)}")
        rows.append(f"[dim]Episodes:[/] {format_appearances(c.episode_count)}")
        return "\n".join(rows)

    def compose(self) -> ComposeResult:
        with Vertical(id="character-dialog"):
            yield Label(escape_markup(self._character.name), id="character-name")
            yield Static(self._render_body(), id="character-body")
            with Horizontal(id="character-buttons"):
                yield Button("Close (Esc)", variant="default", id="character-close-btn")

    def action_close(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#character-close-btn")
    def on_close_pressed(self) -> None:
        self.action_close()


__all__ = [
    "CharacterDetailScreen",
    "CharacterListItem",
    "EpisodeDetailScreen",
    "format_appearances",
    "format_status",
    "render_character_row",
    "render_episode_info",
]
