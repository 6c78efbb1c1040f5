"""List rendering helpers and widgets for episode rows."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from textual.app import ComposeResult
from textual.css.query import NoMatches
from textual.widgets import ListItem, Static

from episode_browser.models import Episode
from episode_browser.themes import THEME_COLORS

_ICON_SETS: dict[str, dict[str, str]] = {
    "unicode": {
        "favourite": "♥",
        "not_favourite": "♡",
        "separator": "·",
    },
    "ascii": {
        "favourite": "[*]",
        "not_favourite": "[ ]",
        "separator": "-",
    },
}
_ACTIVE_ICON_SET = _ICON_SETS["unicode"]


def set_ascii_icons(enabled: bool) -> None:
    """Switch list indicators between Unicode and ASCII modes."""
    global _ACTIVE_ICON_SET
    _ACTIVE_ICON_SET = _ICON_SETS["ascii"] if enabled else _ICON_SETS["unicode"]


def favourite_icon(is_favourite: bool) -> str:
    """Return the heart markup for a row."""
    if is_favourite:
        return f"[{THEME_COLORS['red']}]{_ACTIVE_ICON_SET['favourite']}[/]"
    return f"[{THEME_COLORS['muted']}]{_ACTIVE_ICON_SET['not_favourite']}[/]"


def render_episode_title(episode: Episode, *, is_favourite: bool) -> str:
    """Build the title line: heart indicator then the episode name."""
    return f"{favourite_icon(is_favourite)} [bold]{escape_markup(episode.name)}[/]"


def render_episode_meta(episode: Episode) -> str:
    """Build the meta line: code and air date."""
    sep = _ACTIVE_ICON_SET["separator"]
    parts = [f"[{THEME_COLORS['accent']}]{escape_markup(episode.episode)}[/]"]
    if episode.air_date:
        parts.append(f"[dim]{escape_markup(episode.air_date)}[/]")
    return f" {sep} ".join(parts)


class EpisodeListItem(ListItem):
    """A list row showing one episode and its favourite state."""

    def __init__(self, episode: Episode, *, is_favourite: bool = False) -> None:
        super().__init__()
        self.episode = episode
        self._is_favourite = is_favourite
        self.removal_ticket: int | None = None

    @property
    def episode_id(self) -> int:
        return self.episode.id

    @property
    def is_favourite(self) -> bool:
        return self._is_favourite

    def set_favourite(self, is_favourite: bool) -> None:
        """Update the heart indicator in place."""
        if is_favourite == self._is_favourite:
            return
        self._is_favourite = is_favourite
        try:
            self.query_one(".episode-title", Static).update(
                render_episode_title(self.episode, is_favourite=is_favourite)
            )
        except NoMatches:
            return

    def compose(self) -> ComposeResult:
        yield Static(
            render_episode_title(self.episode, is_favourite=self._is_favourite),
            classes="episode-title",
        )
        yield Static(render_episode_meta(self.episode), classes="episode-meta")


__all__ = [
    "EpisodeListItem",
    "favourite_icon",
    "render_episode_meta",
    "render_episode_title",
    "set_ascii_icons",
]
