"""Widget classes for the episode lists."""

from episode_browser.widgets.listing import (
    EpisodeListItem,
    render_episode_meta,
    render_episode_title,
    set_ascii_icons,
)

__all__ = [
    "EpisodeListItem",
    "render_episode_meta",
    "render_episode_title",
    "set_ascii_icons",
]
