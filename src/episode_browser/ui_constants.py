"""Internal UI constants for the EpisodeBrowser app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: $th-background;
}

Header {
    background: $th-panel-alt;
    color: $th-text;
}

#views {
    height: 1fr;
}

TabPane {
    padding: 0;
}

.list-header {
    padding: 0 1;
    color: $th-accent;
    text-style: bold;
}

.search-input {
    width: 100%;
    border: tall $th-panel-alt;
    background: $th-panel;
}

.search-input:focus {
    border: tall $th-accent;
}

.episode-list {
    height: 1fr;
    background: $th-panel;
    scrollbar-gutter: stable;
    scrollbar-background: $th-scrollbar-bg;
    scrollbar-color: $th-scrollbar-thumb;
    scrollbar-color-hover: $th-scrollbar-hover;
    scrollbar-color-active: $th-scrollbar-active;
}

.episode-list > ListItem {
    padding: 0 1;
}

.episode-list > ListItem.--highlight {
    background: $th-highlight;
}

.episode-list:focus > ListItem.--highlight {
    background: $th-highlight-focus;
}

.episode-list > ListItem.-removing {
    text-style: dim;
}

.episode-meta {
    color: $th-muted;
}

.empty-state {
    padding: 1 2;
    color: $th-muted;
    display: none;
}

.empty-state.visible {
    display: block;
}

.list-footer {
    padding: 0 1;
    color: $th-muted;
}

.list-footer.error {
    color: $th-red;
}

#status-bar {
    padding: 0 1;
    color: $th-muted;
    background: $th-panel-alt;
}
"""

APP_BINDINGS: list[BindingType] = [
    Binding("q", "quit", "Quit", show=False),
    Binding("f", "toggle_favourite", "Favourite", show=False),
    Binding("n", "load_more", "Load more", show=False),
    Binding("r", "refresh_catalog", "Refresh", show=False),
    Binding("slash", "focus_search", "Search", show=False),
    Binding("escape", "clear_search", "Clear search", show=False),
    Binding("1", "show_view('episodes')", "Episodes", show=False),
    Binding("2", "show_view('favourites')", "Favourites", show=False),
    Binding("j", "cursor_down", "Down", show=False),
    Binding("k", "cursor_up", "Up", show=False),
]

STATUS_HINT = (
    "enter details · f favourite · n more · r refresh · / search · esc clear · 1/2 views · q quit"
)

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
    "STATUS_HINT",
]
