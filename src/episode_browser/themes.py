"""Color palette and the Textual theme built from it."""

from __future__ import annotations

from textual.theme import Theme as TextualTheme

THEME_NAME = "portal"

DEFAULT_THEME = {
    "background": "#1b1f23",
    "panel": "#15181b",
    "panel_alt": "#2a3036",
    "text": "#e8f1e4",
    "muted": "#7b8a80",
    "accent": "#97ce4c",  # portal green
    "accent_alt": "#44c3d4",
    "green": "#97ce4c",
    "yellow": "#f0e14a",
    "orange": "#f5a623",
    "red": "#e4475b",
    "pink": "#e89ac7",
    "highlight": "#2f3a2a",
    "highlight_focus": "#3e4d36",
    "scrollbar_background": "#2a3036",
    "scrollbar": "#7b8a80",
    "scrollbar_active": "#97ce4c",
    "scrollbar_hover": "#a9b8ae",
}

THEME_COLORS = DEFAULT_THEME.copy()

# Character status -> palette key
_STATUS_COLOR_KEYS = {
    "alive": "green",
    "dead": "red",
}


def status_color(status: str) -> str:
    """Return the color for a character status. Unknown statuses are muted."""
    return THEME_COLORS[_STATUS_COLOR_KEYS.get(status.strip().lower(), "muted")]


def _build_textual_theme(name: str, colors: dict[str, str]) -> TextualTheme:
    """Convert the palette to a Textual Theme exposing $th-* CSS variables."""
    variables = {
        "th-background": colors["background"],
        "th-panel": colors["panel"],
        "th-panel-alt": colors["panel_alt"],
        "th-highlight": colors["highlight"],
        "th-highlight-focus": colors["highlight_focus"],
        "th-accent": colors["accent"],
        "th-accent-alt": colors["accent_alt"],
        "th-muted": colors["muted"],
        "th-text": colors["text"],
        "th-green": colors["green"],
        "th-red": colors["red"],
        "th-scrollbar-bg": colors["scrollbar_background"],
        "th-scrollbar-thumb": colors["scrollbar"],
        "th-scrollbar-active": colors["scrollbar_active"],
        "th-scrollbar-hover": colors["scrollbar_hover"],
    }
    return TextualTheme(
        name=name,
        primary=colors["accent"],
        secondary=colors["accent_alt"],
        accent=colors["green"],
        foreground=colors["text"],
        background=colors["background"],
        surface=colors["panel"],
        panel=colors["panel_alt"],
        warning=colors["orange"],
        error=colors["red"],
        success=colors["green"],
        dark=True,
        variables=variables,
    )


TEXTUAL_THEME = _build_textual_theme(THEME_NAME, DEFAULT_THEME)


__all__ = [
    "DEFAULT_THEME",
    "TEXTUAL_THEME",
    "THEME_COLORS",
    "THEME_NAME",
    "status_color",
]
