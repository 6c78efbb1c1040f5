"""Data models and constants for the episode browser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Application identity
CONFIG_APP_NAME = "episode-browser"

RICK_AND_MORTY_API_URL = "https://rickandmortyapi.com/api"

# Key under which the favourites collection is persisted
FAVOURITES_STORAGE_KEY = "favourite_episodes"

# Request limits
DEFAULT_REQUEST_TIMEOUT_SECONDS = 20
MAX_REQUEST_TIMEOUT_SECONDS = 120
DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS = 5

# Episode detail view
DEFAULT_CHARACTERS_PER_PAGE = 4
MAX_CHARACTERS_PER_PAGE = 40

# Favourites exit transition
DEFAULT_REMOVAL_ANIMATION_SECONDS = 0.4
MAX_REMOVAL_ANIMATION_SECONDS = 5.0


class View(str, Enum):
    """The two episode lists the UI can show."""

    EPISODES = "episodes"
    FAVOURITES = "favourites"


@dataclass(frozen=True, slots=True)
class Episode:
    """An episode as returned by the catalog API. Immutable once fetched."""

    id: int
    name: str
    episode: str  # season/episode code, e.g. "S01E02"
    air_date: str
    created: str  # ISO 8601 timestamp string
    characters: tuple[str, ...] = ()  # character resource URLs, API order
    url: str = ""


@dataclass(frozen=True, slots=True)
class CatalogPage:
    """One page of the episode catalog."""

    number: int  # 1-based
    episodes: tuple[Episode, ...]
    next_cursor: int | None = None  # None when the catalog is exhausted


@dataclass(frozen=True, slots=True)
class Character:
    """A character referenced by an episode."""

    id: int
    name: str
    status: str  # "Alive" | "Dead" | "unknown"
    species: str
    type: str
    gender: str
    origin: str
    location: str
    image: str
    episode_count: int = 0


@dataclass(slots=True)
class UserConfig:
    """User preferences loaded from config.json."""

    api_base_url: str = RICK_AND_MORTY_API_URL
    request_timeout_seconds: int = DEFAULT_REQUEST_TIMEOUT_SECONDS
    connectivity_timeout_seconds: int = DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS
    characters_per_page: int = DEFAULT_CHARACTERS_PER_PAGE
    removal_animation_seconds: float = DEFAULT_REMOVAL_ANIMATION_SECONDS
    ascii_icons: bool = False
    version: int = 1


__all__ = [
    "CONFIG_APP_NAME",
    "DEFAULT_CHARACTERS_PER_PAGE",
    "DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS",
    "DEFAULT_REMOVAL_ANIMATION_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "FAVOURITES_STORAGE_KEY",
    "MAX_CHARACTERS_PER_PAGE",
    "MAX_REMOVAL_ANIMATION_SECONDS",
    "MAX_REQUEST_TIMEOUT_SECONDS",
    "RICK_AND_MORTY_API_URL",
    "CatalogPage",
    "Character",
    "Episode",
    "UserConfig",
    "View",
]
