"""Shared test fixtures for Episode Browser tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from episode_browser.errors import StorageReadError
from episode_browser.favourites import FavouritesStore
from episode_browser.models import CatalogPage, Character, Episode
from episode_browser.services.interfaces import AppServices
from episode_browser.themes import DEFAULT_THEME, THEME_COLORS
from episode_browser.widgets.listing import set_ascii_icons

# ── Module-level state isolation ─────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Restore THEME_COLORS and the icon set after each test.

    EpisodeBrowser.__init__ switches the module-level icon set; without this
    fixture an --ascii test would leak into later rendering tests.
    """
    yield
    THEME_COLORS.clear()
    THEME_COLORS.update(DEFAULT_THEME)
    set_ascii_icons(False)


# ── Fakes ────────────────────────────────────────────────────────────────────


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore with switchable failures."""

    def __init__(self, data: dict[str, bytes] | None = None) -> None:
        self.data: dict[str, bytes] = dict(data or {})
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def read(self, key: str) -> bytes | None:
        if self.fail_reads:
            raise StorageReadError(f"cannot read {key}")
        return self.data.get(key)

    def write(self, key: str, data: bytes) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.data[key] = data
        self.writes += 1


# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_episode():
    """Factory fixture for creating Episode instances with sensible defaults."""

    def _make(
        episode_id: int = 1,
        name: str | None = None,
        episode: str | None = None,
        air_date: str = "December 2, 2013",
        created: str = "2017-11-10T12:56:33.798Z",
        characters: tuple[str, ...] = (),
    ) -> Episode:
        return Episode(
            id=episode_id,
            name=name if name is not None else f"Episode {episode_id}",
            episode=episode if episode is not None else f"S01E{episode_id:02d}",
            air_date=air_date,
            created=created,
            characters=characters,
            url=f"https://rickandmortyapi.com/api/episode/{episode_id}",
        )

    return _make


@pytest.fixture
def make_page(make_episode):
    """Factory fixture for CatalogPage: ``make_page(2, [3, 4], next_cursor=3)``."""

    def _make(
        number: int,
        ids: list[int],
        *,
        next_cursor: int | None = None,
        names: dict[int, str] | None = None,
    ) -> CatalogPage:
        names = names or {}
        return CatalogPage(
            number=number,
            episodes=tuple(make_episode(i, name=names.get(i)) for i in ids),
            next_cursor=next_cursor,
        )

    return _make


@pytest.fixture
def make_character():
    """Factory fixture for Character instances."""

    def _make(
        character_id: int = 1,
        name: str = "Rick Sanchez",
        status: str = "Alive",
        episode_count: int = 51,
    ) -> Character:
        return Character(
            id=character_id,
            name=name,
            status=status,
            species="Human",
            type="",
            gender="Male",
            origin="Earth (C-137)",
            location="Citadel of Ricks",
            image=f"https://rickandmortyapi.com/api/character/avatar/{character_id}.jpeg",
            episode_count=episode_count,
        )

    return _make


@pytest.fixture
def memory_storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def favourites(memory_storage) -> FavouritesStore:
    store = FavouritesStore(memory_storage)
    store.load()
    return store


@pytest.fixture
def fake_services() -> AppServices:
    """AppServices with AsyncMock collaborators; connectivity defaults to online."""
    episode_api = AsyncMock()
    episode_api.fetch_characters.return_value = []
    connectivity = AsyncMock()
    connectivity.is_connected.return_value = True
    return AppServices(episode_api=episode_api, connectivity=connectivity)
