"""Modal screens for the episode browser."""

from episode_browser.modals.detail import (
    CharacterDetailScreen,
    CharacterListItem,
    EpisodeDetailScreen,
)

__all__ = [
    "CharacterDetailScreen",
    "CharacterListItem",
    "EpisodeDetailScreen",
]
