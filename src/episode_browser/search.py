"""Episode name search."""

from __future__ import annotations

from collections.abc import Sequence

from episode_browser.models import Episode


def normalize_query(query: str) -> str:
    """Trim and casefold a search query."""
    return query.strip().casefold()


def filter_episodes(episodes: Sequence[Episode], query: str) -> list[Episode]:
    """Return episodes whose name contains query, case-insensitively.

    An empty or whitespace-only query returns every episode in input order.
    """
    needle = normalize_query(query)
    if not needle:
        return list(episodes)
    return [episode for episode in episodes if needle in episode.name.casefold()]


__all__ = [
    "filter_episodes",
    "normalize_query",
]
