"""Classify refresh results by the catalog's identifier high-water mark."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from episode_browser.models import Episode


class RefreshOutcome(str, Enum):
    NEW_CONTENT = "new_content"
    NO_NEW_CONTENT = "no_new_content"
    FAILED = "failed"
    OFFLINE = "offline"  # refused before any request was made
    SUPERSEDED = "superseded"  # a newer refresh started; this result was dropped


@dataclass(frozen=True, slots=True)
class RefreshResult:
    """Outcome of one refresh, with the marks it was judged on."""

    outcome: RefreshOutcome
    before: int | None = None
    after: int | None = None
    error: str | None = None


def freshness_mark(episodes: Iterable[Episode]) -> int | None:
    """Return the highest episode id, or None for an empty collection."""
    return max((episode.id for episode in episodes), default=None)


def classify_refresh(
    before: int | None,
    after: int | None,
    *,
    failed: bool = False,
) -> RefreshOutcome:
    """Classify a refresh from the marks taken before and after it.

    Only net-new highest ids count as new content; edits to existing
    episodes are not detected.
    """
    if failed:
        return RefreshOutcome.FAILED
    if before is None or after is None:
        return RefreshOutcome.NO_NEW_CONTENT
    if after > before:
        return RefreshOutcome.NEW_CONTENT
    return RefreshOutcome.NO_NEW_CONTENT


__all__ = [
    "RefreshOutcome",
    "RefreshResult",
    "classify_refresh",
    "freshness_mark",
]
