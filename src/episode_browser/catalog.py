"""Page accumulation and cursor bookkeeping for the episode catalog.

CatalogCache owns the ordered list of fetched pages and derives the flattened
episode collection from it. It performs no I/O: the engine fetches pages and
hands them over, checking the generation counter first so that results of
requests superseded by a refresh are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from episode_browser.errors import Exhausted, OutOfOrderPage
from episode_browser.models import CatalogPage, Episode

logger = logging.getLogger(__name__)

FIRST_PAGE = 1


def flatten_pages(pages: Iterable[CatalogPage]) -> tuple[Episode, ...]:
    """Concatenate pages in order, dropping repeated ids (first occurrence wins)."""
    seen: set[int] = set()
    episodes: list[Episode] = []
    for page in pages:
        for episode in page.episodes:
            if episode.id in seen:
                continue
            seen.add(episode.id)
            episodes.append(episode)
    return tuple(episodes)


@dataclass(frozen=True, slots=True)
class CatalogState:
    """Snapshot of the catalog. ``episodes`` is always derived from ``pages``."""

    pages: tuple[CatalogPage, ...] = ()
    loading: bool = False
    error: str | None = None
    episodes: tuple[Episode, ...] = field(init=False, default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "episodes", flatten_pages(self.pages))

    @property
    def last_page(self) -> CatalogPage | None:
        return self.pages[-1] if self.pages else None

    @property
    def is_empty(self) -> bool:
        return not self.episodes


class CatalogCache:
    """Accumulates catalog pages into a deduplicated episode collection."""

    def __init__(self) -> None:
        self._state = CatalogState()
        self._generation = 0

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def episodes(self) -> tuple[Episode, ...]:
        return self._state.episodes

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> int:
        """Start a new generation; results of older requests become stale."""
        self._generation += 1
        logger.debug("Catalog generation advanced to %d", self._generation)
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def append_page(self, page: CatalogPage) -> None:
        """Append the page following the last one.

        Re-appending a held page with identical content is a no-op.

        Raises:
            OutOfOrderPage: If ``page.number`` is neither last + 1 nor a held
                page with the same content.
        """
        pages = self._state.pages
        expected = len(pages) + 1
        if page.number < FIRST_PAGE or page.number > expected:
            raise OutOfOrderPage(expected=expected, received=page.number)

        if page.number < expected:
            if pages[page.number - 1] != page:
                raise OutOfOrderPage(expected=expected, received=page.number)
            logger.debug("Catalog page %d already held", page.number)
            return

        self._state = replace(self._state, pages=(*pages, page))

    def reset(self) -> None:
        """Drop all pages. Only used when applying a refresh result."""
        self._state = replace(self._state, pages=())

    @staticmethod
    def _advances(page: CatalogPage) -> bool:
        return page.next_cursor is not None and page.next_cursor > page.number

    def has_more(self) -> bool:
        """Return True if another page can be requested.

        An empty cache has more: its next cursor is the first page. A cursor
        that does not point past the last page counts as exhausted.
        """
        last = self._state.last_page
        if last is None:
            return True
        return self._advances(last)

    def next_cursor(self) -> int:
        """Return the page number to request next.

        Raises:
            Exhausted: If the last page carried no forward cursor.
        """
        last = self._state.last_page
        if last is None:
            return FIRST_PAGE
        cursor = last.next_cursor
        if cursor is None or cursor <= last.number:
            raise Exhausted("No more pages")
        return cursor

    def set_loading(self, loading: bool) -> None:
        if self._state.loading != loading:
            self._state = replace(self._state, loading=loading)

    def set_error(self, error: str | None) -> None:
        if self._state.error != error:
            self._state = replace(self._state, error=error)


__all__ = [
    "FIRST_PAGE",
    "CatalogCache",
    "CatalogState",
    "flatten_pages",
]
