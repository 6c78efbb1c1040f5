"""Pending-removal bookkeeping for the favourites view.

When a favourite is switched off while the favourites view shows it, the row
must stay on screen until its exit transition finishes. The reconciler keeps
such ids in a pending set, independent of the favourites store, and drops them
only when the UI reports that the transition completed.

States per episode id::

    FAVOURITED --unfavourite while visible--> PENDING_REMOVAL --complete--> GONE
         ^                                          |
         +-------------- refavourite ---------------+

Each pending lifecycle gets a ticket. A completion signal for an older ticket
(an animation started before a refavourite/unfavourite round trip) is ignored.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable
from enum import Enum

from episode_browser.favourites import FavouritesStore
from episode_browser.models import Episode

logger = logging.getLogger(__name__)


class RemovalState(str, Enum):
    FAVOURITED = "favourited"
    PENDING_REMOVAL = "pending_removal"
    GONE = "gone"


class RemovalReconciler:
    """Tracks favourites that are leaving the favourites view."""

    def __init__(self, favourites: FavouritesStore) -> None:
        self._favourites = favourites
        self._pending: dict[int, int] = {}  # episode_id -> ticket
        self._tickets = itertools.count(1)

    @property
    def pending_ids(self) -> frozenset[int]:
        return frozenset(self._pending)

    def ticket_for(self, episode_id: int) -> int | None:
        """Return the ticket of the outstanding removal for episode_id, if any."""
        return self._pending.get(episode_id)

    def state_of(self, episode_id: int) -> RemovalState:
        if episode_id in self._pending:
            return RemovalState.PENDING_REMOVAL
        if self._favourites.is_favourite(episode_id):
            return RemovalState.FAVOURITED
        return RemovalState.GONE

    def toggle(self, episode_id: int, *, visible: bool) -> bool:
        """Toggle a favourite and update pending state. Returns the new membership.

        ``visible`` says whether the favourites view currently shows the episode;
        only then does switching it off start a pending removal.
        """
        was_favourite = self._favourites.is_favourite(episode_id)
        is_favourite = self._favourites.toggle(episode_id)
        if is_favourite:
            if self._pending.pop(episode_id, None) is not None:
                logger.debug("Cancelled pending removal of episode %d", episode_id)
        elif was_favourite and visible:
            ticket = next(self._tickets)
            self._pending[episode_id] = ticket
            logger.debug("Episode %d pending removal (ticket %d)", episode_id, ticket)
        return is_favourite

    def complete(self, episode_id: int, ticket: int | None = None) -> bool:
        """Handle an exit-transition completion signal.

        Returns True if a pending removal ended. Signals for ids that are not
        pending, or whose ticket does not match, are ignored.
        """
        current = self._pending.get(episode_id)
        if current is None:
            return False
        if ticket is not None and ticket != current:
            logger.debug(
                "Ignoring stale completion for episode %d (ticket %d, current %d)",
                episode_id,
                ticket,
                current,
            )
            return False
        del self._pending[episode_id]
        return True

    def sync(self) -> None:
        """Drop pending entries whose episode is a favourite again (e.g. after reload)."""
        for episode_id in [i for i in self._pending if self._favourites.is_favourite(i)]:
            del self._pending[episode_id]

    def is_rendered_as_favourite(self, episode_id: int) -> bool:
        """Favourite indicator for a row: on only for settled favourites."""
        return episode_id not in self._pending and self._favourites.is_favourite(episode_id)

    def visible_ids(self) -> frozenset[int]:
        return self._favourites.ids.union(self._pending)

    def project(self, episodes: Iterable[Episode]) -> list[Episode]:
        """Favourites-view rows: catalog episodes that are favourite or pending, catalog order."""
        visible = self.visible_ids()
        return [episode for episode in episodes if episode.id in visible]


__all__ = [
    "RemovalReconciler",
    "RemovalState",
]
