"""Persisted favourite-episode membership."""

from __future__ import annotations

import json
import logging

from episode_browser.errors import StorageReadError
from episode_browser.models import FAVOURITES_STORAGE_KEY
from episode_browser.storage import KeyValueStore

logger = logging.getLogger(__name__)


def _decode_ids(raw: bytes) -> set[int]:
    """Decode the persisted JSON array of ids. Non-integer entries are dropped.

    Raises:
        ValueError: If the payload is not a JSON array.
    """
    data = json.loads(raw.decode("utf-8"))
    if not isinstance(data, list):
        raise ValueError("Favourites payload is not a JSON array")
    return {item for item in data if isinstance(item, int) and not isinstance(item, bool)}


def _encode_ids(ids: set[int]) -> bytes:
    return json.dumps(sorted(ids)).encode("utf-8")


class FavouritesStore:
    """Set of favourite episode ids, backed by a key-value store.

    The in-memory set is authoritative: ``toggle`` updates it before writing,
    so ``is_favourite`` is consistent immediately. Every mutation writes the
    whole collection; the set is bounded by the catalog size.
    """

    def __init__(self, storage: KeyValueStore, key: str = FAVOURITES_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._ids: set[int] = set()

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, episode_id: object) -> bool:
        return episode_id in self._ids

    def load(self) -> frozenset[int]:
        """Read persisted ids into memory. Missing or corrupt data yields an empty set."""
        try:
            raw = self._storage.read(self._key)
        except StorageReadError as exc:
            logger.warning("Could not read favourites, starting empty: %s", exc)
            self._ids = set()
            return self.ids
        if raw is None:
            self._ids = set()
            return self.ids
        try:
            self._ids = _decode_ids(raw)
        except (UnicodeDecodeError, ValueError) as exc:
            logger.warning("Favourites data is corrupt, starting empty: %s", exc)
            self._ids = set()
        return self.ids

    def reload(self) -> frozenset[int]:
        """Re-read persisted ids, discarding in-memory state."""
        return self.load()

    def is_favourite(self, episode_id: int) -> bool:
        return episode_id in self._ids

    def toggle(self, episode_id: int) -> bool:
        """Flip membership of episode_id, persist, and return the new membership."""
        if episode_id in self._ids:
            self._ids.discard(episode_id)
            is_favourite = False
        else:
            self._ids.add(episode_id)
            is_favourite = True
        self._persist()
        return is_favourite

    def clear(self) -> bool:
        """Remove every favourite and persist the empty set. Returns write success."""
        self._ids = set()
        return self._persist()

    def _persist(self) -> bool:
        try:
            self._storage.write(self._key, _encode_ids(self._ids))
        except (OSError, ValueError) as exc:
            logger.error("Failed to save favourites: %s", exc)
            return False
        return True


__all__ = [
    "FavouritesStore",
]
