"""Exception taxonomy shared by the catalog engine and its collaborators."""

from __future__ import annotations


class EpisodeBrowserError(Exception):
    """Base class for all episode browser errors."""


class NetworkError(EpisodeBrowserError):
    """A remote request failed. Transient; cached pages are never cleared."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OutOfOrderPage(EpisodeBrowserError):
    """A page was appended whose number does not follow the last known page."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(f"Expected page {expected}, received page {received}")
        self.expected = expected
        self.received = received


class Exhausted(EpisodeBrowserError):
    """Pagination reached its end. A normal terminal state, not a failure."""


class StorageReadError(EpisodeBrowserError):
    """Persisted data exists but could not be read."""


__all__ = [
    "EpisodeBrowserError",
    "Exhausted",
    "NetworkError",
    "OutOfOrderPage",
    "StorageReadError",
]
