"""Durable key-value storage for small on-device blobs (favourites, etc.)."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from platformdirs import user_data_dir

from episode_browser.errors import StorageReadError
from episode_browser.models import CONFIG_APP_NAME

logger = logging.getLogger(__name__)

# Keys map directly to file names, so keep them to a safe alphabet.
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,100}$")


@runtime_checkable
class KeyValueStore(Protocol):
    """Interface for the durable key-value store."""

    def read(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if the key was never written."""
        ...

    def write(self, key: str, data: bytes) -> None:
        """Replace the value stored under key."""
        ...


def get_data_dir() -> Path:
    """Get the per-user data directory.

    Uses platformdirs for cross-platform paths:
    - Linux: ~/.local/share/episode-browser
    - macOS: ~/Library/Application Support/episode-browser
    - Windows: %LOCALAPPDATA%/episode-browser
    """
    return Path(user_data_dir(CONFIG_APP_NAME))


def atomic_write(path: Path, data: bytes, *, prefix: str) -> None:
    """Replace path with data via a sibling tempfile and os.replace().

    Creates the parent directory if needed. The temp file is removed on
    any failure.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix=prefix)
    closed = False
    try:
        os.write(fd, data)
        os.close(fd)
        closed = True
        os.replace(tmp_path, path)
    except BaseException:
        if not closed:
            os.close(fd)
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def _validate_key(key: str) -> str:
    if not _KEY_PATTERN.match(key) or key.startswith("."):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class FileKeyValueStore:
    """One file per key under a directory, written atomically."""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root if root is not None else get_data_dir()

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        return self._root / f"{_validate_key(key)}.json"

    def read(self, key: str) -> bytes | None:
        """Read a value.

        Raises:
            StorageReadError: If the file exists but cannot be read.
        """
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageReadError(f"Could not read {path}: {exc}") from exc

    def write(self, key: str, data: bytes) -> None:
        """Write a value atomically.

        Uses write-to-tempfile + os.replace() so a crash mid-write never
        leaves a truncated file behind.

        Raises:
            OSError: If the directory or file cannot be written.
        """
        path = self.path_for(key)
        atomic_write(path, data, prefix=f".{key}-")
        logger.debug("Wrote %d bytes to %s", len(data), path)


__all__ = [
    "FileKeyValueStore",
    "KeyValueStore",
    "atomic_write",
    "get_data_dir",
]
