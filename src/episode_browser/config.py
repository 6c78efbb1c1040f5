"""Configuration persistence: load and save user preferences."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from episode_browser.models import (
    CONFIG_APP_NAME,
    DEFAULT_CHARACTERS_PER_PAGE,
    DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS,
    DEFAULT_REMOVAL_ANIMATION_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    MAX_CHARACTERS_PER_PAGE,
    MAX_REMOVAL_ANIMATION_SECONDS,
    MAX_REQUEST_TIMEOUT_SECONDS,
    RICK_AND_MORTY_API_URL,
    UserConfig,
)
from episode_browser.storage import atomic_write

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# _dict_to_config() returns a valid UserConfig for any input:
#
#   Field                         Rule                     Handler
#   ────────────────────────────  ───────────────────────  ─────────────
#   request_timeout_seconds       1 ≤ x ≤ 120              _clamp_int
#   connectivity_timeout_seconds  1 ≤ x ≤ 120              _clamp_int
#   characters_per_page           1 ≤ x ≤ 40               _clamp_int
#   removal_animation_seconds     0.0 ≤ x ≤ 5.0            _clamp_float
#   api_base_url                  non-empty http(s) URL    _parse_base_url
#   scalar fields                 type-checked             _safe_get
#
CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/episode-browser/config.json
    - macOS: ~/Library/Application Support/episode-browser/config.json
    - Windows: %APPDATA%/episode-browser/config.json
    """
    return Path(user_config_dir(CONFIG_APP_NAME)) / CONFIG_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "api_base_url": config.api_base_url,
        "request_timeout_seconds": config.request_timeout_seconds,
        "connectivity_timeout_seconds": config.connectivity_timeout_seconds,
        "characters_per_page": config.characters_per_page,
        "removal_animation_seconds": config.removal_animation_seconds,
        "ascii_icons": config.ascii_icons,
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type | tuple[type, ...]) -> Any:
    """Get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type. Booleans
    never pass as numbers.
    """
    value = data.get(key, default)
    if isinstance(value, bool) and expected_type is not bool:
        return default
    if not isinstance(value, expected_type):
        return default
    return value


def _clamp_int(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _clamp_float(value: float, low: float, high: float) -> float:
    return float(max(low, min(value, high)))


def _parse_base_url(raw: str) -> str:
    url = raw.strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        logger.warning("Ignoring invalid api_base_url %r", raw)
        return RICK_AND_MORTY_API_URL
    return url


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Build a UserConfig from parsed JSON, falling back per field."""
    if not isinstance(data, dict):
        raise TypeError(f"Config root must be an object, got {type(data).__name__}")
    return UserConfig(
        api_base_url=_parse_base_url(
            _safe_get(data, "api_base_url", RICK_AND_MORTY_API_URL, str)
        ),
        request_timeout_seconds=_clamp_int(
            _safe_get(data, "request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS, int),
            1,
            MAX_REQUEST_TIMEOUT_SECONDS,
        ),
        connectivity_timeout_seconds=_clamp_int(
            _safe_get(
                data, "connectivity_timeout_seconds", DEFAULT_CONNECTIVITY_TIMEOUT_SECONDS, int
            ),
            1,
            MAX_REQUEST_TIMEOUT_SECONDS,
        ),
        characters_per_page=_clamp_int(
            _safe_get(data, "characters_per_page", DEFAULT_CHARACTERS_PER_PAGE, int),
            1,
            MAX_CHARACTERS_PER_PAGE,
        ),
        removal_animation_seconds=_clamp_float(
            _safe_get(
                data,
                "removal_animation_seconds",
                DEFAULT_REMOVAL_ANIMATION_SECONDS,
                (int, float),
            ),
            0.0,
            MAX_REMOVAL_ANIMATION_SECONDS,
        ),
        ascii_icons=_safe_get(data, "ascii_icons", False, bool),
        version=_safe_get(data, "version", 1, int),
    )


def load_config(path: Path | None = None) -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    Logs specific errors to help diagnose config issues.
    """
    config_path = path if path is not None else get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return _dict_to_config(data)
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return UserConfig()
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Config file has invalid structure, using defaults: %s", e)
        return UserConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()


def save_config(config: UserConfig, path: Path | None = None) -> bool:
    """Save configuration to disk atomically.

    Returns True on success, False on failure.
    """
    config_path = path if path is not None else get_config_path()
    json_str = json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False)
    try:
        atomic_write(config_path, json_str.encode("utf-8"), prefix=".config-")
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False
    return True


__all__ = [
    "CONFIG_FILENAME",
    "get_config_path",
    "load_config",
    "save_config",
]
