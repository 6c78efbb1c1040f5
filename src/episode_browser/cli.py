"""CLI/bootstrap helpers for the episode browser application."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from episode_browser.action_messages import build_actionable_error
from episode_browser.config import load_config
from episode_browser.favourites import FavouritesStore
from episode_browser.models import CONFIG_APP_NAME, UserConfig
from episode_browser.storage import FileKeyValueStore

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # The TUI owns the terminal, so nothing may reach stderr.
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / "debug.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _configure_color_mode(color_mode: str) -> None:
    """Set environment hints for terminal color behavior."""
    if color_mode == "never":
        os.environ["NO_COLOR"] = "1"
        os.environ.pop("FORCE_COLOR", None)
    elif color_mode == "always":
        os.environ["FORCE_COLOR"] = "1"
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ.pop("FORCE_COLOR", None)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _build_favourites_store() -> FavouritesStore:
    return FavouritesStore(FileKeyValueStore())


def _list_favourites(store: FavouritesStore) -> int:
    ids = sorted(store.load())
    if not ids:
        print("No favourite episodes saved.")
        return 0
    print(f"Favourite episodes ({len(ids)}):")
    for episode_id in ids:
        print(f"  {episode_id}")
    return 0


def _clear_favourites(store: FavouritesStore) -> int:
    store.load()
    count = len(store)
    if not store.clear():
        print(
            build_actionable_error(
                "clear favourites",
                why="the favourites file could not be written",
                next_step="check permissions on the data directory and retry",
            ),
            file=sys.stderr,
        )
        return 1
    print(f"Cleared {count} favourite episode{'s' if count != 1 else ''}.")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse Rick and Morty episodes and keep a list of favourites"
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        help="Base URL of the episode API (default: config value)",
    )
    parser.add_argument(
        "--list-favourites",
        action="store_true",
        help="Print saved favourite episode ids and exit",
    )
    parser.add_argument(
        "--clear-favourites",
        action="store_true",
        help="Remove all saved favourites and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/episode-browser/debug.log)",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Color output mode for terminal UI (default: auto)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable terminal colors (equivalent to --color never)",
    )
    parser.add_argument(
        "--ascii",
        action="store_true",
        help="Use ASCII-only icons for compatibility with limited terminals",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    favourites_factory: Callable[[], FavouritesStore] = _build_favourites_store,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    configure_color_mode_fn: Callable[[str], None] = _configure_color_mode,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.list_favourites and args.clear_favourites:
        print(
            "Error: --list-favourites cannot be combined with --clear-favourites",
            file=sys.stderr,
        )
        return 1

    color_mode = "never" if args.no_color else args.color
    configure_color_mode_fn(color_mode)
    configure_logging_fn(args.debug)
    logger.debug("episode-browser starting, argv=%s", argv)

    config = load_config_fn()
    if args.api_url:
        api_url = args.api_url.strip().rstrip("/")
        if not api_url.startswith(("http://", "https://")):
            print(
                build_actionable_error(
                    "use the given API URL",
                    why=f"{args.api_url!r} is not an http(s) URL",
                    next_step="pass a URL such as https://rickandmortyapi.com/api",
                ),
                file=sys.stderr,
            )
            return 1
        config.api_base_url = api_url
    if args.ascii:
        config.ascii_icons = True

    if args.list_favourites:
        return _list_favourites(favourites_factory())
    if args.clear_favourites:
        return _clear_favourites(favourites_factory())

    if not validate_interactive_tty_fn():
        print(
            "Error: episode-browser requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run episode-browser directly in a terminal session", file=sys.stderr)
        print("  - Use --list-favourites for non-interactive output", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    if app_factory is None:
        from episode_browser.app import EpisodeBrowser as _EpisodeBrowser

        app_factory = _EpisodeBrowser

    app = app_factory(config=config, favourites=favourites_factory())
    app.run()
    return 0


__all__ = [
    "_configure_color_mode",
    "_configure_logging",
    "_validate_interactive_tty",
    "main",
]
