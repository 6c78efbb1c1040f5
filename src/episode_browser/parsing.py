"""Catalog API payload parsing, cursor extraction, and display formatting."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any
from urllib.parse import parse_qs, urlsplit

from episode_browser.models import CatalogPage, Character, Episode

logger = logging.getLogger(__name__)

# Matches: "S01E02" -> captures ("01", "02")
_EPISODE_CODE_PATTERN = re.compile(r"S(\d+)E(\d+)")
# Matches the trailing numeric id of a resource URL: ".../character/42" -> "42"
_RESOURCE_ID_PATTERN = re.compile(r"/(\d+)$")
# Matches an ASCII page number: "12"
_PAGE_NUMBER_PATTERN = re.compile(r"[0-9]+")

CREATED_DATE_FORMAT = "%B %d, %Y"


def parse_page_cursor(next_url: str | None) -> int | None:
    """Extract the next page number from an absolute next-page URL.

    A missing URL, a missing ``page`` parameter, or one that is not a positive
    integer all yield None. Callers treat None as exhaustion, so a malformed
    cursor stops pagination instead of looping.
    """
    if not next_url or not isinstance(next_url, str):
        return None
    try:
        query = parse_qs(urlsplit(next_url).query)
    except ValueError:
        logger.debug("Unparsable next-page URL %r", next_url)
        return None
    values = query.get("page")
    if not values:
        return None
    raw = values[0].strip()
    # str.isdigit() also accepts superscripts like "²", which int() rejects
    if not _PAGE_NUMBER_PATTERN.fullmatch(raw):
        logger.debug("Non-numeric page cursor %r in %r", raw, next_url)
        return None
    page = int(raw)
    return page if page >= 1 else None


def _text(data: dict[str, Any], key: str, default: str = "") -> str:
    """Return data[key] if it is a non-empty string, else default."""
    value = data.get(key)
    return value if isinstance(value, str) and value else default


def parse_episode(data: Any) -> Episode | None:
    """Parse one episode object. Returns None if the id is missing or invalid."""
    if not isinstance(data, dict):
        return None
    episode_id = data.get("id")
    if not isinstance(episode_id, int) or isinstance(episode_id, bool):
        return None
    characters_raw = data.get("characters")
    if not isinstance(characters_raw, list):
        characters_raw = []
    characters = tuple(c for c in characters_raw if isinstance(c, str))
    return Episode(
        id=episode_id,
        name=_text(data, "name"),
        episode=_text(data, "episode"),
        air_date=_text(data, "air_date"),
        created=_text(data, "created"),
        characters=characters,
        url=_text(data, "url"),
    )


def parse_catalog_page(data: Any, page_number: int) -> CatalogPage:
    """Parse an ``/episode?page=N`` response body into a CatalogPage.

    Raises:
        ValueError: If the payload is not a JSON object.
    """
    if not isinstance(data, dict):
        raise ValueError("Episode page payload is not a JSON object")
    info = data.get("info")
    next_url = info.get("next") if isinstance(info, dict) else None
    results = data.get("results") or []
    if not isinstance(results, list):
        results = []

    episodes: list[Episode] = []
    for raw in results:
        episode = parse_episode(raw)
        if episode is None:
            logger.debug("Skipping malformed episode entry on page %d", page_number)
            continue
        episodes.append(episode)

    next_cursor = parse_page_cursor(next_url)
    if next_cursor is not None and next_cursor <= page_number:
        logger.warning(
            "Page %d points back to page %d, treating as end of catalog",
            page_number,
            next_cursor,
        )
        next_cursor = None

    return CatalogPage(
        number=page_number,
        episodes=tuple(episodes),
        next_cursor=next_cursor,
    )


def _nested_name(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if isinstance(value, dict):
        return _text(value, "name")
    return ""


def parse_character(data: Any) -> Character | None:
    """Parse one character object. Returns None if essential fields are missing."""
    if not isinstance(data, dict):
        return None
    character_id = data.get("id")
    if not isinstance(character_id, int) or isinstance(character_id, bool):
        return None
    episodes = data.get("episode")
    return Character(
        id=character_id,
        name=_text(data, "name"),
        status=_text(data, "status", "unknown"),
        species=_text(data, "species"),
        type=_text(data, "type"),
        gender=_text(data, "gender"),
        origin=_nested_name(data, "origin"),
        location=_nested_name(data, "location"),
        image=_text(data, "image"),
        episode_count=len(episodes) if isinstance(episodes, list) else 0,
    )


def parse_characters_payload(data: Any) -> list[Character]:
    """Normalize a character batch response to a list.

    The API answers ``/character/3`` with a single object and
    ``/character/3,4`` with an array; both become a list here.
    """
    if isinstance(data, dict):
        items: list[Any] = [data]
    elif isinstance(data, list):
        items = data
    else:
        return []
    characters = [parse_character(item) for item in items]
    return [c for c in characters if c is not None]


def character_ids_from_urls(urls: Iterable[str]) -> list[int]:
    """Extract unique character ids from resource URLs, first-seen order."""
    ids: list[int] = []
    seen: set[int] = set()
    for url in urls:
        match = _RESOURCE_ID_PATTERN.search(url.rstrip("/")) if isinstance(url, str) else None
        if not match:
            continue
        character_id = int(match.group(1))
        if character_id in seen:
            continue
        seen.add(character_id)
        ids.append(character_id)
    return ids


def split_episode_code(code: str) -> tuple[str, str]:
    """Split "S01E02" into zero-padded ("01", "02"). Defaults to ("01", "01")."""
    match = _EPISODE_CODE_PATTERN.search(code or "")
    if not match:
        return ("01", "01")
    return (match.group(1).zfill(2), match.group(2).zfill(2))


def format_created_date(created: str) -> str:
    """Format an ISO timestamp as "November 10, 2017". Falls back to the raw value."""
    if not created:
        return ""
    try:
        parsed = datetime.fromisoformat(created)
    except ValueError:
        return created
    return parsed.strftime(CREATED_DATE_FORMAT)


__all__ = [
    "CREATED_DATE_FORMAT",
    "character_ids_from_urls",
    "format_created_date",
    "parse_catalog_page",
    "parse_character",
    "parse_characters_payload",
    "parse_episode",
    "parse_page_cursor",
    "split_episode_code",
]
