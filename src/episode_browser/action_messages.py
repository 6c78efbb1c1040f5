"""UI-facing copy builders for notifications, headers and list footers."""

from __future__ import annotations

from dataclasses import dataclass

from episode_browser.freshness import RefreshOutcome, RefreshResult


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_actionable_warning(
    message: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable warning message."""
    lines = [_ensure_sentence(message)]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class Notice:
    """A toast: title, body and Textual severity."""

    title: str
    message: str
    severity: str = "information"


def build_refresh_notice(result: RefreshResult) -> Notice | None:
    """Map a refresh result to the toast shown for it.

    Superseded refreshes produce no toast; the newer one reports instead.
    """
    outcome = result.outcome
    if outcome is RefreshOutcome.OFFLINE:
        return Notice("No connection", "Connect to the internet to refresh.", "warning")
    if outcome is RefreshOutcome.FAILED:
        return Notice(
            "Refresh failed",
            build_actionable_error(
                "refresh episodes",
                why=result.error,
                next_step="check your connection and press r to try again",
            ),
            "error",
        )
    if outcome is RefreshOutcome.NEW_CONTENT:
        return Notice("Updated", "New episodes loaded!")
    if outcome is RefreshOutcome.NO_NEW_CONTENT:
        return Notice("No new content", "You're already on the latest episodes.")
    return None


def build_load_error_message(error: str) -> str:
    """Inline copy for a failed page load."""
    return build_actionable_error(
        "load episodes",
        why=error,
        next_step="press n to retry",
    )


def build_blocked_message(error: str | None) -> str:
    """Inline copy when paging stopped on an unexpected page."""
    return build_actionable_warning(
        "Episode list is out of sync",
        why=error,
        next_step="press r to refresh",
    )


def build_favourites_header(count: int) -> str:
    """Build the favourites view header, e.g. ``3 episodes``."""
    return f"{count} episode{'s' if count != 1 else ''}"


def build_episodes_footer(*, loading: bool, has_more: bool) -> str:
    """Build the footer line under the all-episodes list."""
    if loading:
        return "Loading more episodes..."
    if has_more:
        return "Load more (n)"
    return "No more episodes"


def build_no_results_message(query: str) -> str:
    """Empty-list copy when a search matches nothing."""
    return f'No episodes match "{query.strip()}".'


FAVOURITES_EMPTY_TITLE = "No Favourites Yet"
FAVOURITES_EMPTY_HINT = "Press f on an episode to add it to your favourites."


__all__ = [
    "FAVOURITES_EMPTY_HINT",
    "FAVOURITES_EMPTY_TITLE",
    "Notice",
    "build_actionable_error",
    "build_actionable_warning",
    "build_blocked_message",
    "build_episodes_footer",
    "build_favourites_header",
    "build_load_error_message",
    "build_next_step_hint",
    "build_no_results_message",
    "build_refresh_notice",
]
