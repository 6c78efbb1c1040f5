"""Tests for notification, header and footer copy."""

from __future__ import annotations

import pytest

from episode_browser.action_messages import (
    build_actionable_error,
    build_actionable_warning,
    build_blocked_message,
    build_episodes_footer,
    build_favourites_header,
    build_load_error_message,
    build_no_results_message,
    build_refresh_notice,
)
from episode_browser.freshness import RefreshOutcome, RefreshResult


class TestActionableCopy:
    def test_error_with_reason(self):
        message = build_actionable_error("load episodes", why="timeout", next_step="press n")
        assert message.splitlines() == [
            "Could not load episodes.",
            "Why: timeout.",
            "Next step: press n.",
        ]

    def test_error_without_reason_is_two_lines(self):
        message = build_actionable_error("save", next_step="retry later!")
        assert message.splitlines() == ["Could not save.", "Next step: retry later!"]

    def test_warning_keeps_existing_punctuation(self):
        message = build_actionable_warning("Out of sync.", next_step="refresh")
        assert message.splitlines()[0] == "Out of sync."

    def test_load_error_mentions_retry_key(self):
        assert "press n to retry" in build_load_error_message("HTTP 500")

    def test_blocked_message_mentions_refresh_key(self):
        message = build_blocked_message("Expected page 2, received page 3")
        assert message.startswith("Episode list is out of sync.")
        assert "press r to refresh" in message


class TestRefreshNotice:
    def test_offline(self):
        notice = build_refresh_notice(RefreshResult(RefreshOutcome.OFFLINE))
        assert notice.title == "No connection"
        assert notice.severity == "warning"

    def test_new_content(self):
        notice = build_refresh_notice(RefreshResult(RefreshOutcome.NEW_CONTENT, before=5, after=8))
        assert (notice.title, notice.message) == ("Updated", "New episodes loaded!")
        assert notice.severity == "information"

    def test_no_new_content(self):
        notice = build_refresh_notice(RefreshResult(RefreshOutcome.NO_NEW_CONTENT, 5, 5))
        assert notice.title == "No new content"

    def test_failed_includes_reason(self):
        notice = build_refresh_notice(RefreshResult(RefreshOutcome.FAILED, error="HTTP 502"))
        assert notice.severity == "error"
        assert "Why: HTTP 502." in notice.message

    def test_superseded_is_silent(self):
        assert build_refresh_notice(RefreshResult(RefreshOutcome.SUPERSEDED)) is None


class TestListChrome:
    @pytest.mark.parametrize(
        ("count", "expected"), [(0, "0 episodes"), (1, "1 episode"), (7, "7 episodes")]
    )
    def test_favourites_header(self, count, expected):
        assert build_favourites_header(count) == expected

    @pytest.mark.parametrize(
        ("loading", "has_more", "expected"),
        [
            (True, True, "Loading more episodes..."),
            (True, False, "Loading more episodes..."),
            (False, True, "Load more (n)"),
            (False, False, "No more episodes"),
        ],
    )
    def test_episodes_footer(self, loading, has_more, expected):
        assert build_episodes_footer(loading=loading, has_more=has_more) == expected

    def test_no_results_message_trims_query(self):
        assert build_no_results_message("  dog ") == 'No episodes match "dog".'
