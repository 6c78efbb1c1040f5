"""Tests for CatalogCache page accumulation and cursor bookkeeping."""

from __future__ import annotations

import pytest

from episode_browser.catalog import FIRST_PAGE, CatalogCache, CatalogState, flatten_pages
from episode_browser.errors import Exhausted, OutOfOrderPage


def _ids(cache: CatalogCache) -> list[int]:
    return [episode.id for episode in cache.episodes]


class TestFlattenPages:
    def test_concatenates_in_page_order(self, make_page):
        pages = [make_page(1, [1, 2]), make_page(2, [3, 4])]
        assert [e.id for e in flatten_pages(pages)] == [1, 2, 3, 4]

    def test_first_occurrence_wins(self, make_page):
        pages = [
            make_page(1, [1, 2], names={2: "Original"}),
            make_page(2, [2, 3], names={2: "Duplicate"}),
        ]
        flattened = flatten_pages(pages)
        assert [e.id for e in flattened] == [1, 2, 3]
        assert flattened[1].name == "Original"

    def test_state_derives_episodes_from_pages(self, make_page):
        state = CatalogState(pages=(make_page(1, [5, 6]),))
        assert [e.id for e in state.episodes] == [5, 6]
        assert state.last_page.number == 1
        assert not state.is_empty


class TestAppendPage:
    def test_empty_cache_accepts_first_page(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1, 2], next_cursor=2))
        assert _ids(cache) == [1, 2]

    def test_appends_consecutive_pages(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1, 2], next_cursor=2))
        cache.append_page(make_page(2, [3], next_cursor=None))
        assert _ids(cache) == [1, 2, 3]
        assert [p.number for p in cache.state.pages] == [1, 2]

    def test_gap_raises_out_of_order(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1], next_cursor=2))
        with pytest.raises(OutOfOrderPage) as excinfo:
            cache.append_page(make_page(3, [5]))
        assert excinfo.value.expected == 2
        assert excinfo.value.received == 3
        assert _ids(cache) == [1]

    def test_first_append_must_be_page_one(self, make_page):
        cache = CatalogCache()
        with pytest.raises(OutOfOrderPage):
            cache.append_page(make_page(2, [3]))

    def test_page_zero_rejected(self, make_page):
        cache = CatalogCache()
        with pytest.raises(OutOfOrderPage):
            cache.append_page(make_page(0, [1]))

    def test_same_page_twice_is_idempotent(self, make_page):
        cache = CatalogCache()
        page = make_page(1, [1, 2], next_cursor=2)
        cache.append_page(page)
        once = cache.episodes
        cache.append_page(page)
        assert cache.episodes == once
        assert len(cache.state.pages) == 1

    def test_held_page_with_different_content_raises(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1, 2], next_cursor=2))
        cache.append_page(make_page(2, [3, 4], next_cursor=3))
        before = cache.state
        with pytest.raises(OutOfOrderPage) as excinfo:
            cache.append_page(make_page(1, [1, 9], next_cursor=2))
        assert excinfo.value.expected == 3
        assert excinfo.value.received == 1
        assert cache.state is before
        assert _ids(cache) == [1, 2, 3, 4]

    def test_held_page_with_changed_cursor_raises(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1, 2], next_cursor=2))
        with pytest.raises(OutOfOrderPage):
            cache.append_page(make_page(1, [1, 2], next_cursor=None))
        assert cache.next_cursor() == 2

    def test_duplicate_ids_across_pages_kept_once(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1, 2], next_cursor=2))
        cache.append_page(make_page(2, [2, 3], next_cursor=None))
        assert _ids(cache) == [1, 2, 3]


class TestCursor:
    def test_empty_cache_has_more_and_starts_at_first_page(self):
        cache = CatalogCache()
        assert cache.has_more()
        assert cache.next_cursor() == FIRST_PAGE

    def test_next_cursor_follows_last_page(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1], next_cursor=2))
        assert cache.has_more()
        assert cache.next_cursor() == 2

    def test_exhausted_without_cursor(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1], next_cursor=None))
        assert not cache.has_more()
        with pytest.raises(Exhausted):
            cache.next_cursor()

    @pytest.mark.parametrize("cursor", [1, 2])
    def test_cursor_not_past_last_page_is_exhausted(self, make_page, cursor):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1], next_cursor=2))
        cache.append_page(make_page(2, [2], next_cursor=cursor))
        assert not cache.has_more()
        with pytest.raises(Exhausted):
            cache.next_cursor()


class TestGenerationAndReset:
    def test_invalidate_bumps_generation(self):
        cache = CatalogCache()
        before = cache.generation
        token = cache.invalidate()
        assert token == before + 1
        assert cache.is_current(token)
        assert not cache.is_current(before)

    def test_reset_clears_pages_but_keeps_generation(self, make_page):
        cache = CatalogCache()
        cache.append_page(make_page(1, [1], next_cursor=2))
        generation = cache.generation
        cache.reset()
        assert cache.episodes == ()
        assert cache.generation == generation
        assert cache.next_cursor() == FIRST_PAGE

    def test_flags_update_state_snapshot(self):
        cache = CatalogCache()
        original = cache.state
        cache.set_loading(True)
        cache.set_error("boom")
        assert cache.state.loading is True
        assert cache.state.error == "boom"
        assert original.loading is False

    def test_unchanged_flag_keeps_state_identity(self):
        cache = CatalogCache()
        state = cache.state
        cache.set_loading(False)
        cache.set_error(None)
        assert cache.state is state
