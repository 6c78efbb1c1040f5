"""Tests for the pending-removal state machine."""

from __future__ import annotations

from episode_browser.reconciler import RemovalReconciler, RemovalState


def _ids(episodes) -> list[int]:
    return [episode.id for episode in episodes]


class TestRemovalLifecycle:
    def test_unfavourite_while_visible_stays_until_completion(self, favourites, make_episode):
        favourites.toggle(2)
        reconciler = RemovalReconciler(favourites)
        catalog = [make_episode(1), make_episode(2), make_episode(3)]

        assert reconciler.toggle(2, visible=True) is False
        assert reconciler.state_of(2) is RemovalState.PENDING_REMOVAL
        assert _ids(reconciler.project(catalog)) == [2]
        assert not reconciler.is_rendered_as_favourite(2)

        ticket = reconciler.ticket_for(2)
        assert reconciler.complete(2, ticket) is True
        assert reconciler.state_of(2) is RemovalState.GONE
        assert reconciler.project(catalog) == []

    def test_refavourite_cancels_pending(self, favourites, make_episode):
        favourites.toggle(2)
        reconciler = RemovalReconciler(favourites)
        catalog = [make_episode(2)]

        reconciler.toggle(2, visible=True)
        old_ticket = reconciler.ticket_for(2)
        assert reconciler.toggle(2, visible=True) is True
        assert reconciler.state_of(2) is RemovalState.FAVOURITED
        assert reconciler.pending_ids == frozenset()

        # The completion of the cancelled animation must not remove it.
        assert reconciler.complete(2, old_ticket) is False
        assert _ids(reconciler.project(catalog)) == [2]
        assert reconciler.is_rendered_as_favourite(2)

    def test_stale_ticket_ignored_after_second_unfavourite(self, favourites, make_episode):
        favourites.toggle(2)
        reconciler = RemovalReconciler(favourites)

        reconciler.toggle(2, visible=True)
        first = reconciler.ticket_for(2)
        reconciler.toggle(2, visible=True)  # refavourite
        reconciler.toggle(2, visible=True)  # unfavourite again
        second = reconciler.ticket_for(2)
        assert second != first

        assert reconciler.complete(2, first) is False
        assert reconciler.state_of(2) is RemovalState.PENDING_REMOVAL
        assert reconciler.complete(2, second) is True
        assert reconciler.state_of(2) is RemovalState.GONE

    def test_completion_is_applied_once(self, favourites):
        favourites.toggle(1)
        reconciler = RemovalReconciler(favourites)
        reconciler.toggle(1, visible=True)
        ticket = reconciler.ticket_for(1)
        assert reconciler.complete(1, ticket) is True
        assert reconciler.complete(1, ticket) is False

    def test_complete_without_ticket_ends_current_lifecycle(self, favourites):
        favourites.toggle(1)
        reconciler = RemovalReconciler(favourites)
        reconciler.toggle(1, visible=True)
        assert reconciler.complete(1) is True

    def test_unfavourite_while_hidden_removes_immediately(self, favourites, make_episode):
        favourites.toggle(4)
        reconciler = RemovalReconciler(favourites)
        assert reconciler.toggle(4, visible=False) is False
        assert reconciler.pending_ids == frozenset()
        assert reconciler.project([make_episode(4)]) == []

    def test_favouriting_never_creates_pending(self, favourites):
        reconciler = RemovalReconciler(favourites)
        assert reconciler.toggle(8, visible=True) is True
        assert reconciler.pending_ids == frozenset()

    def test_toggle_persists_through_store(self, favourites, memory_storage):
        favourites.toggle(3)
        reconciler = RemovalReconciler(favourites)
        reconciler.toggle(3, visible=True)
        assert memory_storage.data["favourite_episodes"] == b"[]"


class TestProjection:
    def test_projection_keeps_catalog_order(self, favourites, make_episode):
        for episode_id in (3, 1):
            favourites.toggle(episode_id)
        reconciler = RemovalReconciler(favourites)
        catalog = [make_episode(i) for i in (1, 2, 3)]
        assert _ids(reconciler.project(catalog)) == [1, 3]

    def test_favourites_outside_catalog_not_projected(self, favourites, make_episode):
        favourites.toggle(99)
        reconciler = RemovalReconciler(favourites)
        assert reconciler.project([make_episode(1)]) == []

    def test_visible_ids_union(self, favourites):
        favourites.toggle(1)
        favourites.toggle(2)
        reconciler = RemovalReconciler(favourites)
        reconciler.toggle(2, visible=True)
        assert reconciler.visible_ids() == frozenset({1, 2})

    def test_sync_drops_pending_that_became_favourite(self, favourites, memory_storage):
        favourites.toggle(5)
        reconciler = RemovalReconciler(favourites)
        reconciler.toggle(5, visible=True)
        memory_storage.data["favourite_episodes"] = b"[5]"
        favourites.reload()
        reconciler.sync()
        assert reconciler.pending_ids == frozenset()
        assert reconciler.state_of(5) is RemovalState.FAVOURITED
