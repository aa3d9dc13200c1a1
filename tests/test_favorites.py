"""
Tests for FavoritesService membership.
"""

from selection_tracker.services import FavoritesService


class TestFavorites:
    """Set and clear membership."""

    def test_favoriting_twice_equals_once(self, factory, player):
        favorites = FavoritesService()
        entry = factory.create(player)

        favorites.record_entry(entry, True)
        once = [e.id for e in favorites.entries]
        favorites.record_entry(entry, True)

        assert [e.id for e in favorites.entries] == once == [entry.id]
        assert entry.is_favorite is True

    def test_same_object_from_another_entry(self, factory, player):
        favorites = FavoritesService()
        favorites.record_entry(factory.create(player), True)
        favorites.record_entry(factory.create(player), True)

        assert len(favorites) == 1

    def test_unfavorite_removes_and_clears_flag(self, factory, player):
        favorites = FavoritesService()
        stored = factory.create(player)
        favorites.record_entry(stored, True)

        other = factory.create(player)
        favorites.record_entry(other, False)

        assert len(favorites) == 0
        assert stored.is_favorite is False
        assert other.is_favorite is False

    def test_flag_defaults_to_unfavorite(self, factory, player):
        favorites = FavoritesService()
        entry = factory.create(player)
        favorites.record_entry(entry, True)

        favorites.record_entry(entry)

        assert not favorites.contains(entry.id)

    def test_remove_is_unconditional(self, factory, player, body):
        favorites = FavoritesService()
        entry = factory.create(player)
        favorites.record_entry(entry, True)
        favorites.record_entry(factory.create(body), True)

        assert favorites.remove_entry(factory.create(player))

        assert [e.cached_name for e in favorites.entries] == ["Body"]
        assert entry.is_favorite is False

    def test_keeps_insertion_order(self, factory, make_objects):
        objects = make_objects("C", "A", "B")
        favorites = FavoritesService()
        for obj in objects:
            favorites.record_entry(factory.create(obj), True)

        assert [e.cached_name for e in favorites.entries] == ["C", "A", "B"]

    def test_changes_notify(self, factory, player):
        favorites = FavoritesService()
        calls = []
        favorites.updated.add_listener(lambda: calls.append(1))

        favorites.record_entry(factory.create(player), True)
        favorites.record_entry(factory.create(player), False)

        assert len(calls) == 2
