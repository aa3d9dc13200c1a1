"""
Tests for reference entries: liveness, display data, actions and serialization.
"""

import pytest

from selection_tracker.models import (
    ComponentEntry,
    Entry,
    GameObjectEntry,
    NormalAssetEntry,
    RefState,
)
from selection_tracker.services import ComponentListService


class TestGameObjectEntry:
    """Scene object lifecycle."""

    def test_live_object(self, factory, player):
        entry = factory.create(player)

        assert isinstance(entry, GameObjectEntry)
        assert entry.ref is player
        assert entry.ref_state == RefState.GAME_OBJECT | RefState.LOADED
        assert entry.display_name == "Player"
        assert entry.scene_path == player.scene.path

    def test_destroyed_object_keeps_cached_name(self, host, factory, player):
        entry = factory.create(player)
        host.destroy(player)

        assert entry.ref is None
        assert entry.ref_state == RefState.GAME_OBJECT | RefState.DESTROYED
        assert entry.display_name == "Player"

    def test_unloaded_scene(self, host, scene, factory, player):
        entry = factory.create(player)
        host.unload_scene(scene)

        assert entry.ref is None
        assert entry.ref_state == RefState.GAME_OBJECT | RefState.UNLOADED

        host.open_scene(scene)
        assert entry.ref is player
        assert entry.ref_state == RefState.GAME_OBJECT | RefState.LOADED

    def test_prefab_stage_objects_are_staged(self, host, factory):
        asset = host.create_asset("Enemy", "Assets/Prefabs/Enemy.prefab")
        stage = host.open_prefab_stage(asset)
        root = host.create_game_object("EnemyRoot", scene=stage.scene)
        entry = factory.create(root)

        assert entry.ref_state == RefState.GAME_OBJECT | RefState.STAGED

        host.close_prefab_stage(stage)
        assert entry.ref_state == RefState.GAME_OBJECT | RefState.UNSTAGED

    def test_ping_live_object(self, host, factory, player):
        factory.create(player).ping()
        assert host.pinged == [player]

    def test_ping_unloaded_object_pings_its_scene(self, host, scene, factory, player):
        entry = factory.create(player)
        host.unload_scene(scene)

        entry.ping()

        assert host.pinged == []
        assert host.pinged_scenes == [scene.path]

    def test_ping_destroyed_object_does_nothing(self, host, factory, player):
        entry = factory.create(player)
        host.destroy(player)

        entry.ping()

        assert host.pinged == []
        assert host.pinged_scenes == []

    def test_open_prefab_instance(self, host, factory, player):
        source = host.create_asset("PlayerPrefab", "Assets/Prefabs/Player.prefab")
        player.prefab_source = source

        factory.create(player).open()

        assert host.opened_assets == [source]

    def test_open_without_source(self, host, factory, player):
        factory.create(player).open()
        assert host.opened_assets == []


class TestComponentEntry:
    """Component entries are keyed by type."""

    def test_display_name_is_type(self, factory, player):
        entry = factory.create(player.get_component("Collider"))

        assert isinstance(entry, ComponentEntry)
        assert entry.display_name == "Collider"
        assert entry.ref_state == RefState.GAME_OBJECT | RefState.LOADED

    def test_duplicates_by_type(self, factory, player, body):
        player_renderer = factory.create(player.get_component("Renderer"))
        body_renderer = factory.create(body.get_component("Renderer"))
        collider = factory.create(player.get_component("Collider"))

        assert player_renderer.id != body_renderer.id
        assert player_renderer.duplicates(body_renderer)
        assert not player_renderer.duplicates(collider)

    def test_ping_pings_owner(self, host, factory, player):
        factory.create(player.get_component("Collider")).ping()
        assert host.pinged == [player]

    def test_ping_missing_component_searches_scene(self, host, registry, factory, player):
        renderer = player.get_component("Renderer")
        entry = factory.create(renderer)
        host.remove_component(renderer)

        entry.ping()

        results = registry.get_service(ComponentListService)
        assert [e.display_name for e in results.entries] == ["Body"]
        assert host.pinged == []

    def test_builtin_component_cannot_open(self, host, factory, player):
        factory.create(player.get_component("Collider")).open()

        assert host.opened_scripts == []
        assert host.project_window_focus_count == 0

    def test_open_script(self, host, factory, player):
        script = host.add_component(player, "PlayerMovement", script_path="Assets/Scripts/PlayerMovement.cs")

        factory.create(script).open()

        assert host.project_window_focus_count == 1
        assert host.opened_scripts == ["Assets/Scripts/PlayerMovement.cs"]


class TestNormalAssetEntry:
    """Project assets."""

    def test_deleted_asset(self, host, factory):
        asset = host.create_asset("Grass", "Assets/Textures/Grass.png")
        entry = factory.create(asset)

        assert isinstance(entry, NormalAssetEntry)
        assert entry.ref_state == RefState.ASSET
        assert entry.display_name == "Grass"

        host.delete_asset(asset)

        assert entry.ref_state == RefState.DELETED
        assert entry.display_name == "<s>Grass</s>"

    def test_ping_focuses_project_window(self, host, factory):
        asset = host.create_asset("Grass", "Assets/Textures/Grass.png")
        factory.create(asset).ping()

        assert host.project_window_focus_count == 1
        assert host.pinged == [asset]

    def test_open_deleted_asset_does_nothing(self, host, factory):
        asset = host.create_asset("Grass", "Assets/Textures/Grass.png")
        entry = factory.create(asset)
        host.delete_asset(asset)

        entry.open()

        assert host.opened_assets == []


class TestFavoriteFlag:
    """Favorite change notifications."""

    def test_event_fires_only_on_transition(self, factory, player):
        entry = factory.create(player)
        changes = []
        entry.on_favorite_changed.add_listener(changes.append)

        entry.is_favorite = True
        entry.is_favorite = True
        entry.is_favorite = False

        assert changes == [True, False]


class TestSerialization:
    """Entries survive a trip through plain dicts."""

    def test_component_entry_round_trip(self, host, factory, player):
        script = host.add_component(player, "PlayerMovement", script_path="Assets/Scripts/PlayerMovement.cs")
        entry = factory.create(script)
        entry.is_favorite = True

        restored = Entry.from_dict(entry.to_dict())

        assert isinstance(restored, ComponentEntry)
        assert restored.id == entry.id
        assert restored.component_type == "PlayerMovement"
        assert restored.script_path == "Assets/Scripts/PlayerMovement.cs"
        assert restored.scene_path == player.scene.path
        assert restored.is_favorite is True
        assert restored.ref_state == RefState.GAME_OBJECT | RefState.LOADED

    def test_restored_entry_resolves_after_bind(self, host, factory, player):
        restored = Entry.from_dict(factory.create(player).to_dict())

        assert not restored.is_bound
        assert restored.ref is None

        restored.bind(host)
        assert restored.ref is player

    def test_unknown_kind(self):
        with pytest.raises(KeyError):
            Entry.from_dict({"kind": "texture_atlas", "id": "x"})

    def test_unbound_entry_actions_are_noops(self):
        entry = GameObjectEntry("GlobalObjectId_V1-2-abc-1-0", cached_name="Ghost")

        entry.ping()
        entry.open()

        assert entry.ref is None
        assert entry.display_name == "Ghost"
