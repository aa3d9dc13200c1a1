"""
Tests for the selection-tracker CLI.
"""

import json

import pytest
from click.testing import CliRunner

from selection_tracker.cli import cli
from selection_tracker.config import TrackerConfig
from selection_tracker.preferences import PreferenceStore, keys
from selection_tracker.registry import ServiceRegistry


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path, host, scene, factory, make_objects):
    """Project directory with persisted history, ranking and favorites."""
    config = TrackerConfig().with_project_dir(tmp_path)
    registry = ServiceRegistry(config.registry_file, preferences=PreferenceStore(), host=host)

    door, lamp = make_objects("Door", "Lamp")
    texture = host.create_asset("Grass", "Assets/Textures/Grass.png")
    for obj in (door, lamp, door, texture):
        registry.record_selection(factory.create(obj))
    registry.record_favorites(factory.create(lamp), True)
    registry.close()
    return tmp_path


def invoke(runner, project, *args):
    return runner.invoke(cli, ["--project", str(project), *args])


class TestListings:
    """history, most-visited and favorites."""

    def test_history_json(self, runner, project):
        result = invoke(runner, project, "history", "--format", "json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["kind"] == "history"
        assert [entry["name"] for entry in data["entries"]] == ["Grass", "Door", "Lamp"]
        assert data["entries"][0]["state"] == ["asset"]
        assert data["entries"][2]["favorite"] is True

    def test_history_table(self, runner, project):
        result = invoke(runner, project, "history")

        assert result.exit_code == 0
        assert "Door" in result.output
        assert "loaded|game_object" in result.output

    def test_state_filter(self, runner, project):
        result = invoke(runner, project, "history", "--state", "asset", "--format", "json")

        assert [entry["name"] for entry in json.loads(result.output)["entries"]] == ["Grass"]

    def test_unknown_state(self, runner, project):
        result = invoke(runner, project, "history", "--state", "sparkly")
        assert result.exit_code != 0

    def test_search(self, runner, project):
        result = invoke(runner, project, "history", "--search", "lamp", "--format", "json")

        assert [entry["name"] for entry in json.loads(result.output)["entries"]] == ["Lamp"]

    def test_most_visited(self, runner, project):
        result = invoke(runner, project, "most-visited", "--format", "json")

        entries = json.loads(result.output)["entries"]
        assert [(entry["name"], entry["visits"]) for entry in entries] == [
            ("Door", 2),
            ("Grass", 1),
            ("Lamp", 1),
        ]

    def test_favorites(self, runner, project):
        result = invoke(runner, project, "favorites", "--format", "json")

        assert [entry["name"] for entry in json.loads(result.output)["entries"]] == ["Lamp"]

    def test_empty_project(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "history")

        assert result.exit_code == 0
        assert "No history entries" in result.output
        assert not (tmp_path / "UserSettings").exists()


class TestStatus:
    def test_counts(self, runner, project):
        result = invoke(runner, project, "status", "--format", "json")

        data = json.loads(result.output)
        assert data["registry_exists"] is True
        assert data["services"]["history"] == 3
        assert data["services"]["scene_components"] == 0


class TestPrefs:
    """prefs show, set and filter."""

    def test_show_defaults(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "prefs", "show")

        data = json.loads(result.output)
        assert data["toggles"][keys.AUTO_REMOVE_DESTROYED] is True
        assert data["ref_state_filter"] == ["all"]

    def test_set_is_persisted(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "prefs", "set", keys.TRACK_PLAIN_OBJECTS, "on")
        assert result.exit_code == 0, result.output

        store = PreferenceStore.load(TrackerConfig().with_project_dir(tmp_path).preferences_file)
        assert store.get_toggle(keys.TRACK_PLAIN_OBJECTS) is True

    def test_set_unknown_key(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "prefs", "set", "show-everything", "on")
        assert result.exit_code != 0

    def test_filter(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "prefs", "filter", "loaded", "game-object")

        assert json.loads(result.output)["ref_state_filter"] == ["loaded", "game_object"]

    def test_filter_applies_to_listings(self, runner, project):
        invoke(runner, project, "prefs", "filter", "asset")

        result = invoke(runner, project, "history", "--format", "json")

        assert [entry["name"] for entry in json.loads(result.output)["entries"]] == ["Grass"]

    def test_all_state_hides_everything_under_preference_filter(self, runner, project):
        invoke(runner, project, "prefs", "filter", "asset")

        result = invoke(runner, project, "history", "--state", "all", "--format", "json")

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["count"] == 0

    def test_all_state_without_preference_filter(self, runner, project):
        result = invoke(runner, project, "history", "--state", "all", "--format", "json")

        assert json.loads(result.output)["count"] == 3


class TestStoredState:
    """States written by a host-bound registry."""

    def test_deleted_favorite_is_saved_as_deleted(self, runner, tmp_path, host, factory):
        config = TrackerConfig().with_project_dir(tmp_path)
        registry = ServiceRegistry(config.registry_file, preferences=PreferenceStore(), host=host)
        texture = host.create_asset("Grass", "Assets/Textures/Grass.png")
        registry.record_favorites(factory.create(texture), True)

        host.delete_asset(texture)
        registry.save(True)
        registry.close()

        result = invoke(runner, tmp_path, "favorites", "--format", "json")
        assert json.loads(result.output)["entries"][0]["state"] == ["deleted"]


class TestClear:
    def test_clear_history(self, runner, project):
        result = invoke(runner, project, "clear", "history")

        assert json.loads(result.output)["removed"] == 3
        listing = invoke(runner, project, "history", "--format", "json")
        assert json.loads(listing.output)["count"] == 0
        ranking = invoke(runner, project, "most-visited", "--format", "json")
        assert json.loads(ranking.output)["count"] == 3

    def test_clear_favorites(self, runner, project):
        invoke(runner, project, "clear", "favorites")

        listing = invoke(runner, project, "favorites", "--format", "json")
        assert json.loads(listing.output)["count"] == 0

    def test_clear_unknown_kind(self, runner, project):
        result = invoke(runner, project, "clear", "scene_components")
        assert result.exit_code != 0


class TestConfig:
    def test_invalid_config(self, runner, tmp_path):
        (tmp_path / "tracker.yaml").write_text("storage:\n  registry_path: /abs/path.json\n")

        result = invoke(runner, tmp_path, "history")

        assert result.exit_code == 1
        assert "storage.registry_path" in result.output
