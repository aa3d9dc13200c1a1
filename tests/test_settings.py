"""
Tests for TrackerConfig loading and validation.
"""

from pathlib import Path

from selection_tracker.config import STATE_VERSION, TrackerConfig, load_config
from selection_tracker.config.settings import CONFIG_FILE_NAME, DEFAULT_REGISTRY_PATH


class TestTrackerConfig:
    """Parsing and validation."""

    def test_defaults_are_valid(self):
        config = TrackerConfig()

        assert config.validate().is_ok()
        assert config.storage.state_version == STATE_VERSION
        assert config.scan.include_persistent_area is True

    def test_from_yaml(self, tmp_path):
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text(
            "storage:\n"
            "  registry_path: Library/Tracker.json\n"
            "logging:\n"
            "  level: debug\n"
            "  format: json\n"
            "scan:\n"
            "  include_persistent_area: false\n"
        )

        config = TrackerConfig.from_yaml(path).unwrap()

        assert config.storage.registry_path == "Library/Tracker.json"
        assert config.logging.level == "debug"
        assert config.logging.format == "json"
        assert config.scan.include_persistent_area is False
        assert config.scan.skip_transform is True

    def test_missing_yaml(self, tmp_path):
        result = TrackerConfig.from_yaml(tmp_path / "absent.yaml")

        assert result.is_err()
        assert result.unwrap_err().field == "path"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("storage: [unclosed\n")

        result = TrackerConfig.from_yaml(path)

        assert result.is_err()
        assert result.unwrap_err().field == "yaml"

    def test_absolute_path_rejected(self):
        config = TrackerConfig.from_dict({"storage": {"registry_path": "/tmp/tracker.json"}}).unwrap()

        error = config.validate().unwrap_err()

        assert error.field == "storage.registry_path"

    def test_shared_file_rejected(self):
        config = TrackerConfig.from_dict({
            "storage": {"registry_path": "state.json", "preferences_path": "state.json"},
        }).unwrap()

        assert config.validate().is_err()

    def test_unknown_log_format_rejected(self):
        config = TrackerConfig.from_dict({"logging": {"format": "xml"}}).unwrap()

        assert config.validate().unwrap_err().field == "logging.format"

    def test_paths_resolve_under_project(self, tmp_path):
        config = TrackerConfig().with_project_dir(tmp_path)

        assert config.registry_file == tmp_path / DEFAULT_REGISTRY_PATH
        assert config.preferences_file.parent == tmp_path / "UserSettings"


class TestLoadConfig:
    """Standard location lookup."""

    def test_defaults_without_file(self, tmp_path):
        config = load_config(project_dir=tmp_path).unwrap()

        assert config.project_dir == tmp_path
        assert config.storage.registry_path == DEFAULT_REGISTRY_PATH

    def test_reads_config_dir(self, tmp_path):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / CONFIG_FILE_NAME).write_text("storage:\n  preferences_path: Prefs.json\n")

        config = load_config(config_dir=config_dir, project_dir=tmp_path).unwrap()

        assert config.preferences_file == tmp_path / "Prefs.json"

    def test_invalid_file_is_an_error(self, tmp_path):
        (tmp_path / CONFIG_FILE_NAME).write_text("logging:\n  level: chatty\n")

        result = load_config(project_dir=tmp_path)

        assert result.is_err()
        assert result.unwrap_err().field == "logging.level"

    def test_relative_project_dir(self):
        config = load_config(project_dir=Path("missing-project")).unwrap()
        assert config.registry_file == Path("missing-project") / DEFAULT_REGISTRY_PATH
