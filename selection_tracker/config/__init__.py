"""Configuration module for selection-tracker."""

from selection_tracker.config.settings import STATE_VERSION, TrackerConfig, load_config

__all__ = ["STATE_VERSION", "TrackerConfig", "load_config"]
