"""Preference toggles and filter state."""

from selection_tracker.preferences import keys
from selection_tracker.preferences.store import PreferenceStore

__all__ = ["PreferenceStore", "keys"]
