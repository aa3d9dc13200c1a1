"""Data models for selection-tracker."""

from selection_tracker.models.entry import (
    ENTRY_TYPES,
    ComponentEntry,
    Entry,
    GameObjectEntry,
    NormalAssetEntry,
    SceneEntry,
)
from selection_tracker.models.factory import EntryFactory
from selection_tracker.models.ref_state import RefState, passes_filter

__all__ = [
    # Entries
    "Entry",
    "SceneEntry",
    "GameObjectEntry",
    "ComponentEntry",
    "NormalAssetEntry",
    "ENTRY_TYPES",
    "EntryFactory",
    # State
    "RefState",
    "passes_filter",
]
