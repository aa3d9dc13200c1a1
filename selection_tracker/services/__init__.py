"""Entry tracking services."""

from selection_tracker.services.base import (
    SERVICE_TYPES,
    EntryService,
    matches_search,
    register_service_type,
    visible_entries,
)
from selection_tracker.services.favorites import FavoritesService
from selection_tracker.services.history import HistoryService
from selection_tracker.services.most_visited import MostVisitedService
from selection_tracker.services.scene_components import (
    ComponentListService,
    SceneComponentsService,
    iter_scene_objects,
)

__all__ = [
    "EntryService",
    "SERVICE_TYPES",
    "register_service_type",
    "matches_search",
    "visible_entries",
    "HistoryService",
    "MostVisitedService",
    "FavoritesService",
    "SceneComponentsService",
    "ComponentListService",
    "iter_scene_objects",
]
