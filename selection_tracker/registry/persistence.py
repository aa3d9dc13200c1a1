"""Service registry: owns the tracking services and persists them."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, TypeVar

from selection_tracker.config.settings import STATE_VERSION
from selection_tracker.host.base import EditorHost
from selection_tracker.models.entry import Entry
from selection_tracker.models.factory import EntryFactory
from selection_tracker.models.ref_state import RefState
from selection_tracker.preferences import keys
from selection_tracker.preferences.store import PreferenceStore
from selection_tracker.services.base import SERVICE_TYPES, EntryService
from selection_tracker.services.favorites import FavoritesService
from selection_tracker.services.history import HistoryService
from selection_tracker.services.most_visited import MostVisitedService
from selection_tracker.services.scene_components import (
    ComponentListService,
    SceneComponentsService,
)
from selection_tracker.utils.logging import get_logger
from selection_tracker.utils.storage import read_blob, write_blob

logger = get_logger("registry.persistence")

BLOB_KIND = "registry"

# Services every registry carries from the start, in listing order
DEFAULT_SERVICES: list[type[EntryService]] = [
    HistoryService,
    MostVisitedService,
    FavoritesService,
    SceneComponentsService,
    ComponentListService,
]

# Services whose entries are pruned before a save
PRUNED_SERVICES: tuple[type[EntryService], ...] = (HistoryService, MostVisitedService)

S = TypeVar("S", bound=EntryService)


class ServiceRegistry:
    """
    Registry of tracking services with save-on-change persistence.

    Provides:
    - At most one service per kind, created on first request
    - A single listener per service that flushes persistent state on change
    - Forwarding entry points for selections, scans, favorites and navigation
    - Load once at startup, full-state save after every relevant mutation

    A registry is constructed once at startup and closed once at shutdown; it
    is passed to the components that need it.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        preferences: Optional[PreferenceStore] = None,
        host: Optional[EditorHost] = None,
        state_version: str = STATE_VERSION,
    ) -> None:
        """
        Initialize the registry.

        Args:
            path: Blob location; None keeps the registry in memory only
            preferences: Store gating pruning and duplicate removal
            host: Host used to resolve entries and run component searches
            state_version: Version written to and expected from the blob
        """
        self.path = Path(path) if path else None
        self.preferences = preferences or PreferenceStore()
        self.host = host
        self.state_version = state_version

        self._services: dict[str, EntryService] = {}
        self._listeners: dict[str, object] = {}
        self._deferred = 0

        for service_cls in DEFAULT_SERVICES:
            self._attach(service_cls(self.preferences))

    # Services -----------------------------------------------------------

    @property
    def services(self) -> list[EntryService]:
        return list(self._services.values())

    @property
    def factory(self) -> Optional[EntryFactory]:
        if self.host is None:
            return None
        return EntryFactory(self.host, self)

    def get_service(self, service_cls: type[S]) -> S:
        """
        Get the service of ``service_cls``, creating it on first request.

        A newly created service is registered and persisted right away.
        """
        service = self._services.get(service_cls.kind)
        if service is not None:
            return service

        service = service_cls(self.preferences)
        self._attach(service)
        logger.info("service_created", kind=service.kind)
        self.save(True)
        return service

    def find_service(self, service_cls: type[S]) -> Optional[S]:
        """Get the service of ``service_cls`` without creating it."""
        return self._services.get(service_cls.kind)

    def service_by_kind(self, kind: str) -> Optional[EntryService]:
        return self._services.get(kind)

    def _attach(self, service: EntryService) -> None:
        if service.kind in self._services:
            return

        def listener(service: EntryService = service) -> None:
            self._on_service_updated(service)

        self._services[service.kind] = service
        self._listeners[service.kind] = listener
        service.updated.add_listener(listener)
        if self.host is not None:
            service.bind(self.host, self)

    def _on_service_updated(self, service: EntryService) -> None:
        if not service.persistent or self._deferred:
            return
        self.save(True)

    @contextmanager
    def _batch(self) -> Iterator[None]:
        """Collapse the saves of several service updates into one."""
        self._deferred += 1
        try:
            yield
        finally:
            self._deferred -= 1

    # Forwarding ---------------------------------------------------------

    def record_selection(self, entry: Entry) -> None:
        """Record a selection into history and most-visited, then save."""
        with self._batch():
            self.get_service(HistoryService).record_entry(entry)
            self.get_service(MostVisitedService).record_entry(entry)
        self.save(True)

    def record_component(self, entry: Entry) -> None:
        """Record a component type into the scene index. Never saved."""
        self.get_service(SceneComponentsService).record_entry(entry)

    def record_favorites(self, entry: Entry, is_favorite: bool = False) -> None:
        """Set or clear favorite membership, then save."""
        with self._batch():
            self.get_service(FavoritesService).record_entry(entry, is_favorite)
            self._sync_favorite(entry.id, is_favorite)
        self.save(True)

    def remove_from_favorites(self, entry: Entry) -> None:
        with self._batch():
            self.get_service(FavoritesService).remove_entry(entry)
            self._sync_favorite(entry.id, False)
        self.save(True)

    def is_favorite(self, entry_id: str) -> bool:
        favorites = self._services.get(FavoritesService.kind)
        return favorites is not None and favorites.find(entry_id) is not None

    def _sync_favorite(self, entry_id: str, is_favorite: bool) -> None:
        for service in self._services.values():
            for tracked in service.entries:
                if tracked.id == entry_id:
                    tracked.is_favorite = is_favorite

    def jump_to_previous_selection(self) -> Optional[Entry]:
        return self.get_service(HistoryService).previous_selection()

    def jump_to_next_selection(self) -> Optional[Entry]:
        return self.get_service(HistoryService).next_selection()

    def find_objects_with_component(self, type_name: str) -> list[Entry]:
        """
        Search the active scene for objects carrying a ``type_name`` component.

        Results replace the contents of the component list service.
        """
        factory = self.factory
        if factory is None:
            logger.warning("component_search_unavailable", component_type=type_name)
            return []

        index = self.get_service(SceneComponentsService)
        results = self.get_service(ComponentListService)
        found = index.find_representatives_of_type(
            type_name,
            self.host.active_scene,
            factory,
            into=results,
        )

        if found:
            logger.info("component_search_completed", component_type=type_name, objects=len(found))
        else:
            logger.warning("no_objects_with_component", component_type=type_name)
        return found

    # Persistence --------------------------------------------------------

    def bind(self, host: EditorHost) -> None:
        """Attach ``host`` and rebind every entry's resolver to it."""
        self.host = host
        for service in self._services.values():
            service.bind(host, self)

    def load(self) -> bool:
        """
        Replace service contents with the persisted state.

        Returns:
            True if a blob was loaded
        """
        if self.path is None:
            return False

        result = read_blob(self.path, BLOB_KIND, self.state_version)
        if result.is_err():
            error = result.unwrap_err()
            if self.path.exists():
                logger.warning("registry_load_failed", error=str(error))
            else:
                logger.info("registry_not_found", path=str(self.path))
            return False

        services = result.unwrap().get("services", [])
        if not isinstance(services, list):
            logger.warning("registry_load_failed", error="services is not a list")
            return False

        for service_data in services:
            kind = service_data.get("kind") if isinstance(service_data, dict) else None
            service_cls = SERVICE_TYPES.get(kind)
            if service_cls is None:
                logger.warning("unknown_service_dropped", kind=kind)
                continue

            service = self._services.get(kind)
            if service is None:
                service = service_cls(self.preferences)
                self._attach(service)
            service.load_dict(service_data)

        if self.host is not None:
            self.bind(self.host)

        logger.info(
            "registry_loaded",
            services=len(self._services),
            entries=sum(len(service) for service in self._services.values()),
        )
        return True

    def prune(self) -> int:
        """Drop destroyed and unloaded entries as the preferences ask."""
        remove_destroyed = self.preferences.get_toggle(keys.AUTO_REMOVE_DESTROYED)
        remove_unloaded = self.preferences.get_toggle(keys.AUTO_REMOVE_UNLOADED)
        if not remove_destroyed and not remove_unloaded:
            return 0

        def stale(entry: Entry) -> bool:
            state = entry.ref_state
            if remove_destroyed and state & RefState.DESTROYED:
                return True
            if remove_unloaded and state & RefState.UNLOADED:
                return True
            return False

        removed = 0
        for service_cls in PRUNED_SERVICES:
            service = self._services.get(service_cls.kind)
            if service is not None:
                removed += service.remove_where(stale)

        if removed:
            logger.debug("entries_pruned", count=removed)
        return removed

    def save(self, as_text: bool) -> None:
        """
        Flush the full registry state.

        Args:
            as_text: Indented, diff-friendly output when True; compact otherwise
        """
        self.prune()
        if self.path is None:
            return

        if self.host is not None:
            # Stored states are what host-less readers see
            for service in self._services.values():
                if service.persistent:
                    for entry in service.entries:
                        entry.snapshot()

        data = {"services": [service.to_dict() for service in self._services.values()]}
        write_blob(self.path, BLOB_KIND, self.state_version, data, as_text=as_text)
        logger.debug(
            "registry_saved",
            entries=sum(len(service) for service in self._services.values() if service.persistent),
        )

    def close(self) -> None:
        """Detach from every service."""
        for kind, listener in self._listeners.items():
            self._services[kind].updated.remove_listener(listener)
        self._listeners.clear()
