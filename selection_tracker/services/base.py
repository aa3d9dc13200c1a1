"""Base class shared by all entry tracking services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterable, Iterator, Optional

from selection_tracker.models.entry import Entry
from selection_tracker.models.ref_state import RefState, passes_filter
from selection_tracker.preferences import keys
from selection_tracker.utils.events import Event
from selection_tracker.utils.logging import get_logger

if TYPE_CHECKING:
    from selection_tracker.host.base import EditorHost
    from selection_tracker.preferences.store import PreferenceStore
    from selection_tracker.registry.persistence import ServiceRegistry

logger = get_logger("services.base")

SERVICE_TYPES: dict[str, type["EntryService"]] = {}


def register_service_type(cls: type["EntryService"]) -> type["EntryService"]:
    """Class decorator making a service loadable from its ``kind`` tag."""
    SERVICE_TYPES[cls.kind] = cls
    return cls


class EntryService(ABC):
    """
    An ordered collection of entries with an update channel.

    ``updated`` fires after every mutating operation. Services whose
    ``persistent`` flag is False hold scene-transient data: they are stored
    without entries and their updates do not trigger a save.
    """

    kind: ClassVar[str] = "entry_service"
    persistent: ClassVar[bool] = True

    def __init__(self, preferences: Optional["PreferenceStore"] = None) -> None:
        self.entries: list[Entry] = []
        self.updated = Event()
        self.preferences = preferences

    @abstractmethod
    def record_entry(self, entry: Entry, *args: Any) -> None:
        ...

    def remove_entry(self, entry: Entry) -> bool:
        """
        Remove ``entry``.

        The exact instance is removed when present; otherwise every entry
        with the same id is removed.

        Returns:
            True if anything was removed
        """
        indices = [i for i, existing in enumerate(self.entries) if existing is entry]
        if not indices:
            indices = [i for i, existing in enumerate(self.entries) if existing.id == entry.id]
        if not indices:
            return False

        self._remove_indices(indices)
        self.refresh()
        return True

    def remove_where(self, predicate: Callable[[Entry], bool]) -> int:
        """Drop every entry matching ``predicate`` without notifying."""
        indices = [i for i, entry in enumerate(self.entries) if predicate(entry)]
        if indices:
            self._remove_indices(indices)
        return len(indices)

    def _remove_indices(self, indices: list[int]) -> None:
        drop = set(indices)
        self.entries = [entry for i, entry in enumerate(self.entries) if i not in drop]

    def find(self, entry_id: str) -> Optional[Entry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def clear(self) -> None:
        self.entries.clear()
        self.refresh()

    def refresh(self) -> None:
        """Publish the current entries to listeners."""
        self.updated.invoke()

    def bind(self, host: "EditorHost", registry: Optional["ServiceRegistry"] = None) -> None:
        for entry in self.entries:
            entry.bind(host, registry)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    # Serialization ------------------------------------------------------

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {"kind": self.kind}
        if self.persistent:
            data["entries"] = [entry.to_dict() for entry in self.entries]
            data.update(self._extra_fields())
        return data

    def _extra_fields(self) -> dict[str, Any]:
        return {}

    def load_dict(self, data: dict) -> None:
        """Replace entries with the ones stored in ``data``; bad entries are dropped."""
        self.entries = []
        if not self.persistent:
            return

        entries = data.get("entries", [])
        if not isinstance(entries, list):
            logger.warning("entry_load_failed", service=self.kind, error="entries is not a list")
            entries = []

        for entry_data in entries:
            try:
                self.entries.append(Entry.from_dict(entry_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("entry_load_failed", service=self.kind, error=str(e))

        self._load_extra(data)

    def _load_extra(self, data: dict) -> None:
        pass


def matches_search(text: str, search_text: Optional[str]) -> bool:
    """Any whitespace-separated keyword contained in the lower-cased text."""
    if not search_text:
        return True
    if not text:
        return False

    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in search_text.split(" ") if keyword)


def visible_entries(
    entries: Iterable[Entry],
    preferences: "PreferenceStore",
    window_filter: Optional[RefState] = None,
    search_text: Optional[str] = None,
) -> list[Entry]:
    """
    Entries a listing should show, in display order.

    Args:
        entries: Entries in service order
        preferences: Store providing the filter and show/order toggles
        window_filter: Listing filter; None uses the preference filter
        search_text: Space-separated keywords matched against display names

    Returns:
        Entries passing search, filter and visibility toggles
    """
    preference_filter = preferences.ref_state_filter
    if window_filter is None:
        window_filter = preference_filter

    show_unloaded = preferences.get_toggle(keys.SHOW_UNLOADED_OBJECTS)
    show_destroyed = preferences.get_toggle(keys.SHOW_DESTROYED_OBJECTS)

    result = []
    for entry in entries:
        if entry is None or not matches_search(entry.display_name, search_text):
            continue

        state = entry.ref_state
        if not passes_filter(state, window_filter, preference_filter):
            continue
        if state & (RefState.UNLOADED | RefState.UNSTAGED) and not show_unloaded:
            continue
        if state & RefState.DESTROYED and not show_destroyed:
            continue

        result.append(entry)

    if not preferences.get_toggle(keys.ORDER_BY_RECENCY):
        result.reverse()
    return result
