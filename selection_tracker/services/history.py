"""Selection history with back/forward navigation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from selection_tracker.models.entry import Entry
from selection_tracker.preferences import keys
from selection_tracker.services.base import EntryService, register_service_type

if TYPE_CHECKING:
    from selection_tracker.preferences.store import PreferenceStore

NO_CURSOR = -1


@register_service_type
class HistoryService(EntryService):
    """
    Navigable timeline of selections, newest first.

    ``cursor`` marks the entry the user navigated back to. -1 means the user
    is at the live position, which is where every recording puts them.
    Moving "previous" walks toward older entries.
    """

    kind = "history"

    def __init__(self, preferences: Optional["PreferenceStore"] = None) -> None:
        super().__init__(preferences)
        self.cursor = NO_CURSOR

    def record_entry(self, entry: Entry, *args: Any) -> None:
        if self.entries and entry.duplicates(self.entries[0]):
            return

        if self.preferences is not None and self.preferences.get_toggle(keys.AUTO_REMOVE_DUPLICATES):
            self.entries = [existing for existing in self.entries if not entry.duplicates(existing)]

        self.entries.insert(0, entry)
        self.cursor = NO_CURSOR
        self.refresh()

    def previous_selection(self) -> Optional[Entry]:
        if self.cursor + 1 < len(self.entries):
            self.cursor += 1
            return self.entries[self.cursor]
        return None

    def next_selection(self) -> Optional[Entry]:
        if self.cursor > 0:
            self.cursor -= 1
            return self.entries[self.cursor]
        if self.cursor == 0:
            self.cursor = NO_CURSOR
        return None

    @property
    def current(self) -> Optional[Entry]:
        """Entry under the cursor, None at the live position."""
        if self.cursor == NO_CURSOR:
            return None
        return self.entries[self.cursor]

    def _remove_indices(self, indices: list[int]) -> None:
        shift = sum(1 for i in indices if i < self.cursor)
        super()._remove_indices(indices)
        self.cursor = min(self.cursor - shift, len(self.entries) - 1)

    def clear(self) -> None:
        self.cursor = NO_CURSOR
        super().clear()

    def _extra_fields(self) -> dict[str, Any]:
        return {"cursor": self.cursor}

    def _load_extra(self, data: dict) -> None:
        cursor = data.get("cursor", NO_CURSOR)
        if not isinstance(cursor, int) or not NO_CURSOR <= cursor < len(self.entries):
            cursor = NO_CURSOR
        self.cursor = cursor
