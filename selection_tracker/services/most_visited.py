"""Frequency ranking of selections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from selection_tracker.models.entry import Entry
from selection_tracker.services.base import EntryService, register_service_type
from selection_tracker.utils.logging import get_logger

if TYPE_CHECKING:
    from selection_tracker.preferences.store import PreferenceStore

logger = get_logger("services.most_visited")


@register_service_type
class MostVisitedService(EntryService):
    """
    One entry per id, ranked by visit count.

    Ties are broken by the most recent touch. Counts are never capped and
    entries are never evicted.
    """

    kind = "most_visited"

    def __init__(self, preferences: Optional["PreferenceStore"] = None) -> None:
        super().__init__(preferences)
        self.visits: dict[str, int] = {}
        self._touched: dict[str, int] = {}
        self._clock = 0

    def record_entry(self, entry: Entry, *args: Any) -> None:
        self._clock += 1
        existing = self.find(entry.id)
        if existing is None:
            self.entries.append(entry)
            self.visits[entry.id] = 1
        else:
            # Keep the newest snapshot of the object
            self.entries[self.entries.index(existing)] = entry
            self.visits[entry.id] = self.visits.get(entry.id, 0) + 1

        self._touched[entry.id] = self._clock
        self._sort()
        self.refresh()

    def visit_count(self, entry_id: str) -> int:
        return self.visits.get(entry_id, 0)

    def _sort(self) -> None:
        self.entries.sort(
            key=lambda e: (self.visits.get(e.id, 0), self._touched.get(e.id, 0)),
            reverse=True,
        )

    def _remove_indices(self, indices: list[int]) -> None:
        removed = {self.entries[i].id for i in indices}
        super()._remove_indices(indices)
        for entry_id in removed:
            self.visits.pop(entry_id, None)
            self._touched.pop(entry_id, None)

    def clear(self) -> None:
        self.visits.clear()
        self._touched.clear()
        super().clear()

    def _extra_fields(self) -> dict[str, Any]:
        return {
            "visits": [
                {"id": e.id, "count": self.visits.get(e.id, 0), "touched": self._touched.get(e.id, 0)}
                for e in self.entries
            ],
        }

    def _load_extra(self, data: dict) -> None:
        self.visits = {}
        self._touched = {}
        visits = data.get("visits", [])
        if not isinstance(visits, list):
            logger.warning("visits_load_failed", service=self.kind, error="visits is not a list")
            visits = []

        for item in visits:
            try:
                entry_id = item["id"]
                count = int(item.get("count", 1))
                touched = int(item.get("touched", 0))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("visit_record_dropped", service=self.kind, error=str(e))
                continue
            self.visits[entry_id] = count
            self._touched[entry_id] = touched

        for entry in self.entries:
            self.visits.setdefault(entry.id, 1)
        self._clock = max(self._touched.values(), default=0)
        self._sort()
