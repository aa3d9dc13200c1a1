"""Manually curated favorites."""

from __future__ import annotations

from typing import Any

from selection_tracker.models.entry import Entry
from selection_tracker.services.base import EntryService, register_service_type


@register_service_type
class FavoritesService(EntryService):
    """Set of favorited entries, kept in the order they were added."""

    kind = "favorites"

    def record_entry(self, entry: Entry, *args: Any) -> None:
        """
        Set or clear favorite membership for ``entry.id``.

        Args:
            entry: Entry to (un)favorite
            args: Optional ``is_favorite`` flag, False when omitted
        """
        is_favorite = bool(args[0]) if args else False
        existing = self.find(entry.id)

        if is_favorite:
            if existing is None:
                self.entries.append(entry)
            entry.is_favorite = True
        else:
            if existing is not None:
                self._remove_indices([self.entries.index(existing)])
                existing.is_favorite = False
            entry.is_favorite = False

        self.refresh()

    def remove_entry(self, entry: Entry) -> bool:
        removed = [existing for existing in self.entries if existing is entry or existing.id == entry.id]
        entry.is_favorite = False
        for existing in removed:
            existing.is_favorite = False
        return super().remove_entry(entry)

    def contains(self, entry_id: str) -> bool:
        return self.find(entry_id) is not None
