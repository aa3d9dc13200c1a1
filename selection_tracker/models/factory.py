"""Entry factory: picks the entry variant for a live object."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from selection_tracker.host.objects import Component, GameObject, HostObject
from selection_tracker.models.entry import (
    ComponentEntry,
    Entry,
    GameObjectEntry,
    NormalAssetEntry,
)
from selection_tracker.models.ref_state import RefState

if TYPE_CHECKING:
    from selection_tracker.host.base import EditorHost
    from selection_tracker.registry.persistence import ServiceRegistry


class EntryFactory:
    """
    Creates entries for objects observed through a host.

    The identifier comes from the host's global object id, so the same object
    always yields entries with the same id, across restarts included.
    """

    def __init__(
        self,
        host: "EditorHost",
        registry: Optional["ServiceRegistry"] = None,
    ) -> None:
        self.host = host
        self.registry = registry

    def create(self, obj: HostObject) -> Entry:
        """
        Create the entry variant matching ``obj``.

        Args:
            obj: Live object to reference

        Returns:
            A bound entry carrying a fresh display snapshot

        Raises:
            ValueError: If obj is None
        """
        if obj is None:
            raise ValueError("Cannot create an entry for None")

        gid = self.host.global_object_id(obj)

        if isinstance(obj, Component):
            entry: Entry = ComponentEntry(
                gid,
                component_type=obj.type_name,
                script_path=obj.script_path,
                cached_ref_state=RefState.GAME_OBJECT | RefState.LOADED,
            )
        elif isinstance(obj, GameObject):
            entry = GameObjectEntry(
                gid,
                cached_ref_state=RefState.GAME_OBJECT | RefState.LOADED,
            )
        else:
            entry = NormalAssetEntry(gid, asset_path=getattr(obj, "path", ""))

        if self.registry is not None:
            entry.is_favorite = self.registry.is_favorite(gid)
        entry.bind(self.host, self.registry)
        entry.snapshot()
        return entry
