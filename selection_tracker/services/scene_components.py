"""Live index of the component types present in the open scene."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, Optional

from selection_tracker.host.objects import GameObject, Scene, Transform
from selection_tracker.models.entry import Entry
from selection_tracker.services.base import EntryService, register_service_type
from selection_tracker.utils.logging import get_logger

if TYPE_CHECKING:
    from selection_tracker.host.base import EditorHost
    from selection_tracker.models.factory import EntryFactory

logger = get_logger("services.scene_components")


def iter_scene_objects(scene: Scene) -> Iterator[GameObject]:
    """Objects of ``scene`` in root-list order, each root depth-first."""
    for root in scene.get_root_game_objects():
        yield from root.iter_hierarchy()


@register_service_type
class SceneComponentsService(EntryService):
    """
    One representative entry per component type found in the scene.

    Entries follow traversal order: roots in list order, each hierarchy
    depth-first, then the persistent holding area. The index is rebuilt on
    every scene load and is never written to disk.
    """

    kind = "scene_components"
    persistent = False

    def record_entry(self, entry: Entry, *args: Any) -> None:
        if any(entry.duplicates(existing) for existing in self.entries):
            return
        self.entries.append(entry)
        self.refresh()

    def rebuild(
        self,
        scene: Optional[Scene],
        factory: "EntryFactory",
        include_persistent_area: bool = True,
        skip_transform: bool = True,
    ) -> int:
        """
        Re-index the component types of ``scene``.

        Args:
            scene: Scene to traverse
            factory: Factory creating the entries
            include_persistent_area: Also visit the persistent holding area
            skip_transform: Leave the placement behavior out of the index

        Returns:
            Number of component types found
        """
        self.entries.clear()

        if scene is None or not scene.is_valid or not scene.is_loaded:
            logger.warning("scene_not_loaded", scene=getattr(scene, "name", None))
            self.refresh()
            return 0

        seen: set[str] = set()
        for obj in self._targets(scene, factory.host, include_persistent_area):
            for component in obj.get_components():
                if component.type_name in seen:
                    continue
                if skip_transform and isinstance(component, Transform):
                    continue
                seen.add(component.type_name)
                self.entries.append(factory.create(component))

        logger.info(
            "scene_components_indexed",
            scene=scene.name,
            component_types=len(self.entries),
        )
        self.refresh()
        return len(self.entries)

    def _targets(
        self,
        scene: Scene,
        host: "EditorHost",
        include_persistent_area: bool,
    ) -> Iterator[GameObject]:
        yield from iter_scene_objects(scene)
        if not include_persistent_area:
            return

        persistent = host.persistent_scene()
        if persistent is not None and persistent is not scene:
            yield from iter_scene_objects(persistent)

    def find_representatives_of_type(
        self,
        type_name: str,
        scene: Optional[Scene],
        factory: "EntryFactory",
        into: Optional[EntryService] = None,
        include_persistent_area: bool = True,
    ) -> list[Entry]:
        """
        Collect one entry per object carrying a component of ``type_name``.

        Args:
            type_name: Component type to look for
            scene: Scene to traverse
            factory: Factory creating the entries
            into: Service receiving the entries; it is cleared first
            include_persistent_area: Also visit the persistent holding area

        Returns:
            Game object entries in traversal order
        """
        if into is not None:
            into.entries.clear()

        found: list[Entry] = []
        if scene is None or not scene.is_valid or not scene.is_loaded:
            logger.warning("scene_not_loaded", scene=getattr(scene, "name", None))
        else:
            for obj in self._targets(scene, factory.host, include_persistent_area):
                if obj.get_component(type_name) is not None:
                    found.append(factory.create(obj))

        if into is not None:
            into.entries.extend(found)
            into.refresh()
        return found


@register_service_type
class ComponentListService(EntryService):
    """Objects found by the last component search, in traversal order."""

    kind = "component_list"
    persistent = False

    def record_entry(self, entry: Entry, *args: Any) -> None:
        if self.find(entry.id) is not None:
            return
        self.entries.append(entry)
        self.refresh()
