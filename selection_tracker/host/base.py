"""Abstract base class for the editor host the tracker is embedded in."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from selection_tracker.host.objects import Asset, GameObject, HostObject, Scene
from selection_tracker.utils.events import Event
from selection_tracker.utils.logging import get_logger

logger = get_logger("host.base")

PERSISTENT_MARKER_NAME = "TempForDDOL"


class EditorHost(ABC):
    """
    Everything the tracker needs from the host environment.

    A host is responsible for:
    1. Object identity: stable global ids and re-resolution of those ids
    2. The scene graph: active scene, loaded state, the persistent holding area
    3. Editor actions: selection, ping, opening assets and scripts
    4. Lifecycle hooks and cooperative scheduling on its main loop

    Hook signatures:
        selection_changed()
        scene_loaded(scene, mode)
        scene_opened(scene, mode)
        prefab_stage_opened(stage)
        prefab_stage_closing(stage)
    """

    def __init__(self) -> None:
        self.selection_changed = Event()
        self.scene_loaded = Event()
        self.scene_opened = Event()
        self.prefab_stage_opened = Event()
        self.prefab_stage_closing = Event()

    # Identity -----------------------------------------------------------

    @abstractmethod
    def global_object_id(self, obj: HostObject) -> str:
        """Stable identifier for ``obj`` that survives process restarts."""
        ...

    @abstractmethod
    def resolve(self, global_id: str) -> Optional[HostObject]:
        """Live object for ``global_id``, or None when it is not available."""
        ...

    # Scenes -------------------------------------------------------------

    @property
    @abstractmethod
    def active_scene(self) -> Optional[Scene]:
        ...

    @property
    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def is_scene_loaded(self, scene_path: str) -> bool:
        ...

    @abstractmethod
    def create_game_object(self, name: str) -> GameObject:
        ...

    @abstractmethod
    def dont_destroy_on_load(self, obj: GameObject) -> None:
        """Move ``obj`` into the persistent holding area."""
        ...

    @abstractmethod
    def destroy_immediate(self, obj: GameObject) -> None:
        ...

    def persistent_scene(self) -> Optional[Scene]:
        """
        Locate the holding area for objects that survive scene loads.

        The area cannot be enumerated directly: a throwaway marker is moved
        into it, its scene is read and the marker is destroyed right away.
        Only available while the host is playing.
        """
        if not self.is_playing:
            return None

        marker = self.create_game_object(PERSISTENT_MARKER_NAME)
        self.dont_destroy_on_load(marker)
        scene = marker.scene
        self.destroy_immediate(marker)

        if scene is None or not scene.is_valid:
            logger.debug("persistent_scene_unavailable")
            return None
        return scene

    # Editor actions -----------------------------------------------------

    @property
    @abstractmethod
    def active_object(self) -> Optional[HostObject]:
        ...

    @abstractmethod
    def select(self, obj: HostObject) -> None:
        ...

    @abstractmethod
    def ping(self, obj: HostObject) -> None:
        """Highlight ``obj`` in its native view."""
        ...

    @abstractmethod
    def ping_scene(self, scene_path: str) -> None:
        """Highlight the scene asset stored at ``scene_path``."""
        ...

    @abstractmethod
    def focus_project_window(self) -> None:
        ...

    @abstractmethod
    def open_asset(self, asset: Asset) -> None:
        ...

    @abstractmethod
    def open_script(self, script_path: str) -> None:
        ...

    # Scheduling ---------------------------------------------------------

    @abstractmethod
    async def main_thread(self) -> None:
        """Resume on the host's main loop."""
        ...

    @abstractmethod
    async def next_frame(self) -> None:
        """Suspend until the next host update tick."""
        ...
