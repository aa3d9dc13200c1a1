"""In-memory editor host.

Keeps the whole object graph in process: scenes can be loaded and unloaded,
objects destroyed and assets deleted, and every editor action is recorded so
callers can inspect what the tracker asked the host to do.
"""

from __future__ import annotations

import asyncio
import itertools
import uuid
from typing import Optional

from selection_tracker.host.base import EditorHost
from selection_tracker.host.objects import (
    Asset,
    Component,
    GameObject,
    HostObject,
    PrefabStage,
    Scene,
)
from selection_tracker.utils.logging import get_logger

logger = get_logger("host.memory")

PERSISTENT_SCENE_NAME = "DontDestroyOnLoad"

# Identifier types used inside global object ids
ID_TYPE_ASSET = 1
ID_TYPE_SCENE_OBJECT = 2


class InMemoryHost(EditorHost):
    """Editor host backed by plain Python objects."""

    def __init__(self, is_playing: bool = False) -> None:
        super().__init__()
        self._is_playing = is_playing
        self._ids: dict[HostObject, str] = {}
        self._objects: dict[str, HostObject] = {}
        self._local_ids = itertools.count(1)
        self._scene_guids: dict[str, str] = {}
        self._scenes: list[Scene] = []
        self._active_scene: Optional[Scene] = None
        self._active_object: Optional[HostObject] = None
        self._stages: list[PrefabStage] = []

        self._persistent = Scene(PERSISTENT_SCENE_NAME, path=PERSISTENT_SCENE_NAME)
        self._persistent.is_loaded = True

        self.frame = 0
        # Editor actions, newest last
        self.pinged: list[HostObject] = []
        self.pinged_scenes: list[str] = []
        self.opened_assets: list[Asset] = []
        self.opened_scripts: list[str] = []
        self.project_window_focus_count = 0

    # Identity -----------------------------------------------------------

    def global_object_id(self, obj: HostObject) -> str:
        gid = self._ids.get(obj)
        if gid is None:
            raise KeyError(f"{obj!r} is not registered with this host")
        return gid

    def resolve(self, global_id: str) -> Optional[HostObject]:
        obj = self._objects.get(global_id)
        if obj is None:
            return None

        scene = _scene_of(obj)
        if scene is not None and not scene.is_loaded:
            return None
        return obj

    def _register(self, obj: HostObject, id_type: int, guid: str) -> str:
        gid = f"GlobalObjectId_V1-{id_type}-{guid}-{next(self._local_ids)}-0"
        self._ids[obj] = gid
        self._objects[gid] = obj
        return gid

    def _unregister(self, obj: HostObject) -> None:
        gid = self._ids.pop(obj, None)
        if gid is not None:
            self._objects.pop(gid, None)

    def _scene_guid(self, scene: Scene) -> str:
        if scene.path not in self._scene_guids:
            self._scene_guids[scene.path] = uuid.uuid4().hex
        return self._scene_guids[scene.path]

    # Scenes -------------------------------------------------------------

    @property
    def active_scene(self) -> Optional[Scene]:
        return self._active_scene

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    def set_playing(self, playing: bool) -> None:
        self._is_playing = playing

    @property
    def loaded_scenes(self) -> list[Scene]:
        return [scene for scene in self._scenes if scene.is_loaded]

    def is_scene_loaded(self, scene_path: str) -> bool:
        if scene_path == self._persistent.path:
            return True
        return any(
            scene.path == scene_path and scene.is_loaded
            for scene in self._scenes
        )

    def create_scene(self, name: str, path: str = "") -> Scene:
        scene = Scene(name, path=path)
        self._scenes.append(scene)
        return scene

    def load_scene(self, scene: Scene, mode: str = "single") -> None:
        """Load ``scene`` at runtime and fire ``scene_loaded``."""
        self._activate(scene, mode)
        self.scene_loaded.invoke(scene, mode)

    def open_scene(self, scene: Scene, mode: str = "single") -> None:
        """Open ``scene`` in the editor and fire ``scene_opened``."""
        self._activate(scene, mode)
        self.scene_opened.invoke(scene, mode)

    def _activate(self, scene: Scene, mode: str) -> None:
        if scene not in self._scenes:
            self._scenes.append(scene)
        if mode == "single":
            for other in self._scenes:
                if other is not scene:
                    other.is_loaded = False
        scene.is_loaded = True
        self._active_scene = scene
        logger.debug("scene_activated", scene=scene.name, mode=mode)

    def unload_scene(self, scene: Scene) -> None:
        scene.is_loaded = False
        if self._active_scene is scene:
            loaded = self.loaded_scenes
            self._active_scene = loaded[0] if loaded else None

    def create_game_object(
        self,
        name: str,
        scene: Optional[Scene] = None,
        parent: Optional[GameObject] = None,
    ) -> GameObject:
        obj = GameObject(name)
        if parent is not None:
            parent.children.append(obj)
            obj.parent = parent
            obj.scene = parent.scene
        else:
            # Without an active scene new objects land in the holding area
            target = scene or self._active_scene or self._persistent
            target.roots.append(obj)
            obj.scene = target

        guid = self._scene_guid(obj.scene)
        self._register(obj, ID_TYPE_SCENE_OBJECT, guid)
        self._register(obj.transform, ID_TYPE_SCENE_OBJECT, guid)
        return obj

    def add_component(
        self,
        obj: GameObject,
        type_name: str,
        script_path: Optional[str] = None,
    ) -> Component:
        component = obj._attach(Component(type_name, script_path=script_path))
        self._register(component, ID_TYPE_SCENE_OBJECT, self._scene_guid(obj.scene))
        return component

    def remove_component(self, component: Component) -> None:
        owner = component.game_object
        if owner is not None and component in owner.components:
            owner.components.remove(component)
        self._unregister(component)

    def dont_destroy_on_load(self, obj: GameObject) -> None:
        if obj.parent is not None:
            raise ValueError("Only root game objects can be made persistent")
        if obj.scene is not None and obj in obj.scene.roots:
            obj.scene.roots.remove(obj)
        self._persistent.roots.append(obj)
        for node in obj.iter_hierarchy():
            node.scene = self._persistent

    def destroy_immediate(self, obj: GameObject) -> None:
        if obj.parent is not None:
            obj.parent.children.remove(obj)
            obj.parent = None
        elif obj.scene is not None and obj in obj.scene.roots:
            obj.scene.roots.remove(obj)

        for node in list(obj.iter_hierarchy()):
            for component in node.components:
                self._unregister(component)
            self._unregister(node)
            if self._active_object is node:
                self._active_object = None

    def destroy(self, obj: GameObject) -> None:
        self.destroy_immediate(obj)

    # Assets -------------------------------------------------------------

    def create_asset(self, name: str, path: str, icon: Optional[str] = None) -> Asset:
        asset = Asset(name, path, icon=icon)
        self._register(asset, ID_TYPE_ASSET, uuid.uuid4().hex)
        return asset

    def delete_asset(self, asset: Asset) -> None:
        self._unregister(asset)
        if self._active_object is asset:
            self._active_object = None

    # Prefab stages ------------------------------------------------------

    def open_prefab_stage(self, asset: Asset) -> PrefabStage:
        stage = PrefabStage(asset)
        stage.scene.is_loaded = True
        self._scenes.append(stage.scene)
        self._stages.append(stage)
        self.prefab_stage_opened.invoke(stage)
        return stage

    def close_prefab_stage(self, stage: PrefabStage) -> None:
        self.prefab_stage_closing.invoke(stage)
        stage.scene.is_loaded = False
        if stage in self._stages:
            self._stages.remove(stage)

    # Editor actions -----------------------------------------------------

    @property
    def active_object(self) -> Optional[HostObject]:
        return self._active_object

    def select(self, obj: Optional[HostObject]) -> None:
        self._active_object = obj
        self.selection_changed.invoke()

    def ping(self, obj: HostObject) -> None:
        self.pinged.append(obj)
        logger.debug("object_pinged", name=obj.name)

    def ping_scene(self, scene_path: str) -> None:
        self.pinged_scenes.append(scene_path)
        logger.debug("scene_pinged", path=scene_path)

    def focus_project_window(self) -> None:
        self.project_window_focus_count += 1

    def open_asset(self, asset: Asset) -> None:
        self.opened_assets.append(asset)
        logger.debug("asset_opened", path=asset.path)

    def open_script(self, script_path: str) -> None:
        self.opened_scripts.append(script_path)
        logger.debug("script_opened", path=script_path)

    # Scheduling ---------------------------------------------------------

    async def main_thread(self) -> None:
        await asyncio.sleep(0)

    async def next_frame(self) -> None:
        await asyncio.sleep(0)
        self.frame += 1


def _scene_of(obj: HostObject) -> Optional[Scene]:
    if isinstance(obj, Component):
        owner = obj.game_object
        return owner.scene if owner is not None else None
    if isinstance(obj, GameObject):
        return obj.scene
    return None
