"""Wires the host lifecycle hooks to the service registry."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Optional

from selection_tracker.config.settings import TrackerConfig
from selection_tracker.host.base import EditorHost
from selection_tracker.host.objects import GameObject, PrefabStage, Scene
from selection_tracker.models.entry import Entry
from selection_tracker.models.factory import EntryFactory
from selection_tracker.models.ref_state import RefState
from selection_tracker.preferences import keys
from selection_tracker.preferences.store import PreferenceStore
from selection_tracker.registry.persistence import ServiceRegistry
from selection_tracker.services.scene_components import SceneComponentsService
from selection_tracker.utils.logging import (
    clear_scan_context,
    get_logger,
    new_scan_id,
    set_scan_context,
)

logger = get_logger("bootstrap")


class Bootstrap:
    """
    Connects an editor host to a registry.

    Handles:
    1. Recording every selection change into history and most-visited
    2. Rebuilding the scene component index when scenes or prefab stages open
    3. Back/forward navigation through the history

    Scans run as coroutines on the host's main loop. Selections made by the
    navigation commands themselves are not recorded again unless the
    ``track-plain-objects`` preference is on.
    """

    def __init__(
        self,
        host: EditorHost,
        registry: ServiceRegistry,
        preferences: Optional[PreferenceStore] = None,
        config: Optional[TrackerConfig] = None,
    ) -> None:
        self.host = host
        self.registry = registry
        self.preferences = preferences or registry.preferences
        self.config = config or TrackerConfig()
        self.factory = EntryFactory(host, registry)

        self._installed = False
        self._navigating = False
        self._tasks: set[asyncio.Task] = set()

        if registry.host is not host:
            registry.bind(host)

    @classmethod
    def start(cls, host: EditorHost, config: TrackerConfig) -> "Bootstrap":
        """
        Load persisted state for ``config`` and hook into ``host``.

        Args:
            host: Editor host to observe
            config: Resolved tracker configuration

        Returns:
            An installed bootstrap
        """
        preferences = PreferenceStore.load(
            config.preferences_file,
            state_version=config.storage.state_version,
        )
        registry = ServiceRegistry(
            config.registry_file,
            preferences=preferences,
            host=host,
            state_version=config.storage.state_version,
        )
        registry.load()

        bootstrap = cls(host, registry, preferences, config)
        bootstrap.install()
        return bootstrap

    def shutdown(self) -> None:
        """Unhook from the host and flush the registry."""
        self.uninstall()
        self.registry.save(True)
        self.registry.close()

    # Hooks --------------------------------------------------------------

    def install(self) -> None:
        if self._installed:
            return
        self.host.selection_changed.add_listener(self.on_selection_changed)
        self.host.scene_loaded.add_listener(self.on_scene_loaded)
        self.host.scene_opened.add_listener(self.on_scene_opened)
        self.host.prefab_stage_opened.add_listener(self.on_prefab_stage_opened)
        self.host.prefab_stage_closing.add_listener(self.on_prefab_stage_closing)
        self._installed = True
        logger.debug("hooks_installed")

    def uninstall(self) -> None:
        if not self._installed:
            return
        self.host.selection_changed.remove_listener(self.on_selection_changed)
        self.host.scene_loaded.remove_listener(self.on_scene_loaded)
        self.host.scene_opened.remove_listener(self.on_scene_opened)
        self.host.prefab_stage_opened.remove_listener(self.on_prefab_stage_opened)
        self.host.prefab_stage_closing.remove_listener(self.on_prefab_stage_closing)
        self._installed = False
        logger.debug("hooks_uninstalled")

    def on_selection_changed(self) -> None:
        obj = self.host.active_object
        if obj is None:
            return

        if isinstance(obj, GameObject) and not self.preferences.get_toggle(keys.TRACK_SCENE_OBJECTS):
            return

        if self._navigating and not self.preferences.get_toggle(keys.TRACK_PLAIN_OBJECTS):
            return

        try:
            entry = self.factory.create(obj)
        except KeyError as e:
            # Objects the host cannot address are not tracked
            logger.warning("selection_not_addressable", name=obj.name, error=str(e))
            return

        self.registry.record_selection(entry)

    def on_scene_loaded(self, scene: Scene, mode: str = "single") -> None:
        self._schedule(self._scan_after_load(scene))

    def on_scene_opened(self, scene: Scene, mode: str = "single") -> None:
        self._schedule(self.scan_all_components_in_scene(scene))

    def on_prefab_stage_opened(self, stage: PrefabStage) -> None:
        self._schedule(self.scan_all_components_in_scene(stage.scene))

    def on_prefab_stage_closing(self, stage: PrefabStage) -> None:
        # The stage is still loaded here; index the scene that takes over
        self.rescan(self.host.active_scene)

    # Scans --------------------------------------------------------------

    async def _scan_after_load(self, scene: Scene) -> int:
        # Loaded objects are only reachable from the next frame on
        await self.host.next_frame()
        return await self.scan_all_components_in_scene(scene)

    async def scan_all_components_in_scene(self, scene: Optional[Scene]) -> int:
        """Rebuild the scene component index on the host's main loop."""
        await self.host.main_thread()
        return self.rescan(scene)

    def rescan(self, scene: Optional[Scene]) -> int:
        set_scan_context(new_scan_id(), scene.name if scene is not None else "")
        try:
            index = self.registry.get_service(SceneComponentsService)
            return index.rebuild(
                scene,
                self.factory,
                include_persistent_area=self.config.scan.include_persistent_area,
                skip_transform=self.config.scan.skip_transform,
            )
        finally:
            clear_scan_context()

    def _schedule(self, coro: Coroutine[Any, Any, Any]) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return None

        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_for_scans(self) -> None:
        """Wait until every scheduled scan has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # Navigation ---------------------------------------------------------

    def previous_selection(self) -> Optional[Entry]:
        entry = self.registry.jump_to_previous_selection()
        self._jump_to(entry)
        return entry

    def next_selection(self) -> Optional[Entry]:
        entry = self.registry.jump_to_next_selection()
        self._jump_to(entry)
        return entry

    def _jump_to(self, entry: Optional[Entry]) -> None:
        if entry is None:
            return

        obj = entry.ref
        if obj is not None:
            self._navigating = True
            try:
                self.host.select(obj)
            finally:
                self._navigating = False
            return

        if entry.ref_state & (RefState.UNLOADED | RefState.UNSTAGED):
            entry.ping()
            return

        logger.warning("jump_target_missing", name=entry.cached_name, state=int(entry.ref_state))
