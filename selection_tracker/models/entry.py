"""Reference entries: serializable, possibly stale records of observed objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

from selection_tracker.host.objects import Component, GameObject, HostObject
from selection_tracker.models.ref_state import RefState
from selection_tracker.utils.events import Event
from selection_tracker.utils.logging import get_logger

if TYPE_CHECKING:
    from selection_tracker.host.base import EditorHost
    from selection_tracker.registry.persistence import ServiceRegistry

logger = get_logger("models.entry")

ENTRY_TYPES: dict[str, type["Entry"]] = {}


def register_entry_type(cls: type["Entry"]) -> type["Entry"]:
    """Class decorator making an entry variant loadable from its ``kind`` tag."""
    ENTRY_TYPES[cls.kind] = cls
    return cls


class Entry:
    """
    A lightweight reference to an object the user touched.

    The entry owns only the object's global id and a snapshot of its display
    data. The live object is looked up through a resolver bound at runtime, so
    an entry loaded from disk stays usable (with cached data) while its object
    is unloaded, destroyed or deleted.
    """

    kind = "entry"

    def __init__(
        self,
        id: str,
        cached_name: str = "",
        cached_icon: str = "",
        cached_ref_state: RefState = RefState.ALL,
        is_favorite: bool = False,
    ) -> None:
        self._id = id
        self.cached_name = cached_name
        self.cached_icon = cached_icon
        self._cached_ref_state = RefState(cached_ref_state)
        self._is_favorite = is_favorite
        self.on_favorite_changed = Event()

        self._resolver: Optional[Callable[[str], Optional[HostObject]]] = None
        self._host: Optional[EditorHost] = None
        self._registry: Optional[ServiceRegistry] = None

    @property
    def id(self) -> str:
        return self._id

    # Binding ------------------------------------------------------------

    def bind(
        self,
        host: "EditorHost",
        registry: Optional["ServiceRegistry"] = None,
    ) -> None:
        """Attach the runtime collaborators used for resolution and actions."""
        self._host = host
        self._resolver = host.resolve
        if registry is not None:
            self._registry = registry

    @property
    def is_bound(self) -> bool:
        return self._resolver is not None

    # Resolution ---------------------------------------------------------

    @property
    def ref(self) -> Optional[HostObject]:
        """The live object, or None when it cannot be resolved right now."""
        return self.refresh()

    def refresh(self) -> Optional[HostObject]:
        """Re-resolve the live object and update the cached display snapshot."""
        if self._resolver is None:
            return None
        obj = self._resolver(self._id)
        if obj is not None:
            self._refresh_cache(obj)
        return obj

    def _refresh_cache(self, obj: HostObject) -> None:
        self.cached_name = obj.name
        self.cached_icon = obj.icon

    @property
    def ref_state(self) -> RefState:
        if self._host is None:
            return self._cached_ref_state
        self._cached_ref_state = self._derive_ref_state()
        return self._cached_ref_state

    def _derive_ref_state(self) -> RefState:
        return self._cached_ref_state

    def snapshot(self) -> RefState:
        """Refresh the cached display data and state; returns the state."""
        return self.ref_state

    @property
    def display_name(self) -> str:
        self.refresh()
        return self.cached_name

    @property
    def icon(self) -> str:
        self.refresh()
        return self.cached_icon

    # Favorites ----------------------------------------------------------

    @property
    def is_favorite(self) -> bool:
        return self._is_favorite

    @is_favorite.setter
    def is_favorite(self, value: bool) -> None:
        value = bool(value)
        if value == self._is_favorite:
            return
        self._is_favorite = value
        self.on_favorite_changed.invoke(value)

    # Behavior -----------------------------------------------------------

    def duplicates(self, other: Optional["Entry"]) -> bool:
        """Whether ``other`` refers to the same logical thing as this entry."""
        return other is not None and other.id == self.id

    def ping(self) -> None:
        logger.warning("ping_not_supported", kind=self.kind, id=self._id)

    def open(self) -> None:
        logger.warning("open_not_supported", kind=self.kind, id=self._id)

    def _require_host(self, action: str) -> Optional["EditorHost"]:
        if self._host is None:
            logger.warning(
                "entry_not_bound",
                action=action,
                kind=self.kind,
                name=self.cached_name,
            )
        return self._host

    # Serialization ------------------------------------------------------

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            "kind": self.kind,
            "id": self._id,
            "name": self.cached_name,
            "icon": self.cached_icon,
            "ref_state": int(self._cached_ref_state),
            "is_favorite": self._is_favorite,
        }
        data.update(self._extra_fields())
        return data

    def _extra_fields(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: dict) -> "Entry":
        """
        Create the right entry variant from a dictionary.

        Raises:
            KeyError: If the kind tag or a required field is missing or unknown
        """
        kind = data["kind"]
        entry_cls = ENTRY_TYPES.get(kind)
        if entry_cls is None:
            raise KeyError(f"Unknown entry kind: {kind}")
        return entry_cls._from_fields(data)

    @classmethod
    def _from_fields(cls, data: dict) -> "Entry":
        return cls(
            id=data["id"],
            cached_name=data.get("name", ""),
            cached_icon=data.get("icon", ""),
            cached_ref_state=RefState(data.get("ref_state", 0)),
            is_favorite=data.get("is_favorite", False),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.cached_name!r}, id={self._id!r})"


class SceneEntry(Entry):
    """Shared state derivation for objects that live in a scene hierarchy."""

    def __init__(
        self,
        id: str,
        scene_path: str = "",
        staged: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(id, **kwargs)
        self.scene_path = scene_path
        self.staged = staged

    def _owner(self, obj: HostObject) -> Optional[GameObject]:
        return obj if isinstance(obj, GameObject) else None

    def _refresh_cache(self, obj: HostObject) -> None:
        super()._refresh_cache(obj)
        owner = self._owner(obj)
        if owner is not None and owner.scene is not None:
            self.scene_path = owner.scene.path
            self.staged = owner.scene.is_prefab_stage

    def _derive_ref_state(self) -> RefState:
        obj = self.ref
        if obj is not None:
            availability = RefState.STAGED if self.staged else RefState.LOADED
        elif self.scene_path and self._host.is_scene_loaded(self.scene_path):
            availability = RefState.DESTROYED
        elif self.staged:
            availability = RefState.UNSTAGED
        else:
            availability = RefState.UNLOADED
        return RefState.GAME_OBJECT | availability

    def _extra_fields(self) -> dict[str, Any]:
        return {"scene_path": self.scene_path, "staged": self.staged}

    @classmethod
    def _from_fields(cls, data: dict) -> "Entry":
        entry = super()._from_fields(data)
        entry.scene_path = data.get("scene_path", "")
        entry.staged = data.get("staged", False)
        return entry


@register_entry_type
class GameObjectEntry(SceneEntry):
    """Entry for a game object in a scene or prefab context."""

    kind = "game_object"

    def ping(self) -> None:
        host = self._require_host("ping")
        if host is None:
            return

        obj = self.ref
        if obj is not None:
            host.ping(obj)
            return

        if self.ref_state & (RefState.UNLOADED | RefState.UNSTAGED) and self.scene_path:
            host.ping_scene(self.scene_path)
            return

        logger.warning("ping_target_destroyed", name=self.cached_name)

    def open(self) -> None:
        host = self._require_host("open")
        if host is None:
            return

        obj = self.ref
        source = getattr(obj, "prefab_source", None)
        if source is None:
            logger.warning("no_source_to_open", name=self.cached_name)
            return
        host.open_asset(source)


@register_entry_type
class ComponentEntry(SceneEntry):
    """
    Entry for a component.

    Component entries are deduplicated by component type, so an index holds
    one representative per type. When the component itself is gone, pinging
    searches the open scenes for other objects carrying the same type.
    """

    kind = "component"

    def __init__(
        self,
        id: str,
        component_type: str = "",
        script_path: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(id, **kwargs)
        self.component_type = component_type
        self.script_path = script_path

    @property
    def display_name(self) -> str:
        self.refresh()
        return self.component_type or self.cached_name

    def _owner(self, obj: HostObject) -> Optional[GameObject]:
        return obj.game_object if isinstance(obj, Component) else None

    def _refresh_cache(self, obj: HostObject) -> None:
        super()._refresh_cache(obj)
        if isinstance(obj, Component):
            self.component_type = obj.type_name
            self.script_path = obj.script_path

    def duplicates(self, other: Optional[Entry]) -> bool:
        if not isinstance(other, ComponentEntry):
            return False
        return bool(self.component_type) and other.component_type == self.component_type

    def ping(self) -> None:
        host = self._require_host("ping")
        if host is None:
            return

        component = self.ref
        if component is not None and component.game_object is not None:
            host.ping(component.game_object)
            return

        if self._registry is None:
            logger.warning(
                "component_search_unavailable",
                component_type=self.component_type,
            )
            return

        self._registry.find_objects_with_component(self.component_type)

    def open(self) -> None:
        host = self._require_host("open")
        if host is None:
            return

        self.refresh()
        if not self.script_path:
            logger.warning("builtin_component_cannot_open", component_type=self.component_type)
            return

        host.focus_project_window()
        host.open_script(self.script_path)

    def _extra_fields(self) -> dict[str, Any]:
        data = super()._extra_fields()
        data["component_type"] = self.component_type
        data["script_path"] = self.script_path
        return data

    @classmethod
    def _from_fields(cls, data: dict) -> "Entry":
        entry = super()._from_fields(data)
        entry.component_type = data.get("component_type", "")
        entry.script_path = data.get("script_path")
        return entry


@register_entry_type
class NormalAssetEntry(Entry):
    """Entry for a project asset; it is either present or deleted."""

    kind = "asset"

    def __init__(self, id: str, asset_path: str = "", **kwargs: Any) -> None:
        kwargs.setdefault("cached_ref_state", RefState.ASSET)
        super().__init__(id, **kwargs)
        self.asset_path = asset_path

    def _refresh_cache(self, obj: HostObject) -> None:
        super()._refresh_cache(obj)
        path = getattr(obj, "path", None)
        if path:
            self.asset_path = path

    @property
    def display_name(self) -> str:
        if self.ref_state & RefState.DELETED:
            return f"<s>{self.cached_name}</s>"
        return self.cached_name

    def _derive_ref_state(self) -> RefState:
        return RefState.ASSET if self.ref is not None else RefState.DELETED

    def ping(self) -> None:
        host = self._require_host("ping")
        if host is None:
            return

        host.focus_project_window()
        obj = self.ref
        if obj is None:
            logger.warning("ping_target_deleted", name=self.cached_name, path=self.asset_path)
            return
        host.ping(obj)

    def open(self) -> None:
        host = self._require_host("open")
        if host is None:
            return

        obj = self.ref
        if obj is None:
            logger.warning("open_target_deleted", name=self.cached_name, path=self.asset_path)
            return
        host.open_asset(obj)

    def _extra_fields(self) -> dict[str, Any]:
        return {"asset_path": self.asset_path}

    @classmethod
    def _from_fields(cls, data: dict) -> "Entry":
        entry = super()._from_fields(data)
        entry.asset_path = data.get("asset_path", "")
        return entry
