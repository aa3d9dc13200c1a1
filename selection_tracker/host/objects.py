"""Object model of the addressable graph exposed by an editor host.

Host adapters wrap their native handles in these classes; the in-memory host
uses them directly.
"""

from __future__ import annotations

from typing import Optional


class HostObject:
    """Anything the host can address with a global object id."""

    icon: str = "DefaultAsset Icon"

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Scene:
    """
    A container of root game objects.

    Scenes are identified by ``path``; the same path may be loaded, unloaded
    and loaded again over the lifetime of the host.
    """

    def __init__(
        self,
        name: str,
        path: str = "",
        is_valid: bool = True,
        is_prefab_stage: bool = False,
    ) -> None:
        self.name = name
        self.path = path or f"Assets/Scenes/{name}.unity"
        self.is_valid = is_valid
        self.is_loaded = False
        self.is_prefab_stage = is_prefab_stage
        self.roots: list[GameObject] = []

    def get_root_game_objects(self) -> list["GameObject"]:
        return list(self.roots)

    def __repr__(self) -> str:
        return f"Scene({self.name!r}, loaded={self.is_loaded})"


class Component(HostObject):
    """A behavior attached to a game object."""

    icon = "cs Script Icon"

    def __init__(
        self,
        type_name: Optional[str] = None,
        script_path: Optional[str] = None,
    ) -> None:
        super().__init__(type_name or type(self).__name__)
        self.type_name = type_name or type(self).__name__
        # Only user scripts have a backing source file
        self.script_path = script_path
        self.game_object: Optional[GameObject] = None


class Transform(Component):
    """Placement behavior every game object carries."""

    icon = "Transform Icon"

    def __init__(self) -> None:
        super().__init__("Transform")


class GameObject(HostObject):
    """A node of a scene hierarchy."""

    icon = "GameObject Icon"

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.parent: Optional[GameObject] = None
        self.children: list[GameObject] = []
        self.scene: Optional[Scene] = None
        self.prefab_source: Optional[Asset] = None
        self.components: list[Component] = []
        self._attach(Transform())

    def _attach(self, component: Component) -> Component:
        component.game_object = self
        self.components.append(component)
        return component

    @property
    def transform(self) -> Transform:
        return self.components[0]

    def get_components(self) -> list[Component]:
        return list(self.components)

    def get_component(self, type_name: str) -> Optional[Component]:
        for component in self.components:
            if component.type_name == type_name:
                return component
        return None

    def iter_hierarchy(self):
        """Yield this object and its descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_hierarchy()


class Asset(HostObject):
    """A project asset addressed by its path."""

    def __init__(self, name: str, path: str, icon: Optional[str] = None) -> None:
        super().__init__(name)
        self.path = path
        if icon:
            self.icon = icon


class PrefabStage:
    """An isolated editing context for a prefab asset."""

    def __init__(self, asset: Asset) -> None:
        self.asset = asset
        self.scene = Scene(
            asset.name,
            path=asset.path,
            is_prefab_stage=True,
        )
