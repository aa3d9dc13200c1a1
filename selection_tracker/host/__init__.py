"""Host boundary: the editor environment the tracker observes."""

from selection_tracker.host.base import EditorHost
from selection_tracker.host.memory import InMemoryHost
from selection_tracker.host.objects import (
    Asset,
    Component,
    GameObject,
    HostObject,
    PrefabStage,
    Scene,
    Transform,
)

__all__ = [
    "EditorHost",
    "InMemoryHost",
    "HostObject",
    "GameObject",
    "Component",
    "Transform",
    "Asset",
    "Scene",
    "PrefabStage",
]
