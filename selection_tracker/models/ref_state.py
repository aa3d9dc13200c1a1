"""Availability and kind classification of tracked references."""

from __future__ import annotations

from enum import IntFlag
from typing import Iterable


class RefState(IntFlag):
    """
    Flags describing what an entry points at and whether it is reachable.

    Availability flags (LOADED, UNLOADED, DESTROYED, DELETED) are mutually
    exclusive at any instant; STAGED and UNSTAGED are their counterparts for
    objects living in a prefab editing context. ASSET and GAME_OBJECT tell the
    kind of thing and combine freely with availability.

    ALL is the empty value. Used as a filter it means "no restriction" and is
    checked by equality, never by flag containment.
    """

    ALL = 0
    LOADED = 1
    STAGED = 2
    UNLOADED = 4
    UNSTAGED = 8
    DESTROYED = 16
    DELETED = 32
    ASSET = 64
    GAME_OBJECT = 128

    @property
    def is_available(self) -> bool:
        """Whether the referenced object can currently be resolved."""
        return bool(self & (RefState.LOADED | RefState.STAGED | RefState.ASSET))

    @classmethod
    def parse(cls, names: Iterable[str]) -> "RefState":
        """Combine flag names such as ``["loaded", "asset"]`` into one value."""
        state = cls.ALL
        for name in names:
            key = name.strip().upper().replace("-", "_")
            if key not in cls.__members__:
                raise ValueError(f"Unknown ref state: {name}")
            state |= cls[key]
        return state


def passes_filter(
    state: RefState,
    window_filter: RefState,
    preference_filter: RefState,
) -> bool:
    """
    Two-tier filter check used by every entry listing.

    A window filter other than ALL passes states whose flags it fully
    contains. A window filter equal to ALL passes only when the preference
    filter is ALL as well.
    """
    if window_filter != RefState.ALL and (window_filter & state) == state:
        return True

    if window_filter == RefState.ALL and preference_filter == RefState.ALL:
        return True

    return False
