"""Process-wide preference toggles and the RefState filter."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from selection_tracker.config.settings import STATE_VERSION
from selection_tracker.models.ref_state import RefState
from selection_tracker.preferences.keys import DEFAULT_TOGGLES
from selection_tracker.utils.events import Event
from selection_tracker.utils.logging import get_logger
from selection_tracker.utils.storage import read_blob, write_blob

logger = get_logger("preferences.store")

BLOB_KIND = "preferences"


class PreferenceStore:
    """
    Toggle and filter state shared by the registry, services and views.

    Every change made through ``set_toggle`` or ``set_ref_state_filter`` fires
    ``on_updated`` and flushes the store to disk when it has a path.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        state_version: str = STATE_VERSION,
    ) -> None:
        """
        Initialize the store with defaults.

        Args:
            path: Blob location; None keeps the store in memory only
            state_version: Version written to and expected from the blob
        """
        self.path = Path(path) if path else None
        self.state_version = state_version
        self.on_updated = Event()
        self._toggles: dict[str, bool] = dict(DEFAULT_TOGGLES)
        self._ref_state_filter = RefState.ALL

    @classmethod
    def load(cls, path: Path, state_version: str = STATE_VERSION) -> "PreferenceStore":
        """Create a store from the blob at ``path``, falling back to defaults."""
        store = cls(path, state_version=state_version)
        store._load()
        return store

    def _load(self) -> None:
        result = read_blob(self.path, BLOB_KIND, self.state_version)
        if result.is_err():
            error = result.unwrap_err()
            if self.path.exists():
                logger.warning("preferences_load_failed", error=str(error))
            else:
                logger.info("preferences_not_found", path=str(self.path))
            return

        self.apply_dict(result.unwrap())
        logger.info("preferences_loaded", path=str(self.path))

    # Toggles ------------------------------------------------------------

    @property
    def toggles(self) -> list[tuple[str, bool]]:
        return list(self._toggles.items())

    def get_toggle(self, key: str) -> bool:
        """Value of ``key``; unknown keys read as False."""
        return self._toggles.get(key, False)

    def set_toggle(self, key: str, value: bool) -> None:
        """
        Change a toggle and publish the update.

        Raises:
            KeyError: If key is not a known preference
        """
        if key not in self._toggles:
            raise KeyError(f"Unknown preference: {key}")
        self._toggles[key] = bool(value)
        self.update_settings()

    # Filter -------------------------------------------------------------

    @property
    def ref_state_filter(self) -> RefState:
        return self._ref_state_filter

    @ref_state_filter.setter
    def ref_state_filter(self, value: RefState) -> None:
        self._ref_state_filter = RefState(value)

    def set_ref_state_filter(self, value: RefState) -> None:
        self.ref_state_filter = value
        self.update_settings()

    # Persistence --------------------------------------------------------

    def update_settings(self) -> None:
        """Notify listeners, then flush."""
        self.on_updated.invoke()
        self.save(True)

    def save(self, as_text: bool) -> None:
        if self.path is None:
            return
        write_blob(self.path, BLOB_KIND, self.state_version, self.to_dict(), as_text=as_text)

    def to_dict(self) -> dict:
        return {
            "toggles": [{"key": key, "value": value} for key, value in self._toggles.items()],
            "ref_state_filter": int(self._ref_state_filter),
        }

    def apply_dict(self, data: dict) -> None:
        """Overlay persisted values on the defaults; unknown keys are dropped."""
        toggles = data.get("toggles", [])
        if not isinstance(toggles, list):
            logger.warning("invalid_toggles_dropped", value=toggles)
            toggles = []

        for item in toggles:
            if not isinstance(item, dict):
                logger.warning("invalid_toggle_dropped", value=item)
                continue
            key = item.get("key")
            if key not in self._toggles:
                logger.warning("unknown_preference_dropped", key=key)
                continue
            self._toggles[key] = bool(item.get("value", False))

        if "ref_state_filter" in data:
            try:
                self._ref_state_filter = RefState(int(data["ref_state_filter"]))
            except (TypeError, ValueError):
                logger.warning("invalid_ref_state_filter", value=data["ref_state_filter"])
