"""Utility modules for selection-tracker."""

from selection_tracker.utils.atomic import (
    AtomicWriteError,
    atomic_write,
    atomic_write_text,
)
from selection_tracker.utils.events import Event
from selection_tracker.utils.logging import (
    clear_scan_context,
    configure_logging,
    get_logger,
    new_scan_id,
    set_scan_context,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "new_scan_id",
    "set_scan_context",
    "clear_scan_context",
    # Storage
    "AtomicWriteError",
    "atomic_write",
    "atomic_write_text",
    # Events
    "Event",
]
