"""Service registry for the tracked selections.

This module owns the tracking services:
- Creates at most one service per kind, on first request
- Saves the full state after every persistent mutation
- Prunes destroyed and unloaded entries before saving
- Forwards selections, favorites and navigation to the right service
"""

from selection_tracker.registry.persistence import (
    DEFAULT_SERVICES,
    ServiceRegistry,
)

__all__ = [
    "ServiceRegistry",
    "DEFAULT_SERVICES",
]
