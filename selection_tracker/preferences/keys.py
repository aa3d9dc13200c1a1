"""Preference toggle keys and their defaults."""

TRACK_PLAIN_OBJECTS = "track-plain-objects"
AUTO_REMOVE_DESTROYED = "auto-remove-destroyed"
AUTO_REMOVE_UNLOADED = "auto-remove-unloaded"
AUTO_REMOVE_DUPLICATES = "auto-remove-duplicates"
DRAW_FAVORITES_INDICATOR = "draw-favorites-indicator"
ORDER_BY_RECENCY = "order-by-recency"
BACKGROUND_RECORDING = "background-recording"
TRACK_SCENE_OBJECTS = "track-scene-objects"
SHOW_UNLOADED_OBJECTS = "show-unloaded-objects"
SHOW_DESTROYED_OBJECTS = "show-destroyed-objects"
SHOW_DETAIL_ON_HOVER = "show-detail-on-hover"

# Listing order is the order settings screens show them in
DEFAULT_TOGGLES: list[tuple[str, bool]] = [
    (TRACK_PLAIN_OBJECTS, False),
    (AUTO_REMOVE_DESTROYED, True),
    (AUTO_REMOVE_UNLOADED, False),
    (AUTO_REMOVE_DUPLICATES, True),
    (DRAW_FAVORITES_INDICATOR, False),
    (ORDER_BY_RECENCY, True),
    (BACKGROUND_RECORDING, False),
    (TRACK_SCENE_OBJECTS, True),
    (SHOW_UNLOADED_OBJECTS, True),
    (SHOW_DESTROYED_OBJECTS, False),
    (SHOW_DETAIL_ON_HOVER, True),
]
