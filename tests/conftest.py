"""
Pytest configuration and fixtures for selection-tracker tests.
"""

import sys

import pytest

from selection_tracker.host import InMemoryHost
from selection_tracker.models import EntryFactory
from selection_tracker.preferences import PreferenceStore
from selection_tracker.registry import ServiceRegistry
from selection_tracker.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Point structlog at the stream pytest captures for this test."""
    configure_logging(level="debug", stream=sys.stderr)
    yield


@pytest.fixture
def host():
    """Editor host with nothing loaded."""
    return InMemoryHost()


@pytest.fixture
def scene(host):
    """
    Open scene shaped like::

        Player   {Renderer, Collider}
          Body   {Renderer}
    """
    main = host.create_scene("Main")
    host.open_scene(main)

    player = host.create_game_object("Player", scene=main)
    host.add_component(player, "Renderer")
    host.add_component(player, "Collider")

    body = host.create_game_object("Body", parent=player)
    host.add_component(body, "Renderer")
    return main


@pytest.fixture
def player(scene):
    return scene.roots[0]


@pytest.fixture
def body(player):
    return player.children[0]


@pytest.fixture
def preferences(tmp_path):
    return PreferenceStore(tmp_path / "prefs.json")


@pytest.fixture
def registry(tmp_path, host, preferences):
    registry = ServiceRegistry(tmp_path / "registry.json", preferences=preferences, host=host)
    yield registry
    registry.close()


@pytest.fixture
def factory(host, registry):
    return EntryFactory(host, registry)


@pytest.fixture
def make_objects(host, scene):
    """Create named root objects in the open scene."""

    def _make(*names):
        return [host.create_game_object(name, scene=scene) for name in names]

    return _make
