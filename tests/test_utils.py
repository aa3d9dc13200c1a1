"""
Tests for events, blob storage and atomic writes.
"""

import pytest

from selection_tracker.utils import AtomicWriteError, Event, atomic_write, atomic_write_text
from selection_tracker.utils.storage import read_blob, write_blob


class TestEvent:
    def test_listeners_called_in_order(self):
        event = Event()
        calls = []
        event.add_listener(lambda value: calls.append(("first", value)))
        event.add_listener(lambda value: calls.append(("second", value)))

        event.invoke(3)

        assert calls == [("first", 3), ("second", 3)]

    def test_duplicate_subscription_is_ignored(self):
        event = Event()
        calls = []

        def listener():
            calls.append(1)

        event.add_listener(listener)
        event.add_listener(listener)
        event.invoke()

        assert calls == [1]
        assert listener in event

    def test_listener_may_unsubscribe_while_notified(self):
        event = Event()
        calls = []

        def once():
            calls.append("once")
            event.remove_listener(once)

        event.add_listener(once)
        event.add_listener(lambda: calls.append("always"))

        event.invoke()
        event.invoke()

        assert calls == ["once", "always", "always"]


class TestBlobs:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "state" / "blob.json"
        write_blob(path, "registry", "1.0", {"services": []})

        assert read_blob(path, "registry", "1.0").unwrap() == {"services": []}

    def test_kind_mismatch(self, tmp_path):
        path = tmp_path / "blob.json"
        write_blob(path, "preferences", "1.0", {})

        error = read_blob(path, "registry", "1.0").unwrap_err()

        assert "expected kind" in error.message

    def test_missing(self, tmp_path):
        assert read_blob(tmp_path / "none.json", "registry", "1.0").is_err()

    def test_missing_data_section(self, tmp_path):
        path = tmp_path / "blob.json"
        path.write_text('{"kind": "registry", "version": "1.0"}')

        assert read_blob(path, "registry", "1.0").is_err()


class TestAtomicWrite:
    def test_write_text(self, tmp_path):
        path = tmp_path / "nested" / "file.txt"
        atomic_write_text(path, "hello")
        assert path.read_text() == "hello"

    def test_failure_keeps_original(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("original")

        with pytest.raises(AtomicWriteError):
            with atomic_write(path) as f:
                f.write("partial")
                raise RuntimeError("interrupted")

        assert path.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]
