"""Tests for glance.reactive.store — the render context and its lock."""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path

import pytest

from glance._errors import ConfigError, DataError
from glance.reactive.store import DataStore, RWLock, format_context, parse_context


# ---------------------------------------------------------------------------
# parse_context
# ---------------------------------------------------------------------------


class TestParseContext:
    """parse_context — only JSON objects are render contexts."""

    def test_object(self) -> None:
        assert parse_context('{"a": 1, "b": [true, null]}') == {"a": 1, "b": [True, None]}

    def test_bytes(self) -> None:
        assert parse_context(b'{"name": "Ada"}') == {"name": "Ada"}

    def test_preserves_key_order(self) -> None:
        assert list(parse_context('{"z": 1, "a": 2, "m": 3}')) == ["z", "a", "m"]

    @pytest.mark.parametrize("raw", ["[1, 2]", '"text"', "42", "null", "true"])
    def test_non_object_rejected(self, raw: str) -> None:
        with pytest.raises(DataError, match="JSON object"):
            parse_context(raw)

    def test_malformed_rejected(self) -> None:
        with pytest.raises(DataError, match="could not parse"):
            parse_context('{"a": ')

    def test_invalid_utf8_rejected(self) -> None:
        with pytest.raises(DataError):
            parse_context(b"\xff\xfe{")


# ---------------------------------------------------------------------------
# DataStore
# ---------------------------------------------------------------------------


class TestDataStore:
    """DataStore — replace, read, snapshot."""

    def test_defaults_to_empty_object(self) -> None:
        store = DataStore()
        assert store.snapshot() == {}

    def test_replace_installs_new_context(self) -> None:
        store = DataStore({"old": True})
        result = store.replace('{"name": "Ada"}')

        assert result == {"name": "Ada"}
        assert store.snapshot() == {"name": "Ada"}

    def test_replace_discards_previous_keys(self) -> None:
        store = DataStore({"a": 1, "b": 2})
        store.replace('{"c": 3}')
        assert store.snapshot() == {"c": 3}

    def test_rejected_replace_leaves_state_untouched(self) -> None:
        store = DataStore({"name": "Ada"})
        with pytest.raises(DataError):
            store.replace("not json")
        with pytest.raises(DataError):
            store.replace("[1]")
        assert store.snapshot() == {"name": "Ada"}

    def test_listener_called_once_per_replace(self) -> None:
        calls: list[int] = []
        store = DataStore(listener=lambda: calls.append(1))

        store.replace('{"a": 1}')
        store.replace('{"a": 2}')

        assert len(calls) == 2

    def test_listener_not_called_on_rejection(self) -> None:
        calls: list[int] = []
        store = DataStore(listener=lambda: calls.append(1))

        with pytest.raises(DataError):
            store.replace("{")

        assert calls == []

    def test_listener_sees_new_context(self) -> None:
        seen: list[dict] = []
        store = DataStore()
        store.set_listener(lambda: seen.append(store.snapshot()))

        store.replace('{"n": 7}')

        assert seen == [{"n": 7}]

    def test_snapshot_is_a_copy(self) -> None:
        store = DataStore({"items": [1, 2]})
        snap = store.snapshot()
        snap["items"].append(3)
        assert store.snapshot() == {"items": [1, 2]}

    def test_keys_in_insertion_order(self) -> None:
        store = DataStore({"b": 1, "a": {"nested": 2}})
        assert store.keys() == ("b", "a")

    def test_read_yields_live_context(self) -> None:
        store = DataStore({"name": "Ada"})
        with store.read() as data:
            assert data["name"] == "Ada"

    def test_dumps_pretty_prints(self) -> None:
        store = DataStore({"name": "Ada", "tags": ["x"]})
        text = store.dumps()
        assert text == format_context({"name": "Ada", "tags": ["x"]})
        assert '    "name": "Ada"' in text
        assert json.loads(text) == {"name": "Ada", "tags": ["x"]}

    def test_dumps_keeps_unicode(self) -> None:
        store = DataStore({"city": "Zürich"})
        assert "Zürich" in store.dumps()


class TestFromInitial:
    """DataStore.from_initial — startup literal or @file."""

    def test_empty_is_empty_object(self) -> None:
        assert DataStore.from_initial("").snapshot() == {}

    def test_literal(self) -> None:
        store = DataStore.from_initial('{"name": "Ada"}')
        assert store.snapshot() == {"name": "Ada"}

    def test_file_reference(self, tmp_path: Path) -> None:
        data_file = tmp_path / "data.json"
        data_file.write_text('{"from": "file"}')

        store = DataStore.from_initial(f"@{data_file}")

        assert store.snapshot() == {"from": "file"}

    def test_empty_file_is_empty_object(self, tmp_path: Path) -> None:
        data_file = tmp_path / "data.json"
        data_file.write_text("")
        assert DataStore.from_initial(f"@{data_file}").snapshot() == {}

    def test_missing_file_is_config_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="could not read data file"):
            DataStore.from_initial(f"@{tmp_path / 'nope.json'}")

    def test_bad_literal_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            DataStore.from_initial("[1, 2, 3]")

    def test_listener_attached(self) -> None:
        calls: list[int] = []
        store = DataStore.from_initial("{}", listener=lambda: calls.append(1))
        store.replace('{"a": 1}')
        assert calls == [1]


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestRWLock:
    """RWLock — shared readers, exclusive writers."""

    def test_readers_share(self) -> None:
        lock = RWLock()
        inside = threading.Barrier(3, timeout=5)

        def reader() -> None:
            with lock.read_locked():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        # All three were inside at once or the barrier would have broken.
        assert not inside.broken

    def test_writer_excludes_readers(self) -> None:
        lock = RWLock()
        events: list[str] = []
        writer_in = threading.Event()

        def writer() -> None:
            with lock.write_locked():
                writer_in.set()
                time.sleep(0.05)
                events.append("writer-done")

        def reader() -> None:
            writer_in.wait(timeout=5)
            with lock.read_locked():
                events.append("reader")

        w = threading.Thread(target=writer)
        r = threading.Thread(target=reader)
        w.start()
        r.start()
        w.join(timeout=5)
        r.join(timeout=5)

        assert events == ["writer-done", "reader"]

    def test_writers_serialize(self) -> None:
        lock = RWLock()
        active = 0
        overlap = False
        guard = threading.Lock()

        def writer() -> None:
            nonlocal active, overlap
            with lock.write_locked():
                with guard:
                    active += 1
                    overlap = overlap or active > 1
                time.sleep(0.005)
                with guard:
                    active -= 1

        threads = [threading.Thread(target=writer) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert not overlap


class TestConcurrentReplace:
    """N concurrent updates: final state is exactly one payload, never a mix."""

    def test_final_state_is_one_submitted_payload(self) -> None:
        store = DataStore()
        payloads = [{"id": i, "copy": i, "items": list(range(i))} for i in range(20)]
        start = threading.Barrier(len(payloads), timeout=5)

        def update(payload: dict) -> None:
            start.wait()
            store.replace(json.dumps(payload))

        threads = [threading.Thread(target=update, args=(p,)) for p in payloads]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert store.snapshot() in payloads

    def test_readers_never_see_a_mixture(self) -> None:
        store = DataStore({"id": -1, "copy": -1})
        stop = threading.Event()
        torn: list[dict] = []

        def read_loop() -> None:
            while not stop.is_set():
                with store.read() as data:
                    if data["id"] != data["copy"]:
                        torn.append(dict(data))

        readers = [threading.Thread(target=read_loop) for _ in range(4)]
        for t in readers:
            t.start()
        for i in range(200):
            store.replace(json.dumps({"id": i, "copy": i}))
        stop.set()
        for t in readers:
            t.join(timeout=5)

        assert torn == []
        assert store.snapshot() == {"id": 199, "copy": 199}
