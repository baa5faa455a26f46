"""Tests for the in-memory snapshot store."""
from __future__ import annotations

import threading

from core.state_store import StateStore


class TestStateStore:
    def test_get_missing_returns_none(self):
        assert StateStore().get("foo") is None

    def test_keys_are_case_insensitive(self, make_state):
        store = StateStore()
        store.update("Foo", make_state(title="first"))
        store.update("foo", make_state(title="second"))

        assert len(store) == 1
        assert store.get("FOO").title == "second"
        assert store.get("fOo") is not None

    def test_update_replaces_snapshot(self, make_state):
        store = StateStore()
        store.update("foo", make_state(is_live=True))
        store.update("foo", make_state(is_live=False))

        assert store.get("foo").is_live is False

    def test_all_offline(self, make_state):
        store = StateStore()
        store.update("foo", make_state(login="foo"))
        store.update("bar", make_state(login="bar", is_live=True))

        assert store.all_offline(["foo"])
        assert store.all_offline(["foo", "unknown"])
        assert not store.all_offline(["foo", "BAR"])

    def test_concurrent_writers_and_readers(self, make_state):
        store = StateStore()
        names = [f"user{i}" for i in range(20)]

        def write(name: str) -> None:
            for n in range(50):
                store.update(name, make_state(login=name, viewer_count=n))

        def read() -> None:
            for name in names * 5:
                store.get(name)

        threads = [threading.Thread(target=write, args=(n,)) for n in names]
        threads += [threading.Thread(target=read) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 20
        assert all(store.get(n).viewer_count == 49 for n in names)
