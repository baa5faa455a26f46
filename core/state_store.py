from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from models.state import StreamerState, login_key


class _ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class StateStore:
    """In-memory last-known snapshot per broadcaster.

    Keys are case-folded here rather than by callers, so "Foo" and "foo"
    always address the same entry.  Snapshots live for the process
    lifetime; nothing is persisted.
    """

    def __init__(self) -> None:
        self._states: dict[str, StreamerState] = {}
        self._lock = _ReadWriteLock()

    @staticmethod
    def _key(username: str) -> str:
        return login_key(username)

    def get(self, username: str) -> StreamerState | None:
        with self._lock.read():
            return self._states.get(self._key(username))

    def update(self, username: str, state: StreamerState) -> None:
        with self._lock.write():
            self._states[self._key(username)] = state

    def all_offline(self, usernames: Iterable[str]) -> bool:
        """True when none of *usernames* has a stored live snapshot."""
        with self._lock.read():
            for name in usernames:
                state = self._states.get(self._key(name))
                if state is not None and state.is_live:
                    return False
        return True

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._states)
