"""Data store — the live render context behind a reader/writer lock.

Exactly one render context is live at a time.  Renders hold the read lock for
the duration of template execution; ``replace`` takes the write lock, swaps
the whole object in one assignment, and then notifies the change listener so
connected browsers re-render.

Thread Safety:
    Any number of concurrent readers; a writer excludes readers and other
    writers.  The listener is called after the write lock is released.

"""

from __future__ import annotations

import copy
import json
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from glance._errors import ConfigError, DataError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from glance._types import ChangeListener, RenderContext


class RWLock:
    """Multiple-reader / single-writer lock.

    Writers are preferred: once a writer is waiting, new readers queue behind
    it so a steady stream of renders cannot starve a data update.

    """

    __slots__ = ("_cond", "_readers", "_writer", "_writers_waiting")

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def parse_context(raw: str | bytes) -> RenderContext:
    """Parse *raw* as a render context.

    Raises:
        DataError: If *raw* is not valid JSON or not a JSON object.

    """
    try:
        value = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        msg = f"could not parse data: {exc}"
        raise DataError(msg) from exc
    if not isinstance(value, dict):
        msg = f"data must be a JSON object, got {type(value).__name__}"
        raise DataError(msg)
    return value


def format_context(data: RenderContext) -> str:
    """Pretty-print a context the way the editing overlay shows it."""
    return json.dumps(data, indent=4, ensure_ascii=False)


class DataStore:
    """Holds the current render context.

    Args:
        initial: Starting context.  Defaults to an empty object.
        listener: Called once after every successful ``replace``.

    """

    def __init__(
        self,
        initial: RenderContext | None = None,
        listener: ChangeListener | None = None,
    ) -> None:
        self._data: RenderContext = initial if initial is not None else {}
        self._lock = RWLock()
        self._listener = listener

    @classmethod
    def from_initial(
        cls, value: str, listener: ChangeListener | None = None
    ) -> DataStore:
        """Build a store from a startup value.

        ``""`` is an empty object, ``@path`` reads the JSON file at *path*,
        anything else is parsed as a JSON literal.

        Raises:
            ConfigError: If the file cannot be read or the data is not a
                JSON object.

        """
        raw = value
        if value.startswith("@"):
            try:
                raw = Path(value[1:]).read_text(encoding="utf-8")
            except OSError as exc:
                msg = f"could not read data file: {exc}"
                raise ConfigError(msg) from exc
        if not raw.strip():
            raw = "{}"
        try:
            return cls(parse_context(raw), listener=listener)
        except DataError as exc:
            raise ConfigError(str(exc)) from exc

    def set_listener(self, listener: ChangeListener | None) -> None:
        self._listener = listener

    def replace(self, raw: str | bytes) -> RenderContext:
        """Install a new context parsed from *raw* and notify the listener.

        Parsing happens before the lock is taken; a rejected payload leaves
        the current context untouched and does not notify.

        Raises:
            DataError: If *raw* is not a JSON object.

        """
        data = parse_context(raw)
        with self._lock.write_locked():
            self._data = data
        if self._listener is not None:
            self._listener()
        return data

    @contextmanager
    def read(self) -> Iterator[RenderContext]:
        """Yield the live context while holding the read lock.

        The yielded object must not be mutated or kept past the ``with``.
        """
        with self._lock.read_locked():
            yield self._data

    def snapshot(self) -> RenderContext:
        """Deep copy of the current context."""
        with self.read() as data:
            return copy.deepcopy(data)

    def keys(self) -> tuple[str, ...]:
        """Top-level keys of the current context, in insertion order."""
        with self.read() as data:
            return tuple(data)

    def dumps(self) -> str:
        """Pretty-printed JSON of the current context."""
        with self.read() as data:
            return format_context(data)
