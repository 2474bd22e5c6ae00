from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

from modelbind.logger import get_logger

_logger = get_logger("listeners")

K = TypeVar("K")


class ListenerList(Generic[K]):
    """Copy-on-write list of ``(key, listener)`` entries.

    Mutations replace the stored tuple under a lock; dispatch iterates over the
    tuple captured when it started, so listeners may subscribe or unsubscribe
    (from any thread) while a dispatch is in progress.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: tuple[tuple[K, Callable[..., Any]], ...] = ()
        self._lock = threading.Lock()

    def add(self, key: K, listener: Callable[..., Any]) -> None:
        with self._lock:
            self._entries = (*self._entries, (key, listener))

    def remove(self, key: K, listener: Callable[..., Any]) -> bool:
        """Remove the first matching entry. Returns False when nothing matched."""
        with self._lock:
            entries = self._entries
            for i, (k, fn) in enumerate(entries):
                if k == key and fn == listener:
                    self._entries = entries[:i] + entries[i + 1 :]
                    return True
        return False

    def clear(self) -> None:
        with self._lock:
            self._entries = ()

    def snapshot(self) -> tuple[tuple[K, Callable[..., Any]], ...]:
        return self._entries

    def count(self, key: K | None = None) -> int:
        entries = self._entries
        if key is None:
            return len(entries)
        return sum(1 for k, _ in entries if k == key)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[K, Callable[..., Any]]]:
        return iter(self._entries)


def notify(listener: Callable[[Any], Any], event: Any, origin: str) -> None:
    """Call one listener; a failure is logged and never reaches the emitter."""
    try:
        listener(event)
    except Exception:
        _logger.exception("listener %r failed while dispatching %s", listener, origin)
