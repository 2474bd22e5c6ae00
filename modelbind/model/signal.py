from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from modelbind.metrics import metrics

from .listeners import ListenerList, notify


ANY = "*"
"""Subscription key that receives every property name."""


@dataclass(frozen=True, slots=True)
class PropertyChange:
    """A single announced change: ``name`` went from ``old_value`` to ``new_value``."""

    source: Any
    name: str
    old_value: Any
    new_value: Any


PropertyListener = Callable[[PropertyChange], Any]


class ChangeSignal:
    """Per-instance publish/subscribe for named property changes.

    Dispatch is synchronous on the announcing thread, in registration order
    across named and ``ANY`` subscriptions. Equal old/new values are still
    announced.
    """

    __slots__ = ("_listeners", "_source")

    def __init__(self, source: Any = None) -> None:
        self._source = source
        self._listeners: ListenerList[str] = ListenerList()

    @property
    def source(self) -> Any:
        return self._source

    def subscribe(self, name: str, listener: PropertyListener) -> None:
        if not callable(listener):
            raise TypeError(f"listener must be callable, got {listener!r}")
        self._listeners.add(str(name), listener)

    def unsubscribe(self, name: str, listener: PropertyListener) -> bool:
        return self._listeners.remove(str(name), listener)

    def announce(self, name: str, old_value: Any, new_value: Any) -> PropertyChange:
        change = PropertyChange(self._source, name, old_value, new_value)
        metrics.inc("signal.announce")
        for key, listener in self._listeners.snapshot():
            if key == name or key == ANY:
                notify(listener, change, f"property '{name}'")
        return change

    def listener_count(self, name: str | None = None) -> int:
        return self._listeners.count(name)

    def has_listeners(self, name: str) -> bool:
        return any(key in (name, ANY) for key, _ in self._listeners.snapshot())
