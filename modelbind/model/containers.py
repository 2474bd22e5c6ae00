"""Containers that announce every structural mutation to their listeners.

``ObservableMap`` emits one event per affected key (``update`` and ``clear``
therefore emit one event per entry). ``ObservableList`` emits one event per
mutating call, with the affected index range.

Removing an absent map key emits nothing: ``remove`` returns ``None``,
``del`` raises ``KeyError`` and ``pop`` follows ``dict.pop``.

Add and remove calls that change nothing emit nothing either: extending a
list with an empty iterable and clearing an empty list or map are silent.
Bulk rewrites (``replace_all``, ``sort``, ``reverse``, slice assignment)
always emit one BULK_REPLACED event.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, MutableMapping, MutableSequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from modelbind.metrics import metrics

from .listeners import ListenerList, notify

_MISSING = object()


class ChangeKind(Enum):
    ADDED = "added"
    REMOVED = "removed"
    VALUE_CHANGED = "value_changed"
    BULK_REPLACED = "bulk_replaced"
    ELEMENT_CHANGED = "element_changed"


@dataclass(frozen=True, slots=True)
class MapChange:
    container: ObservableMap
    kind: ChangeKind
    key: Any
    old_value: Any = None
    new_value: Any = None


@dataclass(frozen=True, slots=True)
class ListChange:
    """Structural list change.

    ``old_values`` holds the removed elements (REMOVED), the replaced element
    (VALUE_CHANGED) or the previous contents (BULK_REPLACED).
    """

    container: ObservableList
    kind: ChangeKind
    index: int
    count: int = 1
    old_values: tuple[Any, ...] = ()


ContainerListener = Callable[[Any], Any]


class ObservableContainer:
    """Listener bookkeeping shared by the map and list variants."""

    def _listener_list(self) -> ListenerList[None]:
        listeners = self.__dict__.get("_listeners")
        if listeners is None:
            listeners = self.__dict__.setdefault("_listeners", ListenerList())
        return listeners

    def add_listener(self, listener: ContainerListener) -> None:
        if not callable(listener):
            raise TypeError(f"listener must be callable, got {listener!r}")
        self._listener_list().add(None, listener)

    def remove_listener(self, listener: ContainerListener) -> bool:
        return self._listener_list().remove(None, listener)

    def listener_count(self) -> int:
        return len(self._listener_list())

    def _emit(self, change: MapChange | ListChange) -> None:
        metrics.inc("container.event")
        for _, listener in self._listener_list().snapshot():
            notify(listener, change, f"{type(self).__name__} {change.kind.value}")


class ObservableMap(ObservableContainer, MutableMapping):
    """A dict-like mapping with per-key change events.

    When constructed with ``default``, reads of absent keys return that value
    (without inserting it and without emitting anything).
    """

    def __init__(self, data: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None = None, *, default: Any = _MISSING):
        self._data: dict[Any, Any] = dict(data or {})
        self._default = default

    @property
    def has_default(self) -> bool:
        return self._default is not _MISSING

    @property
    def default(self) -> Any:
        return None if self._default is _MISSING else self._default

    def __getitem__(self, key: Any) -> Any:
        try:
            return self._data[key]
        except KeyError:
            if self._default is not _MISSING:
                return self._default
            raise

    def get(self, key: Any, default: Any = None) -> Any:
        if key in self._data:
            return self._data[key]
        if self._default is not _MISSING:
            return self._default
        return default

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Any) -> None:
        if key not in self._data:
            raise KeyError(key)
        self.remove(key)

    def put(self, key: Any, value: Any) -> Any:
        """Store ``value``; returns the previous value (``None`` when the key was absent)."""
        existed = key in self._data
        old = self._data.get(key)
        self._data[key] = value
        kind = ChangeKind.VALUE_CHANGED if existed else ChangeKind.ADDED
        self._emit(MapChange(self, kind, key, old, value))
        return old

    def put_all(self, other: Mapping[Any, Any]) -> None:
        for key, value in other.items():
            self.put(key, value)

    def remove(self, key: Any) -> Any:
        """Remove ``key``; returns the removed value, or ``None`` (and emits nothing) when absent."""
        if key not in self._data:
            return None
        old = self._data.pop(key)
        self._emit(MapChange(self, ChangeKind.REMOVED, key, old, None))
        return old

    def pop(self, key: Any, *args: Any) -> Any:
        if key in self._data:
            return self.remove(key)
        if args:
            return args[0]
        raise KeyError(key)

    def setdefault(self, key: Any, default: Any = None) -> Any:
        if key in self._data:
            return self._data[key]
        self.put(key, default)
        return default

    def clear(self) -> None:
        for key in list(self._data):
            self.remove(key)

    def to_dict(self) -> dict[Any, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        extra = f", default={self._default!r}" if self._default is not _MISSING else ""
        return f"ObservableMap({self._data!r}{extra})"


class ObservableList(ObservableContainer, MutableSequence):
    """A list with index-range change events."""

    def __init__(self, items: Iterable[Any] = ()):
        self._items: list[Any] = list(items)

    def _index(self, index: int) -> int:
        n = len(self._items)
        i = int(index)
        if i < 0:
            i += n
        if not 0 <= i < n:
            raise IndexError("list index out of range")
        return i

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return self._items[index]
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObservableList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __setitem__(self, index: int | slice, value: Any) -> None:
        if isinstance(index, slice):
            old = tuple(self._items)
            self._items[index] = value
            self._emit(ListChange(self, ChangeKind.BULK_REPLACED, 0, len(self._items), old))
            return
        self.replace_at(index, value)

    def __delitem__(self, index: int | slice) -> None:
        if isinstance(index, slice):
            old = tuple(self._items)
            del self._items[index]
            self._emit(ListChange(self, ChangeKind.BULK_REPLACED, 0, len(self._items), old))
            return
        self.remove_at(index)

    def insert(self, index: int, value: Any) -> None:
        n = len(self._items)
        i = int(index)
        if i < 0:
            i = max(0, i + n)
        i = min(i, n)
        self._items.insert(i, value)
        self._emit(ListChange(self, ChangeKind.ADDED, i, 1))

    def append(self, value: Any) -> None:
        self.insert(len(self._items), value)

    def extend(self, values: Iterable[Any]) -> None:
        values = list(values)
        if not values:
            return
        start = len(self._items)
        self._items.extend(values)
        self._emit(ListChange(self, ChangeKind.ADDED, start, len(values)))

    def __iadd__(self, values: Iterable[Any]) -> ObservableList:
        self.extend(values)
        return self

    def remove_at(self, index: int) -> Any:
        i = self._index(index)
        old = self._items.pop(i)
        self._emit(ListChange(self, ChangeKind.REMOVED, i, 1, (old,)))
        return old

    def pop(self, index: int = -1) -> Any:
        return self.remove_at(index)

    def replace_at(self, index: int, value: Any) -> Any:
        i = self._index(index)
        old = self._items[i]
        self._items[i] = value
        self._emit(ListChange(self, ChangeKind.VALUE_CHANGED, i, 1, (old,)))
        return old

    def clear(self) -> None:
        if not self._items:
            return
        old = tuple(self._items)
        self._items.clear()
        self._emit(ListChange(self, ChangeKind.REMOVED, 0, len(old), old))

    def replace_all(self, items: Iterable[Any]) -> None:
        old = tuple(self._items)
        self._items = list(items)
        self._emit(ListChange(self, ChangeKind.BULK_REPLACED, 0, len(self._items), old))

    def reverse(self) -> None:
        old = tuple(self._items)
        self._items.reverse()
        self._emit(ListChange(self, ChangeKind.BULK_REPLACED, 0, len(self._items), old))

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        old = tuple(self._items)
        self._items.sort(key=key, reverse=reverse)
        self._emit(ListChange(self, ChangeKind.BULK_REPLACED, 0, len(self._items), old))

    def element_changed(self, element: Any) -> int:
        """Announce that ``element`` changed internally; returns its index."""
        i = self._items.index(element)
        self._emit(ListChange(self, ChangeKind.ELEMENT_CHANGED, i, 1))
        return i

    def to_list(self) -> list[Any]:
        return list(self._items)

    def __repr__(self) -> str:
        return f"ObservableList({self._items!r})"
