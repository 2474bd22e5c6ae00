"""Read, write and watch a single named segment on any supported object.

Supported object kinds, in lookup order:

- ``ObservableMap`` (key lookup, honours the configured default, observable)
- other mappings (key lookup, not observable)
- ``ObservableList`` and other sequences (integer index, list is observable)
- ``QObject`` meta-properties (``property()``/``setProperty()``, observed via the notify signal)
- ``Model`` attributes (observed via the model's ChangeSignal)
- plain attributes (not observable)
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any

from PySide6.QtCore import QObject

from modelbind.model.containers import ListChange, MapChange, ObservableList, ObservableMap
from modelbind.model.model import Model
from modelbind.model.signal import PropertyChange

SegmentCallback = Callable[[Any, Any, Any], Any]
"""Called as ``callback(old_value, new_value, native_event)``."""

Detach = Callable[[], None]


class SegmentError(LookupError):
    """One segment could not be read or written. Converted to PathResolutionError by callers."""

    def __init__(self, reason: str, segment: Any = None) -> None:
        self.reason = reason
        self.segment = segment
        super().__init__(reason)


def _is_sequence(obj: Any) -> bool:
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray))


def _as_index(obj: Sequence, key: Any) -> int:
    if isinstance(key, bool):
        raise SegmentError("boolean is not a list index", key)
    if isinstance(key, int):
        i = key
    elif isinstance(key, str) and key.lstrip("-").isdigit():
        i = int(key)
    else:
        raise SegmentError(f"'{key}' is not a list index", key)
    n = len(obj)
    if i < 0:
        i += n
    if not 0 <= i < n:
        raise SegmentError(f"index {key} out of range (len {n})", key)
    return i


def _qt_property_index(obj: Any, key: Any) -> int:
    if not isinstance(obj, QObject) or not isinstance(key, str):
        return -1
    return obj.metaObject().indexOfProperty(key)


def read(obj: Any, key: Any) -> Any:
    if obj is None:
        raise SegmentError("parent value is None", key)
    if isinstance(obj, ObservableMap):
        if key in obj or obj.has_default:
            return obj.get(key)
        raise SegmentError(f"no entry '{key}' and no default configured", key)
    if isinstance(obj, Mapping):
        try:
            return obj[key]
        except KeyError:
            raise SegmentError(f"no entry '{key}'", key) from None
    if _is_sequence(obj):
        return obj[_as_index(obj, key)]
    if _qt_property_index(obj, key) >= 0:
        return obj.property(key)
    if not isinstance(key, str):
        raise SegmentError(f"'{key}' is not a property name", key)
    try:
        return getattr(obj, key)
    except AttributeError:
        raise SegmentError(f"{type(obj).__name__} has no property '{key}'", key) from None


def write(obj: Any, key: Any, value: Any) -> None:
    if obj is None:
        raise SegmentError("parent value is None", key)
    if isinstance(obj, MutableMapping):
        obj[key] = value
        return
    if isinstance(obj, Mapping):
        raise SegmentError(f"{type(obj).__name__} is read-only", key)
    if _is_sequence(obj):
        if not isinstance(obj, MutableSequence):
            raise SegmentError(f"{type(obj).__name__} is read-only", key)
        obj[_as_index(obj, key)] = value
        return
    if _qt_property_index(obj, key) >= 0:
        if not obj.setProperty(key, value):
            raise SegmentError(f"Qt property '{key}' rejected {value!r}", key)
        return
    if not isinstance(key, str):
        raise SegmentError(f"'{key}' is not a property name", key)
    if not hasattr(obj, key):
        raise SegmentError(f"{type(obj).__name__} has no property '{key}'", key)
    try:
        setattr(obj, key, value)
    except AttributeError as e:
        raise SegmentError(f"property '{key}' is read-only ({e})", key) from None


def _safe_read(obj: Any, key: Any) -> Any:
    try:
        return read(obj, key)
    except SegmentError:
        return None


def watch(obj: Any, key: Any, callback: SegmentCallback) -> Detach | None:
    """Attach ``callback`` to changes of ``key`` on ``obj``.

    Returns a detach function, or ``None`` when the object kind cannot be observed.
    """
    if obj is None:
        return None

    if isinstance(obj, ObservableMap):

        def _on_map(change: MapChange) -> None:
            if change.key != key:
                return
            callback(change.old_value, obj.get(key), change)

        obj.add_listener(_on_map)
        return lambda: obj.remove_listener(_on_map)

    if isinstance(obj, ObservableList):
        last = [_safe_read(obj, key)]

        def _on_list(change: ListChange) -> None:
            old, last[0] = last[0], _safe_read(obj, key)
            callback(old, last[0], change)

        obj.add_listener(_on_list)
        return lambda: obj.remove_listener(_on_list)

    idx = _qt_property_index(obj, key)
    if idx >= 0:
        return _watch_qt(obj, idx, key, callback)

    if isinstance(obj, Model) and isinstance(key, str):

        def _on_property(change: PropertyChange) -> None:
            callback(change.old_value, change.new_value, change)

        obj.add_property_listener(_on_property, key)
        return lambda: obj.remove_property_listener(_on_property, key)

    return None


def _watch_qt(obj: QObject, idx: int, key: str, callback: SegmentCallback) -> Detach | None:
    prop = obj.metaObject().property(idx)
    if not prop.hasNotifySignal():
        return None
    signal_name = prop.notifySignal().name().data().decode()
    bound = getattr(obj, signal_name, None)
    if bound is None:
        return None
    last = [obj.property(key)]

    def _on_notify(*args: Any) -> None:
        old, last[0] = last[0], obj.property(key)
        callback(old, last[0], args)

    bound.connect(_on_notify)

    def _detach() -> None:
        with contextlib.suppress(RuntimeError, TypeError):
            bound.disconnect(_on_notify)

    return _detach


def is_observable(obj: Any, key: Any) -> bool:
    if isinstance(obj, (ObservableMap, ObservableList)):
        return True
    idx = _qt_property_index(obj, key)
    if idx >= 0:
        return obj.metaObject().property(idx).hasNotifySignal()
    return isinstance(obj, Model)
