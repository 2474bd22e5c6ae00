from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import Any

from modelbind.logger import get_logger

from . import accessors
from .accessors import SegmentError
from .expression import CompiledExpression

_logger = get_logger("observer")

PathCallback = Callable[[Any, Any, Any], Any]
"""Called as ``callback(old_value, new_value, native_event)``."""

_UNREADABLE = object()


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    try:
        return bool(a == b)
    except Exception:
        return False


def _plain(value: Any) -> Any:
    return None if value is _UNREADABLE else value


class PathObserver:
    """Observe the terminal value of a segment chain starting at ``root``.

    A listener is attached at every level. When an intermediate object is
    replaced, the levels below it are re-attached to the new object, so
    ``address.street`` keeps working after ``model.address`` is swapped.

    Every terminal announce is forwarded. An intermediate replacement is
    forwarded only when the re-resolved terminal value differs.
    """

    def __init__(self, root: Any, segments: tuple[Any, ...], callback: PathCallback) -> None:
        if not segments:
            raise ValueError("PathObserver needs at least one segment")
        self._root = root
        self._segments = tuple(segments)
        self._callback = callback
        self._detachers: list[accessors.Detach | None] = [None] * len(self._segments)
        self._closed = False
        self._attach_from(0, root)
        self._value = self._resolve()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def value(self) -> Any:
        return _plain(self._value)

    def _resolve(self) -> Any:
        obj = self._root
        try:
            for seg in self._segments:
                obj = accessors.read(obj, seg)
        except SegmentError:
            return _UNREADABLE
        return obj

    def _resolve_to(self, level: int) -> Any:
        """Current object held by segment ``level``, or None when the chain is broken."""
        obj = self._root
        try:
            for seg in self._segments[: level + 1]:
                obj = accessors.read(obj, seg)
        except SegmentError:
            return None
        return obj

    def _detach(self, level: int) -> None:
        detach = self._detachers[level]
        self._detachers[level] = None
        if detach is not None:
            detach()

    def _attach_from(self, level: int, obj: Any) -> None:
        last = len(self._segments) - 1
        for i in range(level, len(self._segments)):
            self._detach(i)
        for i in range(level, len(self._segments)):
            if obj is None:
                return
            seg = self._segments[i]
            self._detachers[i] = accessors.watch(obj, seg, partial(self._segment_changed, i))
            if i == last:
                return
            try:
                obj = accessors.read(obj, seg)
            except SegmentError:
                return

    def _segment_changed(self, level: int, old: Any, new: Any, native: Any) -> None:
        if self._closed:
            return
        if level == len(self._segments) - 1:
            self._value = new
            self._callback(old, new, native)
            return

        self._attach_from(level + 1, self._resolve_to(level))
        previous, current = self._value, self._resolve()
        self._value = current
        if _same(previous, current):
            _logger.debug("path %s: intermediate change left value unchanged", self._segments)
            return
        self._callback(_plain(previous), _plain(current), native)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for i in range(len(self._segments)):
            self._detach(i)


class ExpressionObserver:
    """Re-evaluate an expression whenever any property chain it reads changes."""

    def __init__(self, root: Any, expression: CompiledExpression, callback: PathCallback) -> None:
        self._root = root
        self._expression = expression
        self._callback = callback
        self._closed = False
        self._value = self._evaluate()
        self._observers = [PathObserver(root, chain, self._dependency_changed) for chain in expression.dependencies]

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def value(self) -> Any:
        return _plain(self._value)

    def _evaluate(self) -> Any:
        try:
            return self._expression.evaluate(self._root)
        except SegmentError as e:
            _logger.debug("expression ${%s} unreadable: %s", self._expression.source, e.reason)
            return _UNREADABLE

    def _dependency_changed(self, old: Any, new: Any, native: Any) -> None:  # noqa: ARG002
        if self._closed:
            return
        previous, self._value = self._value, self._evaluate()
        self._callback(_plain(previous), _plain(self._value), native)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for obs in self._observers:
            obs.close()
        self._observers = []
