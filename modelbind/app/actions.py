"""Named actions and pointer/drop gestures dispatched to explicit handlers.

Handlers are registered up front (``ActionTable.register``) and receive typed
event objects; a failing handler is logged as HandlerInvocationError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from PySide6.QtCore import QEvent, QMimeData, QObject, QPointF, Qt

from modelbind.errors import HandlerInvocationError, callable_name
from modelbind.logger import get_logger
from modelbind.metrics import metrics

_logger = get_logger("actions")


@dataclass(frozen=True, slots=True)
class ActionEvent:
    name: str
    source: Any = None
    checked: bool = False


class PointerKind(Enum):
    CLICKED = "clicked"
    DRAGGED = "dragged"
    ENTERED = "entered"
    EXITED = "exited"
    MOVED = "moved"
    PRESSED = "pressed"
    RELEASED = "released"
    WHEEL_MOVED = "wheel_moved"


@dataclass(frozen=True, slots=True)
class PointerEvent:
    source: Any
    kind: PointerKind
    native_event: Any = None
    position: QPointF | None = None
    global_position: QPointF | None = None


class DropKind(Enum):
    DROP = "drop"
    DRAG_EXIT = "drag_exit"
    DROP_CHANGED = "drop_changed"
    DRAG_OVER = "drag_over"
    DRAG_ENTER = "drag_enter"


@dataclass(frozen=True, slots=True)
class DropEvent:
    source: Any
    kind: DropKind
    mime_data: QMimeData | None = None

    def if_mime_data(self, consumer: Callable[[QMimeData], Any]) -> None:
        if self.mime_data is not None:
            consumer(self.mime_data)


class ActionTable:
    """Explicit ``name -> handler`` table."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger
        self._handlers: dict[str, Callable[[Any], Any]] = {}

    def register(self, name: str, handler: Callable[[Any], Any]) -> None:
        if not callable(handler):
            raise TypeError(f"action handler must be callable, got {handler!r}")
        if name in self._handlers:
            self._logger.warning("action '%s' re-registered; replacing %s", name, callable_name(self._handlers[name]))
        self._handlers[name] = handler

    def handler(self, name: str) -> Callable[[Any], Any] | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return list(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def dispatch(self, name: str, event: Any) -> bool:
        handler = self._handlers.get(name)
        if handler is None:
            self._logger.error("%s", HandlerInvocationError(name, f"action '{name}'", KeyError(name)))
            return False
        return self.invoke(handler, event, f"action '{name}'")

    def invoke(self, handler: Callable[[Any], Any], event: Any, origin: str) -> bool:
        metrics.inc("action.invoke")
        try:
            handler(event)
        except Exception as e:
            metrics.inc("action.invoke_failed")
            self._logger.error("%s", HandlerInvocationError(callable_name(handler), origin, e), exc_info=e)
            return False
        return True


_POINTER_TYPES = {
    QEvent.Type.Enter: PointerKind.ENTERED,
    QEvent.Type.Leave: PointerKind.EXITED,
    QEvent.Type.MouseButtonPress: PointerKind.PRESSED,
    QEvent.Type.MouseButtonRelease: PointerKind.RELEASED,
    QEvent.Type.MouseMove: PointerKind.MOVED,
    QEvent.Type.Wheel: PointerKind.WHEEL_MOVED,
}

_DROP_TYPES = {
    QEvent.Type.DragEnter: DropKind.DRAG_ENTER,
    QEvent.Type.DragMove: DropKind.DRAG_OVER,
    QEvent.Type.DragLeave: DropKind.DRAG_EXIT,
    QEvent.Type.Drop: DropKind.DROP,
}


def _point(event: QEvent, attr: str) -> QPointF | None:
    getter = getattr(event, attr, None)
    return getter() if callable(getter) else None


class GestureFilter(QObject):
    """Event filter translating Qt pointer and drag/drop events into typed gesture events.

    Events are never consumed; the watched widget still sees them.
    """

    def __init__(
        self,
        emit: Callable[[Any], Any],
        *,
        pointer: bool = False,
        drop: bool = False,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._emit = emit
        self._pointer = pointer
        self._drop = drop
        self._pressed = False
        self._last_drop_action: Any = None

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
        etype = event.type()
        if self._pointer and etype in _POINTER_TYPES:
            self._on_pointer(watched, event, _POINTER_TYPES[etype])
        elif self._drop and etype in _DROP_TYPES:
            self._on_drop(watched, event, _DROP_TYPES[etype])
        return False

    def _pointer_event(self, watched: QObject, event: QEvent, kind: PointerKind) -> PointerEvent:
        return PointerEvent(watched, kind, event, _point(event, "position"), _point(event, "globalPosition"))

    def _on_pointer(self, watched: QObject, event: QEvent, kind: PointerKind) -> None:
        if kind is PointerKind.MOVED and event.buttons() != Qt.MouseButton.NoButton:
            kind = PointerKind.DRAGGED
        if kind is PointerKind.PRESSED:
            self._pressed = True
        self._emit(self._pointer_event(watched, event, kind))
        if kind is PointerKind.RELEASED:
            if self._pressed:
                self._emit(self._pointer_event(watched, event, PointerKind.CLICKED))
            self._pressed = False
        elif kind is PointerKind.EXITED:
            self._pressed = False

    def _on_drop(self, watched: QObject, event: QEvent, kind: DropKind) -> None:
        mime = None
        if kind is not DropKind.DRAG_EXIT:
            event.acceptProposedAction()
            mime = event.mimeData()
            action = event.dropAction()
            if kind is DropKind.DRAG_OVER and self._last_drop_action is not None and action != self._last_drop_action:
                kind = DropKind.DROP_CHANGED
            self._last_drop_action = action
        if kind in (DropKind.DRAG_EXIT, DropKind.DROP):
            self._last_drop_action = None
        self._emit(DropEvent(watched, kind, mime))
