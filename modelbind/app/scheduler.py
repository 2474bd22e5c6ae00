from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from PySide6.QtCore import QCoreApplication, QObject, Qt, Signal, Slot

from modelbind.logger import get_logger

_logger = get_logger("scheduler")


class Scheduler(Protocol):
    def call_soon(self, fn: Callable[[], Any]) -> None: ...


class ImmediateScheduler:
    """Runs callbacks on the calling thread, right away."""

    def call_soon(self, fn: Callable[[], Any]) -> None:
        fn()


class _Invoker(QObject):
    requested = Signal(object)

    def __init__(self) -> None:
        super().__init__()
        self.requested.connect(self._run, Qt.ConnectionType.QueuedConnection)

    @Slot(object)
    def _run(self, fn: Callable[[], Any]) -> None:
        fn()


class QtScheduler:
    """Queues callbacks onto the Qt application thread's event loop.

    Without a running QCoreApplication the callback runs immediately.
    """

    def __init__(self) -> None:
        self._invoker = _Invoker()
        app = QCoreApplication.instance()
        if app is not None:
            self._invoker.moveToThread(app.thread())

    def call_soon(self, fn: Callable[[], Any]) -> None:
        if QCoreApplication.instance() is None:
            _logger.debug("no Qt application; running %r inline", fn)
            fn()
            return
        self._invoker.requested.emit(fn)


def create_scheduler(kind: str) -> Scheduler:
    if kind == "immediate":
        return ImmediateScheduler()
    if kind == "qt":
        return QtScheduler()
    raise ValueError(f"unknown scheduler kind {kind!r}")
