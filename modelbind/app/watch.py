from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from modelbind.binding.path import PropertyPath
from modelbind.errors import HandlerInvocationError, PathResolutionError, callable_name
from modelbind.logger import get_logger
from modelbind.metrics import metrics
from modelbind.model.containers import ObservableContainer

_logger = get_logger("watch")


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """What a watch handler receives.

    For container watches ``old_value`` and ``new_value`` are both the
    container itself and ``native_event`` is None; otherwise ``native_event``
    is the underlying change record.
    """

    old_value: Any
    new_value: Any
    native_event: Any = None
    path: str = ""


WatchHandler = Callable[[WatchEvent], Any]


@dataclass(frozen=True, slots=True)
class WatchDeclaration:
    handler: WatchHandler
    paths: tuple[PropertyPath, ...]

    @property
    def handler_name(self) -> str:
        return callable_name(self.handler)


class WatchDispatcher:
    """Explicit table of ``path -> handler`` registrations for one model.

    Declarations are resolved into live listeners by :meth:`start`, once per
    dispatcher lifetime. Declarations added after start are attached at once.
    Handler failures are logged and never reach the model. A path whose
    getter raises while attaching is logged and skipped; the other paths and
    declarations are still attached.
    """

    def __init__(self, model: Any, logger: logging.Logger | None = None) -> None:
        self.model = model
        self._logger = logger or _logger
        self._declarations: list[WatchDeclaration] = []
        self._closers: list[Callable[[], Any]] = []
        self._started = False
        self._closed = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def declarations(self) -> tuple[WatchDeclaration, ...]:
        return tuple(self._declarations)

    @property
    def attachment_count(self) -> int:
        return len(self._closers)

    def declare(self, paths: Iterable[str | PropertyPath], handler: WatchHandler) -> WatchDeclaration:
        if not callable(handler):
            raise TypeError(f"watch handler must be callable, got {handler!r}")
        parsed = tuple(PropertyPath.parse(p) for p in paths)
        if not parsed:
            raise ValueError("watch needs at least one property path")
        decl = WatchDeclaration(handler, parsed)
        self._declarations.append(decl)
        if self._started and not self._closed:
            self._attach(decl)
        return decl

    def start(self) -> bool:
        if self._started:
            self._logger.debug("watch dispatcher already started; not attaching again")
            return False
        self._started = True
        for decl in self._declarations:
            self._attach(decl)
        self._logger.debug("watch dispatcher started: %d listener(s)", len(self._closers))
        return True

    def close(self) -> None:
        self._closed = True
        closers, self._closers = self._closers, []
        for close in closers:
            close()

    def _attach(self, decl: WatchDeclaration) -> None:
        for path in decl.paths:
            try:
                self._attach_path(decl, path)
            except Exception as e:
                metrics.inc("watch.attach_failed")
                err = HandlerInvocationError(decl.handler_name, f"attaching watch '{path}'", e)
                self._logger.error("%s", err, exc_info=e)

    def _attach_path(self, decl: WatchDeclaration, path: PropertyPath) -> None:
        try:
            value = path.get(self.model)
        except PathResolutionError as e:
            self._logger.debug("watch '%s' not resolvable yet: %s", path, e.reason)
            value = None

        if isinstance(value, ObservableContainer):
            container = value

            def _on_structure(change: Any) -> None:  # noqa: ARG001
                self._invoke(decl, path, WatchEvent(container, container, None, str(path)))

            container.add_listener(_on_structure)
            self._closers.append(lambda: container.remove_listener(_on_structure))
            return

        def _on_change(old: Any, new: Any, native: Any) -> None:
            self._invoke(decl, path, WatchEvent(old, new, native, str(path)))

        self._closers.append(path.observe(self.model, _on_change).close)

    def _invoke(self, decl: WatchDeclaration, path: PropertyPath, event: WatchEvent) -> None:
        metrics.inc("watch.invoke")
        try:
            with metrics.timed("watch.invoke_duration"):
                decl.handler(event)
        except Exception as e:
            metrics.inc("watch.invoke_failed")
            err = HandlerInvocationError(decl.handler_name, f"watch '{path}'", e)
            self._logger.error("%s", err, exc_info=e)
