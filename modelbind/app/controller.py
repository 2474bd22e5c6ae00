"""Controller base class: owns binder groups, watches and actions for one model."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from PySide6.QtGui import QAction, QIcon
from PySide6.QtWidgets import QWidget

from modelbind.binding.group import BinderGroup
from modelbind.binding.path import PropertyPath
from modelbind.binding.registry import BinderRegistry
from modelbind.logger import get_logger
from modelbind.serialization import JsonSerializer
from modelbind.settings_manager import SettingsManager

from .actions import ActionEvent, ActionTable, DropEvent, GestureFilter, PointerEvent
from .scheduler import Scheduler, create_scheduler
from .watch import WatchDeclaration, WatchDispatcher, WatchHandler

M = TypeVar("M")


class Controller(Generic[M]):
    """Wires one model to a view.

    Subclasses override :meth:`setup` to register watches (and, if they like,
    bindings) and :meth:`on_start` for work that must run once the view is up::

        class PersonController(Controller[Person]):
            def setup(self):
                self.watch("address.town", handler=self.town_changed)

    Collaborators (logger, serializer, settings, scheduler) are injected; each
    falls back to a per-instance default when omitted.
    """

    def __init__(
        self,
        model: M,
        *,
        logger: logging.Logger | None = None,
        serializer: JsonSerializer | None = None,
        settings: SettingsManager | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.model = model
        self.settings = settings or SettingsManager()
        self.logger = logger or get_logger(f"controller.{type(self).__name__}")
        self.serializer = serializer or JsonSerializer(
            indent=self.settings.dump_indent, sort_keys=self.settings.dump_sort_keys
        )
        self.scheduler = scheduler or create_scheduler(self.settings.scheduler_kind)
        self.binders = BinderRegistry(model, logger=self.logger, default_group=self.settings.default_group)
        self.watches = WatchDispatcher(model, logger=self.logger)
        self.actions = ActionTable(logger=self.logger)
        self._qt_actions: dict[str, QAction] = {}
        self._filters: list[GestureFilter] = []
        self._stopped = False
        self.setup()

    # Hooks -----------------------------------------------------------------
    def setup(self) -> None:
        """Register watches and actions. Called once from the constructor."""

    def on_start(self) -> None:
        """Runs on the UI scheduler after :meth:`start`."""

    # Bindings --------------------------------------------------------------
    def binder(self, name: str | None = None) -> BinderGroup:
        return self.binders.lookup_or_create(name)

    def update(self) -> None:
        """Activate every binder group."""
        self.binders.bind_all()

    # Watches ---------------------------------------------------------------
    def watch(self, *paths: str | PropertyPath, handler: WatchHandler) -> WatchDeclaration:
        return self.watches.declare(paths, handler)

    # Lifecycle -------------------------------------------------------------
    def start(self, bind: bool | None = None) -> None:
        """Attach watches (first call only) and schedule binding plus :meth:`on_start`.

        ``bind`` defaults to the ``auto_bind_on_start`` setting.
        """
        if self._stopped:
            self.logger.warning("%s.start() after stop() ignored", type(self).__name__)
            return
        self.watches.start()
        if bind is None:
            bind = self.settings.auto_bind_on_start
        if bind:
            self.scheduler.call_soon(self.update)
        self.scheduler.call_soon(self._run_on_start)

    def _run_on_start(self) -> None:
        try:
            self.on_start()
        except Exception:
            self.logger.exception("%s.on_start failed", type(self).__name__)

    def stop(self) -> None:
        """Unbind all groups and detach watches and gesture filters."""
        self._stopped = True
        self.binders.unbind_all()
        self.watches.close()
        filters, self._filters = self._filters, []
        for f in filters:
            parent = f.parent()
            if parent is not None:
                parent.removeEventFilter(f)
            f.deleteLater()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def log_object(self, obj: Any) -> None:
        """Log a pretty JSON rendition of ``obj`` at INFO."""
        try:
            text = self.serializer.dumps(obj)
        except (TypeError, ValueError) as e:
            self.logger.warning("log_object: cannot serialize %r: %s", obj, e)
            return
        self.logger.info("%s", text)

    # Actions and gestures --------------------------------------------------
    def add_action(
        self,
        name: str,
        handler: Callable[[ActionEvent], Any],
        icon: QIcon | None = None,
        *,
        text: str | None = None,
        parent: QWidget | None = None,
    ) -> QAction:
        """Register ``handler`` under ``name`` and return a QAction triggering it."""
        self.actions.register(name, handler)
        action = QAction(text or name, parent)
        action.setObjectName(name)
        if icon is not None:
            action.setIcon(icon)
        action.triggered.connect(
            lambda checked=False: self.actions.dispatch(name, ActionEvent(name, action, bool(checked)))
        )
        self._qt_actions[name] = action
        return action

    def qt_action(self, name: str) -> QAction | None:
        return self._qt_actions.get(name)

    def add_pointer_handler(self, widget: QWidget, handler: Callable[[PointerEvent], Any]) -> QWidget:
        origin = f"pointer on {type(widget).__name__}"
        self._install_filter(widget, lambda ev: self.actions.invoke(handler, ev, origin), pointer=True)
        widget.setMouseTracking(True)
        return widget

    def add_drop_handler(self, widget: QWidget, handler: Callable[[DropEvent], Any]) -> QWidget:
        origin = f"drop on {type(widget).__name__}"
        self._install_filter(widget, lambda ev: self.actions.invoke(handler, ev, origin), drop=True)
        widget.setAcceptDrops(True)
        return widget

    def _install_filter(self, widget: QWidget, emit: Callable[[Any], Any], **kinds: bool) -> None:
        f = GestureFilter(emit, parent=widget, **kinds)
        widget.installEventFilter(f)
        self._filters.append(f)
