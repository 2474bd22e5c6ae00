from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from modelbind.errors import BindingActivationError, PathResolutionError
from modelbind.logger import get_logger
from modelbind.metrics import metrics
from modelbind.model.containers import ChangeKind, ListChange, ObservableList

from .observer import ExpressionObserver, PathObserver
from .path import PropertyPath
from .surfaces import ItemSurface

_logger = get_logger("binding")


class BindingDirection(Enum):
    TWO_WAY = "two_way"
    READ_ONLY = "read_only"
    """Source (model) to target only."""
    WRITE_ONLY = "write_only"
    """Target (UI) to source only."""


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    try:
        return bool(a == b)
    except Exception:
        return False


class Binding:
    """Common lifecycle: created inactive, ``bind()`` activates, ``unbind()`` deactivates.

    ``bind()`` never raises for a bad path: the failure is logged as a
    BindingActivationError and the binding stays inactive.
    """

    def __init__(self, name: str, logger: logging.Logger | None = None) -> None:
        self.name = name
        self._logger = logger or _logger
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def bind(self) -> bool:
        if self._active:
            return True
        try:
            self._activate()
        except PathResolutionError as e:
            self._deactivate()
            self._logger.error("%s", BindingActivationError(self.name, e))
            return False
        except Exception as e:
            self._deactivate()
            self._logger.error("%s", BindingActivationError(self.name, e), exc_info=True)
            return False
        self._active = True
        self._logger.debug("bound %s", self.name)
        return True

    def unbind(self) -> None:
        if not self._active:
            return
        self._deactivate()
        self._active = False
        self._logger.debug("unbound %s", self.name)

    def _activate(self) -> None:
        raise NotImplementedError

    def _deactivate(self) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        state = "active" if self._active else "inactive"
        return f"<{type(self).__name__} {self.name} {state}>"


class PropertyBinding(Binding):
    """Live link between ``source_path`` on ``source`` and ``target_path`` on ``target``."""

    def __init__(
        self,
        source: Any,
        source_path: str | PropertyPath,
        target: Any,
        target_path: str | PropertyPath,
        direction: BindingDirection = BindingDirection.TWO_WAY,
        *,
        name: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if not isinstance(direction, BindingDirection):
            raise ValueError(f"unknown binding direction {direction!r}")
        self.source = source
        self.source_path = PropertyPath.parse(source_path)
        self.target = target
        self.target_path = PropertyPath.parse(target_path)
        self.direction = direction
        arrow = {"two_way": "<->", "read_only": "->", "write_only": "<-"}[direction.value]
        default_name = f"{self.source_path} {arrow} {type(target).__name__}.{self.target_path}"
        super().__init__(name or default_name, logger)
        self._observers: list[PathObserver | ExpressionObserver] = []
        self._syncing = False

    @property
    def reads_source(self) -> bool:
        return self.direction is not BindingDirection.WRITE_ONLY

    @property
    def reads_target(self) -> bool:
        return self.direction is not BindingDirection.READ_ONLY

    def _activate(self) -> None:
        if self.reads_source:
            self._transfer(self.source, self.source_path, self.target, self.target_path)
            self._observers.append(self.source_path.observe(self.source, self._source_changed))
        else:
            self._transfer(self.target, self.target_path, self.source, self.source_path)
        if self.reads_target:
            self._observers.append(self.target_path.observe(self.target, self._target_changed))

    def _deactivate(self) -> None:
        observers, self._observers = self._observers, []
        for obs in observers:
            obs.close()

    def _transfer(self, from_root: Any, from_path: PropertyPath, to_root: Any, to_path: PropertyPath) -> bool:
        """Copy one side to the other. Raises PathResolutionError; returns False when already equal."""
        value = from_path.get(from_root)
        try:
            if _same(to_path.get(to_root), value):
                return False
        except PathResolutionError:
            pass
        self._syncing = True
        try:
            to_path.set(to_root, value)
        finally:
            self._syncing = False
        return True

    def _push(self, from_root: Any, from_path: PropertyPath, to_root: Any, to_path: PropertyPath) -> None:
        if self._syncing or not self._active:
            metrics.inc("binding.push_skipped")
            return
        try:
            with metrics.timed("binding.push_duration"):
                changed = self._transfer(from_root, from_path, to_root, to_path)
        except PathResolutionError as e:
            metrics.inc("binding.push_failed")
            self._logger.warning("%s: push skipped: %s", self.name, e)
            return
        except Exception as e:
            metrics.inc("binding.push_failed")
            self._logger.warning("%s: setter for '%s' raised: %s", self.name, to_path, e, exc_info=True)
            return
        metrics.inc("binding.push" if changed else "binding.push_skipped")

    def _source_changed(self, old: Any, new: Any, native: Any) -> None:  # noqa: ARG002
        self._push(self.source, self.source_path, self.target, self.target_path)

    def _target_changed(self, old: Any, new: Any, native: Any) -> None:  # noqa: ARG002
        self._push(self.target, self.target_path, self.source, self.source_path)


class ListBinding(Binding):
    """Mirror a model list into an ItemSurface, following structural changes.

    Plain sequences are copied once at activation; ObservableList changes are
    applied granularly. Replacing the whole list on the model re-targets the
    binding to the new list.
    """

    def __init__(
        self,
        source: Any,
        list_path: str | PropertyPath,
        surface: ItemSurface,
        *,
        name: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.source = source
        self.list_path = PropertyPath.parse(list_path)
        self.surface = surface
        super().__init__(name or f"{self.list_path} => {type(surface).__name__}", logger)
        self._list: Any = None
        self._path_observer: PathObserver | ExpressionObserver | None = None

    def _activate(self) -> None:
        items = self.list_path.get(self.source)
        self._attach_list(items)
        self._path_observer = self.list_path.observe(self.source, self._list_replaced)

    def _deactivate(self) -> None:
        self._attach_list(None, render=False)
        if self._path_observer is not None:
            self._path_observer.close()
            self._path_observer = None

    def _attach_list(self, items: Any, *, render: bool = True) -> None:
        if isinstance(self._list, ObservableList):
            self._list.remove_listener(self._list_changed)
        self._list = items
        if isinstance(items, ObservableList):
            items.add_listener(self._list_changed)
        if render:
            self.surface.set_items(list(items or ()))

    def _list_replaced(self, old: Any, new: Any, native: Any) -> None:  # noqa: ARG002
        if new is self._list:
            return
        self._logger.debug("%s: list replaced", self.name)
        self._attach_list(new)
        metrics.inc("binding.push")

    def _list_changed(self, change: ListChange) -> None:
        if change.container is not self._list:
            return
        lst = change.container
        if change.kind is ChangeKind.ADDED:
            self.surface.insert_items(change.index, lst[change.index : change.index + change.count])
        elif change.kind is ChangeKind.REMOVED:
            self.surface.remove_items(change.index, len(change.old_values))
        elif change.kind in (ChangeKind.VALUE_CHANGED, ChangeKind.ELEMENT_CHANGED):
            self.surface.replace_item(change.index, lst[change.index])
        else:
            self.surface.set_items(list(lst))
        metrics.inc("binding.push")
