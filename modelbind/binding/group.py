from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar

from modelbind.logger import get_logger

from .binding import Binding, BindingDirection, ListBinding, PropertyBinding
from .path import PropertyPath
from .surfaces import ItemSurface

if TYPE_CHECKING:
    from .registry import BinderRegistry

_logger = get_logger("binding")

T = TypeVar("T")
S = TypeVar("S", bound=ItemSurface)


class BinderGroup:
    """Named set of bindings against one model, activated and torn down together.

    The ``bind_*`` helpers return the target so a view can be built inline::

        layout.addWidget(group.bind_property("name", QLineEdit(), "text"))
    """

    def __init__(
        self,
        name: str,
        model: Any,
        registry: BinderRegistry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.name = name
        self.model = model
        self._registry = registry
        self._logger = logger or _logger
        self._bindings: list[Binding] = []
        self._lock = threading.Lock()
        self._bound = False
        self._disposed = False

    @property
    def bindings(self) -> tuple[Binding, ...]:
        with self._lock:
            return tuple(self._bindings)

    @property
    def bound(self) -> bool:
        return self._bound

    @property
    def disposed(self) -> bool:
        return self._disposed

    def add(self, binding: Binding) -> Binding:
        if self._disposed:
            raise RuntimeError(f"binder group '{self.name}' is disposed")
        with self._lock:
            self._bindings.append(binding)
        if self._bound:
            binding.bind()
        return binding

    def bind_property(
        self,
        source_path: str | PropertyPath,
        target: T,
        target_path: str | PropertyPath,
        direction: BindingDirection = BindingDirection.TWO_WAY,
    ) -> T:
        """Bind a model property to a target property; two-way unless told otherwise."""
        self.add(PropertyBinding(self.model, source_path, target, target_path, direction, logger=self._logger))
        return target

    def read_property(self, source_path: str | PropertyPath, target: T, target_path: str | PropertyPath) -> T:
        """Push a model property to the target only (model changes show in the UI)."""
        return self.bind_property(source_path, target, target_path, BindingDirection.READ_ONLY)

    def write_property(self, source_path: str | PropertyPath, ui_source: T, ui_path: str | PropertyPath) -> T:
        """Capture a UI property into the model only (UI edits land in the model)."""
        return self.bind_property(source_path, ui_source, ui_path, BindingDirection.WRITE_ONLY)

    def bind_list(
        self,
        list_path: str | PropertyPath,
        surface: S,
        selected_path: str | PropertyPath | None = None,
    ) -> S:
        """Mirror a model list into ``surface``; optionally bind its selection to ``selected_path``."""
        self.add(ListBinding(self.model, list_path, surface, logger=self._logger))
        if selected_path is not None:
            self.bind_property(selected_path, surface, "selected_item")
        return surface

    def bind(self) -> None:
        """Activate every binding. Already-active bindings are left alone."""
        if self._disposed:
            self._logger.warning("bind() on disposed binder group '%s' ignored", self.name)
            return
        self._bound = True
        failed = [b.name for b in self.bindings if not b.bind()]
        if failed:
            self._logger.debug("group '%s': %d binding(s) inactive: %s", self.name, len(failed), failed)

    def unbind(self) -> None:
        """Deactivate every binding but keep their definitions."""
        self._bound = False
        for b in self.bindings:
            b.unbind()

    def dispose(self) -> None:
        """Unbind and drop this group from its registry for good."""
        if self._disposed:
            return
        self.unbind()
        self._disposed = True
        with self._lock:
            self._bindings.clear()
        if self._registry is not None:
            self._registry.remove(self)

    def __len__(self) -> int:
        return len(self.bindings)

    def __repr__(self) -> str:
        return f"<BinderGroup {self.name!r} bindings={len(self)} bound={self._bound}>"
