from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

from modelbind.logger import get_logger

from .group import BinderGroup

_logger = get_logger("binding")

DEFAULT_GROUP = "main"


class BinderRegistry:
    """Per-controller collection of named BinderGroups."""

    def __init__(self, model: Any, logger: logging.Logger | None = None, default_group: str = DEFAULT_GROUP) -> None:
        self.model = model
        self.default_group = default_group
        self._logger = logger or _logger
        self._groups: dict[str, BinderGroup] = {}
        self._lock = threading.Lock()

    def lookup_or_create(self, name: str | None = None) -> BinderGroup:
        """Return the group called ``name``, creating it on first use."""
        key = name or self.default_group
        with self._lock:
            group = self._groups.get(key)
            if group is None:
                group = BinderGroup(key, self.model, registry=self, logger=self._logger)
                self._groups[key] = group
                self._logger.debug("binder group '%s' created", key)
            return group

    def get(self, name: str) -> BinderGroup | None:
        with self._lock:
            return self._groups.get(name)

    def remove(self, group: BinderGroup) -> bool:
        with self._lock:
            if self._groups.get(group.name) is not group:
                return False
            del self._groups[group.name]
        self._logger.debug("binder group '%s' removed", group.name)
        return True

    def groups(self) -> list[BinderGroup]:
        with self._lock:
            return list(self._groups.values())

    def names(self) -> list[str]:
        with self._lock:
            return list(self._groups)

    def bind_all(self) -> None:
        for group in self.groups():
            group.bind()

    def unbind_all(self) -> None:
        for group in self.groups():
            group.unbind()

    def dispose_all(self) -> None:
        for group in self.groups():
            group.dispose()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._groups

    def __iter__(self) -> Iterator[BinderGroup]:
        return iter(self.groups())

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)
