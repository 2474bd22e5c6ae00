from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .signal import ANY, ChangeSignal, PropertyChange, PropertyListener

_UNSET = object()


class Model:
    """Base class for objects whose property changes can be bound and watched.

    Every observable mutation must go through :meth:`property_changed`, usually
    from a setter::

        @name.setter
        def name(self, value):
            old, self._name = self._name, value
            self.property_changed("name", old, value)

    or by declaring the attribute with :class:`observable`. Assigning a plain
    attribute directly is invisible to bindings and watchers.
    """

    @property
    def change_signal(self) -> ChangeSignal:
        # Created lazily so subclasses are free to skip super().__init__().
        signal = self.__dict__.get("_change_signal")
        if signal is None:
            signal = self.__dict__.setdefault("_change_signal", ChangeSignal(self))
        return signal

    def property_changed(self, name: str, old_value: Any, new_value: Any) -> PropertyChange:
        return self.change_signal.announce(name, old_value, new_value)

    def add_property_listener(self, listener: PropertyListener, name: str = ANY) -> None:
        self.change_signal.subscribe(name, listener)

    def remove_property_listener(self, listener: PropertyListener, name: str = ANY) -> bool:
        return self.change_signal.unsubscribe(name, listener)


class observable:  # noqa: N801
    """Data descriptor for a :class:`Model` attribute that announces every assignment.

    ``default_factory`` is called once per instance, on first read or write,
    so nested models and containers are not shared between instances.
    """

    def __init__(self, default: Any = None, *, default_factory: Callable[[], Any] | None = None) -> None:
        if default is not None and default_factory is not None:
            raise ValueError("observable() takes either default or default_factory, not both")
        self.default = default
        self.default_factory = default_factory
        self.name = ""
        self._slot = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self._slot = f"_obs_{name}"

    def _current(self, instance: Any) -> Any:
        value = instance.__dict__.get(self._slot, _UNSET)
        if value is _UNSET:
            value = self.default_factory() if self.default_factory is not None else self.default
            instance.__dict__[self._slot] = value
        return value

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return self._current(instance)

    def __set__(self, instance: Any, value: Any) -> None:
        old = self._current(instance)
        instance.__dict__[self._slot] = value
        instance.property_changed(self.name, old, value)

    def __repr__(self) -> str:
        return f"observable({self.name!r})"


def observable_names(model_type: type) -> list[str]:
    """Names of the :class:`observable` attributes declared on ``model_type`` and its bases."""
    names: list[str] = []
    for klass in reversed(model_type.__mro__):
        for key, value in vars(klass).items():
            if isinstance(value, observable) and key not in names:
                names.append(key)
    return names
