"""Property paths, bindings and binder groups."""

from .binding import Binding, BindingDirection, ListBinding, PropertyBinding
from .group import BinderGroup
from .path import PathKind, PropertyPath, parse
from .registry import DEFAULT_GROUP, BinderRegistry
from .surfaces import ComboBoxSurface, ItemSurface, ListWidgetSurface, SequenceSurface

__all__ = [
    "DEFAULT_GROUP",
    "BinderGroup",
    "BinderRegistry",
    "Binding",
    "BindingDirection",
    "ComboBoxSurface",
    "ItemSurface",
    "ListBinding",
    "ListWidgetSurface",
    "PathKind",
    "PropertyBinding",
    "PropertyPath",
    "SequenceSurface",
    "parse",
]
