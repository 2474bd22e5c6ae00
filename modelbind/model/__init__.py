"""Observable models: change signals, Model base class and observable containers."""

from .containers import ChangeKind, ListChange, MapChange, ObservableContainer, ObservableList, ObservableMap
from .model import Model, observable, observable_names
from .signal import ANY, ChangeSignal, PropertyChange

__all__ = [
    "ANY",
    "ChangeKind",
    "ChangeSignal",
    "ListChange",
    "MapChange",
    "Model",
    "ObservableContainer",
    "ObservableList",
    "ObservableMap",
    "PropertyChange",
    "observable",
    "observable_names",
]
