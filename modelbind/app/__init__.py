"""Controller layer: watches, actions, gestures and UI-thread scheduling."""

from .actions import ActionEvent, ActionTable, DropEvent, DropKind, GestureFilter, PointerEvent, PointerKind
from .controller import Controller
from .scheduler import ImmediateScheduler, QtScheduler, Scheduler, create_scheduler
from .watch import WatchDeclaration, WatchDispatcher, WatchEvent

__all__ = [
    "ActionEvent",
    "ActionTable",
    "Controller",
    "DropEvent",
    "DropKind",
    "GestureFilter",
    "ImmediateScheduler",
    "PointerEvent",
    "PointerKind",
    "QtScheduler",
    "Scheduler",
    "WatchDeclaration",
    "WatchDispatcher",
    "WatchEvent",
]
