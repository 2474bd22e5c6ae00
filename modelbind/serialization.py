from __future__ import annotations

import dataclasses
import json
from enum import Enum
from pathlib import Path
from typing import Any

from .model.containers import ObservableList, ObservableMap
from .model.model import Model, observable_names

_HIDDEN = ("_change_signal", "_listeners")


def _model_state(obj: Model) -> dict[str, Any]:
    state: dict[str, Any] = {name: getattr(obj, name) for name in observable_names(type(obj))}
    klass = type(obj)
    for key, value in list(vars(obj).items()):
        if key in _HIDDEN or key.startswith("_obs_"):
            continue
        if key.startswith("_"):
            public = key.lstrip("_")
            # Private storage behind a property is reported under the property's name.
            if isinstance(getattr(klass, public, None), property) and public not in state:
                state[public] = getattr(obj, public)
            continue
        state.setdefault(key, value)
    return state


def to_jsonable(obj: Any) -> Any:
    """``default=`` hook for :func:`json.dumps` covering models and containers."""
    if isinstance(obj, ObservableMap):
        return obj.to_dict()
    if isinstance(obj, ObservableList):
        return obj.to_list()
    if isinstance(obj, Model):
        return _model_state(obj)
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    return repr(obj)


class JsonSerializer:
    """Pretty JSON dumps of model graphs, used by ``Controller.log_object``."""

    def __init__(self, indent: int = 2, sort_keys: bool = False) -> None:
        self.indent = indent
        self.sort_keys = sort_keys

    def dumps(self, obj: Any) -> str:
        return json.dumps(
            obj,
            default=to_jsonable,
            ensure_ascii=False,
            indent=self.indent or None,
            sort_keys=self.sort_keys,
        )
