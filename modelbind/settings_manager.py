from __future__ import annotations

import json
import logging
import os
from typing import Any

from .logger import get_logger, level_from_name

_logger = get_logger("settings")

SCHEDULER_KINDS = ("qt", "immediate")


class SettingsManager:
    """JSON-backed settings for controllers, with class-level defaults.

    Without a ``settings_path`` the settings live in memory only.
    """

    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "default_group": "main",
        "scheduler": "qt",
        "auto_bind_on_start": True,
        "dump_indent": 2,
        "dump_sort_keys": False,
        "log_level": "info",
    }

    def load(self) -> None:
        if not self.settings_path:
            self._settings = {}
            return
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except Exception as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        if not self.settings_path:
            return
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except Exception as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def default_group(self) -> str:
        val = self.get("default_group")
        return val if isinstance(val, str) and val else self.DEFAULTS["default_group"]

    @property
    def scheduler_kind(self) -> str:
        val = str(self.get("scheduler") or "").strip().lower()
        if val not in SCHEDULER_KINDS:
            _logger.warning("unknown scheduler %r, using %s", val, self.DEFAULTS["scheduler"])
            return self.DEFAULTS["scheduler"]
        return val

    @property
    def auto_bind_on_start(self) -> bool:
        return bool(self.get("auto_bind_on_start"))

    @property
    def dump_indent(self) -> int:
        try:
            return max(0, int(self.get("dump_indent")))
        except (TypeError, ValueError):
            return self.DEFAULTS["dump_indent"]

    @property
    def dump_sort_keys(self) -> bool:
        return bool(self.get("dump_sort_keys"))

    @property
    def log_level(self) -> int:
        return level_from_name(self.get("log_level"), logging.INFO)
