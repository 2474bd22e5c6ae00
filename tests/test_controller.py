from __future__ import annotations

import json
import logging

import pytest

pytest.importorskip("PySide6")

from PySide6.QtWidgets import QLineEdit

from modelbind.app import Controller, ImmediateScheduler, QtScheduler, WatchEvent
from modelbind.serialization import JsonSerializer
from modelbind.settings_manager import SettingsManager

from tests.helpers.models import Person


class PersonController(Controller[Person]):
    def setup(self) -> None:
        self.town_changes: list[WatchEvent] = []
        self.started = 0
        self.watch("address.town", handler=self.town_changed)

    def town_changed(self, event: WatchEvent) -> None:
        self.town_changes.append(event)

    def on_start(self) -> None:
        self.started += 1


def _controller(test_logger, **kwargs) -> PersonController:
    kwargs.setdefault("scheduler", ImmediateScheduler())
    return PersonController(Person("Ann"), logger=test_logger, **kwargs)


def test_start_attaches_watches_and_binds(test_logger, qtbot) -> None:
    ctl = _controller(test_logger)
    edit = QLineEdit()
    qtbot.addWidget(edit)
    ctl.binder().bind_property("name", edit, "text")

    ctl.start()
    ctl.model.address.town = "Leeds"

    assert edit.text() == "Ann"
    assert [e.new_value for e in ctl.town_changes] == ["Leeds"]
    assert ctl.started == 1


def test_restart_does_not_double_watch_invocations(test_logger) -> None:
    ctl = _controller(test_logger)

    ctl.start()
    ctl.start()
    ctl.model.address.town = "York"

    assert len(ctl.town_changes) == 1
    assert ctl.started == 2


def test_start_without_binding(test_logger) -> None:
    ctl = _controller(test_logger)
    field = ctl.binder("form").bind_property("name", QLineEdit(), "text")

    ctl.start(bind=False)
    assert field.text() == ""

    ctl.update()
    assert field.text() == "Ann"


def test_auto_bind_setting(test_logger) -> None:
    settings = SettingsManager()
    settings.set("auto_bind_on_start", False)
    ctl = _controller(test_logger, settings=settings)
    group = ctl.binder()

    ctl.start()

    assert not group.bound


def test_default_group_name_comes_from_settings(test_logger) -> None:
    settings = SettingsManager()
    settings.set("default_group", "form")

    ctl = _controller(test_logger, settings=settings)

    assert ctl.binder().name == "form"
    assert ctl.binder() is ctl.binder("form")


def test_stop_unbinds_and_detaches(test_logger) -> None:
    ctl = _controller(test_logger)
    edit = ctl.binder().bind_property("name", QLineEdit(), "text")
    ctl.start()

    ctl.stop()
    ctl.model.name = "Bob"
    ctl.model.address.town = "Hull"
    ctl.start()

    assert edit.text() == "Ann"
    assert ctl.town_changes == []
    assert ctl.stopped


def test_on_start_failure_is_logged(test_logger, caplog) -> None:
    class Broken(Controller[Person]):
        def on_start(self) -> None:
            raise RuntimeError("no view")

    ctl = Broken(Person(), logger=test_logger, scheduler=ImmediateScheduler())
    ctl.start()

    assert any("on_start failed" in r.getMessage() for r in caplog.records if r.levelno == logging.ERROR)


def test_log_object_dumps_model_as_json(test_logger, caplog) -> None:
    ctl = _controller(test_logger, serializer=JsonSerializer(indent=0, sort_keys=True))
    ctl.model.address.town = "Leeds"
    ctl.model.tags.append("vip")

    with caplog.at_level(logging.INFO, logger="tests.modelbind"):
        ctl.log_object(ctl.model)

    info = [r for r in caplog.records if r.levelno == logging.INFO]
    data = json.loads(info[-1].getMessage())
    assert data["name"] == "Ann"
    assert data["address"]["town"] == "Leeds"
    assert data["tags"] == ["vip"]


def test_qt_scheduler_defers_until_events_are_processed(test_logger, qtbot) -> None:
    ctl = _controller(test_logger, scheduler=QtScheduler())
    edit = QLineEdit()
    qtbot.addWidget(edit)
    ctl.binder().bind_property("name", edit, "text")

    ctl.start()
    assert ctl.started == 0
    assert len(ctl.watches.declarations) == 1
    assert ctl.watches.started

    qtbot.waitUntil(lambda: ctl.started == 1, timeout=2000)
    assert edit.text() == "Ann"


def test_default_logger_is_per_controller_class() -> None:
    ctl = PersonController(Person(), scheduler=ImmediateScheduler())

    assert ctl.logger.name == "modelbind.controller.PersonController"
