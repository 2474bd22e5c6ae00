#!/usr/bin/env python3
"""Small address form wired through a Controller.

Edits in the form land in the model, model changes show in the form, and
the watches log every town/region change. ``Ctrl+D`` dumps the model.

Usage:
  python scripts/address_form_demo.py [--settings PATH]
"""

from __future__ import annotations

import argparse
import sys

from PySide6.QtGui import QKeySequence
from PySide6.QtWidgets import QApplication, QComboBox, QFormLayout, QLabel, QLineEdit, QPushButton, QWidget

from modelbind.app import ActionEvent, Controller, WatchEvent
from modelbind.binding import ComboBoxSurface
from modelbind.logger import install_qt_message_handler, setup_logger
from modelbind.model import Model, ObservableList, observable
from modelbind.settings_manager import SettingsManager


class Address(Model):
    street = observable("")
    town = observable("")
    region = observable("")
    postcode = observable("")


class Person(Model):
    name = observable("")
    address = observable(default_factory=Address)
    regions = observable(default_factory=lambda: ObservableList(["North", "Midlands", "South"]))


class PersonController(Controller[Person]):
    def setup(self) -> None:
        self.watch("address.town", "address.region", handler=self.location_changed)
        self.watch("regions", handler=self.regions_changed)

    def location_changed(self, event: WatchEvent) -> None:
        self.logger.info("%s: %r -> %r", event.path, event.old_value, event.new_value)

    def regions_changed(self, event: WatchEvent) -> None:
        self.logger.info("regions now %s", list(event.new_value))

    def on_start(self) -> None:
        self.logger.info("form ready")

    def build_view(self) -> QWidget:
        form = QWidget()
        form.setWindowTitle("Address")
        layout = QFormLayout(form)
        group = self.binder()

        layout.addRow("Name", group.bind_property("name", QLineEdit(), "text"))
        layout.addRow("Street", group.bind_property("address.street", QLineEdit(), "text"))
        layout.addRow("Town", group.bind_property("address.town", QLineEdit(), "text"))
        layout.addRow("Postcode", group.bind_property("address.postcode", QLineEdit(), "text"))
        combo = QComboBox()
        group.bind_list("regions", ComboBoxSurface(combo), "address.region")
        layout.addRow("Region", combo)
        layout.addRow("", group.read_property("${'Hello, ' + name if name else ''}", QLabel(), "text"))

        add_region = QPushButton("Add region")
        add_region.clicked.connect(lambda: self.model.regions.append(f"Region {len(self.model.regions) + 1}"))
        layout.addRow("", add_region)

        dump = self.add_action("dump", self.dump_model, parent=form)
        dump.setShortcut(QKeySequence("Ctrl+D"))
        form.addAction(dump)
        self.add_pointer_handler(form, lambda ev: self.logger.debug("pointer %s", ev.kind.value))
        return form

    def dump_model(self, event: ActionEvent) -> None:  # noqa: ARG002
        self.log_object(self.model)


def main() -> int:
    p = argparse.ArgumentParser(description="modelbind address form demo")
    p.add_argument("--settings", help="Path to a JSON settings file")
    args = p.parse_args()

    app = QApplication(sys.argv)
    settings = SettingsManager(args.settings)
    setup_logger(settings.log_level)
    install_qt_message_handler()

    controller = PersonController(Person(), settings=settings)
    view = controller.build_view()
    controller.start()
    view.show()
    code = app.exec()
    controller.stop()
    return code


if __name__ == "__main__":
    raise SystemExit(main())
