from __future__ import annotations

import pytest

pytest.importorskip("PySide6")

from PySide6.QtWidgets import QComboBox, QListWidget

from modelbind.binding import BinderGroup, ComboBoxSurface, ListWidgetSurface, SequenceSurface
from modelbind.model import ObservableList

from tests.helpers.models import Catalog


def _bound(catalog: Catalog, surface, selected: str | None = "current"):
    group = BinderGroup("main", catalog)
    group.bind_list("items", surface, selected)
    group.bind()
    return group


def test_surface_mirrors_structural_changes() -> None:
    catalog = Catalog()
    catalog.items.extend(["a", "b"])
    surface = SequenceSurface()
    _bound(catalog, surface, None)

    assert surface.items == ["a", "b"]

    catalog.items.append("c")
    catalog.items.insert(0, "z")
    catalog.items.remove_at(1)
    catalog.items.replace_at(0, "Z")
    assert surface.items == ["Z", "b", "c"]

    catalog.items.sort(reverse=True)
    assert surface.items == ["c", "b", "Z"]

    catalog.items.clear()
    assert surface.items == []


def test_replacing_the_list_retargets_the_binding() -> None:
    catalog = Catalog()
    old = catalog.items
    surface = SequenceSurface()
    _bound(catalog, surface, None)

    catalog.items = ObservableList(["x", "y"])
    assert surface.items == ["x", "y"]

    old.append("ignored")
    catalog.items.append("z")
    assert surface.items == ["x", "y", "z"]


def test_selection_follows_model_and_view() -> None:
    catalog = Catalog()
    catalog.items.extend(["a", "b", "c"])
    surface = SequenceSurface()
    _bound(catalog, surface)

    catalog.current = "b"
    assert surface.selected_item == "b"
    assert surface.selected_index == 1

    surface._selection_from_view(2)
    assert catalog.current == "c"


def test_removing_selected_entry_clears_model_selection() -> None:
    catalog = Catalog()
    catalog.items.extend(["a", "b"])
    surface = SequenceSurface()
    _bound(catalog, surface)
    catalog.current = "a"

    catalog.items.remove_at(0)

    assert surface.selected_item is None
    assert catalog.current is None


def test_unbind_stops_mirroring() -> None:
    catalog = Catalog()
    surface = SequenceSurface()
    group = _bound(catalog, surface, None)

    group.unbind()
    catalog.items.append("late")

    assert surface.items == []
    assert catalog.items.listener_count() == 0


def test_combo_box_surface(qtbot) -> None:
    combo = QComboBox()
    qtbot.addWidget(combo)
    catalog = Catalog()
    catalog.items.extend(["a", "b", "c"])
    surface = ComboBoxSurface(combo)
    _bound(catalog, surface)

    assert [combo.itemText(i) for i in range(combo.count())] == ["a", "b", "c"]
    assert catalog.current is None

    catalog.current = "b"
    assert combo.currentIndex() == 1

    combo.setCurrentIndex(2)
    assert catalog.current == "c"

    catalog.items.replace_at(0, "A")
    assert combo.itemText(0) == "A"


def test_list_widget_surface_uses_display(qtbot) -> None:
    widget = QListWidget()
    qtbot.addWidget(widget)
    catalog = Catalog()
    catalog.items.extend([1, 2])
    surface = ListWidgetSurface(widget, display=lambda n: f"#{n}")
    _bound(catalog, surface)

    catalog.items.append(3)
    assert [widget.item(i).text() for i in range(widget.count())] == ["#1", "#2", "#3"]

    widget.setCurrentRow(1)
    assert catalog.current == 2

    catalog.items.remove_at(0)
    assert widget.count() == 2
