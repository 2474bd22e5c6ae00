"""List-like UI surfaces that a ListBinding can drive.

A surface mirrors the bound list and exposes the selection as an observable
``selected_item`` property, so the selection can be bound to the model with
an ordinary two-way PropertyBinding.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from PySide6.QtWidgets import QComboBox, QListWidget

from modelbind.model.model import Model


class ItemSurface(Model):
    """Base surface: keeps the item mirror and the selection, subclasses render."""

    def __init__(self) -> None:
        self._items: list[Any] = []
        self._selected: Any = None
        self._syncing = False

    # ---- view hooks ----
    def _render_all(self) -> None:
        pass

    def _render_insert(self, index: int, items: list[Any]) -> None:
        pass

    def _render_remove(self, index: int, count: int) -> None:
        pass

    def _render_replace(self, index: int, item: Any) -> None:
        pass

    def _show_selection(self, index: int) -> None:
        pass

    def _view_index(self) -> int:
        return -1

    # ---- items ----
    @property
    def items(self) -> list[Any]:
        return list(self._items)

    def set_items(self, items: Iterable[Any]) -> None:
        self._items = list(items)
        self._quietly(self._render_all)
        self._reconcile_selection()

    def insert_items(self, index: int, items: Iterable[Any]) -> None:
        new = list(items)
        self._items[index:index] = new
        self._quietly(self._render_insert, index, new)
        self._reconcile_selection()

    def remove_items(self, index: int, count: int) -> None:
        del self._items[index : index + count]
        self._quietly(self._render_remove, index, count)
        self._reconcile_selection()

    def replace_item(self, index: int, item: Any) -> None:
        self._items[index] = item
        self._quietly(self._render_replace, index, item)
        self._reconcile_selection()

    # ---- selection ----
    @property
    def selected_item(self) -> Any:
        return self._selected

    @selected_item.setter
    def selected_item(self, value: Any) -> None:
        self._set_selected(value)
        self._quietly(self._show_selection, self.index_of(value))

    @property
    def selected_index(self) -> int:
        return self.index_of(self._selected)

    def index_of(self, item: Any) -> int:
        if item is None:
            return -1
        for i, it in enumerate(self._items):
            if it is item:
                return i
        try:
            return self._items.index(item)
        except ValueError:
            return -1

    def _set_selected(self, item: Any) -> None:
        old = self._selected
        self._selected = item
        self.property_changed("selected_item", old, item)

    def _selection_from_view(self, index: int) -> None:
        if self._syncing:
            return
        item = self._items[index] if 0 <= index < len(self._items) else None
        self._set_selected(item)

    def _reconcile_selection(self) -> None:
        idx = self.index_of(self._selected)
        if idx >= 0:
            self._quietly(self._show_selection, idx)
            return
        view_idx = self._view_index()
        item = self._items[view_idx] if 0 <= view_idx < len(self._items) else None
        if item is not self._selected:
            self._set_selected(item)

    def _quietly(self, fn: Callable[..., Any], *args: Any) -> None:
        self._syncing = True
        try:
            fn(*args)
        finally:
            self._syncing = False


class SequenceSurface(ItemSurface):
    """Surface without a widget; handy for tests and headless controllers."""

    def __init__(self, items: Iterable[Any] = ()) -> None:
        super().__init__()
        self._items = list(items)


class ComboBoxSurface(ItemSurface):
    """Drives a QComboBox; items are shown through ``display``."""

    def __init__(self, widget: QComboBox, display: Callable[[Any], str] = str) -> None:
        super().__init__()
        self.widget = widget
        self._display = display
        widget.currentIndexChanged.connect(self._selection_from_view)

    def _render_all(self) -> None:
        self.widget.clear()
        self.widget.addItems([self._display(item) for item in self._items])

    def _render_insert(self, index: int, items: list[Any]) -> None:
        for offset, item in enumerate(items):
            self.widget.insertItem(index + offset, self._display(item))

    def _render_remove(self, index: int, count: int) -> None:
        for _ in range(count):
            self.widget.removeItem(index)

    def _render_replace(self, index: int, item: Any) -> None:
        self.widget.setItemText(index, self._display(item))

    def _show_selection(self, index: int) -> None:
        self.widget.setCurrentIndex(index)

    def _view_index(self) -> int:
        return self.widget.currentIndex()


class ListWidgetSurface(ItemSurface):
    """Drives a QListWidget; items are shown through ``display``."""

    def __init__(self, widget: QListWidget, display: Callable[[Any], str] = str) -> None:
        super().__init__()
        self.widget = widget
        self._display = display
        widget.currentRowChanged.connect(self._selection_from_view)

    def _render_all(self) -> None:
        self.widget.clear()
        self.widget.addItems([self._display(item) for item in self._items])

    def _render_insert(self, index: int, items: list[Any]) -> None:
        for offset, item in enumerate(items):
            self.widget.insertItem(index + offset, self._display(item))

    def _render_remove(self, index: int, count: int) -> None:
        for _ in range(count):
            self.widget.takeItem(index)

    def _render_replace(self, index: int, item: Any) -> None:
        row = self.widget.item(index)
        if row is not None:
            row.setText(self._display(item))

    def _show_selection(self, index: int) -> None:
        self.widget.setCurrentRow(index)

    def _view_index(self) -> int:
        return self.widget.currentRow()
