"""Series sidebar — one checkbox per value column plus bulk show/hide."""

from __future__ import annotations

from typing import Callable

import dearpygui.dearpygui as dpg

from csvscope.series import SeriesState


class SeriesSidebar:
    """Checkbox list mirroring the SeriesRegistry.

    Toggles are forwarded to the controller; the checkboxes are re-synced from
    registry state rather than trusted as the source of truth.
    """

    def __init__(self, parent: int | str,
                 dispatch: Callable[..., bool]) -> None:
        self._parent = parent
        self._dispatch = dispatch
        self._group: int | str | None = None
        self._list_group: int | str | None = None
        self._series: list[SeriesState] = []
        self._checkboxes: dict[int, int | str] = {}
        self._filter_text = ""

    def build(self, series: list[SeriesState]) -> None:
        """(Re)build the sidebar for a freshly loaded registry."""
        self._series = series
        self._filter_text = ""

        if self._group is not None and dpg.does_item_exist(self._group):
            dpg.delete_item(self._group)

        self._group = dpg.add_group(parent=self._parent)
        with dpg.group(horizontal=True, parent=self._group):
            dpg.add_button(label="All",
                           callback=lambda: self._dispatch("select_all", visible=True))
            dpg.add_button(label="None",
                           callback=lambda: self._dispatch("select_all", visible=False))
        dpg.add_input_text(hint="Search series...", parent=self._group,
                           callback=self._on_filter_changed)
        dpg.add_separator(parent=self._group)

        self._list_group = None
        self._rebuild_list()

    def _rebuild_list(self) -> None:
        if self._list_group is not None and dpg.does_item_exist(self._list_group):
            dpg.delete_item(self._list_group)
        self._list_group = dpg.add_group(parent=self._group)
        self._checkboxes.clear()

        filt = self._filter_text.lower()
        for s in self._series:
            if filt and filt not in s.label.lower():
                continue
            with dpg.group(horizontal=True, parent=self._list_group):
                dpg.add_text("■", color=s.color.rgba())
                cb = dpg.add_checkbox(label=s.label, default_value=s.visible,
                                      callback=self._on_toggle,
                                      user_data=s.column_index)
            self._checkboxes[s.column_index] = cb

    def sync(self, series: list[SeriesState]) -> None:
        for s in series:
            cb = self._checkboxes.get(s.column_index)
            if cb is not None and dpg.does_item_exist(cb):
                dpg.set_value(cb, s.visible)

    def clear(self) -> None:
        if self._group is not None and dpg.does_item_exist(self._group):
            dpg.delete_item(self._group)
        self._group = None
        self._list_group = None
        self._series = []
        self._checkboxes.clear()

    def _on_toggle(self, sender: int, app_data: bool, user_data: int) -> None:
        self._dispatch("toggle_series", column_index=user_data,
                       visible=bool(app_data))

    def _on_filter_changed(self, sender: int, app_data: str) -> None:
        self._filter_text = app_data
        self._rebuild_list()
