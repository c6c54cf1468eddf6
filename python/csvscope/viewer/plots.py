"""Plot panel — draws the visible series inside the controller's viewport.

ImPlot's own pan/zoom is overridden every sync by pinning the axis limits to
the viewport; mouse gestures are translated into controller intents instead:

  wheel              pointer-anchored zoom
  left drag          zoom to the dragged X range
  left click         pin the nearest row
  double click / R   reset to the full domain
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
import dearpygui.dearpygui as dpg

from csvscope.autoscale import x_ticks, y_ticks
from csvscope.controller import AppState

logger = logging.getLogger(__name__)

_WHEEL_FACTOR = 0.85
_CLICK_PIXELS = 4  # drags shorter than this count as a click
_TICK_COUNT = 6


@dataclass
class _PlotSeries:
    column_index: int
    line_tag: int | str
    theme_tag: int | str


class PlotPanel:
    """Single plot with one line series per visible column."""

    def __init__(self, parent: int | str,
                 dispatch: Callable[..., bool]) -> None:
        self._parent = parent
        self._dispatch = dispatch
        self._series: dict[int, _PlotSeries] = {}
        self._store_id: int | None = None
        self._prev_lmb_down = False
        self._press: tuple[float, float] | None = None  # (data x, screen x)

        self.plot_tag = dpg.add_plot(label="##plot", parent=parent,
                                     width=-1, height=-1,
                                     anti_aliased=True)
        self.x_axis_tag = dpg.add_plot_axis(dpg.mvXAxis, label="Time (UTC)",
                                            parent=self.plot_tag)
        self.y_axis_tag = dpg.add_plot_axis(dpg.mvYAxis, label="Value",
                                            parent=self.plot_tag)
        dpg.add_plot_legend(parent=self.plot_tag)

        with dpg.handler_registry() as hr:
            dpg.add_mouse_wheel_handler(callback=self._on_mouse_wheel)
            dpg.add_mouse_double_click_handler(button=dpg.mvMouseButton_Left,
                                               callback=self._on_double_click)
            dpg.add_key_press_handler(key=dpg.mvKey_R,
                                      callback=self._on_key_r)
        self._handler_registry = hr

    # ------------------------------------------------------------------
    # State → widgets
    # ------------------------------------------------------------------

    def sync(self, state: AppState) -> None:
        """Bring series and axes in line with *state*."""
        if state.store is None or state.registry is None:
            self.clear()
            return

        # New load: every cached line belongs to the old store
        if id(state.store) != self._store_id:
            self.clear()
            self._store_id = id(state.store)

        for s in state.registry:
            ps = self._series.get(s.column_index)
            if s.visible and ps is None:
                self._add_series(state, s.column_index, s.label,
                                 s.color.rgba())
            elif not s.visible and ps is not None:
                self._remove_series(s.column_index)

        vp = state.viewport
        if vp is None:
            return
        x_min, x_max = vp.x_min, vp.x_max
        if x_max <= x_min:
            x_min, x_max = x_min - 0.5, x_max + 0.5
        y_min, y_max = vp.y_min, vp.y_max
        if y_max <= y_min:
            y_min, y_max = y_min - 0.5, y_max + 0.5
        dpg.set_axis_limits(self.x_axis_tag, x_min, x_max)
        dpg.set_axis_limits(self.y_axis_tag, y_min, y_max)
        dpg.set_axis_ticks(self.x_axis_tag,
                           tuple(x_ticks(x_min, x_max, _TICK_COUNT)))
        dpg.set_axis_ticks(self.y_axis_tag,
                           tuple(y_ticks(y_min, y_max, _TICK_COUNT)))

    def _add_series(self, state: AppState, column_index: int, label: str,
                    color: tuple[int, int, int, int]) -> None:
        store = state.store
        x = np.ascontiguousarray(store.x, dtype=np.float64)
        y = np.ascontiguousarray(store.y(column_index), dtype=np.float64)
        line = dpg.add_line_series([], [], label=label, parent=self.y_axis_tag)
        if len(x) > 0:
            dpg.configure_item(line, x=x, y=y)
        with dpg.theme() as theme:
            with dpg.theme_component(dpg.mvLineSeries):
                dpg.add_theme_color(dpg.mvPlotCol_Line, color,
                                    category=dpg.mvThemeCat_Plots)
        dpg.bind_item_theme(line, theme)
        self._series[column_index] = _PlotSeries(column_index, line, theme)

    def _remove_series(self, column_index: int) -> None:
        ps = self._series.pop(column_index, None)
        if ps is None:
            return
        for tag in (ps.line_tag, ps.theme_tag):
            if dpg.does_item_exist(tag):
                dpg.delete_item(tag)

    def clear(self) -> None:
        for column_index in list(self._series):
            self._remove_series(column_index)
        self._store_id = None

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _is_hovered(self) -> bool:
        return dpg.does_item_exist(self.plot_tag) and dpg.is_item_hovered(self.plot_tag)

    def tick(self) -> None:
        """Per-frame: report plot size and turn left-button edges into intents."""
        w, h = dpg.get_item_rect_size(self.plot_tag)
        if w > 0 and h > 0:
            self._dispatch("resize", width=w, height=h)

        lmb_down = dpg.is_mouse_button_down(dpg.mvMouseButton_Left)
        pressed = lmb_down and not self._prev_lmb_down
        released = self._prev_lmb_down and not lmb_down
        self._prev_lmb_down = lmb_down

        if pressed and self._is_hovered():
            self._press = (dpg.get_plot_mouse_pos()[0],
                           dpg.get_mouse_pos(local=False)[0])
        elif released and self._press is not None:
            x0, sx0 = self._press
            self._press = None
            x1 = dpg.get_plot_mouse_pos()[0]
            sx1 = dpg.get_mouse_pos(local=False)[0]
            if abs(sx1 - sx0) < _CLICK_PIXELS:
                logger.debug("[CLICK] pin at x=%s", x0)
                self._dispatch("pin_at", x=x0)
            else:
                logger.debug("[DRAG] zoom to [%s, %s]", x0, x1)
                self._dispatch("zoom_rect", x0=x0, x1=x1)

    def _on_mouse_wheel(self, sender: int, app_data: float) -> None:
        if not self._is_hovered() or app_data == 0:
            return
        anchor = dpg.get_plot_mouse_pos()[0]
        factor = _WHEEL_FACTOR if app_data > 0 else 1.0 / _WHEEL_FACTOR
        self._dispatch("zoom", x=anchor, factor=factor)

    def _on_double_click(self, sender: int, app_data: int) -> None:
        if self._is_hovered():
            self._press = None
            self._dispatch("reset_view")

    def _on_key_r(self, sender: int, app_data: int) -> None:
        self._dispatch("reset_view")
