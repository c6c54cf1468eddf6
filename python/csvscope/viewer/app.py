"""DearPyGui application shell — menu bar, windows, file dialog, main loop."""

from __future__ import annotations

import logging
from pathlib import Path

import dearpygui.dearpygui as dpg

from csvscope.controller import Controller
from csvscope.ingest import DEFAULT_CHUNK_ROWS, DEFAULT_DELIMITER
from csvscope.series import SeriesRegistry

from .plots import PlotPanel
from .sidebar import SeriesSidebar

logger = logging.getLogger(__name__)

_NO_PIN = "Click the plot to pin values."


class ViewerApp:
    """Top-level viewer application.

    Renders whatever the Controller's state says and forwards every user
    gesture back to it as an intent.
    """

    def __init__(self, delimiter: str = DEFAULT_DELIMITER,
                 chunk_rows: int = DEFAULT_CHUNK_ROWS) -> None:
        self._ctl = Controller(delimiter=delimiter, chunk_rows=chunk_rows)
        self._sidebar: SeriesSidebar | None = None
        self._plot_panel: PlotPanel | None = None
        self._rendered_revision = -1
        self._rendered_registry: SeriesRegistry | None = None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup(self) -> None:
        logging.basicConfig(level=logging.INFO,
                            format="%(name)s: %(message)s")

        dpg.create_context()
        dpg.configure_app(init_file=self._get_ini_path(),
                          auto_save_init_file=True)
        dpg.create_viewport(title="csvscope", width=1280, height=720)

        self._build_layout()
        self._build_file_dialog()

        dpg.setup_dearpygui()
        dpg.show_viewport()

    @staticmethod
    def _get_ini_path() -> str:
        config_dir = Path.home() / ".config" / "csvscope"
        config_dir.mkdir(parents=True, exist_ok=True)
        return str(config_dir / "layout.ini")

    def _build_layout(self) -> None:
        dispatch = self._ctl.dispatch

        with dpg.viewport_menu_bar():
            with dpg.menu(label="File"):
                dpg.add_menu_item(label="Open File...",
                                  callback=self._on_open_file)
                dpg.add_separator()
                dpg.add_menu_item(label="Quit",
                                  callback=lambda: dpg.stop_dearpygui())

            with dpg.menu(label="View"):
                dpg.add_menu_item(label="Reset View",
                                  callback=lambda: dispatch("reset_view"))
                dpg.add_menu_item(label="Auto Y", check=True,
                                  default_value=True, tag="auto_y_item",
                                  callback=self._on_auto_y_toggle)
                dpg.add_separator()
                dpg.add_menu_item(label="Show All Series",
                                  callback=lambda: dispatch("select_all", visible=True))
                dpg.add_menu_item(label="Hide All Series",
                                  callback=lambda: dispatch("select_all", visible=False))

            dpg.add_text("Status: No file loaded.", tag="status_bar")

        with dpg.window(label="Series", tag="series_window", no_close=True,
                        width=250, height=470, pos=[0, 30]):
            dpg.add_text("No file loaded.", tag="series_placeholder")

        with dpg.window(label="Pinned", tag="pin_window", no_close=True,
                        width=250, height=200, pos=[0, 505]):
            dpg.add_text(_NO_PIN, tag="pin_text")

        with dpg.window(label="Plot", tag="plot_window", no_close=True,
                        width=1010, height=675, pos=[260, 30]):
            pass

        self._sidebar = SeriesSidebar("series_window", dispatch)
        self._plot_panel = PlotPanel("plot_window", dispatch)

    def _build_file_dialog(self) -> None:
        with dpg.file_dialog(directory_selector=False, show=False,
                             callback=self._on_file_selected,
                             cancel_callback=self._on_file_canceled,
                             tag="file_dialog", width=600, height=400):
            dpg.add_file_extension(".csv", color=(0, 255, 0, 255))
            dpg.add_file_extension(".*")

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def _on_open_file(self) -> None:
        dpg.show_item("file_dialog")

    def _on_file_selected(self, sender: int, app_data: dict) -> None:
        self._ctl.dispatch("load", path=app_data.get("file_path_name") or None)

    def _on_file_canceled(self, sender: int, app_data: dict) -> None:
        self._ctl.dispatch("load", path=None)

    def _on_auto_y_toggle(self, sender: int, value: bool) -> None:
        self._ctl.dispatch("auto_y", enabled=bool(value))

    # ------------------------------------------------------------------
    # Render
    # ------------------------------------------------------------------

    def _render(self) -> None:
        state = self._ctl.state
        if state.revision == self._rendered_revision:
            return
        self._rendered_revision = state.revision
        assert self._sidebar is not None
        assert self._plot_panel is not None

        if state.registry is not self._rendered_registry:
            self._rendered_registry = state.registry
            if state.registry is None:
                self._sidebar.clear()
                dpg.show_item("series_placeholder")
            else:
                dpg.hide_item("series_placeholder")
                self._sidebar.build(state.series)
        else:
            self._sidebar.sync(state.series)

        self._plot_panel.sync(state)

        vp = state.viewport
        if vp is not None:
            dpg.set_value("auto_y_item", vp.y_auto)

        pin = state.pinned
        dpg.set_value("pin_text", "\n".join(pin.lines()) if pin else _NO_PIN)
        dpg.set_value("status_bar", f"Status: {state.status}")

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        assert self._plot_panel is not None
        while dpg.is_dearpygui_running():
            # 1. Apply finished background loads
            self._ctl.poll()

            # 2. Mouse gestures → intents
            if self._ctl.state.has_data:
                self._plot_panel.tick()

            # 3. Redraw if anything changed
            self._render()

            dpg.render_dearpygui_frame()

        dpg.destroy_context()

    def open_file(self, path: str) -> None:
        """Start loading a file immediately (called from CLI args)."""
        self._ctl.dispatch("load", path=path)
