"""Application state and the intent dispatch table that mutates it.

UI code never edits state directly: it calls ``Controller.dispatch(intent,
**payload)`` and re-renders when ``state.revision`` changes.  Everything here
runs on the control thread; only ingestion runs in the background (see
loader.py) and its results are applied from poll().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from .ingest import DEFAULT_CHUNK_ROWS, DEFAULT_DELIMITER
from .loader import Loader, LoadResult
from .pins import PinnedSample, inspect, nearest_index
from .series import SeriesRegistry, SeriesState
from .store import ColumnarStore
from .viewport import Viewport, ViewTransform

logger = logging.getLogger(__name__)

STATUS_IDLE = "No file loaded."
STATUS_NO_DATA = "No data"


@dataclass
class AppState:
    store: ColumnarStore | None = None
    registry: SeriesRegistry | None = None
    transform: ViewTransform | None = None
    pinned: PinnedSample | None = None
    path: Path | None = None
    status: str = STATUS_IDLE
    loading: bool = False
    plot_size: tuple[int, int] = (0, 0)
    revision: int = 0

    @property
    def viewport(self) -> Viewport | None:
        return self.transform.viewport if self.transform is not None else None

    @property
    def series(self) -> list[SeriesState]:
        return self.registry.list() if self.registry is not None else []

    @property
    def has_data(self) -> bool:
        return self.store is not None and len(self.store) > 0


def status_for(store: ColumnarStore) -> str:
    n = len(store)
    if n == 0:
        return STATUS_NO_DATA
    return f"{n:,} rows loaded"


class Controller:
    """Owns AppState and routes UI intents to state transitions."""

    def __init__(self, loader: Loader | None = None, *,
                 delimiter: str = DEFAULT_DELIMITER,
                 chunk_rows: int = DEFAULT_CHUNK_ROWS) -> None:
        self.state = AppState()
        self._loader = loader or Loader(delimiter, chunk_rows)
        self._handlers: dict[str, Callable[..., bool]] = {
            "load": self._load,
            "load_completed": self._load_completed,
            "toggle_series": self._toggle_series,
            "select_all": self._select_all,
            "zoom": self._zoom,
            "zoom_rect": self._zoom_rect,
            "reset_view": self._reset_view,
            "pin": self._pin,
            "pin_at": self._pin_at,
            "set_y_range": self._set_y_range,
            "auto_y": self._auto_y,
            "resize": self._resize,
        }

    @property
    def intents(self) -> list[str]:
        return list(self._handlers)

    def dispatch(self, intent: str, **payload: Any) -> bool:
        """Apply *intent*; returns True when state changed."""
        try:
            handler = self._handlers[intent]
        except KeyError:
            raise KeyError(f"Unknown intent: {intent!r}") from None
        changed = handler(**payload)
        if changed:
            self.state.revision += 1
        return changed

    def poll(self) -> bool:
        """Apply any finished background loads.  Call once per frame."""
        changed = False
        for result in self._loader.poll():
            changed |= self.dispatch("load_completed", result=result)
        return changed

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self, path: str | Path | None = None) -> bool:
        if not path:
            return False  # selection canceled
        path = Path(path)
        gen = self._loader.request(path)
        logger.info("load %d requested: %s", gen, path)
        self.state.loading = True
        self.state.status = f"Loading {path.name}..."
        return True

    def _load_completed(self, result: LoadResult) -> bool:
        st = self.state
        st.loading = False
        if not result.ok:
            logger.warning("failed to load %s: %s", result.path, result.error)
            st.status = f"Error opening file: {result.error}"
            return True

        store = result.store
        st.store = store
        st.registry = SeriesRegistry.from_store(store)
        st.transform = ViewTransform(store, st.registry)
        st.path = result.path
        st.status = status_for(store)
        logger.info("loaded %s: %d rows, %d series in %.2fs",
                    result.path, len(store), len(st.registry), result.elapsed)
        return True

    def apply_store(self, store: ColumnarStore, path: str | Path | None = None) -> bool:
        """Install an already-ingested store as if a load had completed."""
        return self.dispatch("load_completed", result=LoadResult(
            self._loader.generation, Path(path or "<memory>"), store=store))

    # ------------------------------------------------------------------
    # Series visibility
    # ------------------------------------------------------------------

    def _after_visibility_change(self) -> None:
        transform = self.state.transform
        if transform is not None and transform.viewport.y_auto:
            transform.autoscale()

    def _toggle_series(self, column_index: int, visible: bool | None = None) -> bool:
        reg = self.state.registry
        if reg is None:
            return False
        if visible is None:
            visible = not reg.get(column_index).visible
        if not reg.set_visible(column_index, visible):
            return False
        self._after_visibility_change()
        return True

    def _select_all(self, visible: bool = True) -> bool:
        reg = self.state.registry
        if reg is None or not reg.set_all_visible(visible):
            return False
        self._after_visibility_change()
        return True

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def _zoom(self, factor: float, x: float | None = None,
              px: float | None = None) -> bool:
        transform = self.state.transform
        if transform is None:
            return False
        if x is None and px is not None:
            width = self.state.plot_size[0]
            if width <= 0:
                return False
            x = transform.viewport.pixel_to_x(px, width)
        if x is None:
            x = (transform.viewport.x_min + transform.viewport.x_max) / 2
        transform.zoom_at(x, factor)
        return True

    def _zoom_rect(self, x0: float, x1: float) -> bool:
        transform = self.state.transform
        if transform is None:
            return False
        return transform.zoom_to_rect(x0, x1)

    def _reset_view(self) -> bool:
        transform = self.state.transform
        if transform is None:
            return False
        transform.reset_to_full_domain()
        return True

    def _set_y_range(self, y0: float, y1: float) -> bool:
        transform = self.state.transform
        if transform is None:
            return False
        transform.set_y_range(y0, y1)
        return True

    def _auto_y(self, enabled: bool = True) -> bool:
        transform = self.state.transform
        if transform is None:
            return False
        transform.set_auto_y(enabled)
        return True

    def _resize(self, width: int, height: int) -> bool:
        size = (int(width), int(height))
        if size == self.state.plot_size:
            return False
        self.state.plot_size = size
        return True

    # ------------------------------------------------------------------
    # Pinning
    # ------------------------------------------------------------------

    def _pin(self, index: int | None) -> bool:
        st = self.state
        if st.store is None or st.registry is None:
            return False
        sample = inspect(st.store, st.registry, index)
        if sample is None:
            return False
        st.pinned = sample
        return True

    def _pin_at(self, x: float) -> bool:
        if self.state.store is None:
            return False
        return self._pin(nearest_index(self.state.store, x))

    # ------------------------------------------------------------------

    def wait_for_load(self, timeout: float | None = None) -> bool:
        """Block until the in-flight load finishes, then apply it."""
        done = self._loader.wait(timeout)
        self.poll()
        return done
