"""Viewport state and the zoom / reset transforms that act on it."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from . import autoscale
from .series import SeriesRegistry
from .store import ColumnarStore

logger = logging.getLogger(__name__)


@dataclass
class Viewport:
    x_min: float = 0.0
    x_max: float = 1.0
    y_min: float = 0.0
    y_max: float = 1.0
    y_auto: bool = True

    @property
    def x_window(self) -> tuple[float, float]:
        return self.x_min, self.x_max

    @property
    def x_span(self) -> float:
        return self.x_max - self.x_min

    def pixel_to_x(self, px: float, width: float) -> float:
        """Data X under pixel column *px* of a plot area *width* pixels wide."""
        if width <= 0:
            raise ValueError(f"plot width must be positive, got {width}")
        return self.x_min + (px / width) * self.x_span

    def x_to_pixel(self, x: float, width: float) -> float:
        if width <= 0:
            raise ValueError(f"plot width must be positive, got {width}")
        if self.x_span == 0:
            return 0.0
        return (x - self.x_min) / self.x_span * width


class ViewTransform:
    """Owns the Viewport for one loaded store and keeps Y in sync.

    Every X change re-runs autoscale while ``y_auto`` is set; when autoscale
    has nothing to fit the previous Y bounds are kept.
    """

    def __init__(self, store: ColumnarStore, registry: SeriesRegistry) -> None:
        self._store = store
        self._registry = registry
        self.viewport = Viewport()
        self.reset_to_full_domain()

    # ------------------------------------------------------------------
    # X transforms
    # ------------------------------------------------------------------

    def reset_to_full_domain(self) -> None:
        xr = self._store.x_range()
        if xr is not None:
            self.viewport.x_min, self.viewport.x_max = xr
        self._x_changed()

    def zoom_at(self, anchor_x: float, factor: float) -> None:
        """Scale the X range by *factor* keeping *anchor_x* at the same pixel.

        ``factor < 1`` zooms in, ``factor > 1`` zooms out.
        """
        if not math.isfinite(factor) or factor <= 0:
            raise ValueError(f"zoom factor must be positive, got {factor}")
        vp = self.viewport
        new_range = vp.x_span * factor
        x_min = anchor_x - (anchor_x - vp.x_min) * factor
        vp.x_min, vp.x_max = x_min, x_min + new_range
        logger.debug("zoom_at %g x%g -> [%g, %g]",
                     anchor_x, factor, vp.x_min, vp.x_max)
        self._x_changed()

    def zoom_at_pixel(self, px: float, width: float, factor: float) -> None:
        self.zoom_at(self.viewport.pixel_to_x(px, width), factor)

    def zoom_to_rect(self, x0: float, x1: float) -> bool:
        """Show exactly ``[min(x0, x1), max(x0, x1)]``; zero width does nothing."""
        if x0 == x1:
            return False
        self.viewport.x_min, self.viewport.x_max = min(x0, x1), max(x0, x1)
        self._x_changed()
        return True

    # ------------------------------------------------------------------
    # Y control
    # ------------------------------------------------------------------

    def set_y_range(self, y0: float, y1: float) -> None:
        """Pin Y explicitly; autoscale stays off until set_auto_y(True)."""
        self.viewport.y_min, self.viewport.y_max = min(y0, y1), max(y0, y1)
        self.viewport.y_auto = False

    def set_auto_y(self, enabled: bool) -> None:
        self.viewport.y_auto = enabled
        if enabled:
            self.autoscale()

    def autoscale(self) -> bool:
        """Recompute Y from visible data; returns False when bounds were kept."""
        yr = autoscale.recompute(self._store, self._registry,
                                 self.viewport.x_window)
        if yr is None:
            return False
        self.viewport.y_min, self.viewport.y_max = yr
        return True

    def _x_changed(self) -> None:
        if self.viewport.y_auto:
            self.autoscale()
