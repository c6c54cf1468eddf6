"""Y-range autoscale over the visible series inside the current X window."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import numpy as np

from .formatting import format_tick, format_timestamp
from .series import SeriesRegistry
from .store import ColumnarStore

logger = logging.getLogger(__name__)

LOWER_PAD = 0.9
UPPER_PAD = 1.1


def recompute(store: ColumnarStore, registry: SeriesRegistry,
              x_window: tuple[float, float]) -> tuple[float, float] | None:
    """Return padded (y_min, y_max), or None when there is nothing to fit.

    Only rows whose timestamp lies in ``[x_min, x_max]`` are scanned.  The
    padding multiplies the extremes (``v_min * 0.9``, ``v_max * 1.1``); the
    result is ordered so the lower bound comes first for negative data.
    """
    visible = registry.visible()
    if not visible or len(store) == 0:
        return None

    x_min, x_max = x_window
    mask = (store.x >= x_min) & (store.x <= x_max)
    if not mask.any():
        return None

    v_min = v_max = None
    for state in visible:
        vals = store.y(state.column_index)[mask]
        vals = vals[np.isfinite(vals)]
        if len(vals) == 0:
            continue
        lo, hi = float(vals.min()), float(vals.max())
        if v_min is None or lo < v_min:
            v_min = lo
        if v_max is None or hi > v_max:
            v_max = hi

    if v_min is None:
        return None

    a, b = v_min * LOWER_PAD, v_max * UPPER_PAD
    logger.debug("autoscale: values [%g, %g] -> y [%g, %g]",
                 v_min, v_max, min(a, b), max(a, b))
    return min(a, b), max(a, b)


def y_ticks(y_min: float, y_max: float, count: int = 6) -> list[tuple[str, float]]:
    """Evenly spaced (label, value) ticks across the Y range."""
    if count < 2 or y_max <= y_min:
        return [(format_tick(y_min), float(y_min))]
    return [(format_tick(v), float(v)) for v in np.linspace(y_min, y_max, count)]


def _clock_label(t: float, span: float) -> str:
    try:
        dt = datetime.fromtimestamp(t, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return f"{t:g}"
    if span >= 2 * 86400:
        return dt.strftime("%Y-%m-%d")
    if span >= 60:
        return dt.strftime("%H:%M:%S")
    return format_timestamp(t)[11:-1]  # HH:MM:SS.mmm


def x_ticks(x_min: float, x_max: float, count: int = 6) -> list[tuple[str, float]]:
    """Evenly spaced (label, value) time ticks, UTC clock text."""
    span = x_max - x_min
    if count < 2 or span <= 0:
        return [(_clock_label(x_min, 0.0), float(x_min))]
    return [(_clock_label(t, span), float(t))
            for t in np.linspace(x_min, x_max, count)]
