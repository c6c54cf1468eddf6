"""Point inspection: snapshot the visible series at one row."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field

import numpy as np

from .formatting import format_inspect, format_timestamp
from .series import SeriesRegistry
from .store import ColumnarStore


@dataclass(frozen=True)
class PinnedSample:
    index: int
    timestamp: float
    values: dict[str, str] = field(default_factory=dict)

    def lines(self) -> list[str]:
        out = [f"#{self.index}  {format_timestamp(self.timestamp)}"]
        out.extend(f"  {label}: {text}" for label, text in self.values.items())
        return out


def inspect(store: ColumnarStore, registry: SeriesRegistry,
            index: int | None) -> PinnedSample | None:
    """Sample at row *index*, or None when the index is not a valid row."""
    if index is None or isinstance(index, bool):
        return None
    if not isinstance(index, numbers.Integral):
        return None
    index = int(index)
    if index < 0 or index >= len(store):
        return None
    values = {
        s.label: format_inspect(float(store.y(s.column_index)[index]))
        for s in registry.visible()
    }
    return PinnedSample(index, float(store.x[index]), values)


def nearest_index(store: ColumnarStore, x: float) -> int | None:
    """Row whose timestamp is closest to *x*.

    Timestamps are not guaranteed sorted, so this is a full scan.
    """
    if len(store) == 0:
        return None
    dist = np.abs(store.x - x)
    if not np.isfinite(dist).any():
        return None
    return int(np.nanargmin(np.where(np.isfinite(dist), dist, np.nan)))
