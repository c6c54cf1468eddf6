"""Per-column display state: label, color and visibility."""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Sequence

from .store import Column, ColumnarStore, ColumnKind

GOLDEN_ANGLE = 137.5
SATURATION = 70.0
LIGHTNESS = 50.0


class HSLColor(NamedTuple):
    hue: float          # degrees, [0, 360)
    saturation: float   # percent
    lightness: float    # percent

    def rgba(self, alpha: int = 255) -> tuple[int, int, int, int]:
        """0-255 RGBA tuple for renderers that take integer colors."""
        r, g, b = colorsys.hls_to_rgb(self.hue / 360.0,
                                      self.lightness / 100.0,
                                      self.saturation / 100.0)
        return (round(r * 255), round(g * 255), round(b * 255), alpha)


def series_color(index: int) -> HSLColor:
    """Color for the *index*-th value series (0-based)."""
    return HSLColor((index * GOLDEN_ANGLE) % 360.0, SATURATION, LIGHTNESS)


@dataclass
class SeriesState:
    column_index: int
    label: str
    color: HSLColor
    visible: bool = False


class SeriesRegistry:
    """Ordered SeriesState for every numeric column of one load.

    All series start hidden.
    """

    def __init__(self, columns: Sequence[Column]) -> None:
        numeric = [c for c in columns if c.kind is ColumnKind.NUMERIC]
        self._states: dict[int, SeriesState] = {
            c.index: SeriesState(c.index, c.name, series_color(i))
            for i, c in enumerate(numeric)
        }

    @classmethod
    def from_store(cls, store: ColumnarStore) -> SeriesRegistry:
        return cls(store.columns)

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[SeriesState]:
        return iter(self._states.values())

    def get(self, column_index: int) -> SeriesState:
        try:
            return self._states[column_index]
        except KeyError:
            raise KeyError(f"No series for column {column_index}") from None

    def list(self) -> list[SeriesState]:
        return list(self._states.values())

    def visible(self) -> list[SeriesState]:
        return [s for s in self._states.values() if s.visible]

    def set_visible(self, column_index: int, visible: bool) -> bool:
        """Returns True when the flag actually changed."""
        state = self.get(column_index)
        if state.visible == visible:
            return False
        state.visible = visible
        return True

    def set_all_visible(self, visible: bool) -> bool:
        changed = False
        for state in self._states.values():
            if state.visible != visible:
                state.visible = visible
                changed = True
        return changed
