"""Columnar numeric storage for ingested time-series data.

Layout:
  x          float64[N]   timestamps, epoch seconds (not required to be sorted)
  y[1..K-1]  float64[N]   one dense array per numeric column

Values are accumulated into growable buffers while the file streams in and
then finalized into exact-length arrays.  The growable storage is released
on finalize, so peak memory is roughly one buffer per column plus the copy.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

DEFAULT_TIME_NAME = "time"
_INITIAL_CAPACITY = 1024


class ColumnKind(enum.Enum):
    TIME = "time"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class Column:
    name: str
    index: int
    kind: ColumnKind


def columns_from_names(names: Sequence[str]) -> list[Column]:
    """Column 0 is the time column, the rest are numeric."""
    return [
        Column(name, i, ColumnKind.TIME if i == 0 else ColumnKind.NUMERIC)
        for i, name in enumerate(names)
    ]


# ---------------------------------------------------------------------------
# Growable buffer
# ---------------------------------------------------------------------------

class ColumnBuffer:
    """Append-only float64 buffer with geometric growth."""

    def __init__(self, capacity: int = _INITIAL_CAPACITY) -> None:
        self._data: np.ndarray | None = np.empty(max(capacity, 1), dtype=np.float64)
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def _reserve(self, needed: int) -> None:
        if self._data is None:
            raise RuntimeError("buffer already finalized")
        cap = len(self._data)
        if needed <= cap:
            return
        while cap < needed:
            cap *= 2
        grown = np.empty(cap, dtype=np.float64)
        grown[:self._size] = self._data[:self._size]
        self._data = grown

    def append(self, value: float) -> None:
        self._reserve(self._size + 1)
        self._data[self._size] = value
        self._size += 1

    def extend(self, values: np.ndarray | Iterable[float]) -> None:
        arr = np.asarray(values, dtype=np.float64)
        n = len(arr)
        if n == 0:
            return
        self._reserve(self._size + n)
        self._data[self._size:self._size + n] = arr
        self._size += n

    def finalize(self) -> np.ndarray:
        """Return a tight read-only copy and drop the growable storage."""
        if self._data is None:
            raise RuntimeError("buffer already finalized")
        out = self._data[:self._size].copy()
        out.flags.writeable = False
        self._data = None
        return out


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ColumnarStore:
    """Finalized, read-only column arrays for one loaded file."""

    def __init__(self, columns: Sequence[Column], x: np.ndarray,
                 ys: Sequence[np.ndarray]) -> None:
        if not columns or columns[0].kind is not ColumnKind.TIME:
            raise ValueError("column 0 must be the time column")
        if len(ys) != len(columns) - 1:
            raise ValueError(
                f"expected {len(columns) - 1} value arrays, got {len(ys)}")
        n = len(x)
        for col, arr in zip(columns[1:], ys):
            if len(arr) != n:
                raise ValueError(
                    f"column {col.name!r} has {len(arr)} rows, expected {n}")
        self._columns = list(columns)
        self._x = x
        self._ys = list(ys)
        self._by_name = {c.name: c.index for c in self._columns[1:]}

    @classmethod
    def empty(cls, columns: Sequence[Column]) -> ColumnarStore:
        def _arr() -> np.ndarray:
            a = np.empty(0, dtype=np.float64)
            a.flags.writeable = False
            return a
        return cls(columns, _arr(), [_arr() for _ in columns[1:]])

    def __len__(self) -> int:
        return len(self._x)

    @property
    def columns(self) -> list[Column]:
        return list(self._columns)

    @property
    def time_column(self) -> Column:
        return self._columns[0]

    @property
    def numeric_columns(self) -> list[Column]:
        return self._columns[1:]

    @property
    def x(self) -> np.ndarray:
        return self._x

    def y(self, column_index: int) -> np.ndarray:
        """Values of numeric column *column_index* (1-based, as in the header)."""
        if column_index < 1 or column_index >= len(self._columns):
            raise IndexError(f"no numeric column at index {column_index}")
        return self._ys[column_index - 1]

    def series(self, name: str) -> np.ndarray:
        try:
            return self.y(self._by_name[name])
        except KeyError:
            raise KeyError(f"Unknown column: {name!r}") from None

    def x_range(self) -> tuple[float, float] | None:
        """(min, max) over finite timestamps, or None when there are none."""
        if len(self._x) == 0:
            return None
        finite = self._x[np.isfinite(self._x)]
        if len(finite) == 0:
            return None
        return float(finite.min()), float(finite.max())


class StoreBuilder:
    """Accumulates parsed chunks into one buffer per column."""

    def __init__(self, columns: Sequence[Column],
                 capacity: int = _INITIAL_CAPACITY) -> None:
        self._columns = list(columns)
        self._x = ColumnBuffer(capacity)
        self._ys = [ColumnBuffer(capacity) for _ in self._columns[1:]]

    def __len__(self) -> int:
        return len(self._x)

    @property
    def columns(self) -> list[Column]:
        return list(self._columns)

    def append_chunk(self, x: np.ndarray, ys: Sequence[np.ndarray]) -> None:
        if len(ys) != len(self._ys):
            raise ValueError(
                f"expected {len(self._ys)} value arrays, got {len(ys)}")
        self._x.extend(x)
        for buf, arr in zip(self._ys, ys):
            buf.extend(arr)

    def finalize(self) -> ColumnarStore:
        x = self._x.finalize()
        ys = [buf.finalize() for buf in self._ys]
        return ColumnarStore(self._columns, x, ys)
