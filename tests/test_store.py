"""Tests for the growable column buffers and the finalized store.

Run from the repo root:
    python3 tests/test_store.py
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import numpy as np
import pytest

from csvscope.store import (
    ColumnarStore, ColumnBuffer, ColumnKind, StoreBuilder, columns_from_names,
)


def test_buffer_grows_past_capacity():
    print("test_buffer_grows_past_capacity...", end="")

    buf = ColumnBuffer(capacity=2)
    for i in range(5):
        buf.append(float(i))
    buf.extend(np.arange(5, 100, dtype=np.float64))
    assert len(buf) == 100

    out = buf.finalize()
    assert out.dtype == np.float64
    assert len(out) == 100
    np.testing.assert_array_equal(out, np.arange(100))

    print(" OK")


def test_buffer_released_after_finalize():
    print("test_buffer_released_after_finalize...", end="")

    buf = ColumnBuffer()
    buf.extend([1.0, 2.0])
    out = buf.finalize()
    assert not out.flags.writeable
    with pytest.raises(RuntimeError):
        buf.append(3.0)
    with pytest.raises(RuntimeError):
        buf.finalize()

    print(" OK")


def test_builder_chunks_and_rows():
    print("test_builder_chunks_and_rows...", end="")

    cols = columns_from_names(["t", "a", "b"])
    builder = StoreBuilder(cols, capacity=1)
    builder.append_chunk(np.array([0.0, 1.0]),
                         [np.array([10.0, 11.0]), np.array([20.0, 21.0])])
    builder.append_chunk(np.array([2.0]), [np.array([12.0]), np.array([0.0])])
    assert len(builder) == 3

    store = builder.finalize()
    assert len(store) == 3
    np.testing.assert_array_equal(store.x, [0, 1, 2])
    np.testing.assert_array_equal(store.y(1), [10, 11, 12])
    np.testing.assert_array_equal(store.series("b"), [20, 21, 0])
    assert store.x_range() == (0.0, 2.0)

    print(" OK")


def test_builder_rejects_wrong_column_count():
    print("test_builder_rejects_wrong_column_count...", end="")

    builder = StoreBuilder(columns_from_names(["t", "a"]))
    with pytest.raises(ValueError):
        builder.append_chunk(np.array([0.0]), [])

    print(" OK")


def test_store_invariants():
    print("test_store_invariants...", end="")

    cols = columns_from_names(["t", "a"])
    assert cols[0].kind is ColumnKind.TIME
    assert cols[1].kind is ColumnKind.NUMERIC

    with pytest.raises(ValueError):
        ColumnarStore(cols, np.zeros(3), [np.zeros(2)])
    with pytest.raises(ValueError):
        ColumnarStore(cols, np.zeros(3), [])

    store = ColumnarStore.empty(cols)
    assert len(store) == 0
    assert store.x_range() is None
    with pytest.raises(IndexError):
        store.y(0)
    with pytest.raises(KeyError):
        store.series("missing")

    print(" OK")


if __name__ == "__main__":
    print("csvscope store tests")
    print("====================\n")

    test_buffer_grows_past_capacity()
    test_buffer_released_after_finalize()
    test_builder_chunks_and_rows()
    test_builder_rejects_wrong_column_count()
    test_store_invariants()

    print("\nAll store tests passed.")
