"""Tests for the view-model: series registry, viewport, autoscale, pinning.

Run from the repo root:
    python3 tests/test_view.py
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import numpy as np
import pytest

from csvscope import autoscale
from csvscope.pins import inspect, nearest_index
from csvscope.series import SeriesRegistry, series_color
from csvscope.store import ColumnarStore, columns_from_names
from csvscope.viewport import Viewport, ViewTransform


def make_store(x, **series):
    cols = columns_from_names(["t"] + list(series))
    return ColumnarStore(cols, np.asarray(x, dtype=np.float64),
                         [np.asarray(v, dtype=np.float64) for v in series.values()])


def make_view(x, visible=(), **series):
    store = make_store(x, **series)
    registry = SeriesRegistry.from_store(store)
    for s in registry:
        if s.label in visible:
            registry.set_visible(s.column_index, True)
    return store, registry, ViewTransform(store, registry)


# ---------------------------------------------------------------------------
# Series registry
# ---------------------------------------------------------------------------

def test_golden_angle_colors():
    print("test_golden_angle_colors...", end="")

    assert series_color(0).hue == 0.0
    assert series_color(1).hue == 137.5
    assert series_color(3).hue == 52.5
    assert series_color(1) == series_color(1)
    assert series_color(0).rgba() == (217, 38, 38, 255)

    print(" OK")


def test_registry_defaults_hidden():
    print("test_registry_defaults_hidden...", end="")

    store = make_store([0, 1], a=[1, 2], b=[3, 4], c=[5, 6])
    reg = SeriesRegistry.from_store(store)
    assert [s.label for s in reg.list()] == ["a", "b", "c"]
    assert [s.column_index for s in reg.list()] == [1, 2, 3]
    assert reg.visible() == []
    assert reg.get(2).color == series_color(1)

    print(" OK")


def test_registry_visibility():
    print("test_registry_visibility...", end="")

    reg = SeriesRegistry.from_store(make_store([0], a=[1], b=[2]))
    assert reg.set_visible(1, True) is True
    assert reg.set_visible(1, True) is False
    assert [s.label for s in reg.visible()] == ["a"]

    assert reg.set_all_visible(True) is True
    assert len(reg.visible()) == 2
    assert reg.set_all_visible(True) is False
    assert reg.set_all_visible(False) is True
    assert reg.visible() == []

    with pytest.raises(KeyError):
        reg.set_visible(0, True)  # time column has no series

    print(" OK")


# ---------------------------------------------------------------------------
# Viewport / zoom
# ---------------------------------------------------------------------------

def test_reset_uses_full_domain():
    print("test_reset_uses_full_domain...", end="")

    _, _, view = make_view([5, 1, 9, 3], a=[0, 0, 0, 0])
    assert view.viewport.x_window == (1.0, 9.0)

    view.zoom_to_rect(2, 4)
    assert view.viewport.x_window == (2.0, 4.0)
    view.reset_to_full_domain()
    assert view.viewport.x_window == (1.0, 9.0)

    print(" OK")


def test_zoom_keeps_anchor_pixel():
    print("test_zoom_keeps_anchor_pixel...", end="")

    width = 800
    for factor in (0.5, 0.8, 1.25, 3.0):
        for anchor in (10.0, 12.5, 21.0, 30.0):
            _, _, view = make_view([10, 30], a=[1, 2])
            before = view.viewport.x_to_pixel(anchor, width)
            view.zoom_at(anchor, factor)
            after = view.viewport.x_to_pixel(anchor, width)
            assert after == pytest.approx(before)
            assert view.viewport.x_span == pytest.approx(20 * factor)

    print(" OK")


def test_zoom_formula():
    print("test_zoom_formula...", end="")

    _, _, view = make_view([10, 30], a=[1, 2])
    view.zoom_at(15, 0.5)
    assert view.viewport.x_min == pytest.approx(12.5)
    assert view.viewport.x_max == pytest.approx(22.5)

    _, _, view = make_view([10, 30], a=[1, 2])
    view.zoom_at_pixel(200, 800, 0.5)  # pixel 200 of 800 -> x = 15
    assert view.viewport.x_window == pytest.approx((12.5, 22.5))

    with pytest.raises(ValueError):
        view.zoom_at(15, 0)

    print(" OK")


def test_zoom_to_rect():
    print("test_zoom_to_rect...", end="")

    _, _, view = make_view([0, 10], a=[1, 2])
    assert view.zoom_to_rect(7, 3) is True
    assert view.viewport.x_window == (3.0, 7.0)
    assert view.zoom_to_rect(5, 5) is False
    assert view.viewport.x_window == (3.0, 7.0)

    print(" OK")


def test_pixel_mapping():
    print("test_pixel_mapping...", end="")

    vp = Viewport(x_min=100, x_max=200)
    assert vp.pixel_to_x(0, 400) == 100
    assert vp.pixel_to_x(400, 400) == 200
    assert vp.x_to_pixel(150, 400) == 200
    with pytest.raises(ValueError):
        vp.pixel_to_x(10, 0)

    print(" OK")


# ---------------------------------------------------------------------------
# Autoscale
# ---------------------------------------------------------------------------

def test_autoscale_padding():
    print("test_autoscale_padding...", end="")

    _, _, view = make_view([0, 1], visible=("a", "b"),
                           a=[2, 4], b=[1, 9], c=[100, 200])
    assert view.viewport.y_min == pytest.approx(0.9)
    assert view.viewport.y_max == pytest.approx(9.9)

    print(" OK")


def test_autoscale_only_scans_window():
    print("test_autoscale_only_scans_window...", end="")

    store, reg, view = make_view([0, 1, 2, 3], visible=("a",),
                                 a=[1, 10, 2, 50])
    view.zoom_to_rect(0, 1)
    assert view.viewport.y_min == pytest.approx(0.9)
    assert view.viewport.y_max == pytest.approx(11.0)

    assert autoscale.recompute(store, reg, (2, 3)) == pytest.approx((1.8, 55.0))

    print(" OK")


def test_autoscale_keeps_bounds_when_nothing_to_fit():
    print("test_autoscale_keeps_bounds_when_nothing_to_fit...", end="")

    store, reg, view = make_view([0, 1], a=[2, 4])
    # Nothing visible: default bounds untouched
    assert (view.viewport.y_min, view.viewport.y_max) == (0.0, 1.0)
    assert autoscale.recompute(store, reg, (0, 1)) is None

    reg.set_visible(1, True)
    view.autoscale()
    y = (view.viewport.y_min, view.viewport.y_max)

    # Window with no rows: bounds kept, no NaN
    view.zoom_to_rect(100, 200)
    assert (view.viewport.y_min, view.viewport.y_max) == y
    assert not np.isnan(view.viewport.y_min)

    print(" OK")


def test_autoscale_negative_values_stay_ordered():
    print("test_autoscale_negative_values_stay_ordered...", end="")

    _, _, view = make_view([0, 1], visible=("a",), a=[-5, -1])
    vp = view.viewport
    assert vp.y_min <= vp.y_max
    assert (vp.y_min, vp.y_max) == pytest.approx((-4.5, -1.1))

    print(" OK")


def test_manual_y_range():
    print("test_manual_y_range...", end="")

    _, _, view = make_view([0, 1, 2], visible=("a",), a=[1, 2, 3])
    view.set_y_range(10, -10)
    assert (view.viewport.y_min, view.viewport.y_max) == (-10, 10)
    assert view.viewport.y_auto is False

    view.zoom_to_rect(0, 1)
    assert (view.viewport.y_min, view.viewport.y_max) == (-10, 10)

    view.set_auto_y(True)
    assert view.viewport.y_max == pytest.approx(2.2)

    print(" OK")


def test_ticks():
    print("test_ticks...", end="")

    ticks = autoscale.y_ticks(0.0, 1.0, count=3)
    assert ticks == [("0.0000", 0.0), ("0.5000", 0.5), ("1.0000", 1.0)]
    assert autoscale.y_ticks(0.0005, 0.0005) == [("5.0e-4", 0.0005)]

    xt = autoscale.x_ticks(1704067200.0, 1704067200.0 + 3600, count=2)
    assert [label for label, _ in xt] == ["00:00:00", "01:00:00"]

    print(" OK")


# ---------------------------------------------------------------------------
# Pinning
# ---------------------------------------------------------------------------

def test_inspect_visible_series():
    print("test_inspect_visible_series...", end="")

    store, reg, _ = make_view([100, 101], visible=("a", "b"),
                              a=[2, 4], b=[1, 0.0009], c=[7, 8])
    sample = inspect(store, reg, 1)
    assert sample.index == 1
    assert sample.timestamp == 101.0
    assert sample.values == {"a": "4.000000", "b": "9.0000e-4"}
    assert "c" not in sample.values

    print(" OK")


def test_inspect_invalid_index():
    print("test_inspect_invalid_index...", end="")

    store, reg, _ = make_view([0, 1], visible=("a",), a=[1, 2])
    for bad in (None, -1, 2, 99, 1.5, True):
        assert inspect(store, reg, bad) is None
    assert inspect(store, reg, np.int64(1)).values == {"a": "2.000000"}

    print(" OK")


def test_nearest_index_unsorted():
    print("test_nearest_index_unsorted...", end="")

    store = make_store([5, 1, 9, 3], a=[0, 0, 0, 0])
    assert nearest_index(store, 2.9) == 3
    assert nearest_index(store, 100) == 2
    assert nearest_index(make_store([], a=[]), 1.0) is None

    print(" OK")


if __name__ == "__main__":
    print("csvscope view-model tests")
    print("=========================\n")

    test_golden_angle_colors()
    test_registry_defaults_hidden()
    test_registry_visibility()
    test_reset_uses_full_domain()
    test_zoom_keeps_anchor_pixel()
    test_zoom_formula()
    test_zoom_to_rect()
    test_pixel_mapping()
    test_autoscale_padding()
    test_autoscale_only_scans_window()
    test_autoscale_keeps_bounds_when_nothing_to_fit()
    test_autoscale_negative_values_stay_ordered()
    test_manual_y_range()
    test_ticks()
    test_inspect_visible_series()
    test_inspect_invalid_index()
    test_nearest_index_unsorted()

    print("\nAll view-model tests passed.")
