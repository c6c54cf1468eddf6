"""Tests for value, tick and timestamp formatting.

Run from the repo root:
    python3 tests/test_formatting.py
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

from csvscope.formatting import (
    format_inspect, format_tick, format_timestamp, format_value,
)


def test_missing_values():
    print("test_missing_values...", end="")

    assert format_value(None, 6) == "-"
    assert format_value(None, 4) == "-"
    assert format_value(float("nan")) == "-"

    print(" OK")


def test_fixed_notation():
    print("test_fixed_notation...", end="")

    assert format_value(1.234567, 6) == "1.234567"
    assert format_value(0.001, 6) == "0.001000"
    assert format_value(-12.5, 4) == "-12.5000"
    assert format_value(0, 6) == "0.000000"
    assert format_value(-0.0, 4) == "0.0000"

    print(" OK")


def test_exponential_below_threshold():
    print("test_exponential_below_threshold...", end="")

    assert format_value(0.0009, 6) == "9.0000e-4"
    assert format_value(0.0009, 4) == "9.0e-4"
    assert format_value(-0.0005, 6) == "-5.0000e-4"
    assert format_value(1e-10, 6) == "1.0000e-10"
    assert format_value(0.000999, 4) == "1.0e-3"

    print(" OK")


def test_presets():
    print("test_presets...", end="")

    assert format_inspect(3.14159265) == "3.141593"
    assert format_inspect(0.000123456) == "1.2346e-4"
    assert format_tick(2.5) == "2.5000"
    assert format_tick(0.00012) == "1.2e-4"

    print(" OK")


def test_timestamp():
    print("test_timestamp...", end="")

    assert format_timestamp(1704067200.0) == "2024-01-01T00:00:00.000Z"
    assert format_timestamp(1704067201.25) == "2024-01-01T00:00:01.250Z"
    assert format_timestamp(1e20) == "1e+20"

    print(" OK")


if __name__ == "__main__":
    print("csvscope formatting tests")
    print("=========================\n")

    test_missing_values()
    test_fixed_notation()
    test_exponential_below_threshold()
    test_presets()
    test_timestamp()

    print("\nAll formatting tests passed.")
