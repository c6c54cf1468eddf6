"""csvscope command-line tool."""

from __future__ import annotations

import argparse
import logging
import os
import sys

import numpy as np

from .formatting import format_inspect, format_timestamp
from .ingest import DEFAULT_CHUNK_ROWS, DEFAULT_DELIMITER, IngestError, ingest_file
from .pins import inspect
from .series import SeriesRegistry
from .store import ColumnarStore


def _load(args: argparse.Namespace) -> ColumnarStore:
    return ingest_file(args.file, args.delimiter, chunk_rows=args.chunk_rows)


def _format_duration(s: float) -> str:
    """Format a duration in seconds as a human-readable string."""
    if s < 1e-3:
        return f"{s * 1e6:.1f}us"
    if s < 1:
        return f"{s * 1e3:.1f}ms"
    if s < 60:
        return f"{s:.2f}s"
    if s < 3600:
        return f"{s / 60:.1f}m"
    if s < 86400:
        return f"{s / 3600:.1f}h"
    return f"{s / 86400:.1f}d"


def cmd_info(args: argparse.Namespace) -> None:
    """Print summary info about a delimited file."""
    store = _load(args)
    file_size = os.path.getsize(args.file)

    print(f"File:       {args.file}")
    print(f"Size:       {file_size:,} bytes")
    print(f"Rows:       {len(store):,}")

    xr = store.x_range()
    if xr is not None and len(store) > 0:
        print(f"Time range: {format_timestamp(xr[0])} — {format_timestamp(xr[1])}")
        print(f"Duration:   {_format_duration(xr[1] - xr[0])}")
    else:
        print("Time range: (empty)")

    cols = store.numeric_columns
    print(f"\nSeries ({len(cols)}):")
    print(f"  {'#':>4s}  {'Name':<24s}  {'Min':>16s}  {'Max':>16s}")
    print(f"  {'—' * 4}  {'—' * 24}  {'—' * 16}  {'—' * 16}")
    for col in cols:
        vals = store.y(col.index)
        if len(vals) > 0:
            lo, hi = format_inspect(float(np.min(vals))), format_inspect(float(np.max(vals)))
        else:
            lo = hi = "-"
        print(f"  {col.index:4d}  {col.name:<24s}  {lo:>16s}  {hi:>16s}")


def cmd_dump(args: argparse.Namespace) -> None:
    """Print rows as timestamp + formatted values."""
    store = _load(args)
    names = [c.name for c in store.numeric_columns]
    print("\t".join([store.time_column.name] + names))
    n = len(store) if args.limit is None else min(args.limit, len(store))
    for i in range(n):
        vals = [format_inspect(float(store.y(c.index)[i]))
                for c in store.numeric_columns]
        print("\t".join([format_timestamp(float(store.x[i]))] + vals))


def cmd_pin(args: argparse.Namespace) -> None:
    """Print the pinned-sample readout for one row."""
    store = _load(args)
    registry = SeriesRegistry.from_store(store)
    if args.columns:
        wanted = {c.strip() for c in args.columns.split(",")}
        unknown = wanted - {s.label for s in registry}
        if unknown:
            print(f"Error: unknown column(s): {', '.join(sorted(unknown))}",
                  file=sys.stderr)
            sys.exit(2)
        for s in registry:
            registry.set_visible(s.column_index, s.label in wanted)
    else:
        registry.set_all_visible(True)

    sample = inspect(store, registry, args.index)
    if sample is None:
        print(f"Error: row {args.index} out of range (0..{len(store) - 1})",
              file=sys.stderr)
        sys.exit(2)
    for line in sample.lines():
        print(line)


def main() -> None:
    parser = argparse.ArgumentParser(prog="csvscope",
                                     description="csvscope time-series tool")
    parser.add_argument("-d", "--delimiter", default=DEFAULT_DELIMITER,
                        help="Field delimiter (default: ',')")
    parser.add_argument("--chunk-rows", type=int, default=DEFAULT_CHUNK_ROWS,
                        help="Rows parsed per batch")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    p_info = sub.add_parser("info", help="Show summary info about a file")
    p_info.add_argument("file", help="Path to delimited text file")

    p_dump = sub.add_parser("dump", help="Dump parsed rows")
    p_dump.add_argument("file", help="Path to delimited text file")
    p_dump.add_argument("--limit", type=int, default=None,
                        help="Stop after N rows")

    p_pin = sub.add_parser("pin", help="Show values of one row")
    p_pin.add_argument("file", help="Path to delimited text file")
    p_pin.add_argument("index", type=int, help="0-based data row index")
    p_pin.add_argument("--columns", help="Comma-separated series to show "
                                         "(default: all)")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(message)s")

    commands = {"info": cmd_info, "dump": cmd_dump, "pin": cmd_pin}
    if args.command not in commands:
        parser.print_help()
        return
    try:
        commands[args.command](args)
    except IngestError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
