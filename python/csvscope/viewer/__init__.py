"""csvscope viewer — DearPyGui-based time-series explorer."""

from __future__ import annotations

import argparse
import sys

from csvscope.ingest import DEFAULT_CHUNK_ROWS, DEFAULT_DELIMITER


def launch() -> None:
    """Entry point for ``csvscope-viewer`` console script."""
    parser = argparse.ArgumentParser(
        prog="csvscope-viewer",
        description="csvscope time-series viewer",
    )
    parser.add_argument("file", nargs="?", default=None,
                        help="Path to a delimited text file to open")
    parser.add_argument("-d", "--delimiter", default=DEFAULT_DELIMITER,
                        help="Field delimiter (default: ',')")
    parser.add_argument("--chunk-rows", type=int, default=DEFAULT_CHUNK_ROWS,
                        help="Rows parsed per batch")
    args = parser.parse_args()

    try:
        import dearpygui.dearpygui  # noqa: F401
    except ImportError:
        print("Error: dearpygui is required for the viewer.\n"
              "Install with: pip install 'csvscope[viewer]'",
              file=sys.stderr)
        sys.exit(1)

    from .app import ViewerApp

    app = ViewerApp(delimiter=args.delimiter, chunk_rows=args.chunk_rows)
    app.setup()

    if args.file:
        app.open_file(args.file)

    app.run()
