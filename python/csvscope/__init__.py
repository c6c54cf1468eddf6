"""csvscope - streaming time-series CSV ingestion and interactive view-model."""

from .store import Column, ColumnKind, ColumnarStore, ColumnBuffer, StoreBuilder
from .ingest import (
    IngestError, UnreadableFileError, IngestCancelled, IngestStats, ingest, ingest_file,
)
from .series import HSLColor, SeriesState, SeriesRegistry, series_color
from .formatting import format_value, format_inspect, format_tick, format_timestamp
from .viewport import Viewport, ViewTransform
from .pins import PinnedSample, inspect, nearest_index
from .loader import Loader, LoadResult
from .controller import AppState, Controller

__all__ = [
    "Column", "ColumnKind", "ColumnarStore", "ColumnBuffer", "StoreBuilder",
    "IngestError", "UnreadableFileError", "IngestCancelled", "IngestStats",
    "ingest", "ingest_file",
    "HSLColor", "SeriesState", "SeriesRegistry", "series_color",
    "format_value", "format_inspect", "format_tick", "format_timestamp",
    "Viewport", "ViewTransform",
    "PinnedSample", "inspect", "nearest_index",
    "Loader", "LoadResult",
    "AppState", "Controller",
]
