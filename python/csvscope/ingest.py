"""Streaming ingestion of delimited time-series text.

Input format:
  [header line]          column names, split on the delimiter
  [data line] ...        field 0 = timestamp text, fields 1..K = numbers

Lines are read incrementally and parsed in batches, so at most one batch of
raw strings is resident at a time.  There is no quoting or escaping: every
delimiter splits a field.

Per-row problems never abort a load:
  - blank / whitespace-only lines are skipped and do not count as rows
  - field 0 that is not a recognizable date falls back to the row ordinal
  - numeric fields that do not parse fall back to 0
  - short rows zero-fill missing trailing fields, long rows drop extras

Only an I/O failure on the source is fatal (UnreadableFileError).
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, TextIO, Union

import numpy as np
import pandas as pd

from .store import (
    DEFAULT_TIME_NAME, ColumnarStore, StoreBuilder, columns_from_names,
)

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = ","
DEFAULT_CHUNK_ROWS = 65_536
ENCODING = "utf-8-sig"

_EPOCH = pd.Timestamp(0, tz="UTC").as_unit("us")
# Range pandas can represent at every datetime resolution
_MIN_SECONDS = pd.Timestamp.min.value / 1e9
_MAX_SECONDS = pd.Timestamp.max.value / 1e9
_BARE_NUMBER = r"[+-]?\d*\.?\d*"  # also matches ""

Source = Union[str, os.PathLike, Iterable[str]]


class IngestError(Exception):
    """Base class for ingestion failures."""


class UnreadableFileError(IngestError):
    """The source could not be opened or read."""


class IngestCancelled(IngestError):
    """Ingestion was stopped by the caller before completion."""


@dataclass
class IngestStats:
    rows: int = 0
    blank_lines: int = 0
    short_rows: int = 0
    long_rows: int = 0
    timestamp_fallbacks: int = 0
    numeric_fallbacks: int = 0


# ---------------------------------------------------------------------------
# Header / row splitting
# ---------------------------------------------------------------------------

def make_unique(names: list[str]) -> list[str]:
    """Suffix repeated names with `` #2``, `` #3``... keeping first as-is."""
    seen: dict[str, int] = {}
    out: list[str] = []
    for name in names:
        if name not in seen:
            seen[name] = 1
            out.append(name)
        else:
            seen[name] += 1
            out.append(f"{name} #{seen[name]}")
    return out


def parse_header(line: str | None, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Column names from the header line; index 0 names the time column.

    A header with a single name labels the only value series and the time
    column gets the default name.  A missing header yields just the time
    column.
    """
    if line is None:
        return [DEFAULT_TIME_NAME]
    names = [n.strip() for n in line.rstrip("\r\n").split(delimiter)]
    names = [n or f"column {i}" for i, n in enumerate(names)]
    if len(names) == 1:
        names = [DEFAULT_TIME_NAME, names[0]]
    return make_unique(names)


def _next_nonblank(lines: Iterator[str], stats: IngestStats) -> str | None:
    for line in lines:
        if line.strip():
            return line
        stats.blank_lines += 1
    return None


def iter_chunks(lines: Iterable[str], delimiter: str = DEFAULT_DELIMITER,
                chunk_rows: int = DEFAULT_CHUNK_ROWS,
                stats: IngestStats | None = None) -> Iterator[list[list[str]]]:
    """Yield batches of split data rows, skipping blank lines."""
    if chunk_rows < 1:
        raise ValueError(f"chunk_rows must be positive, got {chunk_rows}")
    chunk: list[list[str]] = []
    for line in lines:
        if not line.strip():
            if stats is not None:
                stats.blank_lines += 1
            continue
        chunk.append(line.rstrip("\r\n").split(delimiter))
        if len(chunk) >= chunk_rows:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------

def _epoch_seconds(parsed: pd.Series) -> np.ndarray:
    """Seconds since the epoch; NaT and dates outside the supported range -> NaN.

    pandas may hand back any datetime unit, so the arithmetic is done in
    microseconds, which cannot overflow for a parsed date.
    """
    secs = (parsed.dt.as_unit("us") - _EPOCH).dt.total_seconds().to_numpy(
        dtype=np.float64, na_value=np.nan, copy=True)
    secs[(secs < _MIN_SECONDS) | (secs > _MAX_SECONDS)] = np.nan
    return secs


def parse_timestamps(fields: list[str], first_ordinal: int = 0,
                     stats: IngestStats | None = None) -> np.ndarray:
    """Epoch seconds for each field; unparseable fields get their row ordinal.

    ISO-8601 text goes through the fast path.  Anything else is retried with
    the permissive mixed-format parser.  Bare numbers are never dates: both
    parsers would read them as a year or a compact date.  Dates outside
    1677-09-21..2262-04-11 fall back too.  Naive times are UTC.
    """
    s = pd.Series(fields, dtype=object).str.strip()
    bare = s.str.fullmatch(_BARE_NUMBER).to_numpy(dtype=bool)
    secs = _epoch_seconds(
        pd.to_datetime(s, format="ISO8601", errors="coerce", utc=True))
    secs[bare] = np.nan

    retry = np.isnan(secs) & ~bare
    if retry.any():
        secs[retry] = _epoch_seconds(
            pd.to_datetime(s[retry], format="mixed", errors="coerce", utc=True))

    bad = np.isnan(secs)
    if bad.any():
        secs[bad] = first_ordinal + np.flatnonzero(bad)
        if stats is not None:
            stats.timestamp_fallbacks += int(bad.sum())
    return secs


def parse_numbers(fields: list[str], stats: IngestStats | None = None) -> np.ndarray:
    """Float values for each field; anything unparseable becomes 0."""
    s = pd.Series(fields, dtype=object).str.strip()
    values = pd.to_numeric(s, errors="coerce").to_numpy(
        dtype=np.float64, na_value=np.nan, copy=True)
    bad = np.isnan(values)
    if bad.any():
        values[bad] = 0.0
        if stats is not None:
            stats.numeric_fallbacks += int(bad.sum())
    return values


def _parse_chunk(rows: list[list[str]], n_columns: int, first_ordinal: int,
                 stats: IngestStats) -> tuple[np.ndarray, list[np.ndarray]]:
    for r in rows:
        if len(r) < n_columns:
            stats.short_rows += 1
        elif len(r) > n_columns:
            stats.long_rows += 1

    x = parse_timestamps([r[0] for r in rows], first_ordinal, stats)

    ys: list[np.ndarray] = []
    for j in range(1, n_columns):
        present = np.fromiter((len(r) > j for r in rows), dtype=bool,
                              count=len(rows))
        if present.all():
            ys.append(parse_numbers([r[j] for r in rows], stats))
            continue
        col = np.zeros(len(rows), dtype=np.float64)
        if present.any():
            col[present] = parse_numbers(
                [r[j] for r in rows if len(r) > j], stats)
        ys.append(col)
    return x, ys


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def ingest(source: Source, delimiter: str = DEFAULT_DELIMITER, *,
           chunk_rows: int = DEFAULT_CHUNK_ROWS,
           cancelled: Callable[[], bool] | None = None,
           stats: IngestStats | None = None) -> ColumnarStore:
    """Parse *source* (a path or an iterable of text lines) into a store.

    *cancelled* is polled once per batch; when it returns True the load is
    abandoned with IngestCancelled.
    """
    if isinstance(source, (str, os.PathLike)):
        return ingest_file(source, delimiter, chunk_rows=chunk_rows,
                           cancelled=cancelled, stats=stats)

    if stats is None:
        stats = IngestStats()
    t_start = time.monotonic()
    try:
        lines = iter(source)
        names = parse_header(_next_nonblank(lines, stats), delimiter)
        columns = columns_from_names(names)
        builder = StoreBuilder(columns)
        for rows in iter_chunks(lines, delimiter, chunk_rows, stats):
            if cancelled is not None and cancelled():
                raise IngestCancelled("ingestion cancelled")
            x, ys = _parse_chunk(rows, len(columns), len(builder), stats)
            builder.append_chunk(x, ys)
    except (OSError, UnicodeDecodeError) as e:
        raise UnreadableFileError(str(e)) from e

    store = builder.finalize()
    stats.rows = len(store)
    logger.info(
        "ingested %d rows x %d columns in %.2fs "
        "(blank=%d short=%d long=%d ts_fallback=%d num_fallback=%d)",
        stats.rows, len(columns), time.monotonic() - t_start,
        stats.blank_lines, stats.short_rows, stats.long_rows,
        stats.timestamp_fallbacks, stats.numeric_fallbacks)
    return store


def ingest_file(path: str | os.PathLike[str], delimiter: str = DEFAULT_DELIMITER, *,
                chunk_rows: int = DEFAULT_CHUNK_ROWS,
                cancelled: Callable[[], bool] | None = None,
                stats: IngestStats | None = None) -> ColumnarStore:
    """Open *path* as text and ingest it."""
    path = Path(path)
    try:
        f: TextIO = open(path, "r", encoding=ENCODING, newline="")
    except OSError as e:
        raise UnreadableFileError(f"{path}: {e.strerror or e}") from e
    logger.info("reading %s", path)
    with f:
        return ingest(f, delimiter, chunk_rows=chunk_rows,
                      cancelled=cancelled, stats=stats)
