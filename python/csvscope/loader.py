"""Background file loading with last-requested-wins semantics.

Ingestion runs on a daemon thread and never touches UI state.  Finished
loads are handed back through a queue and picked up by poll() on the
control thread.  Requesting a new load signals the in-flight one to stop
and marks it superseded, so its result is dropped even if it completes.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from .ingest import (
    DEFAULT_CHUNK_ROWS, DEFAULT_DELIMITER, IngestCancelled, IngestError, ingest_file,
)
from .store import ColumnarStore

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    generation: int
    path: Path
    store: ColumnarStore | None = None
    error: IngestError | None = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.store is not None


class Loader:
    """Runs ingest_file() off the control thread."""

    def __init__(self, delimiter: str = DEFAULT_DELIMITER,
                 chunk_rows: int = DEFAULT_CHUNK_ROWS) -> None:
        self._delimiter = delimiter
        self._chunk_rows = chunk_rows
        self._results: queue.Queue[LoadResult] = queue.Queue()
        self._generation = 0
        self._cancel: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def request(self, path: str | Path) -> int:
        """Start loading *path*; returns the generation number of the load."""
        if self._cancel is not None:
            self._cancel.set()
        self._generation += 1
        cancel = threading.Event()
        self._cancel = cancel
        self._thread = threading.Thread(
            target=self._run, args=(self._generation, Path(path), cancel),
            name=f"csvscope-load-{self._generation}", daemon=True)
        self._thread.start()
        return self._generation

    def _run(self, generation: int, path: Path, cancel: threading.Event) -> None:
        t_start = time.monotonic()
        result = LoadResult(generation, path)
        try:
            result.store = ingest_file(path, self._delimiter,
                                       chunk_rows=self._chunk_rows,
                                       cancelled=cancel.is_set)
        except IngestError as e:
            result.error = e
        except Exception as e:
            logger.exception("unexpected failure loading %s", path)
            result.error = IngestError(str(e))
        result.elapsed = time.monotonic() - t_start
        self._results.put(result)

    def poll(self) -> list[LoadResult]:
        """Results of the current generation; superseded ones are dropped."""
        out: list[LoadResult] = []
        while True:
            try:
                result = self._results.get_nowait()
            except queue.Empty:
                break
            if result.generation != self._generation:
                logger.debug("discarding superseded load %d of %s",
                             result.generation, result.path)
                continue
            if isinstance(result.error, IngestCancelled):
                continue
            out.append(result)
        return out

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current load thread exits.  Returns False on timeout."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()
