"""Full-replace snapshot stream over a Firestore query.

Firestore calls `on_snapshot` callbacks from its own watch thread with the
complete current result set every time a matching document changes (and
again after the watch reconnects). SnapshotStream hands those result sets
to a consumer thread through a queue. Each item is the whole set, so a
slow consumer may skip straight to the newest one without losing anything.
"""
from __future__ import annotations

import queue
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional

from health_monitor.services.logger import get_logger

logger = get_logger(__name__)

Snapshot = List[Dict[str, Any]]

_CLOSED = object()


class StreamClosed(Exception):
    pass


class SnapshotStream:
    def __init__(self, query, transform: Optional[Callable[[Snapshot], Snapshot]] = None):
        self._query = query
        self._transform = transform
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._watch = None
        self._lock = threading.Lock()
        self._closed = False

    # Firestore watch thread
    def _on_snapshot(self, docs, changes, read_time):
        items = [{"id": d.id, **(d.to_dict() or {})} for d in docs]
        if self._transform is not None:
            items = self._transform(items)
        self._queue.put(items)

    def open(self) -> "SnapshotStream":
        with self._lock:
            if self._closed:
                raise StreamClosed("stream already closed")
            if self._watch is None:
                self._watch = self._query.on_snapshot(self._on_snapshot)
        return self

    def reconnect(self) -> None:
        """Drop the current watch and subscribe again; the new watch re-delivers the full set."""
        with self._lock:
            if self._closed:
                raise StreamClosed("stream already closed")
            if self._watch is not None:
                self._watch.unsubscribe()
            logger.info("Re-subscribing snapshot stream")
            self._watch = self._query.on_snapshot(self._on_snapshot)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._watch is not None:
                self._watch.unsubscribe()
                self._watch = None
        self._queue.put(_CLOSED)

    def get(self, timeout: Optional[float] = None) -> Snapshot:
        """
        Block for the next snapshot and return the newest one queued.

        Raises queue.Empty on timeout and StreamClosed once closed.
        """
        item = self._queue.get(timeout=timeout)
        while True:
            if item is _CLOSED:
                # Leave the marker for any other reader
                self._queue.put(_CLOSED)
                raise StreamClosed("stream closed")
            try:
                newer = self._queue.get_nowait()
            except queue.Empty:
                return item
            item = newer

    def __iter__(self) -> Iterator[Snapshot]:
        while True:
            try:
                yield self.get()
            except StreamClosed:
                return

    def __enter__(self) -> "SnapshotStream":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
