from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

SLOW_WAIT_SECONDS = 1.0


class DocumentWriterLocks:
    """
    Single-writer discipline for document files: one re-entrant lock per resolved
    path, so "db.json" and "./data/../db.json" serialize against each other.

    Re-entrant because save() runs while transaction() already holds the lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Path, threading.RLock] = {}

    def lock_for(self, path: Path) -> threading.RLock:
        key = path.resolve()
        with self._guard:
            return self._locks.setdefault(key, threading.RLock())

    @contextmanager
    def writer(self, path: Path) -> Iterator[None]:
        lock = self.lock_for(path)
        started = time.monotonic()
        with lock:
            waited = time.monotonic() - started
            if waited > SLOW_WAIT_SECONDS:
                logger.warning("waited %.2fs for the writer lock on %s", waited, path.name)
            yield


WRITER_LOCKS = DocumentWriterLocks()
