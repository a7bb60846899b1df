from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from pydantic import ValidationError

from json_store import atomic_write_json, read_json

from .document import Document, UserRecord
from .errors import StorageMalformed, StorageUnreadable, StorageUnwritable
from .interfaces import DocumentStore
from .locks import WRITER_LOCKS

logger = logging.getLogger(__name__)


class DiskJsonDocumentStore(DocumentStore):
    """
    Stores the Document as a single JSON file at a fixed path.

    - load() validates the shape and raises StorageUnreadable / StorageMalformed.
    - save() writes atomically with sorted keys.
    - transaction() holds the path's writer lock across the whole cycle so
      concurrent writers never lose each other's updates.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Document:
        # No lock: writes go through os.replace, so readers see a complete file.
        try:
            raw = read_json(self._path)
        except FileNotFoundError as e:
            raise StorageUnreadable(f"{self._path.name} not found") from e
        except OSError as e:
            raise StorageUnreadable(f"{self._path.name} could not be read") from e
        except ValueError as e:
            raise StorageMalformed("Failed to decode database") from e
        if not isinstance(raw, dict):
            raise StorageMalformed("Failed to decode database")
        try:
            return Document.from_disk_doc(raw)
        except ValidationError as e:
            logger.warning("DOCUMENT LOAD: %s has an unexpected shape: %s", self._path, e.error_count())
            if all(err["loc"][:1] == ("users",) for err in e.errors()):
                raise StorageMalformed("Users format is incorrect") from e
            raise StorageMalformed("Resources format is incorrect") from e

    def save(self, doc: Document) -> None:
        with WRITER_LOCKS.writer(self._path):
            try:
                atomic_write_json(self._path, doc.to_disk_doc())
            except OSError as e:
                logger.error("DOCUMENT SAVE: failed to write %s: %r", self._path, e)
                raise StorageUnwritable("Failed to save database") from e

    def create_initial(self, names: Iterable[str], admin: UserRecord | None = None) -> None:
        doc = Document.initial(names, admin)
        self.save(doc)
        logger.info("Created %s with %d resource(s)", self._path, len(doc.resources))

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        with WRITER_LOCKS.writer(self._path):
            doc = self.load()
            yield doc
            self.save(doc)
