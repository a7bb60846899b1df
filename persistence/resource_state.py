from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Protocol

from .document import Document, Item, ResourceBucket
from .errors import ItemNotFound, ResourceNotFound
from .interfaces import DocumentStore

logger = logging.getLogger(__name__)


def new_item_id() -> str:
    return str(uuid.uuid4())


def _bucket(doc: Document, name: str) -> ResourceBucket:
    bucket = doc.find_bucket(name)
    if bucket is None:
        raise ResourceNotFound(name)
    return bucket


def _index(bucket: ResourceBucket, item_id: str) -> int:
    idx = bucket.index_of(item_id)
    if idx is None:
        raise ItemNotFound(bucket.resource, item_id)
    return idx


class ResourceRepository(Protocol):
    def list_items(self, name: str) -> list[Item]:
        ...

    def get_item(self, name: str, item_id: str) -> Item:
        ...

    def create_item(self, name: str, body: Mapping[str, Any]) -> Item:
        ...

    def replace_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item:
        ...

    def patch_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item:
        ...

    def delete_item(self, name: str, item_id: str) -> None:
        ...

    def clear_items(self, name: str) -> None:
        ...


class DiskResourceRepository(ResourceRepository):
    """
    Generic CRUD over the buckets of a single Document.

    Reads are a plain load(). Every mutation is one store transaction: the whole
    Document is loaded, one bucket is changed in memory and the whole Document
    is written back. A failure before the save leaves the file untouched.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def list_items(self, name: str) -> list[Item]:
        doc = self._store.load()
        return [dict(item) for item in _bucket(doc, name).items]

    def get_item(self, name: str, item_id: str) -> Item:
        bucket = _bucket(self._store.load(), name)
        return dict(bucket.items[_index(bucket, item_id)])

    def create_item(self, name: str, body: Mapping[str, Any]) -> Item:
        item: Item = dict(body)
        item["id"] = new_item_id()
        with self._store.transaction() as doc:
            _bucket(doc, name).items.append(item)
        logger.debug("created %s/%s", name, item["id"])
        return dict(item)

    def replace_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item:
        # Wholesale replace; the id is immutable and survives the replace.
        item: Item = dict(body)
        item["id"] = item_id
        with self._store.transaction() as doc:
            bucket = _bucket(doc, name)
            bucket.items[_index(bucket, item_id)] = item
        return dict(item)

    def patch_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item:
        with self._store.transaction() as doc:
            bucket = _bucket(doc, name)
            idx = _index(bucket, item_id)
            merged: Item = {**bucket.items[idx], **body, "id": item_id}
            bucket.items[idx] = merged
        return dict(merged)

    def delete_item(self, name: str, item_id: str) -> None:
        with self._store.transaction() as doc:
            bucket = _bucket(doc, name)
            del bucket.items[_index(bucket, item_id)]
        logger.debug("deleted %s/%s", name, item_id)

    def clear_items(self, name: str) -> None:
        with self._store.transaction() as doc:
            _bucket(doc, name).items = []
