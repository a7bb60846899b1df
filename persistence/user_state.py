from __future__ import annotations

import logging
from typing import Protocol

from security import hash_password

from .document import UserRecord
from .errors import BadRequest, StorageMalformed
from .interfaces import DocumentStore

logger = logging.getLogger(__name__)

USERS_MALFORMED = "Users format is incorrect"


class UserRepository(Protocol):
    def get_user(self, username: str) -> UserRecord | None:
        ...

    def add_user(self, username: str, password: str) -> UserRecord:
        ...


class DiskUserRepository(UserRepository):
    """
    Users live in the same Document as the resource buckets, under "users".
    A Document without that member (authorization disabled at bootstrap) rejects both operations.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def get_user(self, username: str) -> UserRecord | None:
        doc = self._store.load()
        if doc.users is None:
            raise StorageMalformed(USERS_MALFORMED)
        return doc.find_user(username)

    def add_user(self, username: str, password: str) -> UserRecord:
        record = UserRecord(username=username, password=hash_password(password))
        with self._store.transaction() as doc:
            if doc.users is None:
                raise StorageMalformed(USERS_MALFORMED)
            if doc.find_user(username) is not None:
                raise BadRequest("Username already exists")
            doc.users.append(record)
        logger.info("registered user %s", username)
        return record
