from __future__ import annotations

from .disk_store import DiskJsonDocumentStore
from .document import Document, Item, ResourceBucket, UserRecord
from .repositories import (
    AsyncDiskResourceRepository,
    AsyncDiskUserRepository,
    AsyncResourceRepository,
    AsyncUserRepository,
)
from .resource_state import DiskResourceRepository, ResourceRepository
from .user_state import DiskUserRepository, UserRepository

__all__ = [
    "Document",
    "Item",
    "ResourceBucket",
    "UserRecord",
    "DiskJsonDocumentStore",
    "ResourceRepository",
    "DiskResourceRepository",
    "UserRepository",
    "DiskUserRepository",
    "AsyncResourceRepository",
    "AsyncDiskResourceRepository",
    "AsyncUserRepository",
    "AsyncDiskUserRepository",
]
