from __future__ import annotations

import asyncio
from typing import Any, Mapping, Protocol

from .document import Item, UserRecord
from .interfaces import DocumentStore
from .resource_state import DiskResourceRepository
from .user_state import DiskUserRepository


class AsyncResourceRepository(Protocol):
    """
    Per-resource CRUD as the endpoints see it.
    Each mutating call is exactly one Load -> mutate -> Save cycle.
    """

    async def list_items(self, name: str) -> list[Item]: ...
    async def get_item(self, name: str, item_id: str) -> Item: ...

    async def create_item(self, name: str, body: Mapping[str, Any]) -> Item: ...
    async def replace_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item: ...
    async def patch_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item: ...

    async def delete_item(self, name: str, item_id: str) -> None: ...
    async def clear_items(self, name: str) -> None: ...


class AsyncUserRepository(Protocol):
    async def get_user(self, username: str) -> UserRecord | None: ...
    async def add_user(self, username: str, password: str) -> UserRecord: ...


class AsyncDiskResourceRepository(AsyncResourceRepository):
    """
    Async wrapper around the disk-backed resource repository.
    Uses asyncio.to_thread so file I/O and the writer lock never block the event loop.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._repo = DiskResourceRepository(store)

    async def list_items(self, name: str) -> list[Item]:
        return await asyncio.to_thread(self._repo.list_items, name)

    async def get_item(self, name: str, item_id: str) -> Item:
        return await asyncio.to_thread(self._repo.get_item, name, item_id)

    async def create_item(self, name: str, body: Mapping[str, Any]) -> Item:
        return await asyncio.to_thread(self._repo.create_item, name, body)

    async def replace_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item:
        return await asyncio.to_thread(self._repo.replace_item, name, item_id, body)

    async def patch_item(self, name: str, item_id: str, body: Mapping[str, Any]) -> Item:
        return await asyncio.to_thread(self._repo.patch_item, name, item_id, body)

    async def delete_item(self, name: str, item_id: str) -> None:
        await asyncio.to_thread(self._repo.delete_item, name, item_id)

    async def clear_items(self, name: str) -> None:
        await asyncio.to_thread(self._repo.clear_items, name)


class AsyncDiskUserRepository(AsyncUserRepository):
    """
    Async wrapper around the disk-backed user repository (bcrypt hashing runs off the loop too).
    """

    def __init__(self, store: DocumentStore) -> None:
        self._repo = DiskUserRepository(store)

    async def get_user(self, username: str) -> UserRecord | None:
        return await asyncio.to_thread(self._repo.get_user, username)

    async def add_user(self, username: str, password: str) -> UserRecord:
        return await asyncio.to_thread(self._repo.add_user, username, password)
