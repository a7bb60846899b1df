"""Error hierarchy for the document store and the HTTP layer.

Every error renders as a single-field body: {"error": "<message>"}.
"""

from __future__ import annotations


class JsonDeckError(Exception):
    """Base exception for all jsondeck failures."""

    http_status: int = 500

    def __init__(self, message: str, *, http_status: int | None = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict[str, str]:
        return {"error": self.message}


class ConfigError(JsonDeckError):
    """Configuration file missing or invalid."""


# ─── Storage ────────────────────────────────────────────────────


class StorageError(JsonDeckError):
    """Document could not be read, parsed or written."""

    kind: str = "storage"


class StorageUnreadable(StorageError):
    kind = "unreadable"


class StorageMalformed(StorageError):
    kind = "malformed"


class StorageUnwritable(StorageError):
    kind = "write_failed"


# ─── Domain ─────────────────────────────────────────────────────


class ResourceNotFound(JsonDeckError):
    """No bucket matches the requested resource name."""

    def __init__(self, name: str, message: str = "Resource not found", **kwargs):
        super().__init__(message, **kwargs)
        self.name = name


class ItemNotFound(JsonDeckError):
    """No item with the requested id inside an existing bucket."""

    def __init__(self, name: str, item_id: str, message: str = "Resource not found", **kwargs):
        super().__init__(message, **kwargs)
        self.name = name
        self.item_id = item_id


class Unauthorized(JsonDeckError):
    http_status = 401


class BadRequest(JsonDeckError):
    http_status = 400
