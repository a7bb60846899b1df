from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

Item = dict[str, Any]


class UserRecord(BaseModel):
    username: str
    password: str  # bcrypt hash, never returned to clients


class ResourceBucket(BaseModel):
    model_config = ConfigDict(extra="allow")

    resource: str
    items: list[Item] = Field(default_factory=list)

    def index_of(self, item_id: str) -> int | None:
        for idx, item in enumerate(self.items):
            if item.get("id") == item_id:
                return idx
        return None


class Document(BaseModel):
    """
    Mirrors the on-disk database schema:
      {
        "resources": [ { "resource": "<name>", "items": [ {...}, ... ] }, ... ],
        "users": [ { "username": "...", "password": "<bcrypt hash>" } ]   # only with authorization
      }
    """

    model_config = ConfigDict(extra="allow")

    resources: list[ResourceBucket]
    users: list[UserRecord] | None = None

    @classmethod
    def from_disk_doc(cls, doc: Mapping[str, Any]) -> "Document":
        return cls.model_validate(doc)

    @classmethod
    def initial(cls, names: Iterable[str], admin: UserRecord | None = None) -> "Document":
        return cls(
            resources=[ResourceBucket(resource=name, items=[]) for name in names],
            users=[admin] if admin is not None else None,
        )

    def to_disk_doc(self) -> dict[str, Any]:
        doc = self.model_dump(mode="json")
        if self.users is None:
            doc.pop("users", None)
        return doc

    def find_bucket(self, name: str) -> ResourceBucket | None:
        # First match wins; names are unique by configuration.
        for bucket in self.resources:
            if bucket.resource == name:
                return bucket
        return None

    def find_user(self, username: str) -> UserRecord | None:
        for user in self.users or []:
            if user.username == username:
                return user
        return None
