from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterable, Protocol

from .document import Document, UserRecord


class DocumentStore(Protocol):
    """
    Whole-file persistence for the Document: every save rewrites the complete state.
    """

    def load(self) -> Document:
        """Load and validate the full Document."""
        ...

    def save(self, doc: Document) -> None:
        """Persist the full Document atomically."""
        ...

    def create_initial(self, names: Iterable[str], admin: UserRecord | None = None) -> None:
        """Seed a fresh Document with one empty bucket per declared name."""
        ...

    def transaction(self) -> AbstractContextManager[Document]:
        """Serialized Load -> mutate -> Save cycle; saves only on normal exit."""
        ...


class TokenVerifier(Protocol):
    def verify(self, token: str) -> bool: ...
