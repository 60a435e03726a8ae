"""Document store abstract protocol."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


class Collections:
    """Collection names used across the services."""

    LOCATIONS = "locations"
    BLOG_POSTS = "blog-posts"
    NEWSLETTER = "newsletter-subscribers"
    REPORTS = "location-reports"
    ACTIVITIES = "activity-suggestions"
    SYSTEM = "system"


@dataclass(slots=True)
class StoredDocument:
    """Raw record read from the store."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(ABC):
    """Interface for a Firestore-like document collection store.

    Implementations raise errors from ``app.core.errors`` (RemoteUnavailable,
    PermissionDenied, NotFound, UnknownStoreError); raw SDK errors never leak.
    """

    @abstractmethod
    async def get_all_documents(self, collection: str) -> list[StoredDocument]:
        """Return every document in a collection."""
        raise NotImplementedError

    @abstractmethod
    async def get_document(self, collection: str, document_id: str) -> StoredDocument | None:
        """Return one document, or None when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        """Write a document.

        Args:
            collection: Collection name.
            document_id: Document id.
            data: Document fields.
            merge: Deep-merge into the existing document instead of replacing it.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete a document; deleting a missing document is not an error."""
        raise NotImplementedError

    @abstractmethod
    async def add_document(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a store-generated id and return that id."""
        raise NotImplementedError

    @abstractmethod
    async def query_documents(self, collection: str, field_name: str, value: Any) -> list[StoredDocument]:
        """Return documents whose ``field_name`` equals ``value``."""
        raise NotImplementedError

    @abstractmethod
    def server_timestamp(self) -> Any:
        """Return the sentinel (or value) the store resolves to its own write time."""
        raise NotImplementedError
