"""In-memory DocumentStore fake.

Mirrors the Firestore contract used by the services: deep merge on
``set_document(merge=True)``, generated ids on ``add_document`` and a real
datetime in place of the server timestamp sentinel.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from collections import Counter
from datetime import datetime, timezone
from typing import Any

from app.services.store import DocumentStore, StoredDocument


def _deep_merge(target: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


class InMemoryDocumentStore(DocumentStore):
    def __init__(self, collections: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = copy.deepcopy(collections or {})
        self.calls: Counter[str] = Counter()
        self.fail_with: Exception | None = None
        # Set to hold get_all_documents until released; used to overlap concurrent callers.
        self.gate: asyncio.Event | None = None
        self._ids = itertools.count(1)

    def _check(self, operation: str) -> None:
        self.calls[operation] += 1
        if self.fail_with is not None:
            raise self.fail_with

    async def get_all_documents(self, collection: str) -> list[StoredDocument]:
        self._check("get_all_documents")
        if self.gate is not None:
            await self.gate.wait()
        return [
            StoredDocument(id=document_id, data=copy.deepcopy(data))
            for document_id, data in self.collections.get(collection, {}).items()
        ]

    async def get_document(self, collection: str, document_id: str) -> StoredDocument | None:
        self._check("get_document")
        data = self.collections.get(collection, {}).get(document_id)
        if data is None:
            return None
        return StoredDocument(id=document_id, data=copy.deepcopy(data))

    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        self._check("set_document")
        documents = self.collections.setdefault(collection, {})
        if merge and document_id in documents:
            _deep_merge(documents[document_id], data)
        else:
            documents[document_id] = copy.deepcopy(data)

    async def delete_document(self, collection: str, document_id: str) -> None:
        self._check("delete_document")
        self.collections.get(collection, {}).pop(document_id, None)

    async def add_document(self, collection: str, data: dict[str, Any]) -> str:
        self._check("add_document")
        document_id = f"doc-{next(self._ids)}"
        self.collections.setdefault(collection, {})[document_id] = copy.deepcopy(data)
        return document_id

    async def query_documents(self, collection: str, field_name: str, value: Any) -> list[StoredDocument]:
        self._check("query_documents")
        return [
            StoredDocument(id=document_id, data=copy.deepcopy(data))
            for document_id, data in self.collections.get(collection, {}).items()
            if data.get(field_name) == value
        ]

    def server_timestamp(self) -> Any:
        return datetime.now(timezone.utc)
