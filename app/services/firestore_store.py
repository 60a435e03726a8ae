"""Firestore-backed document store."""

from __future__ import annotations

import asyncio
import json
import os
from functools import lru_cache
from typing import Any, Callable, TypeVar

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.config import Settings, get_settings
from app.core.errors import PameKidsError, classify_store_error
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy
from app.services.store import DocumentStore, StoredDocument

logger = get_logger(__name__)

T = TypeVar("T")


class FirebaseConfigurationError(RuntimeError):
    """Raised when no Firebase credentials can be resolved."""


def _build_credentials(settings: Settings) -> credentials.Base:
    if settings.FIREBASE_SERVICE_ACCOUNT_CONTENT:
        logger.info("Firebase credentials loaded from FIREBASE_SERVICE_ACCOUNT_CONTENT.")
        return credentials.Certificate(json.loads(settings.FIREBASE_SERVICE_ACCOUNT_CONTENT))

    path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
    if path:
        if not os.path.exists(path):
            raise FirebaseConfigurationError(f"Firebase service account file not found: {path}")
        logger.info("Firebase credentials loaded from file: %s", path)
        return credentials.Certificate(path)

    logger.info("Firebase credentials not configured; using application default credentials.")
    return credentials.ApplicationDefault()


def initialize_firebase_app(settings: Settings | None = None) -> firebase_admin.App:
    """Initialize the default Firebase app once and return it."""
    if firebase_admin._apps:
        return firebase_admin.get_app()

    resolved_settings = settings or get_settings()
    cred = _build_credentials(resolved_settings)
    options = {"projectId": resolved_settings.FIREBASE_PROJECT_ID} if resolved_settings.FIREBASE_PROJECT_ID else None
    return firebase_admin.initialize_app(cred, options)


class FirestoreDocumentStore(DocumentStore):
    """DocumentStore over the Firebase Admin Firestore client.

    The SDK is blocking, so every call runs in a worker thread.
    """

    def __init__(self, client: Any, timeout_seconds: int = 15) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> FirestoreDocumentStore:
        """Build a store from application settings."""
        settings = get_settings()
        app = initialize_firebase_app(settings)
        timeout_seconds = get_timeout_policy(settings).firestore_timeout_seconds
        return cls(firestore.client(app=app), timeout_seconds=timeout_seconds)

    async def _run(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(func)
        except PameKidsError:
            raise
        except Exception as exc:
            classified = classify_store_error(exc)
            logger.error("Firestore %s failed: category=%s error=%s", operation, classified.code, exc)
            raise classified from exc

    async def get_all_documents(self, collection: str) -> list[StoredDocument]:
        def _fetch() -> list[StoredDocument]:
            snapshots = self._client.collection(collection).get(timeout=self._timeout_seconds)
            return [StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {}) for snapshot in snapshots]

        documents = await self._run(f"get_all({collection})", _fetch)
        logger.info("Firestore collection fetched: collection=%s count=%d", collection, len(documents))
        return documents

    async def get_document(self, collection: str, document_id: str) -> StoredDocument | None:
        def _fetch() -> StoredDocument | None:
            snapshot = self._client.collection(collection).document(document_id).get(timeout=self._timeout_seconds)
            if not snapshot.exists:
                return None
            return StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {})

        return await self._run(f"get({collection}/{document_id})", _fetch)

    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        def _write() -> None:
            self._client.collection(collection).document(document_id).set(
                data, merge=merge, timeout=self._timeout_seconds
            )

        await self._run(f"set({collection}/{document_id})", _write)

    async def delete_document(self, collection: str, document_id: str) -> None:
        def _delete() -> None:
            self._client.collection(collection).document(document_id).delete(timeout=self._timeout_seconds)

        await self._run(f"delete({collection}/{document_id})", _delete)

    async def add_document(self, collection: str, data: dict[str, Any]) -> str:
        def _add() -> str:
            _, reference = self._client.collection(collection).add(data, timeout=self._timeout_seconds)
            return reference.id

        return await self._run(f"add({collection})", _add)

    async def query_documents(self, collection: str, field_name: str, value: Any) -> list[StoredDocument]:
        def _query() -> list[StoredDocument]:
            query = self._client.collection(collection).where(filter=FieldFilter(field_name, "==", value))
            return [
                StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {})
                for snapshot in query.get(timeout=self._timeout_seconds)
            ]

        return await self._run(f"query({collection}.{field_name})", _query)

    def server_timestamp(self) -> Any:
        return firestore.SERVER_TIMESTAMP


@lru_cache(maxsize=1)
def get_firestore_store() -> FirestoreDocumentStore:
    """Return the process-wide Firestore store."""
    return FirestoreDocumentStore.from_settings()
