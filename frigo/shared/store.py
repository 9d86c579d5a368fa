"""Document store access.

Collections are addressed by slash-separated paths
(``rooms``, ``tenants/{tenant_id}/clients``). Queries only support equality
filters; ordering and any further filtering happen in the caller, which
keeps Firestore free of composite indexes.
"""

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import StoreConfig
from .errors import StoreError

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """A stored document and its id."""
    id: str
    data: Dict[str, Any]


class DocumentStore(ABC):
    """Base class for document store backends."""

    @abstractmethod
    def query(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Document]:
        """Return documents whose fields equal every value in ``filters``."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return one document, or None if it does not exist."""

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Update fields of an existing document. Fails if it does not exist."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        """Create or overwrite a document, merging fields when ``merge`` is set."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""


class MemoryStore(DocumentStore):
    """In-process store, used for local runs and tests."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection.strip("/"), {})

    def query(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Document]:
        filters = filters or {}
        return [
            Document(doc_id, copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(data.get(key) == value for key, value in filters.items())
        ]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return Document(doc_id, copy.deepcopy(data))

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise StoreError(f"No document {collection}/{doc_id} to update")
        docs[doc_id].update(copy.deepcopy(data))

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        docs = self._collection(collection)
        if merge and doc_id in docs:
            docs[doc_id].update(copy.deepcopy(data))
        else:
            docs[doc_id] = copy.deepcopy(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)


class FirestoreStore(DocumentStore):
    """Cloud Firestore backend using the Firebase Admin SDK."""

    def __init__(self, config: StoreConfig):
        import firebase_admin
        from firebase_admin import credentials, firestore

        self.config = config

        # initialize_app may only run once per process
        try:
            app = firebase_admin.get_app()
        except ValueError:
            if config.credentials_path:
                cred = credentials.Certificate(config.credentials_path)
            else:
                cred = credentials.ApplicationDefault()
            options = {"projectId": config.project_id} if config.project_id else None
            app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase Admin SDK initialized")

        self._client = firestore.client(app)

    def query(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Document]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        try:
            ref = self._client.collection(collection)
            for key, value in (filters or {}).items():
                ref = ref.where(filter=FieldFilter(key, "==", value))
            return [Document(snap.id, snap.to_dict() or {}) for snap in ref.stream()]
        except Exception as e:
            logger.error(f"Failed to query {collection}: {e}")
            raise StoreError(f"Failed to query {collection}") from e

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            snap = self._client.collection(collection).document(doc_id).get()
        except Exception as e:
            logger.error(f"Failed to read {collection}/{doc_id}: {e}")
            raise StoreError(f"Failed to read {collection}/{doc_id}") from e
        if not snap.exists:
            return None
        return Document(snap.id, snap.to_dict() or {})

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        try:
            _, ref = self._client.collection(collection).add(data)
            return ref.id
        except Exception as e:
            logger.error(f"Failed to add document to {collection}: {e}")
            raise StoreError(f"Failed to add document to {collection}") from e

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        try:
            self._client.collection(collection).document(doc_id).update(data)
        except Exception as e:
            logger.error(f"Failed to update {collection}/{doc_id}: {e}")
            raise StoreError(f"Failed to update {collection}/{doc_id}") from e

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        try:
            self._client.collection(collection).document(doc_id).set(data, merge=merge)
        except Exception as e:
            logger.error(f"Failed to write {collection}/{doc_id}: {e}")
            raise StoreError(f"Failed to write {collection}/{doc_id}") from e

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self._client.collection(collection).document(doc_id).delete()
        except Exception as e:
            logger.error(f"Failed to delete {collection}/{doc_id}: {e}")
            raise StoreError(f"Failed to delete {collection}/{doc_id}") from e


def create_store(config: StoreConfig) -> DocumentStore:
    """Create the store backend named in the configuration."""
    if config.backend == "memory":
        logger.warning("Using in-memory document store; nothing will be persisted")
        return MemoryStore()
    if config.backend == "firestore":
        return FirestoreStore(config)
    raise ValueError(f"Unsupported store backend: {config.backend}")
