"""Document store interface and an in-memory implementation.

Persistence is a collaborator of the validation engine: models hand it
validated plain data and read plain data back. Any backend implementing
``DocumentStore`` can be used.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any

from docknobs_common import OperationError
from docknobs_config import ConfigurableBase

from .exceptions import DocumentNotFoundError
from .values import DocumentReference

logger = logging.getLogger(__name__)


def to_reference(reference: DocumentReference | str) -> DocumentReference:
    if isinstance(reference, DocumentReference):
        return reference
    return DocumentReference(reference)


class DocumentStore(ABC):
    """Abstract async document store."""

    @abstractmethod
    async def create(
        self,
        collection_path: str,
        data: dict[str, Any],
        id: str | None = None,
    ) -> DocumentReference:
        """Store a new document, generating an id when none is given.

        Raises:
            OperationError: If a document with the given id already exists
        """

    @abstractmethod
    async def get(self, reference: DocumentReference | str) -> dict[str, Any] | None:
        """Read a document, or None if it does not exist."""

    @abstractmethod
    async def update(self, reference: DocumentReference | str, data: dict[str, Any]) -> None:
        """Replace an existing document's data.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """

    @abstractmethod
    async def set(self, reference: DocumentReference | str, data: dict[str, Any]) -> None:
        """Write a document's data, creating it if needed."""

    @abstractmethod
    async def delete(self, reference: DocumentReference | str) -> bool:
        """Delete a document. Returns False if it did not exist."""

    async def exists(self, reference: DocumentReference | str) -> bool:
        return await self.get(reference) is not None


class MemoryDocumentStore(DocumentStore, ConfigurableBase):
    """In-memory document store.

    Data is deep-copied on the way in and out so callers never share
    mutable state with the store.

    Example:
        ```python
        store = MemoryDocumentStore.from_config({
            "collections": {"users": {"ada": {"name": "Ada"}}}
        })
        await store.get("users/ada")
        # {'name': 'Ada'}
        ```
    """

    def __init__(self, collections: dict[str, dict[str, dict[str, Any]]] | None = None):
        self._storage: OrderedDict[str, dict[str, Any]] = OrderedDict()
        self._lock = asyncio.Lock()
        for collection_path, documents in (collections or {}).items():
            for id, data in documents.items():
                reference = DocumentReference.of(collection_path, id)
                self._storage[reference.path] = copy.deepcopy(data)

    @classmethod
    def from_config(cls, config: dict) -> MemoryDocumentStore:
        return cls(collections=config.get("collections"))

    async def create(
        self,
        collection_path: str,
        data: dict[str, Any],
        id: str | None = None,
    ) -> DocumentReference:
        reference = DocumentReference.of(collection_path, id or str(uuid.uuid4()))
        async with self._lock:
            if reference.path in self._storage:
                raise OperationError(
                    f"Document '{reference.path}' already exists",
                    context={"path": reference.path},
                )
            self._storage[reference.path] = copy.deepcopy(data)
        logger.debug(f"Created document {reference.path}")
        return reference

    async def get(self, reference: DocumentReference | str) -> dict[str, Any] | None:
        reference = to_reference(reference)
        async with self._lock:
            data = self._storage.get(reference.path)
            return copy.deepcopy(data) if data is not None else None

    async def update(self, reference: DocumentReference | str, data: dict[str, Any]) -> None:
        reference = to_reference(reference)
        async with self._lock:
            if reference.path not in self._storage:
                raise DocumentNotFoundError(reference.path)
            self._storage[reference.path] = copy.deepcopy(data)
        logger.debug(f"Updated document {reference.path}")

    async def set(self, reference: DocumentReference | str, data: dict[str, Any]) -> None:
        reference = to_reference(reference)
        async with self._lock:
            self._storage[reference.path] = copy.deepcopy(data)

    async def delete(self, reference: DocumentReference | str) -> bool:
        reference = to_reference(reference)
        async with self._lock:
            if reference.path in self._storage:
                del self._storage[reference.path]
                logger.debug(f"Deleted document {reference.path}")
                return True
            return False

    async def list(self, collection_path: str) -> list[DocumentReference]:
        """References of every document directly inside a collection."""
        prefix = collection_path.strip("/") + "/"
        async with self._lock:
            return [
                DocumentReference(path)
                for path in self._storage
                if path.startswith(prefix) and "/" not in path[len(prefix):]
            ]

    def count(self) -> int:
        return len(self._storage)
