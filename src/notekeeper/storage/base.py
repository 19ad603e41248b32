"""Backend interfaces for the note repository.

A ``DocumentStore`` is a flat key-value document database addressed by
collection and record id. A ``BlobStore`` takes image bytes and hands back
a durable URL. Backends raise ``StoreError`` for every transport failure.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

Record = Tuple[str, Dict[str, Any]]


class DocumentStore(ABC):
    """Abstract document store."""

    #: Whether ``get`` performs a direct lookup. Callers fall back to
    #: scanning ``list`` when this is False.
    supports_point_reads: bool = False

    @abstractmethod
    def list(self, collection: str) -> List[Record]:
        """Return every ``(id, fields)`` record of a collection, in store order."""

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Return one record's fields, or None when absent."""
        raise NotImplementedError(
            f"{type(self).__name__} does not support point reads"
        )

    @abstractmethod
    def upsert(
        self, collection: str, record_id: Optional[str], fields: Dict[str, Any]
    ) -> str:
        """Create (empty/None id) or overwrite a record and return its id."""

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> bool:
        """Remove a record. Returns False when the id does not exist."""

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class BlobStore(ABC):
    """Abstract blob storage for note images."""

    @abstractmethod
    def upload_blob(self, data: bytes, content_type: str, name: str) -> str:
        """Store ``data`` under ``name`` and return a durable URL for it."""

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
