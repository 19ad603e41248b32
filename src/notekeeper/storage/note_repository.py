"""Repository for note storage and retrieval."""

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from notekeeper.config import config
from notekeeper.exceptions import ErrorCode, StoreError
from notekeeper.models.schema import LocalImage, Note
from notekeeper.observability import traced
from notekeeper.storage.base import BlobStore, DocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

IMAGE_PREFIX = "images"


class NoteRepository:
    """Facade over a document store and a blob store.

    Owns no note state: every call goes to the backends. Each backend call
    is attempted up to ``max_attempts`` times with no delay between
    attempts; the default of 1 means a single attempt per user action.
    """

    def __init__(
        self,
        store: DocumentStore,
        blob_store: BlobStore,
        collection: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ):
        """Initialize the repository.

        Args:
            store: Document store holding note records.
            blob_store: Blob storage receiving note images.
            collection: Collection name; defaults to ``config.collection``.
            max_attempts: Attempts per backend call; defaults to
                ``config.max_attempts``.
        """
        self.store = store
        self.blob_store = blob_store
        self.collection = collection or config.collection
        self.max_attempts = max_attempts if max_attempts is not None else config.max_attempts
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def _attempt(self, operation: str, call: Callable[[], T]) -> T:
        """Run ``call``, repeating it on StoreError until attempts run out."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return call()
            except StoreError as e:
                if attempt == self.max_attempts:
                    raise
                logger.warning(
                    f"{operation} failed (attempt {attempt}/{self.max_attempts}): {e.message}"
                )
        raise AssertionError("unreachable")

    def _to_note(self, record_id: str, fields: Dict[str, Any]) -> Note:
        """Build a note from a store record, rejecting malformed records."""
        try:
            return Note.from_record(record_id, fields)
        except (PydanticValidationError, TypeError, ValueError) as e:
            logger.error(f"Malformed record {self.collection}/{record_id}: {e}")
            raise StoreError(
                f"Malformed note record '{record_id}'",
                operation="read",
                record_id=record_id,
                code=ErrorCode.STORE_READ_FAILED,
                original_error=e,
            ) from e

    @traced("get_notes")
    def get_notes(self) -> List[Note]:
        """Fetch every note in the order the store reports them."""
        records = self._attempt("get_notes", lambda: self.store.list(self.collection))
        return [self._to_note(record_id, fields) for record_id, fields in records]

    @traced("get_note")
    def get_note(self, note_id: str) -> Optional[Note]:
        """Fetch one note by id, or None when it does not exist.

        Uses a point read when the store supports one; otherwise lists the
        collection and scans it.
        """
        if not note_id:
            return None
        if self.store.supports_point_reads:
            fields = self._attempt(
                "get_note", lambda: self.store.get(self.collection, note_id)
            )
            return self._to_note(note_id, fields) if fields is not None else None

        logger.debug(f"Store has no point reads; scanning for note {note_id}")
        for note in self.get_notes():
            if note.id == note_id:
                return note
        return None

    @traced("save_note")
    def save_note(self, note: Note) -> Note:
        """Create (empty id) or overwrite (existing id) a note.

        Last writer wins; no concurrency check is made.

        Returns:
            The saved note, carrying the store-assigned id on the create path.
        """
        record_id = note.id or None
        saved_id = self._attempt(
            "save_note",
            lambda: self.store.upsert(self.collection, record_id, note.to_fields()),
        )
        if note.is_new:
            logger.info(f"Created note {saved_id}")
        else:
            logger.info(f"Updated note {saved_id}")
        return note.model_copy(update={"id": saved_id})

    @traced("delete_note")
    def delete_note(self, note_id: str) -> None:
        """Delete a note. A missing id is reported as a generic StoreError."""
        removed = self._attempt(
            "delete_note", lambda: self.store.delete(self.collection, note_id)
        )
        if not removed:
            raise StoreError(
                f"No note with id '{note_id}'",
                operation="delete",
                record_id=note_id,
                code=ErrorCode.STORE_RECORD_MISSING,
            )
        logger.info(f"Deleted note {note_id}")

    @traced("upload_image")
    def upload_image(self, image: LocalImage) -> str:
        """Upload image bytes under a fresh object name and return its URL."""
        name = f"{IMAGE_PREFIX}/{uuid.uuid4().hex}{image.extension}"
        url = self._attempt(
            "upload_image",
            lambda: self.blob_store.upload_blob(image.data, image.content_type, name),
        )
        logger.info(f"Uploaded image {name} ({image.size} bytes)")
        return url

    def close(self) -> None:
        """Close both backends."""
        self.store.close()
        self.blob_store.close()
