"""Service layer for the note list and note form workflows."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from notekeeper.exceptions import ErrorCode, NoteNotFoundError, NoteValidationError
from notekeeper.models.schema import LocalImage, Note, is_blank
from notekeeper.services.export import export_note
from notekeeper.storage.note_repository import NoteRepository

logger = logging.getLogger(__name__)

EMPTY_FIELDS_MESSAGE = "Title and content must not be empty"


def validate_note_input(title: str, content: str) -> None:
    """Reject a blank title or content.

    Raises:
        NoteValidationError: naming the first blank field.
    """
    if is_blank(title):
        raise NoteValidationError(
            EMPTY_FIELDS_MESSAGE, field="title", code=ErrorCode.NOTE_TITLE_REQUIRED
        )
    if is_blank(content):
        raise NoteValidationError(
            EMPTY_FIELDS_MESSAGE, field="content", code=ErrorCode.NOTE_CONTENT_REQUIRED
        )


class NoteService:
    """Load, save, delete and export notes through a NoteRepository."""

    def __init__(self, repository: Optional[NoteRepository] = None):
        """Initialize the service.

        Args:
            repository: Note repository. Built from the global config if None.
        """
        if repository is None:
            from notekeeper.storage import build_repository

            repository = build_repository()
        self.repository = repository

    def list_notes(self) -> List[Note]:
        return self.repository.get_notes()

    def load_for_edit(self, note_id: str) -> Note:
        """Fetch the note an edit form should show.

        Raises:
            NoteNotFoundError: If no note has this id.
            StoreError: If the store cannot be read.
        """
        logger.debug(f"Loading note {note_id} for editing")
        note = self.repository.get_note(note_id)
        if note is None:
            logger.warning(f"Note {note_id} not found")
            raise NoteNotFoundError(note_id)
        return note

    def save(
        self,
        title: str,
        content: str,
        note_id: Optional[str] = None,
        picked_image: Optional[LocalImage] = None,
        existing_image_url: Optional[str] = None,
    ) -> Note:
        """Validate, upload a newly picked image if any, then persist the note.

        A picked image replaces ``existing_image_url``; without one the
        existing URL is kept as is. If the upload fails the note is not
        saved at all.

        Args:
            title: Note title, must not be blank.
            content: Note content, must not be blank.
            note_id: Id of the note being edited; None or "" creates a note.
            picked_image: Image picked in the form and not uploaded yet.
            existing_image_url: Image URL the edited note already has.

        Returns:
            The saved note with its store id.

        Raises:
            NoteValidationError: On a blank field; no store call is made.
            ImageUploadError: If the upload fails; the note is not saved.
            StoreError: If the store rejects the save.
        """
        validate_note_input(title, content)

        image_url = existing_image_url
        if picked_image is not None:
            logger.debug("Uploading picked image before saving")
            image_url = self.repository.upload_image(picked_image)

        note = Note(id=note_id or "", title=title, content=content, image_url=image_url)
        return self.repository.save_note(note)

    def delete(self, note_id: str) -> None:
        self.repository.delete_note(note_id)

    def export(self, note: Note, directory: Union[str, Path, None] = None) -> Path:
        """Write ``note`` to a Markdown file and return its path."""
        return export_note(note, directory)
