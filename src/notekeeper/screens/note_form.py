"""Add/edit note form: state, reducer and controller."""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from notekeeper.exceptions import (
    ImageUploadError,
    NoteNotFoundError,
    NotekeeperError,
    ValidationError,
)
from notekeeper.models.schema import LocalImage, Note, is_blank
from notekeeper.screens.base import ScreenController, error_text
from notekeeper.services.note_service import EMPTY_FIELDS_MESSAGE, NoteService

NOT_FOUND_MESSAGE = "Note not found"
LOAD_FAILED = "Failed to load note"
UPLOAD_FAILED = "Failed to upload image"
SAVE_FAILED = "Failed to save note"


@dataclass(frozen=True)
class FormState:
    """Fields of the form plus request flags.

    ``note_id`` is None in add mode. ``saved`` turns True once the note
    has been persisted, at which point the host navigates back. After a
    failed load ``load_failed`` blocks saving, so a note that could not be
    read is never overwritten or recreated under its old id.
    """

    note_id: Optional[str] = None
    title: str = ""
    content: str = ""
    picked_image: Optional[LocalImage] = None
    existing_image_url: Optional[str] = None
    error_message: str = ""
    loading: bool = False
    saving: bool = False
    saved: bool = False
    load_failed: bool = False

    @property
    def is_edit(self) -> bool:
        return bool(self.note_id)

    @property
    def can_submit(self) -> bool:
        return not (self.loading or self.saving or self.load_failed)


# Events

@dataclass(frozen=True)
class Mounted:
    note_id: Optional[str] = None


@dataclass(frozen=True)
class NoteLoaded:
    note: Note


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class TitleChanged:
    text: str


@dataclass(frozen=True)
class ContentChanged:
    text: str


@dataclass(frozen=True)
class ImagePicked:
    image: LocalImage


@dataclass(frozen=True)
class ImageCleared:
    """Drop both the picked image and the note's current image."""


@dataclass(frozen=True)
class SaveRequested:
    pass


@dataclass(frozen=True)
class SaveSucceeded:
    note: Note


@dataclass(frozen=True)
class SaveFailed:
    message: str


# Effects

@dataclass(frozen=True)
class LoadNote:
    note_id: str


@dataclass(frozen=True)
class PersistNote:
    note_id: Optional[str]
    title: str
    content: str
    picked_image: Optional[LocalImage]
    existing_image_url: Optional[str]


@dataclass(frozen=True)
class NotifySaved:
    note: Note


def reduce(state: FormState, event: object) -> Tuple[FormState, List[object]]:
    """Pure transition function of the note form."""
    if isinstance(event, Mounted):
        if event.note_id:
            return FormState(note_id=event.note_id, loading=True), [LoadNote(event.note_id)]
        return FormState(), []

    if isinstance(event, NoteLoaded):
        note = event.note
        return replace(
            state,
            title=note.title,
            content=note.content,
            existing_image_url=note.image_url,
            loading=False,
            error_message="",
        ), []

    if isinstance(event, LoadFailed):
        return replace(
            state, loading=False, load_failed=True, error_message=event.message
        ), []

    if isinstance(event, TitleChanged):
        return replace(state, title=event.text), []

    if isinstance(event, ContentChanged):
        return replace(state, content=event.text), []

    if isinstance(event, ImagePicked):
        return replace(state, picked_image=event.image), []

    if isinstance(event, ImageCleared):
        return replace(state, picked_image=None, existing_image_url=None), []

    if isinstance(event, SaveRequested):
        if not state.can_submit:
            return state, []
        if is_blank(state.title) or is_blank(state.content):
            return replace(state, error_message=EMPTY_FIELDS_MESSAGE), []
        return replace(state, saving=True, error_message=""), [
            PersistNote(
                note_id=state.note_id,
                title=state.title,
                content=state.content,
                picked_image=state.picked_image,
                existing_image_url=state.existing_image_url,
            )
        ]

    if isinstance(event, SaveSucceeded):
        note = event.note
        return replace(
            state,
            note_id=note.id,
            existing_image_url=note.image_url,
            picked_image=None,
            saving=False,
            saved=True,
        ), [NotifySaved(note)]

    if isinstance(event, SaveFailed):
        # Fields stay as typed so the user can retry
        return replace(state, saving=False, error_message=event.message), []

    raise TypeError(f"Unknown note form event: {event!r}")


class NoteFormController(ScreenController[FormState]):
    """Drives the add/edit form against a NoteService."""

    component = "note_form"

    def __init__(
        self,
        service: NoteService,
        on_saved: Optional[Callable[[Note], None]] = None,
    ):
        super().__init__(FormState())
        self.service = service
        self.on_saved = on_saved

    def mount(self, note_id: Optional[str] = None) -> FormState:
        return self.dispatch(Mounted(note_id))

    def set_title(self, text: str) -> FormState:
        return self.dispatch(TitleChanged(text))

    def set_content(self, text: str) -> FormState:
        return self.dispatch(ContentChanged(text))

    def pick_image(self, image: LocalImage) -> FormState:
        return self.dispatch(ImagePicked(image))

    def clear_image(self) -> FormState:
        return self.dispatch(ImageCleared())

    def save(self) -> FormState:
        return self.dispatch(SaveRequested())

    def reduce(self, state: FormState, event: object) -> Tuple[FormState, Sequence[object]]:
        return reduce(state, event)

    def run_effect(self, effect: object) -> Optional[object]:
        if isinstance(effect, LoadNote):
            self.log.debug("Loading note", note_id=effect.note_id)
            try:
                note = self.service.load_for_edit(effect.note_id)
            except NoteNotFoundError:
                self.log.error("Note not found", note_id=effect.note_id)
                return LoadFailed(NOT_FOUND_MESSAGE)
            except NotekeeperError as e:
                self.log.error("Failed to load note", note_id=effect.note_id, error=e.message)
                return LoadFailed(error_text(e, LOAD_FAILED))
            return NoteLoaded(note)

        if isinstance(effect, PersistNote):
            try:
                note = self.service.save(
                    effect.title,
                    effect.content,
                    note_id=effect.note_id,
                    picked_image=effect.picked_image,
                    existing_image_url=effect.existing_image_url,
                )
            except ImageUploadError as e:
                self.log.error("Image upload failed, note not saved", error=e.message)
                return SaveFailed(error_text(e, UPLOAD_FAILED))
            except ValidationError as e:
                return SaveFailed(error_text(e))
            except NotekeeperError as e:
                self.log.error("Failed to save note", note_id=effect.note_id, error=e.message)
                return SaveFailed(error_text(e, SAVE_FAILED))
            self.log.info("Note saved", note_id=note.id)
            return SaveSucceeded(note)

        if isinstance(effect, NotifySaved):
            if self.on_saved is not None:
                self.on_saved(effect.note)
            return None

        raise TypeError(f"Unknown note form effect: {effect!r}")
