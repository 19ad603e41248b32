"""Note list screen: state, reducer and controller."""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from notekeeper.config import config
from notekeeper.exceptions import NotekeeperError
from notekeeper.models.schema import Note
from notekeeper.screens.base import ScreenController, error_text
from notekeeper.services.note_service import NoteService

LOAD_FAILED = "Failed to load notes"
DELETE_FAILED = "Failed to delete note"
EXPORT_FAILED = "Failed to export note"


@dataclass(frozen=True)
class HomeState:
    notes: Tuple[Note, ...] = ()
    error_message: str = ""
    loading: bool = False
    # Id of the note whose delete is in flight; blocks further deletes
    pending_delete: Optional[str] = None
    last_export: Optional[Path] = None


# Events

@dataclass(frozen=True)
class Mounted:
    """Screen shown; also used for an explicit refresh."""


@dataclass(frozen=True)
class NotesLoaded:
    notes: Tuple[Note, ...]


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class DeleteRequested:
    note_id: str


@dataclass(frozen=True)
class DeleteSucceeded:
    note_id: str


@dataclass(frozen=True)
class DeleteFailed:
    note_id: str
    message: str


@dataclass(frozen=True)
class ExportRequested:
    note: Note


@dataclass(frozen=True)
class ExportSucceeded:
    path: Path


@dataclass(frozen=True)
class ExportFailed:
    message: str


@dataclass(frozen=True)
class ErrorDismissed:
    pass


# Effects

@dataclass(frozen=True)
class FetchNotes:
    pass


@dataclass(frozen=True)
class RemoveNote:
    note_id: str


@dataclass(frozen=True)
class ExportNote:
    note: Note


def reduce(
    state: HomeState, event: object, optimistic_delete: bool = False
) -> Tuple[HomeState, List[object]]:
    """Pure transition function of the list screen.

    A delete is always followed by a full reload rather than a local
    removal, so the list shows stale rows until the reload lands. With
    ``optimistic_delete`` the row disappears immediately instead, and a
    failed delete reloads to bring it back. Errors are cleared when a new
    action starts, not when data arrives, so a reload never hides them.
    """
    if isinstance(event, Mounted):
        return replace(state, loading=True, error_message=""), [FetchNotes()]

    if isinstance(event, NotesLoaded):
        return replace(state, notes=tuple(event.notes), loading=False), []

    if isinstance(event, LoadFailed):
        return replace(state, loading=False, error_message=event.message), []

    if isinstance(event, DeleteRequested):
        if state.pending_delete is not None:
            return state, []
        notes = state.notes
        if optimistic_delete:
            notes = tuple(n for n in notes if n.id != event.note_id)
        started = replace(state, notes=notes, pending_delete=event.note_id, error_message="")
        return started, [RemoveNote(event.note_id)]

    if isinstance(event, DeleteSucceeded):
        return replace(state, pending_delete=None, loading=True), [FetchNotes()]

    if isinstance(event, DeleteFailed):
        failed = replace(state, pending_delete=None, error_message=event.message)
        if optimistic_delete:
            return replace(failed, loading=True), [FetchNotes()]
        return failed, []

    if isinstance(event, ExportRequested):
        return replace(state, error_message=""), [ExportNote(event.note)]

    if isinstance(event, ExportSucceeded):
        return replace(state, last_export=event.path), []

    if isinstance(event, ExportFailed):
        return replace(state, error_message=event.message), []

    if isinstance(event, ErrorDismissed):
        return replace(state, error_message=""), []

    raise TypeError(f"Unknown home screen event: {event!r}")


class HomeController(ScreenController[HomeState]):
    """Drives the note list against a NoteService."""

    component = "home_screen"

    def __init__(
        self,
        service: NoteService,
        optimistic_delete: Optional[bool] = None,
        export_dir: Optional[Path] = None,
    ):
        super().__init__(HomeState())
        self.service = service
        self.optimistic_delete = (
            config.optimistic_delete if optimistic_delete is None else optimistic_delete
        )
        self.export_dir = export_dir

    def mount(self) -> HomeState:
        return self.dispatch(Mounted())

    def delete(self, note_id: str) -> HomeState:
        return self.dispatch(DeleteRequested(note_id))

    def export(self, note: Note) -> HomeState:
        return self.dispatch(ExportRequested(note))

    def reduce(self, state: HomeState, event: object) -> Tuple[HomeState, Sequence[object]]:
        return reduce(state, event, optimistic_delete=self.optimistic_delete)

    def run_effect(self, effect: object) -> Optional[object]:
        if isinstance(effect, FetchNotes):
            try:
                notes = self.service.list_notes()
            except NotekeeperError as e:
                self.log.error("Error loading notes", error=e.message)
                return LoadFailed(error_text(e, LOAD_FAILED))
            self.log.debug("Notes loaded", count=len(notes))
            return NotesLoaded(tuple(notes))

        if isinstance(effect, RemoveNote):
            try:
                self.service.delete(effect.note_id)
            except NotekeeperError as e:
                self.log.error("Error deleting note", note_id=effect.note_id, error=e.message)
                return DeleteFailed(effect.note_id, error_text(e, DELETE_FAILED))
            return DeleteSucceeded(effect.note_id)

        if isinstance(effect, ExportNote):
            try:
                path = self.service.export(effect.note, self.export_dir)
            except NotekeeperError as e:
                self.log.error("Error exporting note", note_id=effect.note.id, error=e.message)
                return ExportFailed(error_text(e, EXPORT_FAILED))
            self.log.info("Note exported", note_id=effect.note.id, path=path)
            return ExportSucceeded(path)

        raise TypeError(f"Unknown home screen effect: {effect!r}")
