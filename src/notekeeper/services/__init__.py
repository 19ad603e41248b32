"""Service layer for notekeeper."""

from notekeeper.services.export import export_note, render_note
from notekeeper.services.note_service import NoteService, validate_note_input

__all__ = ["NoteService", "export_note", "render_note", "validate_note_input"]
