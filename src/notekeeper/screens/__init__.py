"""Screen state, reducers and controllers for the note list and note form."""

from notekeeper.screens.base import ScreenController, error_text
from notekeeper.screens.home import HomeController, HomeState
from notekeeper.screens.note_form import FormState, NoteFormController

__all__ = [
    "FormState",
    "HomeController",
    "HomeState",
    "NoteFormController",
    "ScreenController",
    "error_text",
]
