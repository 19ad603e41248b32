"""
notekeeper - screens and persistence workflow of a note-taking app.

This package implements the non-visual part of a mobile notes app: a note
repository over a remote document store and blob storage, the save/load
workflow that ties image uploads to note persistence, and explicit view
state with pure reducers for the list screen and the add/edit form.

This version uses synchronous operations.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("notekeeper")
except PackageNotFoundError:
    __version__ = "0.3.0"
