"""Export notes as Markdown files with YAML frontmatter."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import frontmatter

from notekeeper.config import config
from notekeeper.exceptions import ExportError
from notekeeper.models.schema import Note
from notekeeper.utils import sanitize_for_filename

logger = logging.getLogger(__name__)


def render_note(note: Note) -> str:
    """Render a note as Markdown with a ``# title`` heading and frontmatter."""
    metadata: Dict[str, Any] = {"title": note.title}
    if note.id:
        metadata["id"] = note.id
    if note.image_url:
        metadata["image_url"] = note.image_url

    body = f"# {note.title}\n\n{note.content}"
    if note.image_url:
        body += f"\n\n![{note.title}]({note.image_url})"

    post = frontmatter.Post(body, **metadata)
    return frontmatter.dumps(post) + "\n"


def _export_path(note: Note, directory: Path) -> Path:
    stem = sanitize_for_filename(note.title) or sanitize_for_filename(note.id) or "note"
    candidate = directory / f"{stem}.md"
    counter = 2
    while candidate.exists():
        candidate = directory / f"{stem}-{counter}.md"
        counter += 1
    return candidate


def export_note(note: Note, directory: Union[str, Path, None] = None) -> Path:
    """Write ``note`` into ``directory`` without overwriting existing files.

    Args:
        note: The note to export.
        directory: Target directory; defaults to the configured export dir.

    Returns:
        Path of the written file.

    Raises:
        ExportError: If the file cannot be written.
    """
    target_dir: Optional[Path] = Path(directory) if directory else None
    try:
        if target_dir is None:
            target_dir = config.get_export_dir()
        else:
            target_dir.mkdir(parents=True, exist_ok=True)
        path = _export_path(note, target_dir)
        path.write_text(render_note(note), encoding="utf-8")
    except OSError as e:
        raise ExportError(
            str(e), note_id=note.id or None, original_error=e
        ) from e

    logger.info(f"Exported note {note.id or '(unsaved)'} to {path}")
    return path
