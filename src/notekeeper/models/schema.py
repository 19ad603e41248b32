"""Data models for notekeeper."""

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

from notekeeper.exceptions import ErrorCode, ValidationError

# Wire field names used by the document store
TITLE_FIELD = "title"
CONTENT_FIELD = "content"
IMAGE_URL_FIELD = "imageUrl"


def is_blank(value: Optional[str]) -> bool:
    """Return True for None, empty, or whitespace-only strings."""
    return value is None or not value.strip()


class Note(BaseModel):
    """A user-authored note.

    An empty ``id`` marks a note that has not been saved yet; the store
    assigns the durable id on first save. Title and content are not
    checked here: the form and the save workflow reject blank values
    before anything reaches the store.
    """

    id: str = Field(default="", description="Store-assigned ID, empty when unsaved")
    title: str = Field(default="", description="Title of the note")
    content: str = Field(default="", description="Body of the note")
    image_url: Optional[str] = Field(
        default=None,
        alias=IMAGE_URL_FIELD,
        description="URL of the image attached to the note, if any",
    )

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
        "populate_by_name": True,
        "frozen": True,
    }

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        """Treat a missing id as unsaved."""
        if v is None:
            return ""
        return str(v)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: Optional[str]) -> Optional[str]:
        """Normalize an empty image URL to None."""
        if v is None or not v.strip():
            return None
        return v

    @property
    def is_new(self) -> bool:
        """True when the note has not been assigned a store id yet."""
        return self.id == ""

    @classmethod
    def from_record(cls, record_id: str, fields: Dict[str, Any]) -> "Note":
        """Build a note from a store record; unknown fields are ignored."""
        data = dict(fields)
        data["id"] = record_id
        return cls.model_validate(data)

    def to_fields(self) -> Dict[str, Any]:
        """Serialize the stored fields (everything except the id) by wire name."""
        return {
            TITLE_FIELD: self.title,
            CONTENT_FIELD: self.content,
            IMAGE_URL_FIELD: self.image_url,
        }


@dataclass(frozen=True)
class LocalImage:
    """An image picked on the device that has not been uploaded yet.

    Attributes:
        data: Raw image bytes.
        content_type: MIME type, always ``image/*``.
        filename: Original file name, used only for its extension.
    """

    data: bytes = field(repr=False)
    content_type: str
    filename: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.content_type.startswith("image/"):
            raise ValidationError(
                f"Not an image: {self.content_type}",
                field="content_type",
                value=self.content_type,
                code=ErrorCode.IMAGE_INVALID,
            )
        if not self.data:
            raise ValidationError(
                "Image is empty", field="data", code=ErrorCode.IMAGE_INVALID
            )

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "LocalImage":
        """Read an image file, guessing its MIME type from the extension."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        if content_type is None:
            raise ValidationError(
                f"Cannot determine image type of '{path.name}'",
                field="filename",
                value=path.name,
            )
        return cls(data=path.read_bytes(), content_type=content_type, filename=path.name)

    @property
    def extension(self) -> str:
        """File extension for the upload name, including the dot."""
        if self.filename and Path(self.filename).suffix:
            return Path(self.filename).suffix.lower()
        return mimetypes.guess_extension(self.content_type) or ""

    @property
    def size(self) -> int:
        return len(self.data)
