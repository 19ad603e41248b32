"""Blob store writing images into a local directory."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from notekeeper.exceptions import ImageUploadError
from notekeeper.storage.base import BlobStore

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Stores blobs as files below ``root`` and returns ``file://`` URLs.

    When ``public_url`` is set, returned URLs are ``{public_url}/{name}``
    instead, for directories served by a static file server.
    """

    def __init__(self, root: Union[str, Path], public_url: Optional[str] = None):
        self.root = Path(root).resolve()
        self.public_url = public_url.rstrip("/") if public_url else None
        self.root.mkdir(parents=True, exist_ok=True)

    def upload_blob(self, data: bytes, content_type: str, name: str) -> str:
        target = (self.root / name).resolve()
        if self.root not in target.parents:
            raise ImageUploadError(f"Invalid blob name '{name}'", name=name)

        # Blobs appear under their final name only once fully written
        temp_file = target.with_name(target.name + ".tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            temp_file.write_bytes(data)
            os.replace(temp_file, target)
        except OSError as e:
            temp_file.unlink(missing_ok=True)
            raise ImageUploadError(
                f"Failed to store image: {e}", name=name, original_error=e
            ) from e

        logger.debug(f"Stored blob {name} ({len(data)} bytes, {content_type})")
        if self.public_url:
            return f"{self.public_url}/{name}"
        return target.as_uri()
