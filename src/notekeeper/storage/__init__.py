"""Storage layer for notekeeper."""

from typing import Optional

from notekeeper.config import NotekeeperConfig, config
from notekeeper.exceptions import ConfigurationError, ErrorCode
from notekeeper.storage.base import BlobStore, DocumentStore
from notekeeper.storage.http_store import HttpBlobStore, HttpDocumentStore
from notekeeper.storage.local_blob_store import LocalBlobStore
from notekeeper.storage.note_repository import NoteRepository
from notekeeper.storage.sql_store import SqlDocumentStore

__all__ = [
    "BlobStore",
    "DocumentStore",
    "HttpBlobStore",
    "HttpDocumentStore",
    "LocalBlobStore",
    "NoteRepository",
    "SqlDocumentStore",
    "build_repository",
]


def build_repository(cfg: Optional[NotekeeperConfig] = None) -> NoteRepository:
    """Create a NoteRepository wired to the configured backend."""
    cfg = cfg or config

    if cfg.backend == "http":
        for key in ("store_url", "blob_url"):
            if not getattr(cfg, key):
                raise ConfigurationError(
                    f"{key} must be set for the http backend",
                    config_key=key,
                    code=ErrorCode.CONFIG_MISSING,
                )
        store: DocumentStore = HttpDocumentStore(
            cfg.store_url, auth_token=cfg.auth_token, timeout=cfg.request_timeout
        )
        blob_store: BlobStore = HttpBlobStore(
            cfg.blob_url,
            public_url=cfg.blob_public_url,
            auth_token=cfg.auth_token,
            timeout=cfg.request_timeout,
        )
    else:
        # "sqlite"; other values are rejected when the config is built
        store = SqlDocumentStore(db_url=cfg.get_db_url())
        blob_store = LocalBlobStore(cfg.get_blob_dir(), public_url=cfg.blob_public_url)

    return NoteRepository(
        store, blob_store, collection=cfg.collection, max_attempts=cfg.max_attempts
    )
