"""Common test fixtures for notekeeper."""

import logging

import pytest

from tests.fakes import FakeBlobStore, FakeDocumentStore
from notekeeper.config import config
from notekeeper.models.schema import LocalImage
from notekeeper.observability import metrics
from notekeeper.services.note_service import NoteService
from notekeeper.storage.local_blob_store import LocalBlobStore
from notekeeper.storage.note_repository import NoteRepository
from notekeeper.storage.sql_store import SqlDocumentStore

# Smallest valid PNG header is enough; nothing decodes the bytes
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def test_config(tmp_path, monkeypatch):
    """Point every configured path at a temporary directory."""
    monkeypatch.setattr(config, "backend", "sqlite")
    monkeypatch.setattr(config, "collection", "notes")
    monkeypatch.setattr(config, "base_dir", tmp_path)
    monkeypatch.setattr(config, "database_path", tmp_path / "db" / "test_notes.db")
    monkeypatch.setattr(config, "blob_dir", tmp_path / "images")
    monkeypatch.setattr(config, "export_dir", tmp_path / "exports")
    monkeypatch.setattr(config, "blob_public_url", None)
    monkeypatch.setattr(config, "max_attempts", 1)
    monkeypatch.setattr(config, "optimistic_delete", False)
    yield config


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def doc_store():
    """Fake store with point reads."""
    return FakeDocumentStore(point_reads=True)


@pytest.fixture
def scan_only_store():
    """Fake store without point reads."""
    return FakeDocumentStore(point_reads=False)


@pytest.fixture
def blob_store():
    return FakeBlobStore(base_url="https://cdn")


@pytest.fixture
def note_repository(doc_store, blob_store):
    """Repository over the fakes, single attempt per call."""
    return NoteRepository(doc_store, blob_store, collection="notes", max_attempts=1)


@pytest.fixture
def note_service(note_repository):
    return NoteService(repository=note_repository)


@pytest.fixture
def sql_store(tmp_path):
    """Real SQLite document store in a temporary directory."""
    store = SqlDocumentStore(db_url=f"sqlite:///{tmp_path / 'notes.db'}")
    yield store
    store.close()


@pytest.fixture
def local_blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "blobs", public_url="https://cdn")


@pytest.fixture
def sql_repository(sql_store, local_blob_store):
    """Repository over the real local backends."""
    return NoteRepository(sql_store, local_blob_store, collection="notes", max_attempts=1)


@pytest.fixture
def png_image():
    return LocalImage(data=PNG_BYTES, content_type="image/png", filename="img1.png")


@pytest.fixture
def package_logger():
    """The ``notekeeper`` logger, with handlers added by the test removed after."""
    package_logger = logging.getLogger("notekeeper")
    before = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    for handler in package_logger.handlers[:]:
        if handler not in before:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)
