"""Tests for the SQLite document store and the local blob store."""

from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from notekeeper.exceptions import ErrorCode, ImageUploadError, StoreError
from notekeeper.storage.local_blob_store import LocalBlobStore
from notekeeper.storage.sql_store import SqlDocumentStore


class TestSqlDocumentStore:
    def test_supports_point_reads(self, sql_store):
        assert sql_store.supports_point_reads is True

    def test_create_assigns_id(self, sql_store):
        record_id = sql_store.upsert("notes", None, {"title": "T", "content": "C"})
        assert record_id
        assert sql_store.get("notes", record_id) == {"title": "T", "content": "C"}

    def test_list_keeps_insertion_order(self, sql_store):
        ids = [sql_store.upsert("notes", None, {"title": str(i)}) for i in range(3)]
        assert [record_id for record_id, _ in sql_store.list("notes")] == ids

    def test_update_keeps_position(self, sql_store):
        first = sql_store.upsert("notes", None, {"title": "a"})
        sql_store.upsert("notes", None, {"title": "b"})
        sql_store.upsert("notes", first, {"title": "a2"})
        records = sql_store.list("notes")
        assert records[0] == (first, {"title": "a2"})
        assert len(records) == 2

    def test_upsert_with_unknown_id_creates_it(self, sql_store):
        assert sql_store.upsert("notes", "chosen", {"title": "x"}) == "chosen"
        assert sql_store.get("notes", "chosen") == {"title": "x"}

    def test_collections_are_separate(self, sql_store):
        sql_store.upsert("notes", "same", {"title": "note"})
        sql_store.upsert("drafts", "same", {"title": "draft"})
        assert sql_store.list("notes") == [("same", {"title": "note"})]
        assert sql_store.get("drafts", "same") == {"title": "draft"}

    def test_get_missing(self, sql_store):
        assert sql_store.get("notes", "missing") is None

    def test_delete(self, sql_store):
        record_id = sql_store.upsert("notes", None, {"title": "x"})
        assert sql_store.delete("notes", record_id) is True
        assert sql_store.list("notes") == []
        assert sql_store.delete("notes", record_id) is False

    def test_data_survives_reopen(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'persist.db'}"
        with SqlDocumentStore(db_url=db_url) as store:
            record_id = store.upsert("notes", None, {"title": "kept"})
        with SqlDocumentStore(db_url=db_url) as store:
            assert store.get("notes", record_id) == {"title": "kept"}

    def test_database_error_becomes_store_error(self, sql_store):
        with patch.object(
            sql_store, "session_factory", side_effect=OperationalError("SELECT", {}, Exception("disk I/O error"))
        ):
            with pytest.raises(StoreError) as exc_info:
                sql_store.list("notes")
        assert exc_info.value.code == ErrorCode.STORE_READ_FAILED
        assert exc_info.value.operation == "list"

    def test_write_error_code(self, sql_store):
        with patch.object(
            sql_store, "session_factory", side_effect=OperationalError("INSERT", {}, Exception("readonly"))
        ):
            with pytest.raises(StoreError) as exc_info:
                sql_store.upsert("notes", None, {"title": "x"})
        assert exc_info.value.code == ErrorCode.STORE_WRITE_FAILED


class TestLocalBlobStore:
    def test_upload_writes_file_and_returns_public_url(self, tmp_path):
        store = LocalBlobStore(tmp_path / "blobs", public_url="https://cdn/")
        url = store.upload_blob(b"png", "image/png", "images/a.png")
        assert url == "https://cdn/images/a.png"
        assert (tmp_path / "blobs" / "images" / "a.png").read_bytes() == b"png"

    def test_upload_returns_file_uri_without_public_url(self, tmp_path):
        store = LocalBlobStore(tmp_path / "blobs")
        url = store.upload_blob(b"png", "image/png", "a.png")
        assert url == (tmp_path / "blobs" / "a.png").resolve().as_uri()

    def test_rejects_names_escaping_root(self, tmp_path):
        store = LocalBlobStore(tmp_path / "blobs")
        with pytest.raises(ImageUploadError):
            store.upload_blob(b"x", "image/png", "../outside.png")
        assert not (tmp_path / "outside.png").exists()

    def test_write_failure_leaves_no_partial_file(self, tmp_path):
        store = LocalBlobStore(tmp_path / "blobs")
        with patch("notekeeper.storage.local_blob_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ImageUploadError) as exc_info:
                store.upload_blob(b"x", "image/png", "a.png")
        assert "disk full" in exc_info.value.message
        assert list(Path(tmp_path / "blobs").iterdir()) == []
