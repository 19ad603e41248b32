"""Tests for configuration loading and backend wiring."""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from notekeeper.config import _USER_ENV, NotekeeperConfig
from notekeeper.exceptions import ConfigurationError, ErrorCode
from notekeeper.storage import (
    HttpBlobStore,
    HttpDocumentStore,
    LocalBlobStore,
    SqlDocumentStore,
    build_repository,
)

_ENV_VARS = [
    "NOTEKEEPER_BACKEND",
    "NOTEKEEPER_STORE_URL",
    "NOTEKEEPER_BLOB_URL",
    "NOTEKEEPER_BLOB_PUBLIC_URL",
    "NOTEKEEPER_AUTH_TOKEN",
    "NOTEKEEPER_COLLECTION",
    "NOTEKEEPER_REQUEST_TIMEOUT",
    "NOTEKEEPER_MAX_ATTEMPTS",
    "NOTEKEEPER_OPTIMISTIC_DELETE",
    "NOTEKEEPER_LOG_LEVEL",
    "NOTEKEEPER_LOG_DIR",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    def test_user_env_path_is_correct(self):
        assert _USER_ENV == Path.home() / ".notekeeper" / ".env"

    def test_defaults(self, clean_env):
        cfg = NotekeeperConfig()
        assert cfg.backend == "sqlite"
        assert cfg.collection == "notes"
        assert cfg.max_attempts == 1
        assert cfg.request_timeout == 30.0
        assert cfg.optimistic_delete is False
        assert cfg.store_url is None

    def test_env_overrides(self, clean_env):
        clean_env.setenv("NOTEKEEPER_BACKEND", "HTTP")
        clean_env.setenv("NOTEKEEPER_STORE_URL", "https://store.test/v1")
        clean_env.setenv("NOTEKEEPER_MAX_ATTEMPTS", "3")
        clean_env.setenv("NOTEKEEPER_OPTIMISTIC_DELETE", "yes")
        cfg = NotekeeperConfig()
        assert cfg.backend == "http"
        assert cfg.store_url == "https://store.test/v1"
        assert cfg.max_attempts == 3
        assert cfg.optimistic_delete is True

    def test_logging_settings(self, clean_env, tmp_path):
        assert NotekeeperConfig().log_level == "INFO"
        assert NotekeeperConfig().log_dir is None
        clean_env.setenv("NOTEKEEPER_LOG_LEVEL", "debug")
        clean_env.setenv("NOTEKEEPER_LOG_DIR", str(tmp_path))
        cfg = NotekeeperConfig()
        assert cfg.log_level == "DEBUG"
        assert cfg.log_dir == tmp_path

    def test_empty_env_value_is_unset(self, clean_env):
        clean_env.setenv("NOTEKEEPER_AUTH_TOKEN", "")
        assert NotekeeperConfig().auth_token is None

    def test_max_attempts_must_be_positive(self, clean_env):
        with pytest.raises(PydanticValidationError):
            NotekeeperConfig(max_attempts=0)

    def test_unknown_backend_rejected(self, clean_env):
        clean_env.setenv("NOTEKEEPER_BACKEND", "FTP")
        with pytest.raises(PydanticValidationError):
            NotekeeperConfig()
        cfg = NotekeeperConfig(backend="sqlite")
        with pytest.raises(PydanticValidationError):
            cfg.backend = "ftp"

    def test_timeout_must_be_positive(self, clean_env):
        with pytest.raises(PydanticValidationError):
            NotekeeperConfig(request_timeout=0)

    def test_relative_paths_resolve_against_base_dir(self, tmp_path, clean_env):
        cfg = NotekeeperConfig(base_dir=tmp_path)
        assert cfg.get_absolute_path(Path("data/x")) == tmp_path / "data" / "x"
        assert cfg.get_absolute_path(Path("/abs")) == Path("/abs")

    def test_db_url_creates_parent(self, tmp_path, clean_env):
        cfg = NotekeeperConfig(base_dir=tmp_path, database_path=Path("db/n.db"))
        assert cfg.get_db_url() == f"sqlite:///{tmp_path / 'db' / 'n.db'}"
        assert (tmp_path / "db").is_dir()


class TestBuildRepository:
    def test_sqlite_backend(self, tmp_path, clean_env):
        cfg = NotekeeperConfig(backend="sqlite", base_dir=tmp_path, collection="memos")
        repository = build_repository(cfg)
        try:
            assert isinstance(repository.store, SqlDocumentStore)
            assert isinstance(repository.blob_store, LocalBlobStore)
            assert repository.collection == "memos"
            assert repository.max_attempts == 1
        finally:
            repository.close()

    def test_http_backend(self, clean_env):
        cfg = NotekeeperConfig(
            backend="http",
            store_url="https://store.test/v1/",
            blob_url="https://blobs.test",
            auth_token="tok",
            max_attempts=2,
        )
        repository = build_repository(cfg)
        try:
            assert isinstance(repository.store, HttpDocumentStore)
            assert isinstance(repository.blob_store, HttpBlobStore)
            assert repository.store.base_url == "https://store.test/v1"
            assert repository.store.session.headers["Authorization"] == "Bearer tok"
            assert repository.max_attempts == 2
        finally:
            repository.close()

    @pytest.mark.parametrize("missing", ["store_url", "blob_url"])
    def test_http_backend_requires_urls(self, missing, clean_env):
        values = {"store_url": "https://store.test", "blob_url": "https://blobs.test"}
        values[missing] = None
        cfg = NotekeeperConfig(backend="http", **values)
        with pytest.raises(ConfigurationError) as exc_info:
            build_repository(cfg)
        assert exc_info.value.config_key == missing
        assert exc_info.value.code == ErrorCode.CONFIG_MISSING
