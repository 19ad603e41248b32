"""Configuration module for notekeeper."""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Project-level .env, anchored to __file__ so the process CWD does not matter
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config
_USER_ENV = Path.home() / ".notekeeper" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value if value else None


class NotekeeperConfig(BaseModel):
    """Configuration for the note repository and screens."""

    # Which backend family serves notes and images
    backend: Literal["http", "sqlite"] = Field(
        default_factory=lambda: os.getenv("NOTEKEEPER_BACKEND", "sqlite").lower()
    )
    # Remote document store / blob storage (http backend)
    store_url: Optional[str] = Field(
        default_factory=lambda: _env_optional("NOTEKEEPER_STORE_URL")
    )
    blob_url: Optional[str] = Field(
        default_factory=lambda: _env_optional("NOTEKEEPER_BLOB_URL")
    )
    # Public prefix for uploaded images when the blob service returns no URL
    blob_public_url: Optional[str] = Field(
        default_factory=lambda: _env_optional("NOTEKEEPER_BLOB_PUBLIC_URL")
    )
    # Token obtained upstream; attached as a bearer header, never refreshed here
    auth_token: Optional[str] = Field(
        default_factory=lambda: _env_optional("NOTEKEEPER_AUTH_TOKEN")
    )
    collection: str = Field(
        default_factory=lambda: os.getenv("NOTEKEEPER_COLLECTION", "notes")
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("NOTEKEEPER_REQUEST_TIMEOUT", "30"))
    )
    # Attempts per user action; 1 means a single attempt, no retry
    max_attempts: int = Field(
        default_factory=lambda: int(os.getenv("NOTEKEEPER_MAX_ATTEMPTS", "1"))
    )
    # Local backend configuration
    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("NOTEKEEPER_BASE_DIR", "."))
    )
    database_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("NOTEKEEPER_DATABASE_PATH", "data/db/notekeeper.db")
        )
    )
    blob_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("NOTEKEEPER_BLOB_DIR", "data/images"))
    )
    export_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("NOTEKEEPER_EXPORT_DIR", "data/exports")
        )
    )
    # Remove a deleted row from the list before the store confirms the delete
    optimistic_delete: bool = Field(
        default_factory=lambda: _env_flag("NOTEKEEPER_OPTIMISTIC_DELETE", "false")
    )
    # Logging, applied by notekeeper.app.start
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default_factory=lambda: os.getenv("NOTEKEEPER_LOG_LEVEL", "INFO").upper()
    )
    log_dir: Optional[Path] = Field(
        default_factory=lambda: _env_optional("NOTEKEEPER_LOG_DIR")
    )

    model_config = {"validate_assignment": True}

    @model_validator(mode="after")
    def _validate_limits(self) -> "NotekeeperConfig":
        """Validate numeric settings."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if self.max_attempts > 1:
            logger.info(
                "Store calls will be attempted up to %d times per action",
                self.max_attempts,
            )
        return self

    def get_absolute_path(self, path: Path) -> Path:
        """Convert a relative path to an absolute path based on base_dir."""
        if path.is_absolute():
            return path
        return self.base_dir / path

    def get_db_url(self) -> str:
        """Get the database URL for SQLite."""
        db_path = self.get_absolute_path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{db_path}"

    def get_blob_dir(self) -> Path:
        """Get the absolute image directory of the local blob store, creating it."""
        blob_dir = self.get_absolute_path(self.blob_dir)
        blob_dir.mkdir(parents=True, exist_ok=True)
        return blob_dir

    def get_export_dir(self) -> Path:
        """Get the absolute directory notes are exported to, creating it."""
        export_dir = self.get_absolute_path(self.export_dir)
        export_dir.mkdir(parents=True, exist_ok=True)
        return export_dir


# Create a global config instance
config = NotekeeperConfig()
