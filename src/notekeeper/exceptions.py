"""Custom exceptions for notekeeper.

Provides a structured exception hierarchy with error codes and
machine-readable error information. Screen controllers catch
``NotekeeperError`` at their boundary and turn it into a single
user-visible message.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Note errors (1xxx)
    NOTE_NOT_FOUND = 1001
    NOTE_VALIDATION_FAILED = 1002
    NOTE_TITLE_REQUIRED = 1004
    NOTE_CONTENT_REQUIRED = 1005

    # Store errors (4xxx)
    STORE_READ_FAILED = 4001
    STORE_WRITE_FAILED = 4002
    STORE_DELETE_FAILED = 4003
    STORE_CONNECTION_FAILED = 4004
    STORE_RECORD_MISSING = 4008

    # Blob storage errors (45xx)
    IMAGE_UPLOAD_FAILED = 4501
    IMAGE_INVALID = 4502

    # Export errors (5xxx)
    EXPORT_FAILED = 5001

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001
    CONFIG_MISSING = 6002

    # Validation errors (7xxx)
    VALIDATION_FAILED = 7001


class NotekeeperError(Exception):
    """Base exception for all notekeeper errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class NoteNotFoundError(NotekeeperError):
    """Raised when a note requested for editing does not exist."""

    def __init__(self, note_id: str, message: Optional[str] = None):
        super().__init__(
            message or "Note not found",
            code=ErrorCode.NOTE_NOT_FOUND,
            details={"note_id": note_id}
        )
        self.note_id = note_id


class ValidationError(NotekeeperError):
    """Raised for input validation errors, before any store call is made."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        code: ErrorCode = ErrorCode.VALIDATION_FAILED
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]

        super().__init__(message, code=code, details=details)
        self.field = field
        self.value = value


class NoteValidationError(ValidationError):
    """Raised when note fields fail validation (blank title or content)."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        code: ErrorCode = ErrorCode.NOTE_VALIDATION_FAILED
    ):
        super().__init__(message, field=field, value=value, code=code)


class StoreError(NotekeeperError):
    """Raised for any failure of the document store or blob storage.

    The transport's own message is kept as ``message`` so it can be shown
    to the user largely verbatim.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        record_id: Optional[str] = None,
        status_code: Optional[int] = None,
        code: ErrorCode = ErrorCode.STORE_READ_FAILED,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if record_id:
            details["record_id"] = record_id
        if status_code is not None:
            details["status_code"] = status_code
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.record_id = record_id
        self.status_code = status_code
        self.original_error = original_error


class ImageUploadError(StoreError):
    """Raised when an image cannot be uploaded to blob storage."""

    def __init__(
        self,
        message: str,
        name: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message,
            operation="upload_image",
            status_code=status_code,
            code=ErrorCode.IMAGE_UPLOAD_FAILED,
            original_error=original_error
        )
        self.name = name
        if name:
            self.details["name"] = name


class ExportError(NotekeeperError):
    """Raised when a note cannot be written to an export file."""

    def __init__(
        self,
        message: str,
        note_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if note_id:
            details["note_id"] = note_id
        if original_error:
            details["original_error"] = str(original_error)[:200]
        super().__init__(message, code=ErrorCode.EXPORT_FAILED, details=details)
        self.note_id = note_id
        self.original_error = original_error


class ConfigurationError(NotekeeperError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key
