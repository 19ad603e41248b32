"""Logging setup and per-operation metrics for notekeeper.

Repository calls are wrapped with ``@traced``: every call is timed,
counted in the process-wide ``metrics`` collector and logged at debug
level under a short correlation id, together with the id of the note it
touches. Screen controllers log through ``get_logger``.
"""
import functools
import inspect
import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "notekeeper"
DEFAULT_LOG_DIR = Path.home() / ".notekeeper" / "logs"
LOG_FILE_NAME = "notekeeper.log"

# ISO 8601 timestamps
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

MAX_ERROR_LENGTH = 200

F = TypeVar("F", bound=Callable[..., Any])


def configure_logging(
    log_dir: Optional[Union[str, Path]] = None,
    level: int = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    console: bool = True,
) -> Path:
    """Send the package's log records to a rotating file.

    Handlers go on the ``notekeeper`` logger, so every module logger in
    the package (``notekeeper.storage.sql_store``, ``notekeeper.home_screen``,
    ...) writes through them. Calling this again with the same directory
    adds no second handler.

    Args:
        log_dir: Directory for ``notekeeper.log``; defaults to ~/.notekeeper/logs/
        level: Level for the package logger and its handlers
        max_bytes: Size at which the file is rotated
        backup_count: Rotated files to keep
        console: Also log to stderr

    Returns:
        The log directory.
    """
    log_path = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = (log_path / LOG_FILE_NAME).resolve()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers = package_logger.handlers
    if not any(
        isinstance(h, RotatingFileHandler) and Path(h.baseFilename) == log_file
        for h in handlers
    ):
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    # FileHandler subclasses StreamHandler, hence the exact type check
    if console and not any(type(h) is logging.StreamHandler for h in handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    for handler in package_logger.handlers:
        handler.setLevel(level)

    package_logger.info(f"Logging to {log_file}")
    return log_path


def _flatten_error(message: Optional[str], max_length: int = MAX_ERROR_LENGTH) -> Optional[str]:
    """One-line, length-capped form of an error message for metrics."""
    if message is None:
        return None
    flat = " ".join(message.splitlines())
    if len(flat) <= max_length:
        return flat
    return flat[: max_length - 3] + "..."


@dataclass
class OperationStats:
    """Running totals for one operation name."""

    count: int = 0
    errors: int = 0
    total_ms: float = 0.0
    min_ms: Optional[float] = None
    max_ms: float = 0.0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def add(self, duration_ms: float, error: Optional[str] = None) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = duration_ms if self.min_ms is None else min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)
        if error is not None:
            self.errors += 1
            self.last_error = _flatten_error(error)
            self.last_error_at = datetime.now(timezone.utc)

    def as_dict(self) -> Dict[str, Any]:
        successes = self.count - self.errors
        return {
            "count": self.count,
            "success_count": successes,
            "error_count": self.errors,
            "success_rate": successes / self.count if self.count else 0.0,
            "avg_duration_ms": round(self.total_ms / self.count, 2) if self.count else 0.0,
            "min_duration_ms": round(self.min_ms or 0.0, 2),
            "max_duration_ms": round(self.max_ms, 2),
            "last_error": self.last_error,
            "last_error_time": self.last_error_at.isoformat() if self.last_error_at else None,
        }


class MetricsCollector:
    """Thread-safe, in-memory metrics for the repository operations.

    Keyed by operation name (``get_notes``, ``save_note``, ``upload_image``,
    ...). Nothing is persisted; a host reads the totals through
    ``get_summary`` when it shuts down.
    """

    def __init__(self):
        self._stats: Dict[str, OperationStats] = {}
        self._lock = Lock()
        self._since = datetime.now(timezone.utc)

    def record(self, operation: str, duration_ms: float, error: Optional[str] = None) -> None:
        """Add one call of ``operation``; a non-None ``error`` marks it failed."""
        with self._lock:
            self._stats.setdefault(operation, OperationStats()).add(duration_ms, error)

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation snapshot."""
        with self._lock:
            return {name: stats.as_dict() for name, stats in self._stats.items()}

    def get_summary(self) -> Dict[str, Any]:
        """Totals across all operations."""
        with self._lock:
            total = sum(s.count for s in self._stats.values())
            errors = sum(s.errors for s in self._stats.values())
            return {
                "uptime_seconds": (datetime.now(timezone.utc) - self._since).total_seconds(),
                "total_operations": total,
                "total_success": total - errors,
                "total_errors": errors,
                "overall_success_rate": (total - errors) / total if total else 1.0,
                "operations_tracked": sorted(self._stats),
            }

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()
            self._since = datetime.now(timezone.utc)


metrics = MetricsCollector()


@contextmanager
def timed_operation(operation: str, **context: Any) -> Iterator[Dict[str, Any]]:
    """Time a block, record it in ``metrics`` and log its start and end.

    The yielded dict collects result details for the closing log line, e.g.
    ``op["result_count"] = len(notes)``.
    """
    call_id = uuid.uuid4().hex[:8]
    details: Dict[str, Any] = {}
    started = time.perf_counter()
    logger.debug(f"[{call_id}] {operation} start {_fmt(context)}".rstrip())

    error: Optional[str] = None
    try:
        yield details
    except Exception as e:
        error = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - started) * 1000
        metrics.record(operation, duration_ms, error)
        outcome = "ok" if error is None else f"failed: {error}"
        tail = _fmt({**context, **details})
        logger.debug(f"[{call_id}] {operation} {outcome} in {duration_ms:.2f}ms {tail}".rstrip())


def _fmt(values: Dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in values.items())


def _note_context(arguments: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the note a repository call is about out of its arguments."""
    if arguments.get("note_id"):
        return {"note_id": arguments["note_id"]}
    note = arguments.get("note")
    if note is not None and hasattr(note, "id"):
        return {"note_id": note.id or "(new)"}
    return {}


def traced(operation_name: Optional[str] = None) -> Callable[[F], F]:
    """Run every call of the decorated function inside ``timed_operation``.

    A ``note_id`` argument, or the id of a ``note`` argument, is attached to
    the log lines whether it was passed by position or by keyword. List
    results add ``result_count``.

    Example:
        @traced("delete_note")
        def delete_note(self, note_id: str) -> None:
            ...
    """
    def decorator(func: F) -> F:
        name = operation_name or func.__name__
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            bound = signature.bind_partial(*args, **kwargs)
            with timed_operation(name, **_note_context(bound.arguments)) as op:
                result = func(*args, **kwargs)
                if isinstance(result, list):
                    op["result_count"] = len(result)
                return result

        return wrapper  # type: ignore
    return decorator


class StructuredLogger:
    """Prefixes messages with the component name and appends key=value pairs."""

    def __init__(self, component: str):
        self.component = component
        self._logger = logging.getLogger(f"{PACKAGE_LOGGER}.{component}")

    def _format(self, msg: str, extra: Dict[str, Any]) -> str:
        if extra:
            return f"[{self.component}] {msg} | {_fmt(extra)}"
        return f"[{self.component}] {msg}"

    def debug(self, msg: str, **extra: Any) -> None:
        self._logger.debug(self._format(msg, extra))

    def info(self, msg: str, **extra: Any) -> None:
        self._logger.info(self._format(msg, extra))

    def error(self, msg: str, **extra: Any) -> None:
        self._logger.error(self._format(msg, extra))


def get_logger(component: str) -> StructuredLogger:
    """Structured logger for a screen component (e.g. ``home_screen``)."""
    return StructuredLogger(component)
