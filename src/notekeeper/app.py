"""Host-side setup and teardown.

A UI host calls ``start`` once before it creates its screen controllers,
hands the returned service to ``HomeController`` and
``NoteFormController``, and calls ``shutdown`` when it exits.
"""
import logging
from typing import Any, Dict, Optional

from notekeeper import __version__
from notekeeper.config import NotekeeperConfig, config
from notekeeper.observability import configure_logging, metrics
from notekeeper.services.note_service import NoteService
from notekeeper.storage import build_repository

logger = logging.getLogger(__name__)


def start(cfg: Optional[NotekeeperConfig] = None, console: bool = True) -> NoteService:
    """Configure logging and return a NoteService on the configured backend.

    Raises:
        ConfigurationError: If the http backend is selected without its URLs.
    """
    cfg = cfg or config
    level = getattr(logging, cfg.log_level)
    try:
        log_dir = configure_logging(cfg.log_dir, level=level, console=console)
    except OSError as e:
        # Console logging only when the log directory cannot be created
        logging.basicConfig(level=level)
        logger.warning(f"Failed to configure file logging: {e}")
    else:
        logger.info(f"notekeeper {__version__} starting, logs in {log_dir}")

    service = NoteService(repository=build_repository(cfg))
    logger.info(f"Using the {cfg.backend} backend, collection '{cfg.collection}'")
    return service


def shutdown(service: NoteService) -> Dict[str, Any]:
    """Close the service's backends and log the store operation totals."""
    service.repository.close()
    summary = metrics.get_summary()
    logger.info(
        f"Shutting down after {summary['total_operations']} store operations "
        f"({summary['total_errors']} failed)"
    )
    return summary
