"""
Logging setup - tags every record with the error event being enhanced.
"""

import contextvars
import logging
import os
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from .config import AppConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(event_id)s] %(name)s:%(message)s"

# ── Event ID tracking via ContextVar ──────────────────────────────────────────
_event_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("event_id", default="-")


class EventIDFilter(logging.Filter):
    """Injects the current error event ID into every log record."""
    def filter(self, record):
        record.event_id = _event_id_ctx.get("-")
        return True


def current_event_id() -> str:
    return _event_id_ctx.get("-")


@contextmanager
def bind_event_id(event_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with event_id."""
    token = _event_id_ctx.set(event_id)
    try:
        yield
    finally:
        _event_id_ctx.reset(token)


def configure_logging(config: AppConfig) -> None:
    """Install the event-id formatter on the root logger and its handlers."""
    log_level = getattr(logging, config.log_level, logging.INFO)
    eid_filter = EventIDFilter()
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # If root has no handlers yet, add a console handler
    if not root_logger.handlers:
        console = logging.StreamHandler()
        console.setLevel(log_level)
        root_logger.addHandler(console)

    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
        handler.addFilter(eid_filter)

    # Add timestamped file handler if LOG_FILE_DIR is set
    if config.log_file_dir:
        os.makedirs(config.log_file_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file = os.path.join(config.log_file_dir, f"enhancer_{timestamp}.log")
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(eid_filter)
        root_logger.addHandler(file_handler)
        logging.getLogger(__name__).info(f"Logging to file: {log_file}")
