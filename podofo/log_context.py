"""Logging setup that tags every record with the current request id."""

import logging
from contextvars import ContextVar
from typing import Optional

from podofo import config

# Set when a request workspace is created; ContextVar keeps concurrent requests apart.
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestContextFilter(logging.Filter):
    """Prefixes the record message with the request id, if any."""

    def filter(self, record):
        request_id = request_id_context.get()
        if request_id:
            record.msg = f"[{request_id}] {record.msg}"
        return True


def setup_logging(level: Optional[str] = None):
    """Call this once at app startup."""
    root_logger = logging.getLogger()

    # Clear any existing handlers (prevents duplicates under reload)
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(level or config.LOG_LEVEL)
