"""
Logging setup for processes embedding authzgate.
"""

import logging
from typing import Optional

from .config import get_config_value


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Make ``request_id`` available to formatters on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the ``authzgate`` logger.

    The level defaults to AUTHZGATE_LOG_LEVEL, then INFO. Calling it twice
    does not add a second handler.
    """
    level = (level or get_config_value("log_level", "INFO")).upper()
    package_logger = logging.getLogger("authzgate")
    package_logger.setLevel(level)

    if not any(getattr(h, "_authzgate", False) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        handler._authzgate = True
        package_logger.addHandler(handler)

    return package_logger
