"""Process-wide logging setup."""

import logging
import sys

from app.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Loggers that are too chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "python_http_client")


def setup_logging() -> logging.Logger:
    """Configure the root handler once and return the application logger."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root = logging.getLogger()
    if not any(getattr(h, "_perf_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._perf_handler = True
        root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.INFO if settings.sql_debug and name == "sqlalchemy.engine" else logging.WARNING
        )

    return logging.getLogger("app")
