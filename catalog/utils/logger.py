"""
Logging for the catalog service.

All module loggers are children of ``catalog`` and share the single stdout
handler installed there, so level changes apply to the whole package.
"""

import logging
import sys


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
ROOT_LOGGER = "catalog"
NOISY_LOGGERS = ("uvicorn", "fastapi", "httpx", "httpcore")


def _package_logger() -> logging.Logger:
    package = logging.getLogger(ROOT_LOGGER)
    if not package.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package.addHandler(handler)
        package.setLevel(logging.INFO)
        package.propagate = False
    return package


def get_logger(name: str) -> logging.Logger:
    """Logger ``catalog.<name>``."""
    _package_logger()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(debug: bool = False) -> None:
    _package_logger().setLevel(logging.DEBUG if debug else logging.INFO)
    # request lines come from LoggingMiddleware
    logging.getLogger("uvicorn.access").disabled = True
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
