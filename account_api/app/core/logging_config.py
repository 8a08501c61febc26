"""
Logging setup for the Account API.

Handlers live on the root logger so uvicorn's and FastAPI's records
share one format with ours.  Levels are set per logger: the
``account_api`` package follows ``Settings.log_level`` while the
per-request access log of uvicorn is held at WARNING or above, since
every request is already described by the service's own INFO records.
"""

import logging
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "account_api"
ACCESS_LOGGERS = ("uvicorn.access",)


def _parse_level(level: str) -> int:
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> logging.Logger:
    """Apply the configured levels and attach handlers once.

    Levels are (re)applied on every call, so each ``create_app`` gets
    the ``log_level`` of its own settings.  Handlers are only attached
    when the root logger has none yet; a second app in the same
    process, or the test runner's capture handler, keeps what is
    there.  Unknown level names fall back to ``INFO``.

    Returns the ``account_api`` package logger.
    """
    numeric_level = _parse_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)
    for name in ACCESS_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    root = logging.getLogger()
    if root.handlers:
        return package_logger

    root.setLevel(numeric_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    package_logger.debug("Logging configured at %s", logging.getLevelName(numeric_level))
    return package_logger
