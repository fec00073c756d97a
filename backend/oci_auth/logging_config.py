"""Logging setup driven by ``LoggingSettings``.

Levels use the names from the settings file: ``trace`` and ``debug`` both
map to DEBUG, ``warn`` to WARNING, and ``off`` silences everything.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from oci_auth.config import LoggingSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "oci-auth.log"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info":  logging.INFO,
    "warn":  logging.WARNING,
    "error": logging.ERROR,
    "off":   logging.CRITICAL + 1,
}

# httpx/httpcore log every request line and TLS handshake. Never quieter
# than WARNING, never louder than the configured level.
_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
)


def resolve_level(name: str) -> int:
    return _LEVELS[name.lower()]


def configure_logging(settings: LoggingSettings) -> None:
    """Apply level, format and optional rotating file output to the root logger."""
    level = resolve_level(settings.level)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / LOG_FILE_NAME
        already_attached = any(
            isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(log_path)
            for h in root.handlers
        )
        if not already_attached:
            handler = RotatingFileHandler(
                log_path,
                maxBytes=settings.file_size_mb * 1024 * 1024,
                backupCount=settings.file_count,
                encoding="utf-8",
            )
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(logging.WARNING, level))

    logging.getLogger(__name__).info("Root logger level set to %s", settings.level.upper())
