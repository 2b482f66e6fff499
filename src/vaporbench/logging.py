"""Logging for vaporbench runs.

Progress of a benchmark or backfill is reported through the
``vaporbench`` logger.  On the console, informational lines (phase
banners, size summaries) are printed bare and only warnings and errors
carry a level tag.  ``--log-file`` adds a timestamped DEBUG trace that
includes every build and install command.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "vaporbench"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# HTTP connection chatter from the registry client.
_NOISY_LOGGERS = ("urllib3",)


class ConsoleFormatter(logging.Formatter):
    """Bare messages below WARNING, ``warning: ...`` / ``error: ...`` above."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname.lower()}: {message}"
        return message


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the ``vaporbench`` logger for one CLI invocation.

    Calling it again replaces the handlers from the previous call.
    *verbose* takes precedence over *quiet*.  The parent directory of
    *log_file* is created if needed.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(_console_level(verbose, quiet))
    console.setFormatter(ConsoleFormatter("%(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the ``vaporbench.<name>`` logger for a module."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
