"""Logging for logokit: rotating log file, optional rich console, crash hook."""

from __future__ import annotations

import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from logokit.core.config import CACHE_DIR

ROOT_LOGGER = "logokit"
LOG_FILE = CACHE_DIR / "logokit.log"
LOG_MAX_BYTES = 512 * 1024  # 512 KB
LOG_BACKUP_COUNT = 2

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _file_handler() -> logging.Handler:
    """Rotating file handler under the cache dir, or stderr if that is unwritable."""
    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    return handler


def setup_logging(verbose: bool = False) -> None:
    """Attach the log file handler once; add a stderr console when verbose.

    Installs an excepthook so uncaught errors end up in the log file too.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(logging.DEBUG)

    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        root.addHandler(_file_handler())

    if verbose and not any(isinstance(h, RichHandler) for h in root.handlers):
        console = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%H:%M:%S]",
        )
        console.setLevel(logging.DEBUG)
        root.addHandler(console)

    sys.excepthook = _excepthook


def _excepthook(exc_type: type, exc_value: BaseException, exc_tb) -> None:
    logging.getLogger(ROOT_LOGGER).critical(
        "Uncaught exception:\n%s",
        "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
    )
    sys.__excepthook__(exc_type, exc_value, exc_tb)


def get_logger(name: str) -> logging.Logger:
    """Return the ``logokit.<name>`` child logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_log_path() -> Path:
    return LOG_FILE
