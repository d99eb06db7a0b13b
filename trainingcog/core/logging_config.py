"""Logging setup.

Two loggers are configured at import:

- ``trainingcog``: application log. Console plus rotating ``app.log``, with
  ``errors.log`` receiving ERROR and above.
- ``trainingcog.access``: redirect decisions made by the access middleware,
  written to their own rotating ``access.log`` and also propagated to the
  application log.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

from trainingcog.core.config import LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5

APP_LOGGER_NAME = "trainingcog"
ACCESS_LOGGER_NAME = f"{APP_LOGGER_NAME}.access"


def _rotating(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(level: Union[int, str] = LOG_LEVEL, log_dir: Union[str, Path] = LOG_DIR,
                      name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Attach handlers to ``name`` and its ``.access`` child.

    Safe to call more than once: loggers that already have handlers are
    left alone, only their level is updated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    app_logger = logging.getLogger(name)
    app_logger.setLevel(level)
    if not app_logger.handlers:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(formatter)
        app_logger.addHandler(console)
        app_logger.addHandler(_rotating(log_dir / "app.log", level, formatter))
        # Aborted fetches log at DEBUG, so they never land here
        app_logger.addHandler(_rotating(log_dir / "errors.log", logging.ERROR, formatter))

    decisions = logging.getLogger(f"{name}.access")
    decisions.setLevel(logging.INFO)
    if not decisions.handlers:
        decisions.addHandler(_rotating(log_dir / "access.log", logging.INFO, formatter))

    return app_logger


logger = configure_logging()
access_logger = logging.getLogger(ACCESS_LOGGER_NAME)

# uvicorn's own access lines duplicate ours
logging.getLogger("uvicorn").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
