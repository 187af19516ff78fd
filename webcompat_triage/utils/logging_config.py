"""
Logging Setup
=============
One console handler (colored by level, on stderr so it interleaves with
uvicorn's output) and, when a log directory is configured, one plain-text
file per day: <log_dir>/dashboard_YYYYMMDD.log.

Application and uvicorn loggers are forced to propagate to the root logger,
so worker progress lines, access logs and errors all end up in one stream.
"""
import logging
import os
import sys
from datetime import datetime
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_PROPAGATING_LOGGERS = ("webcompat_triage", "main", "uvicorn", "uvicorn.error", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """Wraps each console line in the ANSI color of its level."""

    COLORS = {
        logging.DEBUG: "\x1b[36m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self._by_level = {
            level: logging.Formatter(color + LOG_FORMAT + self.RESET, datefmt=DATE_FORMAT)
            for level, color in self.COLORS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        formatter = self._by_level.get(record.levelno)
        if formatter is None:
            # custom levels stay uncolored
            return super().format(record)
        return formatter.format(record)


def resolve_level(level: Union[int, str]) -> int:
    """Accept either a logging constant or a level name such as "DEBUG"."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _daily_file_handler(log_dir: str) -> logging.FileHandler:
    os.makedirs(log_dir, exist_ok=True)
    filename = f"dashboard_{datetime.now().strftime('%Y%m%d')}.log"
    handler = logging.FileHandler(os.path.join(log_dir, filename))
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: Union[int, str] = logging.INFO, log_dir: Optional[str] = "logs") -> None:
    """
    (Re)configure the root logger.

    Parameters
    ----------
    level : int or str
        Level for the root logger and the application loggers.
    log_dir : str, optional
        Directory for the daily log file. Falsy disables file logging.
    """
    level = resolve_level(level)
    root_logger = logging.getLogger()

    # repeated calls replace handlers instead of stacking them
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter())
    root_logger.addHandler(console_handler)

    if log_dir:
        root_logger.addHandler(_daily_file_handler(log_dir))

    for name in _PROPAGATING_LOGGERS:
        named = logging.getLogger(name)
        named.setLevel(level)
        named.propagate = True

    root_logger.info("Logging initialized (console%s).", " + file" if log_dir else "")
