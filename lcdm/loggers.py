"""
Log output for the LCDM driver.

Driver modules log through children of the ``lcdm`` logger and never
attach handlers themselves. Applications call ``get_logger`` once (or let
``LcdmDispenser.from_settings`` do it) to route those records to a colored
console, an optional rotating file and an optional Loki endpoint.
"""

import logging
import time
from logging.handlers import RotatingFileHandler
from typing import Any, Final, Optional

import colorlog
import httpx


DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
RECORD_FORMAT: Final[str] = "%(name)s | %(asctime)s | %(levelname)s | %(threadName)s | %(message)s"
CONSOLE_FORMAT: Final[str] = (
    "%(name)s | %(log_color)s%(asctime)s | %(levelname)s | %(threadName)s | %(message)s"
)
FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
FILE_BACKUPS: Final[int] = 3
LOKI_TIMEOUT: Final[float] = 2.0

LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def _loki_stream(level: str, message: str, app: str) -> dict[str, Any]:
    return {
        "streams": [
            {
                "stream": {"level": level, "app": app},
                "values": [[str(time.time_ns()), message]],
            }
        ]
    }


def send_to_loki(url: str, level: str, message: str, app: str) -> None:
    """
    Push one entry to a Loki endpoint.

    Delivery errors are printed, not logged, so a dead Loki server cannot
    feed back into the handler that called this.
    """
    try:
        with httpx.Client(timeout=LOKI_TIMEOUT) as client:
            client.post(url, json=_loki_stream(level, message, app))
    except httpx.HTTPError as e:
        print(f"[Loki send error]: {e}")


class LokiHandler(logging.Handler):
    """Logging handler labelling records with ``level`` and ``app`` for Loki."""

    def __init__(self, url: str, app: str) -> None:
        super().__init__()
        self.url = url
        self.app = app

    def emit(self, record: logging.LogRecord) -> None:
        try:
            send_to_loki(self.url, record.levelname, self.format(record), self.app)
        except Exception:
            self.handleError(record)


def _attach(
    logger_instance: logging.Logger,
    handler: logging.Handler,
    formatter: logging.Formatter,
    level: int,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger_instance.addHandler(handler)


def get_logger(
    name: str = "lcdm",
    app: str = "lcdm",
    log_file: Optional[str] = None,
    level: int = logging.DEBUG,
    loki_url: Optional[str] = None,
) -> logging.Logger:
    """
    Configure a logger for driver output.

    Handlers are attached on the first call only; later calls just update
    the level. Records carry the thread name, which tells the dispatcher
    worker apart from caller threads.

    Args:
        name: Logger name, ``lcdm`` covers every driver module.
        app: ``app`` label for Loki.
        log_file: Rotating log file path, or None for no file output.
        level: Logging level.
        loki_url: Loki push endpoint, or None for no remote output.

    Returns:
        The configured logger.
    """
    logger_instance = logging.getLogger(name)
    logger_instance.setLevel(level)
    if logger_instance.handlers:
        return logger_instance

    plain = logging.Formatter(fmt=RECORD_FORMAT, datefmt=DATE_FORMAT)

    _attach(
        logger_instance,
        logging.StreamHandler(),
        colorlog.ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT, log_colors=LOG_COLORS),
        level,
    )
    if log_file:
        _attach(
            logger_instance,
            RotatingFileHandler(
                log_file,
                maxBytes=FILE_MAX_BYTES,
                backupCount=FILE_BACKUPS,
                encoding="utf-8",
            ),
            plain,
            level,
        )
    if loki_url:
        _attach(logger_instance, LokiHandler(loki_url, app), plain, level)

    return logger_instance
