"""
Logging setup using loguru.

One colourised console sink, an optional rotating file sink, and a bridge
that routes stdlib ``logging`` records (uvicorn, urllib3 retries) into the
same sinks.
"""
import logging
import sys
from pathlib import Path

from loguru import logger as _logger


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

# stdlib loggers forwarded to loguru
BRIDGED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "urllib3")


class _InterceptHandler(logging.Handler):
    """Re-emit stdlib log records through loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logger(log_dir: Path | None = None, level: str = "INFO", serialize: bool = False) -> None:
    """
    Configure loguru logger with console and optional file sink.

    Args:
        log_dir: Directory to write log files. If None, file logging is skipped.
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        serialize: Write the file sink as JSON lines instead of plain text.
    """
    _logger.remove()
    _logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        _logger.add(
            log_dir / "f1pitstop_{time:YYYY-MM-DD}.log",
            level=level,
            format=FILE_FORMAT,
            serialize=serialize,
            rotation="1 day",
            retention="7 days",
            compression="gz",
        )

    handler = _InterceptHandler()
    for name in BRIDGED_LOGGERS:
        std = logging.getLogger(name)
        std.handlers = [handler]
        std.propagate = False


# Re-export the configured logger
logger = _logger
