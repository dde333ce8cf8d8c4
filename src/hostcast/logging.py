"""Logging utilities for hostcast.

Log output always goes to stderr so that the per-host report on stdout can
be piped. Provides:
- Verbosity-to-level mapping for repeated -v flags
- Console and optional file handlers
- A structured logger that appends key=value context to messages
- Performance timing for the blocking calls (inventory, transport)
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

DEFAULT_FORMAT = "%(levelname)s [%(name)s] %(message)s"
DEBUG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(funcName)s:%(lineno)d] %(message)s"

# Custom TRACE level (dumps wire payloads)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
    3: TRACE,
}

LEVEL_NAMES = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def get_level_from_verbosity(verbosity: int) -> int:
    """Convert a -v count to a logging level."""
    return VERBOSITY_LEVELS.get(min(verbosity, 3), TRACE)


def get_level_from_name(level_name: str) -> int:
    """Convert a level name to a logging level.

    Args:
        level_name: trace, debug, info, warning, error or critical

    Returns:
        Logging level constant

    Raises:
        ValueError: If level name is invalid
    """
    level_lower = level_name.lower()
    if level_lower not in LEVEL_NAMES:
        valid = ", ".join(LEVEL_NAMES)
        raise ValueError(f"Invalid log level: {level_name}. Valid levels: {valid}")
    return LEVEL_NAMES[level_lower]


def configure_logging(
    level: int = logging.WARNING,
    log_file: str | Path | None = None,
    file_level: int | None = None,
) -> None:
    """Configure root logging for a hostcast run.

    Args:
        level: Console logging level
        log_file: Optional path to also write logs to
        file_level: Level for the file handler (defaults to level)

    Example:
        >>> configure_logging(level=logging.INFO)
        >>> configure_logging(level=logging.WARNING, log_file="/tmp/hostcast.log",
        ...                   file_level=logging.DEBUG)
    """
    format_string = DEBUG_FORMAT if level <= logging.DEBUG else DEFAULT_FORMAT

    root_logger = logging.getLogger()
    root_logger.setLevel(min(level, file_level or level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(format_string))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(file_level or level)
        file_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
        root_logger.addHandler(file_handler)


class StructuredLogger:
    """Logger that appends key=value context to every message.

    Example:
        >>> logger = StructuredLogger("hostcast.transport", backend="func-transmit")
        >>> logger.info("Sending request", hosts=12)
        INFO [hostcast.transport] Sending request (backend=func-transmit, hosts=12)
    """

    def __init__(self, name: str, **context: Any) -> None:
        self.logger = logging.getLogger(name)
        self.context: dict[str, Any] = context.copy()

    def add_context(self, **context: Any) -> None:
        """Add context included in all future messages."""
        self.context.update(context)

    def _format_message(self, message: str, **extra: Any) -> str:
        combined = {**self.context, **extra}
        if not combined:
            return message
        context_str = ", ".join(f"{k}={v}" for k, v in combined.items())
        return f"{message} ({context_str})"

    def log(self, level: int, message: str, **extra: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._format_message(message, **extra))

    def trace(self, message: str, **extra: Any) -> None:
        self.log(TRACE, message, **extra)

    def debug(self, message: str, **extra: Any) -> None:
        self.log(logging.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        self.log(logging.INFO, message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        self.log(logging.WARNING, message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self.log(logging.ERROR, message, **extra)

    @contextmanager
    def performance(
        self,
        operation: str,
        level: int = logging.INFO,
        **context: Any,
    ) -> Generator[None, None, None]:
        """Time a block and log its duration on exit.

        Example:
            >>> with logger.performance("Inventory query", selector="status:allocated"):
            ...     client.find(selector)
            INFO [hostcast.resolver] Inventory query completed in 0.210s (selector=status:allocated)
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            self.log(level, f"{operation} completed in {duration:.3f}s", **context)


def get_logger(name: str, **context: Any) -> StructuredLogger:
    """Get a structured logger (typically ``get_logger(__name__)``)."""
    return StructuredLogger(name, **context)
