#!/usr/bin/env python3
"""Structured logging for Iconic.

This module wraps the standard logging module with:
- Key-value context attached to every message
- Thread-local context stacks (``add_context``)
- Console output by default, rotating file output on request
- A shared instance for components that are not handed a logger

Example:
    >>> logger = Logger(level=LogLevel.DEBUG)
    >>> logger.warning("Invalid regex in rule", pattern="([", rule_id="a1")
    >>> with logger.add_context(category="file"):
    ...     logger.debug("Scanning rules", count=3)
"""

import logging
import logging.handlers
import threading
from contextlib import contextmanager
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50

    @classmethod
    def coerce(cls, level: Union["LogLevel", int, str]) -> "LogLevel":
        """Accept a LogLevel, a numeric level or a level name."""
        if isinstance(level, str):
            return cls[level.upper()]
        return cls(level)


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Logger:
    """Logger that appends key=value context to messages.

    Context given as keyword arguments is merged with any context pushed by
    ``add_context`` on the current thread, rendered after the message and
    also attached to the record as ``record.context``.
    """

    _context_stack = threading.local()

    def __init__(
        self,
        name: str = "iconic",
        level: Union[LogLevel, str] = LogLevel.INFO,
        handlers: Optional[List[logging.Handler]] = None,
    ):
        """Initialize logger.

        Args:
            name: Logger name for identification
            level: Minimum log level to output
            handlers: Optional list of logging handlers (console by default)
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.set_level(level)

        if handlers is None:
            handlers = [self._create_console_handler()]

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)

        self.logger.propagate = False

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DATE_FORMAT))
        return handler

    def create_file_handler(
        self,
        filename: Union[str, Path],
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ) -> logging.handlers.RotatingFileHandler:
        """Create rotating file handler.

        Args:
            filename: Path to log file
            max_bytes: Maximum size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured rotating file handler
        """
        handler = logging.handlers.RotatingFileHandler(
            filename, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DATE_FORMAT))
        return handler

    def add_handler(self, handler: logging.Handler) -> None:
        """Add an output handler."""
        self.logger.addHandler(handler)

    def remove_handler(self, handler: logging.Handler) -> None:
        """Remove an output handler."""
        self.logger.removeHandler(handler)

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """Set the minimum log level.

        Args:
            level: New log level (LogLevel or level name)
        """
        self.logger.setLevel(LogLevel.coerce(level))

    def get_level(self) -> LogLevel:
        """Get current log level."""
        return LogLevel(self.logger.level)

    def is_enabled_for(self, level: Union[LogLevel, str]) -> bool:
        """Check if a message at ``level`` would be emitted."""
        return self.logger.isEnabledFor(LogLevel.coerce(level))

    def _stack(self) -> List[Dict[str, Any]]:
        if not hasattr(self._context_stack, "stack"):
            self._context_stack.stack = [{}]
        return self._context_stack.stack

    def _get_context(self) -> Dict[str, Any]:
        """Merge all context levels pushed on this thread."""
        context: Dict[str, Any] = {}
        for ctx in self._stack():
            context.update(ctx)
        return context

    @staticmethod
    def _format_message(msg: str, context: Mapping[str, Any]) -> str:
        if context:
            ctx_str = " ".join(f"{k}={v}" for k, v in context.items())
            return f"{msg} | {ctx_str}"
        return msg

    @contextmanager
    def add_context(self, **kwargs: Any) -> Iterator[None]:
        """Push temporary context for messages logged inside the block.

        Example:
            >>> with logger.add_context(category="file", item="note.md"):
            ...     logger.debug("Resolving ruling")
        """
        stack = self._stack()
        stack.append(kwargs)
        try:
            yield
        finally:
            stack.pop()

    def _log(self, level: int, msg: str, context: Dict[str, Any], **kwargs: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        combined = self._get_context()
        combined.update(context)
        self.logger.log(
            level, self._format_message(msg, combined), extra={"context": combined}, **kwargs
        )

    def debug(self, msg: str, **context: Any) -> None:
        """Log debug message with context."""
        self._log(logging.DEBUG, msg, context)

    def info(self, msg: str, **context: Any) -> None:
        """Log info message with context."""
        self._log(logging.INFO, msg, context)

    def warning(self, msg: str, **context: Any) -> None:
        """Log warning message with context."""
        self._log(logging.WARNING, msg, context)

    def error(self, msg: str, **context: Any) -> None:
        """Log error message with context."""
        self._log(logging.ERROR, msg, context)

    def exception(self, msg: str, exc: Exception, **context: Any) -> None:
        """Log exception with traceback.

        Args:
            msg: Log message
            exc: Exception to log
            **context: Additional context key-value pairs
        """
        context["exception_type"] = type(exc).__name__
        context["exception_message"] = str(exc)
        self._log(logging.ERROR, msg, context, exc_info=exc)

    def configure(self, settings: Mapping[str, Any]) -> None:
        """Apply the ``logging`` section of the Iconic configuration.

        Args:
            settings: Mapping with optional ``level`` and ``file`` keys
        """
        level = settings.get("level")
        if level:
            self.set_level(level)
        log_file = settings.get("file")
        if log_file:
            self.add_handler(self.create_file_handler(Path(log_file).expanduser()))


# Global logger instance
_global_logger: Optional[Logger] = None


def get_logger(name: str = "iconic") -> Logger:
    """Get or create the shared logger.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _global_logger
    if _global_logger is None or _global_logger.name != name:
        _global_logger = Logger(name=name)
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the shared logger instance."""
    global _global_logger
    _global_logger = logger
