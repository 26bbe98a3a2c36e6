"""
MyShell Logger Module

Logging for the shell built on the standard logging package:
- One logger per subsystem under the "myshell" hierarchy
- Timestamped, append-only log file output
- Optional mirror of log lines to standard error
- Line format: [YYYY-MM-DD HH:MM:SS] LEVEL: message
"""

import logging
import sys
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional, Any, List, TextIO


ROOT_LOGGER_NAME = 'myshell'


class LogLevel(IntEnum):
    """Log level enumeration with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    FATAL = 50


logging.addLevelName(LogLevel.FATAL, 'FATAL')


def parse_level(name: str) -> int:
    """Convert a level name such as "info" into a LogLevel value."""
    try:
        return LogLevel[name.upper()]
    except KeyError:
        raise ValueError(f"unknown log level: {name}") from None


class LogFormatter(logging.Formatter):
    """
    Formats records as "[YYYY-MM-DD HH:MM:SS] LEVEL: message".

    Structured context passed through the ``context`` extra is appended
    as key=value pairs in braces.
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime(
            '%Y-%m-%d %H:%M:%S'
        )
        message = f"[{timestamp}] {record.levelname}: {record.getMessage()}"

        context = getattr(record, 'context', None)
        if context:
            context_str = " ".join(f"{k}={v}" for k, v in context.items())
            message = f"{message} {{{context_str}}}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class Logger:
    """
    Subsystem logger for the shell.

    Instances are shared per subsystem name. Output handlers are
    installed once with initialize() and removed with reset().

    Example:
        >>> Logger.initialize(level=LogLevel.INFO, log_file='/tmp/myshell.log')
        >>> log = Logger('parser')
        >>> log.warning("Dropping excess tokens", context={'dropped': 3})
    """

    _instances: dict[str, 'Logger'] = {}
    _handlers: List[logging.Handler] = []
    _initialized = False

    def __new__(cls, subsystem: str = 'shell') -> 'Logger':
        """Get or create a logger for a subsystem."""
        if subsystem not in cls._instances:
            instance = super().__new__(cls)
            instance._subsystem = subsystem
            instance._logger = logging.getLogger(f'{ROOT_LOGGER_NAME}.{subsystem}')
            cls._instances[subsystem] = instance
        return cls._instances[subsystem]

    @property
    def subsystem(self) -> str:
        return self._subsystem

    @classmethod
    def initialize(
        cls,
        level: int = LogLevel.INFO,
        log_file: Optional[str] = None,
        console_output: bool = False,
        stream: Optional[TextIO] = None
    ) -> None:
        """
        Install the output handlers.

        Calling initialize() again replaces the previous handlers.

        Args:
            level: Minimum log level to capture
            log_file: Append-only log file path, or None for no file
            console_output: Mirror log lines to ``stream``
            stream: Console stream, standard error by default
        """
        cls.reset()

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(level)

        if log_file:
            file_path = Path(log_file).expanduser()
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(file_path, mode='a', encoding='utf-8', errors='backslashreplace')
            file_handler.setLevel(level)
            file_handler.setFormatter(LogFormatter())
            cls._add_handler(root_logger, file_handler)

        if console_output:
            console_handler = logging.StreamHandler(stream or sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(LogFormatter())
            cls._add_handler(root_logger, console_handler)

        cls._initialized = True

    @classmethod
    def _add_handler(cls, root_logger: logging.Logger, handler: logging.Handler) -> None:
        root_logger.addHandler(handler)
        cls._handlers.append(handler)

    @classmethod
    def reset(cls) -> None:
        """Remove and close every handler installed by initialize()."""
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in cls._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        cls._handlers = []
        cls._initialized = False

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized

    def _log(
        self,
        level: int,
        message: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Internal logging method."""
        extra = {
            'subsystem': self._subsystem,
            'context': context or {},
        }
        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.INFO, message, context)

    def warning(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.WARNING, message, context)

    def error(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self._log(LogLevel.ERROR, message, context)

    def fatal(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log a message for a condition that ends the process."""
        self._log(LogLevel.FATAL, message, context)


def get_logger(subsystem: str) -> Logger:
    """
    Get a logger for the specified subsystem.

    Args:
        subsystem: Name of the subsystem (e.g., 'parser', 'environment')

    Returns:
        Logger instance for the subsystem
    """
    return Logger(subsystem)


logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())
