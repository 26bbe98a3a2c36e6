"""
Diagnostics

The error reporting layer every shell component routes through:
- Tracks the last reported error kind and an error counter
- Prints one line per failure on standard error
- Records failures in the per-user log when logging is enabled
"""

import sys
from typing import Optional, TextIO

from myshell.exceptions import ErrorKind, ShellError
from myshell.logger import Logger, get_logger, parse_level
from .config_loader import LoggingConfig


class Diagnostics:
    """
    Error state and reporting for one shell instance.

    Example:
        >>> diag = Diagnostics(LoggingConfig(enabled=False))
        >>> diag.report(ErrorKind.PARSING, "parse_command: tokenization failed")
        >>> diag.last_error
        <ErrorKind.PARSING: 15>
    """

    def __init__(
        self,
        config: Optional[LoggingConfig] = None,
        stream: Optional[TextIO] = None
    ):
        self._config = config or LoggingConfig()
        self._stream = stream
        self._logger = get_logger('diagnostics')
        self.last_error = ErrorKind.NONE
        self.error_count = 0
        self._logging_enabled = self._config.enabled

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    @property
    def log_path(self) -> Optional[str]:
        return self._config.log_file if self._config.log_file else None

    @property
    def logging_enabled(self) -> bool:
        return self._logging_enabled

    @logging_enabled.setter
    def logging_enabled(self, enabled: bool) -> None:
        self._logging_enabled = enabled

    def open_log(self) -> None:
        """
        Attach the log sink described by the logging configuration.

        A log file that cannot be opened disables logging and is reported
        as an I/O failure; the shell keeps running.
        """
        if not self._config.enabled:
            return
        try:
            Logger.initialize(
                level=parse_level(self._config.level),
                log_file=self._config.log_file or None,
                console_output=self._config.console_output,
                stream=self._stream,
            )
        except OSError as e:
            self._logging_enabled = False
            self.report(ErrorKind.IO_OPERATION, f"open_log: {self._config.log_file}", e)
        except ValueError:
            self._logging_enabled = False
            self.report(ErrorKind.INVALID_ARGUMENT, f"open_log: unknown log level {self._config.level!r}")

    def close_log(self) -> None:
        Logger.reset()

    @staticmethod
    def format_message(
        kind: ErrorKind,
        context: Optional[str] = None,
        os_error: Optional[OSError] = None
    ) -> str:
        """Build the one-line description of a failure."""
        if context:
            message = f"Error in {context}: {kind.message}"
        else:
            message = f"Error: {kind.message}"

        if kind == ErrorKind.SYSTEM_CALL and os_error is not None and os_error.errno:
            message = f"{message} (errno: {os_error.errno} - {os_error.strerror})"

        return message

    def report(
        self,
        kind: ErrorKind,
        context: Optional[str] = None,
        os_error: Optional[OSError] = None
    ) -> None:
        """
        Report a failure.

        Args:
            kind: Error kind; ErrorKind.NONE is ignored
            context: Where the failure happened
            os_error: Underlying OS error for syscall failures
        """
        if kind == ErrorKind.NONE:
            return

        self.last_error = kind
        self.error_count += 1

        message = self.format_message(kind, context, os_error)
        print(message, file=self.stream)

        if self._logging_enabled:
            self._logger.error(message)

    def report_exception(self, exc: ShellError) -> None:
        """Report a raised ShellError with its own kind and context."""
        self.report(exc.kind, exc.context, exc.os_error)

    def warn(self, message: str) -> None:
        """Print a warning on standard error and log it."""
        print(f"Warning: {message}", file=self.stream)
        if self._logging_enabled:
            self._logger.warning(message)

    def fatal(self, message: str) -> None:
        """Log a failure the shell cannot continue from."""
        if self._logging_enabled:
            self._logger.fatal(message)

    def info(self, message: str) -> None:
        if self._logging_enabled:
            self._logger.info(message)

    def debug(self, message: str) -> None:
        if self._logging_enabled:
            self._logger.debug(message)

    def clear_last_error(self) -> None:
        self.last_error = ErrorKind.NONE

    def reset_error_count(self) -> None:
        self.error_count = 0
