"""
Shell Exceptions

Exceptions raised inside shell components. Every exception carries the
ErrorKind it belongs to so that component entry points can hand it to the
diagnostic layer unchanged.
"""

import errno
from typing import Optional, Any

from .kinds import ErrorKind


class ShellError(Exception):
    """
    Base exception for all shell errors.

    Attributes:
        message: Human-readable error description
        kind: ErrorKind used when the error is reported
        error_code: Numeric error code (the kind's value)
        context: Where the error happened, e.g. "parse_command"
        os_error: Underlying OSError for syscall failures
    """

    kind = ErrorKind.NONE

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        os_error: Optional[OSError] = None,
        details: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or message
        self.os_error = os_error
        self.details = details or {}
        self.error_code = int(self.kind)

    def __str__(self) -> str:
        return f"[Error {self.error_code}] {self.message}"


class CommandNotFoundError(ShellError):
    """No builtin or executable matches the command name."""
    kind = ErrorKind.COMMAND_NOT_FOUND


class PermissionDeniedError(ShellError):
    kind = ErrorKind.PERMISSION_DENIED


class PathNotFoundError(ShellError):
    """A file or directory does not exist."""
    kind = ErrorKind.FILE_NOT_FOUND


class PathExistsError(ShellError):
    kind = ErrorKind.FILE_EXISTS


class DirectoryNotEmptyError(ShellError):
    kind = ErrorKind.DIRECTORY_NOT_EMPTY


class InvalidArgumentError(ShellError):
    """
    An operation received a missing or malformed argument.

    Example:
        >>> raise InvalidArgumentError("input is None", context="parse_command")
    """
    kind = ErrorKind.INVALID_ARGUMENT


class InvalidPathError(ShellError):
    kind = ErrorKind.INVALID_PATH


class SystemCallError(ShellError):
    """
    An OS-level call failed.

    The errno text is appended to the reported message when the
    underlying OSError is attached.
    """
    kind = ErrorKind.SYSTEM_CALL

    def __init__(
        self,
        syscall: str,
        context: Optional[str] = None,
        os_error: Optional[OSError] = None
    ) -> None:
        ctx = f"{context} (syscall: {syscall})" if context else f"syscall: {syscall}"
        super().__init__(
            message=f"{syscall} failed",
            context=ctx,
            os_error=os_error,
            details={'syscall': syscall}
        )
        self.syscall = syscall


class MemoryAllocationError(ShellError):
    """The allocation registry could not account for a request."""
    kind = ErrorKind.MEMORY_ALLOCATION

    def __init__(self, context: str, size: int) -> None:
        super().__init__(
            message=f"cannot allocate {size} bytes",
            context=f"{context} (requested size: {size} bytes)",
            details={'size': size}
        )
        self.size = size


class BufferOverflowError(ShellError):
    """Input exceeded a fixed-capacity bound."""
    kind = ErrorKind.BUFFER_OVERFLOW


class IOFailureError(ShellError):
    kind = ErrorKind.IO_OPERATION


class ProcessCreationError(ShellError):
    """A child process could not be started."""
    kind = ErrorKind.PROCESS_CREATION


class SignalHandlingError(ShellError):
    kind = ErrorKind.SIGNAL_HANDLING


class EnvironmentVariableError(ShellError):
    """An environment variable could not be read or written."""
    kind = ErrorKind.ENVIRONMENT


class ParsingError(ShellError):
    kind = ErrorKind.PARSING


class TimeoutExpiredError(ShellError):
    kind = ErrorKind.TIMEOUT


class ResourceLimitExceeded(ShellError):
    """
    A request crossed a configured ceiling.

    Example:
        >>> raise ResourceLimitExceeded("expand_variables", requested=20_000_000, limit=10_485_760)
    """
    kind = ErrorKind.RESOURCE_LIMIT

    def __init__(self, context: str, requested: int, limit: int) -> None:
        super().__init__(
            message=f"requested {requested} bytes exceeds limit of {limit}",
            context=context,
            details={'requested': requested, 'limit': limit}
        )
        self.requested = requested
        self.limit = limit


_ERRNO_MAP = {
    errno.ENOENT: PathNotFoundError,
    errno.EACCES: PermissionDeniedError,
    errno.EPERM: PermissionDeniedError,
    errno.EEXIST: PathExistsError,
    errno.ENOTEMPTY: DirectoryNotEmptyError,
    errno.ENOTDIR: InvalidPathError,
    errno.EISDIR: InvalidPathError,
    errno.ENAMETOOLONG: InvalidPathError,
    errno.EIO: IOFailureError,
}


def from_os_error(exc: OSError, context: str, syscall: Optional[str] = None) -> ShellError:
    """
    Translate an OSError into the matching ShellError.

    Args:
        exc: The error raised by the os call
        context: Where it happened
        syscall: Name of the failing call, used for the fallback kind

    Returns:
        ShellError subclass instance carrying the original error
    """
    cls = _ERRNO_MAP.get(exc.errno)
    if cls is None:
        return SystemCallError(syscall or "os", context=context, os_error=exc)
    return cls(exc.strerror or str(exc), context=context, os_error=exc)
