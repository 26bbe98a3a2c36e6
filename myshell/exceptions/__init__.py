"""
MyShell Exception Hierarchy

All shell exceptions inherit from ShellError. Each subclass is bound to
one ErrorKind of the diagnostic taxonomy.

Architecture:
    ShellError (Base)
    ├── CommandNotFoundError
    ├── PermissionDeniedError
    ├── PathNotFoundError
    ├── PathExistsError
    ├── DirectoryNotEmptyError
    ├── InvalidArgumentError
    ├── InvalidPathError
    ├── SystemCallError
    ├── MemoryAllocationError
    ├── BufferOverflowError
    ├── IOFailureError
    ├── ProcessCreationError
    ├── SignalHandlingError
    ├── EnvironmentVariableError
    ├── ParsingError
    ├── TimeoutExpiredError
    └── ResourceLimitExceeded
"""

from .kinds import ErrorKind, ERROR_MESSAGES

from .shell_exceptions import (
    ShellError,
    CommandNotFoundError,
    PermissionDeniedError,
    PathNotFoundError,
    PathExistsError,
    DirectoryNotEmptyError,
    InvalidArgumentError,
    InvalidPathError,
    SystemCallError,
    MemoryAllocationError,
    BufferOverflowError,
    IOFailureError,
    ProcessCreationError,
    SignalHandlingError,
    EnvironmentVariableError,
    ParsingError,
    TimeoutExpiredError,
    ResourceLimitExceeded,
    from_os_error,
)

__all__ = [
    "ErrorKind",
    "ERROR_MESSAGES",
    "ShellError",
    "CommandNotFoundError",
    "PermissionDeniedError",
    "PathNotFoundError",
    "PathExistsError",
    "DirectoryNotEmptyError",
    "InvalidArgumentError",
    "InvalidPathError",
    "SystemCallError",
    "MemoryAllocationError",
    "BufferOverflowError",
    "IOFailureError",
    "ProcessCreationError",
    "SignalHandlingError",
    "EnvironmentVariableError",
    "ParsingError",
    "TimeoutExpiredError",
    "ResourceLimitExceeded",
    "from_os_error",
]
