"""
Error Kinds

The error taxonomy shared by every shell component. Each kind maps to a
fixed human-readable message used when a failure is reported.
"""

from enum import IntEnum


class ErrorKind(IntEnum):
    """Error kinds, numbered in reporting order."""
    NONE = 0
    COMMAND_NOT_FOUND = 1
    PERMISSION_DENIED = 2
    FILE_NOT_FOUND = 3
    FILE_EXISTS = 4
    DIRECTORY_NOT_EMPTY = 5
    INVALID_ARGUMENT = 6
    INVALID_PATH = 7
    SYSTEM_CALL = 8
    MEMORY_ALLOCATION = 9
    BUFFER_OVERFLOW = 10
    IO_OPERATION = 11
    PROCESS_CREATION = 12
    SIGNAL_HANDLING = 13
    ENVIRONMENT = 14
    PARSING = 15
    TIMEOUT = 16  # reserved
    RESOURCE_LIMIT = 17

    @property
    def message(self) -> str:
        return ERROR_MESSAGES.get(self, "Unknown error")


ERROR_MESSAGES = {
    ErrorKind.NONE: "No error",
    ErrorKind.COMMAND_NOT_FOUND: "Command not found",
    ErrorKind.PERMISSION_DENIED: "Permission denied",
    ErrorKind.FILE_NOT_FOUND: "File or directory not found",
    ErrorKind.FILE_EXISTS: "File already exists",
    ErrorKind.DIRECTORY_NOT_EMPTY: "Directory not empty",
    ErrorKind.INVALID_ARGUMENT: "Invalid argument",
    ErrorKind.INVALID_PATH: "Invalid path",
    ErrorKind.SYSTEM_CALL: "System call failed",
    ErrorKind.MEMORY_ALLOCATION: "Memory allocation failed",
    ErrorKind.BUFFER_OVERFLOW: "Buffer overflow detected",
    ErrorKind.IO_OPERATION: "Input/output operation failed",
    ErrorKind.PROCESS_CREATION: "Process creation failed",
    ErrorKind.SIGNAL_HANDLING: "Signal handling error",
    ErrorKind.ENVIRONMENT: "Environment variable error",
    ErrorKind.PARSING: "Command parsing error",
    ErrorKind.TIMEOUT: "Operation timeout",
    ErrorKind.RESOURCE_LIMIT: "Resource limit exceeded",
}
