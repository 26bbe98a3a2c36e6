"""
MyShell Process Module

External command resolution and synchronous execution.
"""

from .external import (
    EXIT_NOT_EXECUTABLE,
    EXIT_NOT_FOUND,
    ExternalCommandRunner,
    is_executable_file,
    status_from_returncode,
)

__all__ = [
    'EXIT_NOT_EXECUTABLE',
    'EXIT_NOT_FOUND',
    'ExternalCommandRunner',
    'is_executable_file',
    'status_from_returncode',
]
