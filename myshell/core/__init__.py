"""
MyShell Core Module

Configuration, diagnostics and the per-shell state shared by every
component of the command pipeline.
"""

from .config_loader import (
    Config,
    ConfigLoader,
    ConfigValidationError,
    LimitsConfig,
    LoggingConfig,
    MemoryConfig,
    ShellConfig,
)
from .diagnostics import Diagnostics
from .state import (
    ShellContext,
    ShellState,
    create_context,
    establish_working_directory,
)

__all__ = [
    'Config',
    'ConfigLoader',
    'ConfigValidationError',
    'LimitsConfig',
    'LoggingConfig',
    'MemoryConfig',
    'ShellConfig',
    'Diagnostics',
    'ShellContext',
    'ShellState',
    'create_context',
    'establish_working_directory',
]
