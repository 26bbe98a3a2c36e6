"""
MyShell - A Line-Oriented Command Interpreter

Reads command lines, expands $VAR references, and runs builtins or
external programs found on PATH. Every failure is reported through a
single diagnostics layer, and buffers owned by the shell are accounted
so leaks can be reported at exit.
"""

__version__ = "1.0.0"

from .shell.shell import Shell, create_shell

__all__ = [
    'Shell',
    'create_shell',
]
