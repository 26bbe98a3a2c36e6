"""
Shell State

The per-shell mutable state and the context object that carries it,
together with configuration, diagnostics and the allocation registry,
into every component.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Any, TextIO

from myshell.exceptions import ErrorKind, ShellError
from .config_loader import Config
from .diagnostics import Diagnostics


@dataclass
class ShellState:
    """State mutated by builtins and by every executed command."""
    current_dir: Optional[str] = None
    current_dir_allocation: Optional[int] = None
    env: Any = None
    last_exit_status: int = 0
    running: bool = True


@dataclass
class ShellContext:
    """
    Everything a component needs, passed explicitly.

    Example:
        >>> ctx = create_context()
        >>> ctx.memory.leak_count()
        0
    """
    config: Config
    diagnostics: Diagnostics
    memory: Any
    state: ShellState = field(default_factory=ShellState)

    def set_current_dir(self, path: str) -> None:
        """Replace the tracked working-directory string."""
        address = self.memory.strdup(path, "set_current_dir: current directory")
        self.memory.free(self.state.current_dir_allocation)
        self.state.current_dir = path
        self.state.current_dir_allocation = address

    def release_current_dir(self) -> None:
        self.memory.free(self.state.current_dir_allocation)
        self.state.current_dir_allocation = None
        self.state.current_dir = None


def create_context(
    config: Optional[Config] = None,
    stream: Optional[TextIO] = None
) -> ShellContext:
    """
    Build a context with fresh diagnostics, registry and state.

    Args:
        config: Configuration, defaults when omitted
        stream: Error stream for diagnostics, standard error when omitted
    """
    from myshell.memory.tracker import AllocationRegistry

    config = config or Config()
    diagnostics = Diagnostics(config.logging, stream=stream)
    memory = AllocationRegistry(diagnostics, config.limits, config.memory)
    return ShellContext(config=config, diagnostics=diagnostics, memory=memory)


def establish_working_directory(ctx: ShellContext) -> str:
    """
    Record the initial working directory.

    Falls back to the configured directory when the current one cannot
    be determined.

    Raises:
        SystemExit: when no working directory can be established
    """
    diag = ctx.diagnostics
    try:
        cwd = os.getcwd()
    except OSError as e:
        diag.report(ErrorKind.SYSTEM_CALL, "shell_init (syscall: getcwd)", e)
        cwd = ctx.config.shell.fallback_dir
        try:
            os.chdir(cwd)
        except OSError as chdir_error:
            diag.report(
                ErrorKind.SYSTEM_CALL,
                "shell_init: failed to change to default directory",
                chdir_error
            )
            diag.fatal(f"shell_init: no usable working directory (tried {cwd})")
            raise SystemExit(1)

    try:
        ctx.set_current_dir(cwd)
    except ShellError as e:
        diag.report_exception(e)
        diag.report(
            ErrorKind.MEMORY_ALLOCATION,
            "shell_init: critical memory allocation failure"
        )
        diag.fatal("shell_init: cannot record the working directory")
        raise SystemExit(1)

    return cwd
