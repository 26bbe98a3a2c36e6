"""
External Command Module

Runs commands that are not builtins:
- PATH search for executables
- Synchronous child process creation and wait
- Mapping of the child's wait status to a shell exit status
"""

import errno
import os
import subprocess
from typing import Optional, List

from myshell.core.state import ShellContext
from myshell.exceptions import ErrorKind, ProcessCreationError
from myshell.logger import get_logger


EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127
SIGNAL_EXIT_BASE = 128


def is_executable_file(path: str) -> bool:
    """True if ``path`` is a regular file with execute permission."""
    return os.path.isfile(path) and os.access(path, os.X_OK)


def status_from_returncode(returncode: int) -> int:
    """
    Convert a subprocess return code into a shell exit status.

    Negative return codes mean the child was killed by that signal.
    """
    if returncode < 0:
        return SIGNAL_EXIT_BASE + (-returncode)
    return returncode


class ExternalCommandRunner:
    """
    Resolves and runs external commands.

    Example:
        >>> runner = ExternalCommandRunner(ctx, env)
        >>> runner.resolve("sh")
        '/bin/sh'
        >>> runner.execute_external("sh", ["sh", "-c", "exit 3"])
        3
    """

    def __init__(self, ctx: ShellContext, env):
        self._ctx = ctx
        self._env = env
        self._logger = get_logger('external')

    def resolve(self, command: Optional[str]) -> Optional[str]:
        """
        Find the executable for a command name.

        A name containing "/" is checked directly and PATH is not
        searched. Otherwise the first PATH directory holding an
        executable of that name wins.

        Returns:
            Path of the executable, or None if not found
        """
        if not command:
            return None

        if '/' in command:
            return command if is_executable_file(command) else None

        dirs = self._env.path_dirs()
        if dirs is None:
            return None

        max_path = self._ctx.config.limits.max_path_size
        for directory in dirs:
            candidate = os.path.join(directory, command)
            if len(candidate) >= max_path:
                continue
            if is_executable_file(candidate):
                return candidate

        return None

    def invoke(self, path: str, argv: List[str]) -> int:
        """
        Run ``path`` with ``argv`` and wait for it to finish.

        ``argv[0]`` is passed through unchanged, so the child sees the
        name the user typed. The child inherits the process environment
        and working directory.

        Returns:
            The child's exit code, 128 + N when killed by signal N,
            126 or 127 when the program cannot be started
        """
        try:
            proc = subprocess.Popen(argv, executable=path)
        except OSError as e:
            self._ctx.diagnostics.report_exception(
                ProcessCreationError(
                    f"cannot execute {path}: {e.strerror}",
                    context=f"fork_and_exec: {path}: {e.strerror}",
                    os_error=e
                )
            )
            if e.errno == errno.ENOENT:
                return EXIT_NOT_FOUND
            return EXIT_NOT_EXECUTABLE

        self._logger.debug("Spawned child", context={'pid': proc.pid, 'path': path})
        while True:
            # Ctrl+C belongs to the child; keep waiting for it
            try:
                returncode = proc.wait()
                break
            except KeyboardInterrupt:
                continue
        status = status_from_returncode(returncode)
        self._logger.debug(
            "Child exited",
            context={'pid': proc.pid, 'status': status}
        )
        return status

    def execute_external(self, command: Optional[str], args: List[str]) -> int:
        """
        Resolve and run a command.

        Unresolved commands are reported as CommandNotFound and
        return 127 without starting a process.
        """
        if command is None:
            self._ctx.diagnostics.report(
                ErrorKind.INVALID_ARGUMENT, "execute_external: command is NULL"
            )
            return -1

        path = self.resolve(command)
        if path is None:
            self._ctx.diagnostics.report(ErrorKind.COMMAND_NOT_FOUND, command)
            return EXIT_NOT_FOUND

        return self.invoke(path, args or [command])
