"""
MyShell Shell Module

The interactive command-line shell.
"""

import os
from typing import Optional, List, TextIO

from .parser import Parser, Command
from .builtins import BuiltinCommands
from .environment import EnvironmentStore
from myshell.core.config_loader import Config
from myshell.core.state import (
    ShellContext,
    create_context,
    establish_working_directory,
)
from myshell.exceptions import from_os_error
from myshell.logger import get_logger
from myshell.process.external import ExternalCommandRunner


class Shell:
    """
    MyShell Interactive Shell.

    Provides:
    - Command parsing
    - Variable expansion
    - Built-in commands
    - External command execution
    - Script execution

    Example:
        >>> shell = Shell()
        >>> shell.execute_line("echo hello")
        hello
        0
        >>> shell.shutdown()
    """

    def __init__(
        self,
        ctx: Optional[ShellContext] = None,
        config: Optional[Config] = None,
        stream: Optional[TextIO] = None
    ):
        self._ctx = ctx or create_context(config, stream)
        self._logger = get_logger('shell')
        self._closed = False

        self._ctx.diagnostics.open_log()
        self._ctx.diagnostics.info("Shell initialization started")

        establish_working_directory(self._ctx)

        self._env = EnvironmentStore(self._ctx)
        self._env.initialize()
        self._ctx.state.env = self._env

        self._parser = Parser(self._ctx)
        self._builtins = BuiltinCommands(self._ctx, self._env)
        self._runner = ExternalCommandRunner(self._ctx, self._env)

        self._ctx.diagnostics.info("Shell initialized")

    @property
    def context(self) -> ShellContext:
        return self._ctx

    @property
    def env(self) -> EnvironmentStore:
        return self._env

    @property
    def parser(self) -> Parser:
        return self._parser

    @property
    def builtins(self) -> BuiltinCommands:
        return self._builtins

    @property
    def cwd(self) -> Optional[str]:
        return self._ctx.state.current_dir

    @property
    def running(self) -> bool:
        return self._ctx.state.running

    @property
    def last_exit_status(self) -> int:
        return self._ctx.state.last_exit_status

    def run(self) -> int:
        """
        Run the interactive shell.

        This is the main REPL loop.

        Returns:
            Last exit status
        """
        print(self._ctx.config.shell.banner)
        print("Type 'exit' to quit.")
        print("Press Ctrl+C to interrupt, Ctrl+D to exit.\n")

        while self._ctx.state.running:
            try:
                line = input(self.prompt())
            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print()
                continue

            try:
                self.execute_line(line)
            except Exception as e:
                self._logger.error(f"Shell error: {e}")
                print(f"myshell: error: {e}", file=self._ctx.diagnostics.stream)
                self._ctx.state.last_exit_status = 1

        print("Shell exited.")
        return self._ctx.state.last_exit_status

    def prompt(self) -> str:
        """Generate the shell prompt, [user@host dir]$ or # for root."""
        user = os.environ.get('USER') or 'user'
        hostname = os.environ.get('HOSTNAME') or 'localhost'

        current = self._ctx.state.current_dir
        if not current:
            display = 'unknown'
        elif current == '/':
            display = '/'
        else:
            display = os.path.basename(current.rstrip('/')) or current

        prompt_char = '#' if os.geteuid() == 0 else '$'
        return f"[{user}@{hostname} {display}]{prompt_char} "

    def execute_line(self, line: Optional[str]) -> int:
        """
        Execute a command line.

        Blank lines are skipped and leave the last exit status untouched.

        Args:
            line: Command line string

        Returns:
            Exit status of the command
        """
        state = self._ctx.state

        if line is None or not line.strip():
            return state.last_exit_status

        cmd = self._parser.parse(line)
        if cmd is None:
            state.last_exit_status = 1
            return 1

        try:
            args = self._expand_args(cmd)
            if args is None:
                state.last_exit_status = 1
                return 1

            status = self.execute_command(args[0], args)
        finally:
            self._parser.release(cmd)

        state.last_exit_status = status
        return status

    def _expand_args(self, cmd: Command) -> Optional[List[str]]:
        expanded = []
        for arg in cmd.args:
            value = self._env.expand(arg)
            if value is None:
                return None
            expanded.append(value)
        return expanded

    def execute_command(self, name: str, args: List[str]) -> int:
        """
        Dispatch a command to a builtin or an external program.

        Args:
            name: Command name
            args: Full argument vector, ``args[0]`` is the name

        Returns:
            Exit status; dispatch failures become 1
        """
        if self._builtins.is_builtin(name):
            status = self._builtins.execute(name, args[1:])
        else:
            status = self._runner.execute_external(name, args)

        if status < 0:
            status = 1
        return status

    def run_script(self, script: str) -> int:
        """
        Run a script (multiple commands).

        Lines starting with "#" are comments. Execution stops early
        when a command exits the shell.

        Args:
            script: Script content

        Returns:
            Last exit code
        """
        for line in script.split('\n'):
            if not self._ctx.state.running:
                break
            line = line.strip()
            if line and not line.startswith('#'):
                self.execute_line(line)

        return self._ctx.state.last_exit_status

    def run_file(self, path: str) -> int:
        """
        Run the script stored at ``path``.

        Bytes that are not valid UTF-8 are kept as surrogate escapes and
        passed through to commands unchanged.
        """
        try:
            with open(path, 'r', encoding='utf-8', errors='surrogateescape') as f:
                script = f.read()
        except OSError as e:
            self._ctx.diagnostics.report_exception(from_os_error(e, f"run_file: {path}", "open"))
            self._ctx.state.last_exit_status = 1
            return 1

        return self.run_script(script)

    def shutdown(self) -> int:
        """
        Release shell resources.

        Returns:
            Number of leaked allocations found
        """
        if self._closed:
            return 0
        self._closed = True

        diag = self._ctx.diagnostics
        memory = self._ctx.memory
        diag.info("Starting shell cleanup")

        self._ctx.release_current_dir()
        self._env.cleanup()
        self._ctx.state.env = None

        if memory.tracking_enabled and self._ctx.config.memory.report_stats_on_exit:
            print(memory.format_stats())

        leaks = memory.shutdown()
        diag.info("Shell cleanup finished")
        diag.close_log()
        return leaks


def create_shell(config: Optional[Config] = None, stream: Optional[TextIO] = None) -> Shell:
    """Factory function to create a shell."""
    return Shell(config=config, stream=stream)
