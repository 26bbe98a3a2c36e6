"""
Shell Built-in Commands

Built-in commands run directly by the shell without creating a process.
Each builtin is described by a BuiltinInfo entry carrying its argument
count bounds and usage text; the table is built once per shell and never
changes afterwards.
"""

import os
import shutil
import stat
import sys
import time
from dataclasses import dataclass
from typing import Optional, Callable, List, Tuple

from myshell.core.state import ShellContext
from myshell.exceptions import (
    CommandNotFoundError,
    EnvironmentVariableError,
    ErrorKind,
    InvalidArgumentError,
    InvalidPathError,
    PathExistsError,
    ShellError,
    SystemCallError,
    from_os_error,
)
from .environment import EnvironmentStore, is_valid_name


UNBOUNDED = -1
DISPATCH_FAILED = -1

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
    "'": "'",
    'a': '\a',
    'b': '\b',
    'f': '\f',
    'v': '\v',
}


@dataclass(frozen=True)
class BuiltinInfo:
    """A builtin command and its calling convention."""
    name: str
    handler: Callable[[List[str]], int]
    min_args: int
    max_args: int
    usage: str
    description: str

    def accepts(self, argc: int) -> bool:
        if argc < self.min_args:
            return False
        return self.max_args == UNBOUNDED or argc <= self.max_args


def process_escape_sequences(text: str) -> str:
    """Translate backslash escapes; unknown escapes are kept as written."""
    out = []
    i = 0
    n = len(text)

    while i < n:
        char = text[i]
        if char == '\\' and i + 1 < n and text[i + 1] in ESCAPES:
            out.append(ESCAPES[text[i + 1]])
            i += 2
            continue
        out.append(char)
        i += 1

    return ''.join(out)


def write_output(text: str, end: str = '\n') -> None:
    """
    Write text to standard output.

    Text decoded from the OS may carry undecodable bytes as surrogate
    escapes; those are written back as the original bytes.
    """
    out = sys.stdout
    try:
        out.write(text + end)
    except UnicodeEncodeError:
        data = os.fsencode(text + end)
        buffer = getattr(out, 'buffer', None)
        if buffer is None:
            out.write(data.decode('utf-8', errors='replace'))
        else:
            out.flush()
            buffer.write(data)
            buffer.flush()


class BuiltinCommands:
    """
    Built-in shell commands.

    Example:
        >>> builtins = BuiltinCommands(ctx, env)
        >>> builtins.is_builtin("cd")
        True
        >>> builtins.execute("echo", ["hello"])
        hello
        0
    """

    def __init__(self, ctx: ShellContext, env: EnvironmentStore):
        """
        Initialize built-in commands.

        Args:
            ctx: Shell context
            env: Environment store used by cd, export, unset and env
        """
        self._ctx = ctx
        self._env = env
        self._table: Tuple[BuiltinInfo, ...] = (
            BuiltinInfo("ls", self.cmd_ls, 0, 1, "ls [directory]", "List directory contents"),
            BuiltinInfo("cat", self.cmd_cat, 1, UNBOUNDED, "cat <file1> [file2] ...", "Display file contents"),
            BuiltinInfo("cp", self.cmd_cp, 2, 2, "cp <source> <destination>", "Copy files"),
            BuiltinInfo("rm", self.cmd_rm, 1, UNBOUNDED, "rm <file1> [file2] ...", "Remove files"),
            BuiltinInfo("touch", self.cmd_touch, 1, UNBOUNDED, "touch <file1> [file2] ...", "Create empty files"),
            BuiltinInfo("date", self.cmd_date, 0, 0, "date", "Display current date and time"),
            BuiltinInfo("pwd", self.cmd_pwd, 0, 0, "pwd", "Print working directory"),
            BuiltinInfo("cd", self.cmd_cd, 0, 1, "cd [directory]", "Change directory"),
            BuiltinInfo("echo", self.cmd_echo, 0, UNBOUNDED, "echo [text] ...", "Display text"),
            BuiltinInfo("export", self.cmd_export, 1, UNBOUNDED, "export <VAR=value> ...", "Set environment variable"),
            BuiltinInfo("unset", self.cmd_unset, 1, UNBOUNDED, "unset <VAR> ...", "Remove environment variable"),
            BuiltinInfo("env", self.cmd_env, 0, 0, "env", "List shell environment variables"),
            BuiltinInfo("memstat", self.cmd_memstat, 0, 1, "memstat [leaks]", "Show memory statistics"),
            BuiltinInfo("exit", self.cmd_exit, 0, 1, "exit [code]", "Exit the shell"),
            BuiltinInfo("help", self.cmd_help, 0, 1, "help [command]", "Show help information"),
        )

    @property
    def table(self) -> Tuple[BuiltinInfo, ...]:
        return self._table

    def find(self, name: Optional[str]) -> Optional[BuiltinInfo]:
        """Look up a builtin by exact name."""
        if name is None:
            return None
        for info in self._table:
            if info.name == name:
                return info
        return None

    def is_builtin(self, name: Optional[str]) -> bool:
        """Check if a command is built-in."""
        return self.find(name) is not None

    def execute(self, name: Optional[str], args: Optional[List[str]] = None) -> int:
        """
        Execute a built-in command.

        The handler is only called when the argument count is within the
        builtin's bounds.

        Args:
            name: Command name
            args: Command arguments, command name excluded

        Returns:
            The handler's exit status, or -1 if the command could not be
            dispatched
        """
        diag = self._ctx.diagnostics

        if name is None:
            diag.report_exception(
                InvalidArgumentError("command is None", context="execute_builtin: command is NULL")
            )
            return DISPATCH_FAILED

        info = self.find(name)
        if info is None:
            diag.report_exception(CommandNotFoundError(name, context=name))
            return DISPATCH_FAILED

        args = list(args or [])
        if not info.accepts(len(args)):
            problem = "Too few arguments" if len(args) < info.min_args else "Too many arguments"
            print(f"Error: {problem}", file=diag.stream)
            print(f"Usage: {info.usage}", file=diag.stream)
            return DISPATCH_FAILED

        try:
            result = info.handler(args)
        except ShellError as e:
            diag.report_exception(e)
            result = 1

        self._ctx.state.last_exit_status = result
        return result

    def list_commands(self) -> None:
        """Print every builtin with its description."""
        print("Available built-in commands:")
        print(f"{'Command':<10} Description")
        print(f"{'-------':<10} -----------")
        for info in self._table:
            print(f"{info.name:<10} {info.description}")

    def show_help(self, name: str) -> None:
        info = self.find(name)
        if info is None:
            print(f"Unknown command: {name}")
            print("Type 'help' to see available commands.")
            return

        print(f"Command: {info.name}")
        print(f"Usage: {info.usage}")
        print(f"Description: {info.description}")

    def _fail(self, exc: ShellError) -> int:
        self._ctx.diagnostics.report_exception(exc)
        return 1

    # Command implementations

    def cmd_ls(self, args: List[str]) -> int:
        """List directory contents."""
        target = args[0] if args else '.'

        try:
            names = sorted(
                entry.name for entry in os.scandir(target)
                if not entry.name.startswith('.')
            )
        except OSError as e:
            return self._fail(from_os_error(e, f"ls: {target}", "opendir"))

        for name in ['.', '..'] + names:
            full_path = os.path.join(target, name)
            try:
                mode = os.stat(full_path).st_mode
            except OSError:
                write_output(f"?---------  {name}")
                continue

            suffix = '/' if stat.S_ISDIR(mode) else ''
            write_output(f"{stat.filemode(mode)}  {name}{suffix}")

        return 0

    def cmd_cat(self, args: List[str]) -> int:
        """Display file contents."""
        overall = 0

        for path in args:
            try:
                st = os.stat(path)
            except OSError as e:
                overall = self._fail(from_os_error(e, f"cat: {path}", "stat"))
                continue

            if stat.S_ISDIR(st.st_mode):
                overall = self._fail(InvalidPathError("is a directory", context=f"cat: {path}: is a directory"))
                continue
            if not stat.S_ISREG(st.st_mode):
                overall = self._fail(InvalidPathError("not a regular file", context=f"cat: {path}: not a regular file"))
                continue

            try:
                with open(path, 'r', encoding='utf-8', errors='replace') as f:
                    shutil.copyfileobj(f, sys.stdout)
            except OSError as e:
                overall = self._fail(from_os_error(e, f"cat: {path}", "read"))

        sys.stdout.flush()
        return overall

    def cmd_cp(self, args: List[str]) -> int:
        """Copy a regular file."""
        source, destination = args

        try:
            source_stat = os.stat(source)
        except OSError as e:
            return self._fail(from_os_error(e, f"cp: {source}", "stat"))

        if not stat.S_ISREG(source_stat.st_mode):
            if stat.S_ISDIR(source_stat.st_mode):
                return self._fail(InvalidPathError(
                    "source is a directory",
                    context="cp: source is a directory (use cp -r for directories)"
                ))
            return self._fail(InvalidPathError("not a regular file", context="cp: source is not a regular file"))

        if os.path.isdir(destination):
            return self._fail(PathExistsError(
                "destination is a directory", context="cp: destination is a directory"
            ))

        if os.path.exists(destination) and os.path.samefile(source, destination):
            return self._fail(InvalidArgumentError(
                "same file", context="cp: source and destination are the same file"
            ))

        try:
            shutil.copyfile(source, destination)
            shutil.copymode(source, destination)
        except OSError as e:
            return self._fail(from_os_error(e, f"cp: {destination}", "write"))

        return 0

    def cmd_rm(self, args: List[str]) -> int:
        """Remove files."""
        overall = 0

        for path in args:
            try:
                if stat.S_ISDIR(os.lstat(path).st_mode):
                    overall = self._fail(InvalidPathError(
                        "is a directory",
                        context=f"rm: {path}: cannot remove directory (use rmdir for directories)"
                    ))
                    continue
                os.unlink(path)
            except OSError as e:
                overall = self._fail(from_os_error(e, f"rm: {path}", "unlink"))

        return overall

    def cmd_touch(self, args: List[str]) -> int:
        """Create empty files or update their timestamps."""
        overall = 0

        for path in args:
            try:
                if os.path.exists(path):
                    os.utime(path, None)
                else:
                    fd = os.open(path, os.O_CREAT | os.O_WRONLY, 0o644)
                    os.close(fd)
            except OSError as e:
                overall = self._fail(from_os_error(e, f"touch: {path}", "open"))

        return overall

    def cmd_date(self, args: List[str]) -> int:
        """Display the current local date and time."""
        print(time.strftime("%a %b %d %H:%M:%S %Z %Y", time.localtime()))
        return 0

    def cmd_pwd(self, args: List[str]) -> int:
        """Print working directory."""
        try:
            write_output(os.getcwd())
        except OSError as e:
            return self._fail(SystemCallError("getcwd", context="builtin_pwd", os_error=e))
        return 0

    def cmd_cd(self, args: List[str]) -> int:
        """Change directory; with no argument, go to HOME."""
        if args:
            target = args[0]
            if len(target) >= self._ctx.config.limits.max_path_size:
                return self._fail(InvalidPathError("path too long", context="builtin_cd: path too long"))
        else:
            target = self._env.get("HOME")
            if target is None:
                return self._fail(EnvironmentVariableError(
                    "HOME not set",
                    context="builtin_cd: HOME environment variable not set"
                ))

        try:
            os.chdir(target)
        except OSError as e:
            return self._fail(from_os_error(e, f"builtin_cd: {target}", "chdir"))

        try:
            new_cwd = os.getcwd()
        except OSError as e:
            return self._fail(SystemCallError("getcwd", context="builtin_cd: after chdir", os_error=e))

        if not self._env.set("PWD", new_cwd):
            return self._fail(EnvironmentVariableError(
                "cannot update PWD", context="builtin_cd: failed to update PWD"
            ))

        self._ctx.set_current_dir(new_cwd)
        return 0

    def cmd_echo(self, args: List[str]) -> int:
        """Echo arguments; -n suppresses the trailing newline."""
        newline = True
        if args and args[0] == '-n':
            newline = False
            args = args[1:]

        text = ' '.join(process_escape_sequences(arg) for arg in args)
        write_output(text, end="\n" if newline else "")
        return 0

    def cmd_export(self, args: List[str]) -> int:
        """Set environment variables from NAME=value arguments."""
        overall = 0

        for arg in args:
            name, sep, value = arg.partition('=')

            if not name:
                self._ctx.diagnostics.report(ErrorKind.INVALID_ARGUMENT, "export: empty variable name")
                overall = 1
                continue

            if not is_valid_name(name):
                self._ctx.diagnostics.report(
                    ErrorKind.INVALID_ARGUMENT, f"export: {name}: invalid variable name"
                )
                overall = 1
                continue

            if not sep:
                # env.set reports its own failures
                if not self._env.exists(name) and not self._env.set(name, ""):
                    overall = 1
                continue

            if not self._env.set(name, value):
                overall = 1

        return overall

    def cmd_unset(self, args: List[str]) -> int:
        """Remove environment variables."""
        overall = 0
        for name in args:
            if not self._env.unset(name):
                overall = 1
        return overall

    def cmd_env(self, args: List[str]) -> int:
        """List the shell's own variables in the order they were set."""
        for name, value in self._env.items():
            write_output(f"{name}={value}")
        return 0

    def cmd_memstat(self, args: List[str]) -> int:
        """Show memory statistics, or the leak list with "leaks"."""
        memory = self._ctx.memory
        if not memory.tracking_enabled:
            print("Error: Memory tracking is disabled", file=self._ctx.diagnostics.stream)
            return 1

        if args and args[0] == 'leaks':
            print(memory.format_leaks())
        else:
            print(memory.format_stats())
        return 0

    def cmd_exit(self, args: List[str]) -> int:
        """Exit the shell with an optional status code."""
        code = 0

        if args:
            try:
                code = int(args[0], 10)
            except ValueError:
                code = -1
            if not 0 <= code <= 255:
                print(
                    "Error: Invalid exit code. Must be a number between 0 and 255.",
                    file=self._ctx.diagnostics.stream
                )
                return 1

        print(f"Exiting shell with code {code}...")
        self._ctx.state.running = False
        self._ctx.state.last_exit_status = code
        return code

    def cmd_help(self, args: List[str]) -> int:
        """Display help information."""
        if args:
            self.show_help(args[0])
        else:
            self.list_commands()
            print("\nType 'help <command>' for detailed information about a specific command.")
        return 0
