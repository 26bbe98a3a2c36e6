"""
Environment Store Module

Shell variables layered over the process environment:
- Writes are mirrored into os.environ so spawned commands inherit them
- Reads fall back to os.environ for names not stored locally
- $NAME and ${NAME} expansion
- PATH splitting for executable lookup
"""

import os
from dataclasses import dataclass
from typing import Optional, List, Tuple

from myshell.core.state import ShellContext
from myshell.exceptions import (
    EnvironmentVariableError,
    InvalidArgumentError,
    ShellError,
)
from myshell.memory.tracker import byte_length


NAME_CHARS = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_"
)


@dataclass
class EnvEntry:
    """A locally stored variable and its accounting record."""
    value: str
    allocation: Optional[int] = None


def is_valid_name(name: str) -> bool:
    """Names start with a letter or underscore, then letters, digits or underscores."""
    if not name:
        return False
    if not (name[0].isascii() and (name[0].isalpha() or name[0] == '_')):
        return False
    return all(c in NAME_CHARS for c in name)


class EnvironmentStore:
    """
    Name to value store overlaying os.environ.

    Example:
        >>> env = EnvironmentStore(ctx)
        >>> env.set("GREETING", "hello")
        True
        >>> env.expand("$GREETING, ${GREETING}!")
        'hello, hello!'
    """

    def __init__(self, ctx: ShellContext):
        self._ctx = ctx
        self._vars: dict[str, EnvEntry] = {}

    def __len__(self) -> int:
        return len(self._vars)

    def __contains__(self, name: str) -> bool:
        return self.exists(name)

    def initialize(self) -> None:
        """Seed HOME, PATH and PWD from the process environment."""
        shell_config = self._ctx.config.shell
        self.set("HOME", os.environ.get("HOME") or shell_config.default_home)
        self.set("PATH", os.environ.get("PATH") or shell_config.default_path)
        if self._ctx.state.current_dir:
            self.set("PWD", self._ctx.state.current_dir)

    def get(self, name: Optional[str]) -> Optional[str]:
        """
        Look up a variable.

        Returns:
            The local value, else the process environment value, else None
        """
        if name is None:
            return None

        entry = self._vars.get(name)
        if entry is not None:
            return entry.value

        return os.environ.get(name)

    def set(self, name: Optional[str], value: Optional[str]) -> bool:
        """
        Create or update a variable and export it to the process environment.

        Returns:
            True on success, False when the variable cannot be set
        """
        try:
            self._set(name, value)
            return True
        except ShellError as e:
            self._ctx.diagnostics.report_exception(e)
            return False

    def _set(self, name: Optional[str], value: Optional[str]) -> None:
        if name is None or value is None:
            raise InvalidArgumentError(
                "name or value is None", context="set_env_var: missing name or value"
            )

        if not name or '=' in name or '\0' in name or '\0' in value:
            raise EnvironmentVariableError(
                f"cannot export {name!r}",
                context=f"set_env_var: invalid variable {name!r}"
            )

        memory = self._ctx.memory
        size = byte_length(name) + byte_length(value) + 2
        entry = self._vars.get(name)

        if entry is not None:
            address = memory.reallocate(entry.allocation, size, "set_env_var: update value")
        else:
            address = memory.allocate(size, "set_env_var: new variable")

        try:
            os.environ[name] = value
        except (ValueError, OSError) as e:
            if entry is None:
                memory.free(address)
            raise EnvironmentVariableError(
                f"cannot export {name!r}: {e}",
                context=f"set_env_var: {name}"
            )

        if entry is not None:
            entry.value = value
            entry.allocation = address
        else:
            self._vars[name] = EnvEntry(value=value, allocation=address)

    def unset(self, name: Optional[str]) -> bool:
        """
        Remove a variable from the store and the process environment.

        Removing a variable that does not exist succeeds.
        """
        if name is None:
            self._ctx.diagnostics.report_exception(
                InvalidArgumentError("name is None", context="unset_env_var: name is NULL")
            )
            return False

        entry = self._vars.pop(name, None)
        if entry is not None:
            self._ctx.memory.free(entry.allocation)

        os.environ.pop(name, None)
        return True

    def exists(self, name: Optional[str]) -> bool:
        if name is None:
            return False
        return name in self._vars or name in os.environ

    def items(self) -> List[Tuple[str, str]]:
        """Locally stored variables in insertion order."""
        return [(name, entry.value) for name, entry in self._vars.items()]

    def path_dirs(self) -> Optional[List[str]]:
        """
        Split PATH into its directories.

        Returns:
            Directories in PATH order, or None when PATH is unset or empty
        """
        path = self.get("PATH")
        if not path:
            return None

        dirs = [d for d in path.split(':') if d]
        return dirs or None

    def expand(self, text: Optional[str]) -> Optional[str]:
        """
        Substitute $NAME and ${NAME} references.

        Unset names expand to the empty string. A "$" not followed by a
        name is kept as-is.

        Returns:
            The expanded text, or None on failure
        """
        if text is None:
            self._ctx.diagnostics.report_exception(
                InvalidArgumentError("input is None", context="expand_variables: input is NULL")
            )
            return None

        memory = self._ctx.memory
        address = None
        try:
            capacity = max(len(text) * 2, 1)
            address = memory.allocate(capacity, "expand_variables: result buffer")
            out: List[str] = []
            used = 0
            i = 0
            n = len(text)

            while i < n:
                char = text[i]
                if char != '$':
                    piece = char
                    i += 1
                else:
                    i += 1
                    name, i = self._scan_name(text, i)
                    if name:
                        piece = self.get(name) or ''
                    else:
                        piece = '$'

                if not piece:
                    continue

                needed = used + byte_length(piece) + 1
                if needed > capacity:
                    while needed > capacity:
                        capacity *= 2
                    address = memory.reallocate(
                        address, capacity, "expand_variables: expand buffer"
                    )
                out.append(piece)
                used = needed - 1

            return ''.join(out)
        except ShellError as e:
            self._ctx.diagnostics.report_exception(e)
            return None
        finally:
            memory.free(address)

    @staticmethod
    def _scan_name(text: str, i: int) -> Tuple[str, int]:
        """
        Read a variable name starting just after a "$".

        Returns:
            (name, index of the first character after the reference)
        """
        n = len(text)

        if i < n and text[i] == '{':
            end = text.find('}', i + 1)
            if end == -1:
                return text[i + 1:], n
            return text[i + 1:end], end + 1

        start = i
        while i < n and text[i] in NAME_CHARS:
            i += 1
        return text[start:i], i

    def cleanup(self) -> int:
        """
        Release every stored variable's record.

        The process environment is left as it is.

        Returns:
            Number of variables released
        """
        count = len(self._vars)
        for entry in self._vars.values():
            self._ctx.memory.free(entry.allocation)
        self._vars.clear()
        self._ctx.diagnostics.info(f"Cleaned up {count} environment variables")
        return count
