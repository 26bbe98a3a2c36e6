"""
Command Parser Module

Turns a raw input line into a Command.

The tokenizer splits on runs of spaces, tabs, carriage returns and
newlines. There is no quoting or escaping.
"""

from dataclasses import dataclass, field
from typing import Optional, List

from myshell.core.state import ShellContext
from myshell.exceptions import (
    BufferOverflowError,
    InvalidArgumentError,
    ParsingError,
    ShellError,
)
from myshell.logger import get_logger
from myshell.memory.tracker import byte_length


WHITESPACE = " \t\r\n"

# Accounted size of one argv slot
POINTER_SIZE = 8


@dataclass
class Command:
    """A parsed command line. ``args[0]`` is the command name."""
    name: str
    args: List[str] = field(default_factory=list)
    argc: int = 0
    allocation: Optional[int] = None

    @property
    def builtin_args(self) -> List[str]:
        """Arguments handed to a builtin handler (name excluded)."""
        return self.args[1:]


class Tokenizer:
    """
    Splits input into whitespace-delimited words.

    Example:
        >>> Tokenizer(ctx).tokenize("ls -la /home")
        ['ls', '-la', '/home']
    """

    def __init__(self, ctx: ShellContext):
        self._ctx = ctx
        self._logger = get_logger('parser')

    @property
    def max_tokens(self) -> int:
        return self._ctx.config.limits.max_args - 1

    def tokenize(self, line: str) -> List[str]:
        """
        Split a line into tokens.

        Args:
            line: Input text

        Returns:
            Tokens in input order; empty for blank input

        Raises:
            InvalidArgumentError: line is None
            BufferOverflowError: line is too long, or holds too many tokens
                and truncation is not enabled
        """
        if line is None:
            raise InvalidArgumentError("input is None", context="tokenize_input: input is NULL")

        limits = self._ctx.config.limits
        if len(line) >= limits.max_input_size:
            raise BufferOverflowError(
                f"input of {len(line)} characters",
                context="tokenize_input: input too long"
            )

        memory = self._ctx.memory
        buffer = memory.allocate(
            limits.max_args * POINTER_SIZE, "tokenize_input: tokens array"
        )
        try:
            tokens = self._split(line)
        finally:
            memory.free(buffer)

        if len(tokens) > self.max_tokens:
            if not self._ctx.config.shell.truncate_excess_tokens:
                raise BufferOverflowError(
                    f"{len(tokens)} tokens, at most {self.max_tokens} allowed",
                    context="tokenize_input: too many tokens"
                )
            dropped = len(tokens) - self.max_tokens
            self._logger.warning(
                "Dropping excess tokens",
                context={'dropped': dropped, 'limit': self.max_tokens}
            )
            tokens = tokens[:self.max_tokens]

        return tokens

    @staticmethod
    def _split(line: str) -> List[str]:
        tokens = []
        current = []

        for char in line:
            if char in WHITESPACE:
                if current:
                    tokens.append(''.join(current))
                    current = []
                continue
            current.append(char)

        # Don't forget last token
        if current:
            tokens.append(''.join(current))

        return tokens


class Parser:
    """
    Builds Command values from input lines.

    Failures are reported through the context's diagnostics and
    parse() returns None.

    Example:
        >>> parser = Parser(ctx)
        >>> cmd = parser.parse("ls -la /home")
        >>> cmd.name, cmd.argc
        ('ls', 3)
        >>> parser.release(cmd)
    """

    def __init__(self, ctx: ShellContext):
        self._ctx = ctx
        self._tokenizer = Tokenizer(ctx)

    @property
    def tokenizer(self) -> Tokenizer:
        return self._tokenizer

    def parse(self, line: Optional[str]) -> Optional[Command]:
        """
        Parse a command line.

        Args:
            line: Command line string

        Returns:
            Command, or None when the line cannot be parsed
        """
        try:
            return self._build(line)
        except ShellError as e:
            self._ctx.diagnostics.report_exception(e)
            return None

    def _build(self, line: Optional[str]) -> Command:
        if not line:
            raise InvalidArgumentError("empty input", context="parse_command: empty input")

        if len(line) >= self._ctx.config.limits.max_input_size:
            raise BufferOverflowError(
                f"input of {len(line)} characters",
                context="parse_command: input too long"
            )

        tokens = self._tokenizer.tokenize(line)
        if not tokens:
            raise ParsingError("no tokens", context="parse_command: tokenization failed")

        memory = self._ctx.memory
        size = POINTER_SIZE * (len(tokens) + 1)
        size += sum(byte_length(token) + 1 for token in tokens)
        address = memory.allocate(size, "parse_command: command structure")

        return Command(
            name=tokens[0],
            args=list(tokens),
            argc=len(tokens),
            allocation=address,
        )

    def release(self, command: Optional[Command]) -> None:
        """Release the accounting record owned by a command."""
        if command is None or command.allocation is None:
            return
        self._ctx.memory.free(command.allocation)
        command.allocation = None
