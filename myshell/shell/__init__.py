"""
MyShell Shell Module

The command pipeline: parsing, variable expansion, builtin dispatch
and the interactive loop.
"""

from .parser import Command, Parser, Tokenizer
from .environment import EnvironmentStore, is_valid_name
from .builtins import BuiltinCommands, BuiltinInfo, process_escape_sequences
from .shell import Shell, create_shell

__all__ = [
    'Command',
    'Parser',
    'Tokenizer',
    'EnvironmentStore',
    'is_valid_name',
    'BuiltinCommands',
    'BuiltinInfo',
    'process_escape_sequences',
    'Shell',
    'create_shell',
]
