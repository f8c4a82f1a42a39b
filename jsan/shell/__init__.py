"""
jsan shell - Interactive command shell for the JSAN index.

Provides alias resolution, command dispatch and the read-eval loop.
"""

from .aliases import CommandTable, COMMANDS_EN
from .dispatcher import CommandOptions, CommandResult, Dispatcher, Outcome
from .shell import JSANShell, ShellState, normalize_line

__all__ = [
    'CommandTable',
    'COMMANDS_EN',
    'CommandOptions',
    'CommandResult',
    'Dispatcher',
    'Outcome',
    'JSANShell',
    'ShellState',
    'normalize_line',
]
