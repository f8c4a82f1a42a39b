"""
Command alias tables for the jsan shell.

A ``CommandTable`` maps what the user types to a canonical command name.
Tables are immutable values; the shell takes one at construction, so a
different locale is a different table.
"""

from types import MappingProxyType
from typing import Iterator, Mapping, Optional


class CommandTable:
    """Immutable mapping of lowercase tokens to canonical command names."""

    def __init__(self, aliases: Mapping[str, str], locale: str = 'en'):
        self.locale = locale
        self._aliases = MappingProxyType({k.lower(): v for k, v in aliases.items()})

    def resolve(self, token: Optional[str]) -> Optional[str]:
        """Return the canonical command for ``token``, or None."""
        if not token:
            return None
        return self._aliases.get(token)

    @property
    def commands(self) -> frozenset:
        return frozenset(self._aliases.values())

    def __contains__(self, token: object) -> bool:
        return token in self._aliases

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)


COMMANDS_EN = CommandTable({
    'quit':         'quit',
    'exit':         'quit',
    'q':            'quit',
    'help':         'help',
    'h':            'help',
    '?':            'help',
    'a':            'author',
    'author':       'author',
    'd':            'dist',
    'dist':         'dist',
    'distribution': 'dist',
    'l':            'library',
    'lib':          'library',
    'library':      'library',
    'f':            'find',
    'find':         'find',
    'get':          'get',
    'install':      'install',
    'readme':       'readme',
    'conf':         'conf',
}, locale='en')
