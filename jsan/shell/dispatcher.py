"""
Command dispatch for the jsan shell.

The dispatcher splits a normalized line into a command word and
parameters, resolves the word through a ``CommandTable`` and calls the
handler registered for the canonical command. Every outcome, including
failures, comes back as a ``CommandResult``; nothing here prints.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Tuple

from ..exit_codes import BackendError, UserInputError
from .aliases import CommandTable

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """What happened when a command ran."""
    SHOWN = "shown"                  # Output to display
    USER_ERROR = "user_error"        # Bad input, unknown command, missing record
    BACKEND_ERROR = "backend_error"  # Index or transport failure
    QUIT = "quit"                    # Leave the shell


@dataclass(frozen=True)
class CommandResult:
    """Result of executing one shell command line."""
    outcome: Outcome
    lines: Tuple[str, ...] = ()

    @classmethod
    def show(cls, *lines: str) -> 'CommandResult':
        return cls(Outcome.SHOWN, tuple(lines))

    @classmethod
    def user_error(cls, message: str) -> 'CommandResult':
        return cls(Outcome.USER_ERROR, (message,))

    @classmethod
    def backend_error(cls, message: str) -> 'CommandResult':
        return cls(Outcome.BACKEND_ERROR, (message,))

    @classmethod
    def quit(cls) -> 'CommandResult':
        return cls(Outcome.QUIT)

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.BACKEND_ERROR


@dataclass(frozen=True)
class CommandOptions:
    """
    Options passed to every handler.

    Attributes:
        params: Positional words following the command word
        force: Allow destructive operations (overwriting an install)
    """
    params: Tuple[str, ...] = field(default_factory=tuple)
    force: bool = False


Handler = Callable[[CommandOptions], CommandResult]


class Dispatcher:
    """Resolve and run shell commands against a handler registry."""

    def __init__(self, table: CommandTable, handlers: Mapping[str, Handler]):
        self.table = table
        self.handlers = dict(handlers)

    def execute(self, line: str, force: bool = False) -> CommandResult:
        """
        Execute a single normalized command line.

        Args:
            line: Normalized line (single spaces, no leading/trailing space)
            force: Initial value of the ``force`` option

        Returns:
            CommandResult describing the outcome
        """
        words = line.split(' ')
        word, params = words[0], tuple(words[1:])

        command = self.table.resolve(word)
        if command is None:
            return CommandResult.user_error(
                f"Unknown command '{word}'. Type 'help' for a list of commands"
            )

        handler = self.handlers.get(command)
        if handler is None:
            return CommandResult.user_error(
                f"The command '{command}' is not currently implemented"
            )

        options = CommandOptions(params=params, force=force)
        try:
            return handler(options)
        except UserInputError as e:
            return CommandResult.user_error(str(e))
        except BackendError as e:
            return CommandResult.backend_error(str(e))
        except Exception as e:
            logger.debug(f"Command '{command}' failed", exc_info=True)
            return CommandResult.backend_error(f"{command}: error: {e}")
