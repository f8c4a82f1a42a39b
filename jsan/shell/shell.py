"""
Main shell implementation for jsan.

Reads command lines, normalizes them, hands them to the dispatcher and
shows the results. One failing command never ends the session; only
end of input or the ``quit`` command do.
"""

import logging
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import ConfigStore, config_path_value, configure_logging, load_config
from ..index.backend import IndexBackend, SQLiteIndex
from ..index.connection import get_db_path
from ..infra.installer import Installer, TransportInstaller
from ..render import console as default_console, show_lines
from .aliases import COMMANDS_EN, CommandTable
from .dispatcher import CommandResult, Dispatcher, Outcome
from .handlers import ShellCommands
from .help import HelpTopics
from .terminal import LineReader, ReadlineTerminal

logger = logging.getLogger("jsan")

_WHITESPACE = re.compile(r'\s+')


def normalize_line(line: str) -> str:
    """Collapse runs of whitespace to one space and trim the ends."""
    return _WHITESPACE.sub(' ', line).strip(' ')


class ShellState(Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


class JSANShell:
    """
    Interactive shell for the JSAN index.

    Args:
        index: Index backend
        terminal: Line input with history
        table: Command alias table
        help_topics: Help page registry
        installer: Optional get/install hook
        config_store: Optional configuration store for ``conf``
        prompt: Prompt string
        console: Console to print results on
        err_console: Console for backend failure warnings (stderr)
    """

    def __init__(
        self,
        index: IndexBackend,
        terminal: LineReader,
        table: CommandTable = COMMANDS_EN,
        help_topics: Optional[HelpTopics] = None,
        installer: Optional[Installer] = None,
        config_store: Optional[ConfigStore] = None,
        prompt: str = 'jsan> ',
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        self.index = index
        self.terminal = terminal
        self.prompt = prompt
        self.console = console or default_console
        self.err_console = err_console or Console(stderr=True)
        self.help_topics = help_topics or HelpTopics()

        commands = ShellCommands(
            index=index,
            help_topics=self.help_topics,
            installer=installer,
            config_store=config_store,
        )
        self.dispatcher = Dispatcher(table, commands.handlers())
        self.state = ShellState.RUNNING

    @classmethod
    def from_config(
        cls,
        config: Optional[dict] = None,
        terminal: Optional[LineReader] = None,
        db_path: Optional[Path] = None,
    ) -> 'JSANShell':
        """
        Build a shell from configuration.

        Raises:
            FatalError: If the index cannot be opened
        """
        if config is None:
            config = load_config()
        configure_logging(config)

        index = SQLiteIndex(db_path=db_path or get_db_path(config))
        if terminal is None:
            terminal = ReadlineTerminal(
                history_file=config_path_value(config, 'shell', 'history_file')
            )

        return cls(
            index=index,
            terminal=terminal,
            installer=TransportInstaller.from_config(config),
            config_store=ConfigStore(config),
            prompt=config['shell'].get('prompt', 'jsan> '),
        )

    def run(self) -> None:
        """Run the read-eval loop until end of input or ``quit``."""
        self.state = ShellState.RUNNING
        self.report(CommandResult.show(self.help_topics.get('motd') or ''))

        while self.state is ShellState.RUNNING:
            line = self.terminal.read_line(self.prompt)
            if line is None:
                self.state = ShellState.TERMINATED
                break

            line = normalize_line(line)
            if not line:
                continue

            result = self.execute(line)
            self.report(result)
            if result.ok:
                self.terminal.add_history(line)

    def execute(self, line: str, force: bool = False) -> CommandResult:
        """Execute one normalized command line."""
        return self.dispatcher.execute(line, force=force)

    def report(self, result: CommandResult) -> None:
        """Show a command result to the user."""
        if result.outcome is Outcome.QUIT:
            self.state = ShellState.TERMINATED
            sys.exit(0)
        elif result.outcome is Outcome.BACKEND_ERROR:
            for message in result.lines:
                # Shown whatever the configured log level
                self.err_console.print(
                    f"WARNING: {message}", markup=False, highlight=False, emoji=False, soft_wrap=True
                )
                logger.debug(f"Backend failure: {message}")
        else:
            show_lines(result.lines, self.console)

    def close(self) -> None:
        close = getattr(self.index, 'close', None)
        if close is not None:
            close()

