"""
Line input for the jsan shell.

``LineReader`` is what the shell needs from a terminal: read one line,
and remember a line in history. ``read_line`` returns None at end of
input.
"""

import logging
import readline
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class LineReader(Protocol):
    def read_line(self, prompt: str) -> Optional[str]: ...

    def add_history(self, line: str) -> None: ...


class ReadlineTerminal:
    """
    Interactive terminal using GNU readline.

    Automatic history is turned off: only lines the shell hands to
    ``add_history`` are remembered. History persists in ``history_file``
    when one is given.
    """

    def __init__(self, history_file: Optional[Path] = None, history_length: int = 1000):
        self.history_file = history_file
        readline.set_auto_history(False)
        readline.set_history_length(history_length)
        if history_file is not None and history_file.exists():
            try:
                readline.read_history_file(str(history_file))
            except OSError as e:
                logger.debug(f"Could not read history {history_file}: {e}")

    def read_line(self, prompt: str) -> Optional[str]:
        try:
            return input(prompt)
        except EOFError:
            print()
            return None

    def add_history(self, line: str) -> None:
        readline.add_history(line)
        if self.history_file is not None:
            try:
                self.history_file.parent.mkdir(parents=True, exist_ok=True)
                self.history_file.touch(exist_ok=True)
                readline.append_history_file(1, str(self.history_file))
            except OSError as e:
                logger.debug(f"Could not write history {self.history_file}: {e}")


class ScriptedTerminal:
    """Feeds the shell a fixed sequence of lines, then end of input."""

    def __init__(self, lines: Iterable[str]):
        self._lines = iter(lines)
        self.history: List[str] = []
        self.prompts: List[str] = []

    def read_line(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        return next(self._lines, None)

    def add_history(self, line: str) -> None:
        self.history.append(line)
