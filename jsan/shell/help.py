"""
Help pages for the jsan shell.

Pages are plain text assembled once from the package version.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from .. import __version__


def _usage_page() -> str:
    return """\
Usage: jsan [OPTIONS] [COMMAND] [ARGS]...

Run 'jsan' with no command to start the interactive shell.
For more details run
        jsan --help
"""


def _motd_page(version: str) -> str:
    return f"""\
jsan shell -- JSAN exploration and library installation (v{version})
           -- Type 'help' for a summary of available commands.
"""


def _commands_page() -> str:
    return """\
   ------------------------------------------------------------
 | Display Information                                          |
 | ------------------------------------------------------------ |
 | command     | argument      | description                    |
 | ------------------------------------------------------------ |
 | a,author    | WORD          | about an author                |
 | d,dist      | WORD          | about a distribution           |
 | l,library   | WORD          | about a library                |
 | f,find      | SUBSTRING     | all matches from above         |
 | ------------------------------------------------------------ |
 | Download, Test, Install...                                   |
 | ------------------------------------------------------------ |
 | get         | WORD          | download                       |
 | install     | WORD          | install (implies get)          |
 | readme      | WORD          | display the README file        |
 | ------------------------------------------------------------ |
 | Other                                                        |
 | ------------------------------------------------------------ |
 | h,help,?    |               | display this menu              |
 | h,help,?    | COMMAND       | command details                |
 | conf get    | OPTION        | get a config option            |
 | conf set    | OPTION, VALUE | set a config option            |
 | quit,q,exit |               | quit the jsan shell            |
   ------------------------------------------------------------
"""


COMMAND_PAGES = {
    'author': """\
author LOGIN  (alias: a)

Show an author's name, email and website. Logins are matched
without regard to case.
""",
    'dist': """\
dist NAME  (aliases: d, distribution)

Show the latest release of a distribution, its author and the
libraries it contains. Names are matched exactly.
""",
    'library': """\
library NAME  (aliases: l, lib)

Show a library, the distribution and release it ships in, and the
other libraries of that release.
""",
    'find': """\
find SUBSTRING  (alias: f)

List authors, distributions and libraries whose names contain
SUBSTRING.
""",
    'get': """\
get NAME

Download the latest release of a distribution into the local mirror.
""",
    'install': """\
install [-f|--force] NAME

Download and install the latest release of a distribution. An
existing install is only replaced with --force.
""",
    'conf': """\
conf get OPTION
conf set OPTION VALUE

Read or change a configuration option, e.g. 'conf get transport.mirror'.
""",
    'quit': """\
quit  (aliases: q, exit)

Leave the jsan shell.
""",
}


class HelpTopics:
    """Read-only registry of help pages keyed by topic name."""

    def __init__(self, version: str = __version__):
        self.version = version
        pages = {
            'usage': _usage_page(),
            'motd': _motd_page(version),
            'commands': _commands_page(),
        }
        pages.update(COMMAND_PAGES)
        self._pages: Mapping[str, str] = MappingProxyType(pages)

    def get(self, topic: str) -> Optional[str]:
        return self._pages.get(topic)

    def __contains__(self, topic: object) -> bool:
        return topic in self._pages

    @property
    def topics(self) -> list:
        return sorted(self._pages)
