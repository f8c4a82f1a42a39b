"""
Shell command for jsan.
"""

import sys
from pathlib import Path

import click

from ..config import load_config
from ..exit_codes import CommandError, INTERRUPTED


@click.command()
@click.option("--script", type=click.File("r"), default=None,
              help="Read commands from FILE ('-' for stdin) instead of the terminal")
@click.option("--db", "db_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Index database to use instead of the configured one")
def shell_handler(script, db_path):
    """Launch the interactive JSAN shell.

    Commands:
      author LOGIN         - About an author
      dist NAME            - About a distribution
      library NAME         - About a library
      find SUBSTRING       - Search authors, distributions, libraries
      get NAME             - Download a distribution
      install NAME         - Install a distribution
      conf get|set         - Read or change configuration
      help [COMMAND]       - Show help
      quit                 - Exit the shell (or Ctrl+D)

    Examples:
        jsan shell

        jsan> author adamk
        jsan> dist Display.Swap
        jsan> install Display.Swap
    """
    from ..shell.shell import JSANShell
    from ..shell.terminal import ScriptedTerminal

    config = load_config()
    terminal = ScriptedTerminal(script.read().splitlines()) if script else None

    try:
        shell = JSANShell.from_config(config, terminal=terminal, db_path=db_path)
    except CommandError as e:
        click.echo(f"Error starting shell: {e}", err=True)
        sys.exit(e.exit_code)

    try:
        shell.run()
    except KeyboardInterrupt:
        click.echo("\nShell closed.")
        sys.exit(INTERRUPTED)
    finally:
        shell.close()
