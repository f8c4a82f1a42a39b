#!/usr/bin/env python3

import click

from jsan import __version__
from jsan.commands.shell import shell_handler
from jsan.commands.index import index_cmd
from jsan.commands.config import config_cmd


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="jsan")
@click.pass_context
def cli(ctx):
    """jsan - JavaScript Archive Network shell.

    Explore authors, distributions and libraries in the JSAN index and
    install them. Runs the interactive shell when no command is given.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(shell_handler)


cli.add_command(shell_handler, name='shell')
cli.add_command(index_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
