"""
Index management commands for jsan.
"""

import json
import sqlite3
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich import box

from ..config import load_config
from ..exit_codes import exit_with_code, get_exit_code_for_exception
from ..index import get_database_info, get_db_path, load_index_file

console = Console()


@click.group("index")
def index_cmd():
    """Manage the local JSAN index database."""
    pass


@index_cmd.command("import")
@click.argument("dump", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--db", "db_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Index database to write instead of the configured one")
def import_index(dump, db_path):
    """Replace the index with the contents of a JSON dump.

    DUMP: JSON file with 'authors' and 'distributions' lists

    Examples:

    \b
        jsan index import openjsan-index.json
        jsan index import dump.json --db /tmp/index.db
    """
    config = load_config()
    target = db_path or get_db_path(config)

    try:
        counts = load_index_file(dump, db_path=target)
    except (ValueError, KeyError) as e:
        exit_with_code(get_exit_code_for_exception(e), f"Invalid index dump {dump}: {e}")
    except sqlite3.Error as e:
        exit_with_code(get_exit_code_for_exception(e), f"Cannot write index {target}: {e}")

    click.echo(
        f"Imported {counts['authors']} authors, {counts['distributions']} distributions, "
        f"{counts['releases']} releases and {counts['libraries']} libraries into {target}"
    )


@index_cmd.command("info")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--db", "db_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Index database to inspect instead of the configured one")
def index_info(as_json, db_path):
    """Show the index location and record counts."""
    info = get_database_info(load_config(), db_path=db_path)

    if as_json:
        click.echo(json.dumps(info))
        return

    if not info['exists']:
        console.print(f"[yellow]No index at {info['path']}.[/yellow] Run 'jsan index import' first.")
        return

    table = Table(title="JSAN Index", box=box.ROUNDED, show_header=True, header_style="bold magenta")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Path", info['path'])
    table.add_row("Size", info['size_human'])
    table.add_row("Schema", str(info['schema_version']))
    for key in ('authors', 'distributions', 'releases', 'libraries'):
        table.add_row(key.capitalize(), str(info[key]))
    console.print(table)
