import json

import click

from ..config import load_config, get_config_path


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
@click.option("--path", is_flag=True, help="Show the config file path being used")
def show_config(pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON.
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    if path:
        click.echo(json.dumps({"config_path": str(get_config_path())}))
        return

    config = load_config()

    if pretty:
        click.echo(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        click.echo(json.dumps(config, ensure_ascii=False))
