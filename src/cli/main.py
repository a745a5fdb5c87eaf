"""carefeed CLI entry point."""

import sys
from pathlib import Path

import click
from rich.console import Console

from cli.commands import answer, cards, dismiss, feed, holidays, people, snooze
from cli.config import load_config_model
from cli.logging_config import setup_logging

console = Console()


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ./config.yaml, ~/.carefeed/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None):
    """carefeed - small reminders to stay close to the people you care about."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    try:
        config = load_config_model(config_path)
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    level = "DEBUG" if verbose else config.logging.level
    setup_logging(json_mode=config.logging.json_mode, level=level)


cli.add_command(feed)
cli.add_command(cards)
cli.add_command(holidays)
cli.add_command(snooze)
cli.add_command(answer)
cli.add_command(dismiss)
cli.add_command(people)


if __name__ == "__main__":
    cli()
