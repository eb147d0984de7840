"""Main Typer application — imports and registers all CLI commands.

Entry point: ``envship`` (configured via pyproject.toml console_scripts).

Commands: deploy, check-config, targets, stats.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from envship.cli.commands._common import load_settings
from envship.cli.commands.check_config import check_config_cmd
from envship.cli.commands.deploy import deploy_cmd
from envship.cli.commands.stats import stats_cmd
from envship.cli.commands.targets import targets_cmd

app = typer.Typer(
    name="envship",
    help="envship: build once, configure at runtime, deploy to every environment.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="deploy", help="Build, configure and publish to one or more environments.")(deploy_cmd)
app.command(name="check-config", help="Validate environment configuration documents.")(check_config_cmd)
app.command(name="targets", help="Show the resolved deployment targets.")(targets_cmd)
app.command(name="stats", help="Show artifact file sizes.")(stats_cmd)


def configure_logging(level: str) -> None:
    """Route library logging through a Rich handler on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to ENVSHIP_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(log_level or load_settings().log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
