"""``envship targets`` — show where each environment deploys to."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from envship.cli.commands._common import load_settings
from envship.core.errors import DeploymentError
from envship.core.targets import TargetResolver
from envship.monitor.renderer import DeployRenderer

console = Console()


def targets_cmd(
    env_file: Path = typer.Option(
        None,
        "--env-file",
        help="Settings file (defaults to .env in the working directory).",
    ),
) -> None:
    """Resolve and print the deployment target of every environment."""
    settings = load_settings(env_file)
    try:
        targets = TargetResolver(settings).resolve_all()
    except DeploymentError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(DeployRenderer(console=console).render_targets(targets))
