"""``envship stats [ARTIFACT_DIR]`` — artifact size report."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from envship.cli.commands._common import load_settings
from envship.core.artifact import BuildArtifact
from envship.core.errors import BuildFailedError
from envship.monitor.renderer import DeployRenderer

console = Console()


def stats_cmd(
    artifact_dir: Path = typer.Argument(
        None,
        help="Built artifact directory (defaults to the configured artifact_dir).",
    ),
    top: int = typer.Option(20, "--top", "-n", help="Number of files to list."),
) -> None:
    """Show the largest files of a built artifact with gzip estimates."""
    if artifact_dir is None:
        settings = load_settings()
        artifact_dir = settings.project_dir / settings.artifact_dir

    try:
        artifact = BuildArtifact(artifact_dir)
    except BuildFailedError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(DeployRenderer(console=console).render_stats(artifact.stats(), top=top))
