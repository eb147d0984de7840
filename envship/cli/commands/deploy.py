"""``envship deploy ENVIRONMENT...`` — build once, configure, publish.

Builds the artifact (unless ``--skip-build``), swaps in each environment's
configuration document, mirror-publishes to the environment's bucket
(or a local directory with ``--local-root``) and, for production,
invalidates the CloudFront cache.

Exit code 0 when every environment published; a failed invalidation is
reported as a warning and does not change the exit code.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from envship.cli.commands._common import load_settings
from envship.core.aws_clients import make_client
from envship.core.builder import CommandBuilder, PrebuiltBuilder
from envship.core.errors import DeploymentError
from envship.core.invalidator import CloudFrontInvalidator
from envship.core.orchestrator import DeployOrchestrator
from envship.core.publisher import LocalMirrorPublisher, S3MirrorPublisher
from envship.models.environment import EnvironmentName
from envship.monitor.renderer import DeployRenderer

console = Console()


def deploy_cmd(
    environments: list[str] = typer.Argument(
        ...,
        help="Target environment(s): dev, qa, staging, prod (or full names).",
    ),
    project_dir: Path = typer.Option(
        None,
        "--project-dir",
        "-C",
        help="Project root containing the source tree and build output.",
    ),
    skip_build: bool = typer.Option(
        False,
        "--skip-build",
        help="Reuse the existing artifact directory instead of building.",
    ),
    local_root: Path = typer.Option(
        None,
        "--local-root",
        help="Publish into {local_root}/{destination} instead of S3.",
    ),
    env_file: Path = typer.Option(
        None,
        "--env-file",
        help="Settings file (defaults to .env in the working directory).",
    ),
) -> None:
    """Deploy one build to one or more environments."""
    renderer = DeployRenderer(console=console)

    try:
        parsed = [EnvironmentName.parse(name) for name in environments]
    except DeploymentError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    settings = load_settings(env_file, project_dir)
    config_slot = settings.config_document_path

    if skip_build:
        builder = PrebuiltBuilder(
            settings.project_dir / settings.artifact_dir, config_slot=config_slot
        )
    else:
        builder = CommandBuilder(
            settings.build_command,
            settings.project_dir,
            settings.artifact_dir,
            config_slot=config_slot,
        )

    if local_root is not None:
        local = LocalMirrorPublisher(local_root)
        orchestrator = DeployOrchestrator(
            settings,
            builder=builder,
            publisher=local,
            url_builder=lambda t: [
                local.destination_path(t.storage_destination).resolve().as_uri()
            ],
        )
    else:
        orchestrator = DeployOrchestrator(
            settings,
            builder=builder,
            publisher=S3MirrorPublisher(
                make_client("s3", settings),
                no_cache_keys=[settings.config_document_path, settings.entry_document],
            ),
            invalidator=(
                CloudFrontInvalidator(make_client("cloudfront", settings))
                if settings.has_edge_cache
                else None
            ),
        )

    names = ", ".join(env.value for env in parsed)
    console.print(f"[bold cyan]Deploying {names}...[/bold cyan]")

    try:
        results = orchestrator.deploy_many(parsed)
    except DeploymentError as exc:
        if orchestrator.last_result is not None:
            renderer.print_result(orchestrator.last_result)
        console.print(
            f"[bold red]Deployment failed[/bold red] at step '{exc.step}' "
            f"for {exc.environment or names}: {exc}"
        )
        raise typer.Exit(code=1)

    for result in results:
        renderer.print_result(result)
        if not result.edge_cached or result.invalidation_succeeded:
            continue
        if result.invalidation_attempted:
            console.print(
                "[yellow]Warning: CDN invalidation failed; cached copies expire with their TTL.[/yellow]"
            )
        else:
            console.print(
                f"[yellow]Warning: CDN invalidation skipped ({result.invalidation_error}); "
                "cached copies expire with their TTL.[/yellow]"
            )
