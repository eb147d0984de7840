"""Rich terminal renderer for deploy results, targets and artifact stats.

Color scheme
------------
- green     : DONE / invalidation succeeded
- red       : FAILED
- yellow    : in progress, skipped or failed invalidation (warning only)
- dim       : PENDING
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from envship.core.artifact import ArtifactStats
from envship.models.deployment import DeploymentTarget, DeployResult, DeployState
from envship.models.environment import EnvironmentName

# Typical gzip ratio for minified JavaScript bundles.
GZIP_ESTIMATE_RATIO = 0.27


# ---------------------------------------------------------------------------
# State -> Rich style mapping
# ---------------------------------------------------------------------------

_STATE_STYLES: dict[DeployState, str] = {
    DeployState.PENDING: "dim",
    DeployState.BUILDING: "bold yellow",
    DeployState.CONFIGURING: "bold yellow",
    DeployState.PUBLISHING: "bold yellow",
    DeployState.INVALIDATING: "bold yellow",
    DeployState.DONE: "bold green",
    DeployState.FAILED: "bold red",
}


def format_bytes(size: int) -> str:
    """Human-readable byte count (B, KB, MB)."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


class DeployRenderer:
    """Renders deploy outcomes as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Deploy results
    # ------------------------------------------------------------------

    def render_result(self, result: DeployResult) -> Panel:
        """Render a DeployResult as a Panel with its transition table."""
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=4, justify="right")
        table.add_column("Transition", min_width=28)
        table.add_column("At", width=10)
        table.add_column("Detail")

        for i, transition in enumerate(result.transitions, start=1):
            style = _STATE_STYLES.get(transition.to_state, "")
            table.add_row(
                str(i),
                f"{transition.from_state.value} -> [{style}]{transition.to_state.value}[/{style}]",
                transition.at.strftime("%H:%M:%S"),
                transition.detail or "[dim]-[/dim]",
            )

        lines: list[str] = [
            f"[bold]Environment:[/bold]  {result.environment.value}",
            f"[bold]Destination:[/bold]  {result.storage_destination}",
        ]
        if result.succeeded:
            lines.append(
                f"[bold]Objects:[/bold]      {result.objects_uploaded} uploaded, "
                f"{result.objects_deleted} deleted"
            )
            lines.append(f"[bold]Cache:[/bold]        {self._invalidation_status(result)}")
            for url in result.live_urls:
                lines.append(f"[bold]Live at:[/bold]      [green]{url}[/green]")
        else:
            lines.append(
                f"[bold red]Failed during {result.failed_step}:[/bold red] {result.error}"
            )

        title = (
            "[bold green]Deployment Successful[/bold green]"
            if result.succeeded
            else "[bold red]Deployment Failed[/bold red]"
        )
        return Panel(
            Group(table, Text(""), Text.from_markup("\n".join(lines))),
            title=title,
            border_style="green" if result.succeeded else "red",
            padding=(1, 2),
        )

    @staticmethod
    def _invalidation_status(result: DeployResult) -> str:
        if not result.edge_cached:
            return "[dim]not edge cached[/dim]"
        if result.invalidation_succeeded:
            return f"[green]invalidated ({result.invalidation_id})[/green]"
        if not result.invalidation_attempted:
            return f"[yellow]invalidation skipped: {result.invalidation_error}[/yellow]"
        return f"[yellow]invalidation failed (not critical): {result.invalidation_error}[/yellow]"

    def print_result(self, result: DeployResult) -> None:
        self.console.print(self.render_result(result))

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    def render_targets(self, targets: Mapping[EnvironmentName, DeploymentTarget]) -> Table:
        table = Table(title="Deployment Targets", header_style="bold cyan")
        table.add_column("Environment", style="cyan")
        table.add_column("Destination")
        table.add_column("Config source")
        table.add_column("Edge cache", justify="center")

        for env, target in targets.items():
            edge = (
                f"[green]{target.edge_cache_id}[/green]"
                if target.is_edge_cached
                else "[dim]-[/dim]"
            )
            table.add_row(env.value, target.storage_destination, target.config_source_path, edge)
        return table

    # ------------------------------------------------------------------
    # Artifact stats
    # ------------------------------------------------------------------

    def render_stats(self, stats: ArtifactStats, *, top: int = 20) -> Table:
        """Largest files first; ``.js`` files get a gzip estimate."""
        table = Table(title="Artifact Sizes", header_style="bold cyan")
        table.add_column("File")
        table.add_column("Size", justify="right")
        table.add_column("Gzip (est.)", justify="right", style="dim")

        ranked = sorted(stats.file_sizes.items(), key=lambda kv: kv[1], reverse=True)
        for rel, size in ranked[:top]:
            gzip = (
                format_bytes(round(size * GZIP_ESTIMATE_RATIO))
                if rel.endswith(".js")
                else "-"
            )
            table.add_row(rel, format_bytes(size), gzip)

        table.caption = (
            f"{stats.file_count} files, {format_bytes(stats.total_bytes)} total"
        )
        return table

    # ------------------------------------------------------------------
    # Config checks
    # ------------------------------------------------------------------

    def print_config_checks(self, checks: Iterable[tuple[str, str | None]]) -> None:
        """Print ``(path, error-or-None)`` pairs."""
        for path, error in checks:
            if error is None:
                self.console.print(f"[green]OK[/green]      {path}")
            else:
                self.console.print(f"[bold red]INVALID[/bold red] {path}: {error}")
