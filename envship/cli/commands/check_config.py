"""``envship check-config [FILE...] [--url URL...]`` — validate configuration documents.

Applies exactly the rules the runtime loader applies, so a document that
passes here will not halt the application at startup. Files are checked
offline; ``--url`` fetches the live document from a deployed site the way
the application itself would.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from envship.cli.commands._common import load_settings
from envship.core.config_loader import ConfigLoader, parse_document, validate_document
from envship.core.errors import ConfigurationError
from envship.core.fetchers import HttpConfigFetcher
from envship.monitor.renderer import DeployRenderer

console = Console()


def check_file(path: Path, *, strict_environment: bool = True) -> str | None:
    """Return None if ``path`` is a valid document, else the error message."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        return f"cannot read file: {exc}"
    try:
        validate_document(parse_document(raw), strict_environment=strict_environment)
    except ConfigurationError as exc:
        return str(exc)
    return None


def check_url(base_url: str, *, timeout: float, strict_environment: bool = True) -> str | None:
    """Load the live document served under ``base_url``; None if it is valid."""
    loader = ConfigLoader(
        HttpConfigFetcher(base_url, timeout=timeout),
        strict_environment=strict_environment,
    )
    try:
        loader.load()
    except ConfigurationError as exc:
        return str(exc)
    return None


def check_config_cmd(
    files: list[Path] = typer.Argument(
        None,
        help="Configuration documents to validate.",
    ),
    urls: list[str] = typer.Option(
        None,
        "--url",
        help="Deployed site whose live configuration should be checked (repeatable).",
    ),
    lenient: bool = typer.Option(
        False,
        "--lenient",
        help="Allow isProduction to disagree with name.",
    ),
) -> None:
    """Validate environment configuration documents."""
    files = files or []
    urls = urls or []
    if not files and not urls:
        console.print("[bold red]Error:[/bold red] give at least one FILE or --url.")
        raise typer.Exit(code=2)

    strict = not lenient
    checks = [(str(path), check_file(path, strict_environment=strict)) for path in files]
    if urls:
        timeout = load_settings().config_fetch_timeout_seconds
        checks.extend(
            (url, check_url(url, timeout=timeout, strict_environment=strict)) for url in urls
        )
    DeployRenderer(console=console).print_config_checks(checks)

    invalid = sum(1 for _, error in checks if error is not None)
    if invalid:
        console.print(f"[bold red]{invalid} of {len(checks)} document(s) invalid.[/bold red]")
        raise typer.Exit(code=1)
