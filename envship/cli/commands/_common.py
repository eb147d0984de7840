"""Shared helpers for envship CLI commands."""

from __future__ import annotations

from pathlib import Path

from envship.config import DeploySettings


def load_settings(
    env_file: Path | None = None, project_dir: Path | None = None
) -> DeploySettings:
    """Build settings from the environment, an optional .env file and overrides.

    Relative paths in the settings are resolved against ``project_dir``
    by the components that use them.
    """
    overrides: dict = {}
    if project_dir is not None:
        overrides["project_dir"] = project_dir
    if env_file is not None:
        return DeploySettings(_env_file=env_file, **overrides)
    return DeploySettings(**overrides)
