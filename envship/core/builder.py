"""Build step collaborators.

A ``Builder`` produces the environment-agnostic ``BuildArtifact``. Its
``build()`` takes no environment argument: the same output must be valid
for every environment.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from envship.core.artifact import DEFAULT_CONFIG_SLOT, BuildArtifact
from envship.core.errors import BuildFailedError

logger = logging.getLogger(__name__)


@runtime_checkable
class Builder(Protocol):
    """Protocol for build backends."""

    def build(self) -> BuildArtifact:
        """Produce the artifact or raise ``BuildFailedError``."""
        ...


class CommandBuilder:
    """Runs an external build command and wraps its output directory.

    Parameters
    ----------
    command:
        Build command line, e.g. ``npm run build -- --configuration=production``.
    project_dir:
        Working directory for the command.
    output_dir:
        Directory the command writes the static tree to (relative to
        ``project_dir`` unless absolute).
    config_slot:
        Relative path of the configuration document inside the tree.
    timeout:
        Seconds before the build is abandoned. ``None`` waits indefinitely.
    """

    def __init__(
        self,
        command: str,
        project_dir: Path,
        output_dir: Path,
        *,
        config_slot: str = DEFAULT_CONFIG_SLOT,
        timeout: float | None = None,
    ) -> None:
        self.command = command
        self.project_dir = Path(project_dir)
        self.output_dir = Path(output_dir)
        self.config_slot = config_slot
        self.timeout = timeout

    @property
    def artifact_root(self) -> Path:
        if self.output_dir.is_absolute():
            return self.output_dir
        return self.project_dir / self.output_dir

    def build(self) -> BuildArtifact:
        argv = shlex.split(self.command)
        logger.info("Building: %s (in %s)", self.command, self.project_dir)
        try:
            result = subprocess.run(
                argv,
                cwd=self.project_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise BuildFailedError(f"Build command could not run: {exc}") from exc

        if result.returncode != 0:
            tail = (result.stderr or result.stdout or "").strip().splitlines()[-20:]
            raise BuildFailedError(
                f"Build failed with exit code {result.returncode}"
                + (":\n" + "\n".join(tail) if tail else "")
            )

        if not self.artifact_root.is_dir():
            raise BuildFailedError(
                f"Build succeeded but produced no artifact at {self.artifact_root}"
            )

        logger.info("Build completed successfully: %s", self.artifact_root)
        return BuildArtifact(self.artifact_root, config_slot=self.config_slot)


class PrebuiltBuilder:
    """Wraps an existing artifact directory without running a build.

    Used for ``--skip-build`` and for CI pipelines that build in an
    earlier job and pass the tree along.
    """

    def __init__(self, artifact_root: Path, *, config_slot: str = DEFAULT_CONFIG_SLOT) -> None:
        self.artifact_root = Path(artifact_root)
        self.config_slot = config_slot

    def build(self) -> BuildArtifact:
        logger.info("Reusing prebuilt artifact at %s", self.artifact_root)
        return BuildArtifact(self.artifact_root, config_slot=self.config_slot)
