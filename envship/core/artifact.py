"""Build artifact — one environment-agnostic static tree per deployment run.

The tree is treated as immutable apart from a single mutable slot: the
configuration document at a fixed relative path. ``with_config`` is the
only write this module performs, and ``verify_unchanged`` proves nothing
else in the tree was touched since the build.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from envship.core.errors import BuildFailedError, MissingConfigSourceError
from envship.core.hasher import file_sha256, tree_digest

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_SLOT = "assets/config/environment.json"


class ArtifactStats(BaseModel):
    """Size summary of an artifact tree."""

    model_config = ConfigDict(frozen=True)

    file_count: int
    total_bytes: int
    file_sizes: dict[str, int]  # relative path -> bytes


class BuildArtifact:
    """A built static file tree with one configuration slot.

    Parameters
    ----------
    root:
        Directory containing the built tree. Must exist.
    config_slot:
        Relative path of the configuration document inside the tree.
    """

    def __init__(self, root: Path, config_slot: str = DEFAULT_CONFIG_SLOT) -> None:
        self.root = Path(root)
        if not self.root.is_dir():
            raise BuildFailedError(f"Artifact directory does not exist: {self.root}")
        self.config_slot = config_slot.lstrip("/")
        self.build_digest = self.digest(exclude_slot=True)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def files(self) -> list[str]:
        """Return the sorted relative POSIX paths of every file in the tree."""
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file()
        )

    def digest(self, *, exclude_slot: bool = False) -> str:
        """Digest of the tree, optionally ignoring the configuration slot."""
        paths = self.files()
        if exclude_slot:
            paths = [p for p in paths if p != self.config_slot]
        return tree_digest(self.root, paths)

    def config_digest(self) -> str:
        """Digest of the document currently in the slot ("" if empty)."""
        slot = self.slot_path
        if not slot.is_file():
            return ""
        return f"sha256:{file_sha256(slot)}"

    @property
    def slot_path(self) -> Path:
        return self.root / self.config_slot

    def verify_unchanged(self) -> bool:
        """True if nothing outside the configuration slot changed since build."""
        return self.digest(exclude_slot=True) == self.build_digest

    def stats(self) -> ArtifactStats:
        sizes = {rel: (self.root / rel).stat().st_size for rel in self.files()}
        return ArtifactStats(
            file_count=len(sizes),
            total_bytes=sum(sizes.values()),
            file_sizes=sizes,
        )

    # ------------------------------------------------------------------
    # Configuration substitution
    # ------------------------------------------------------------------

    def with_config(self, source: Path, *, environment: str) -> str:
        """Copy ``source`` into the configuration slot, overwriting it.

        Returns the digest of the substituted document. Raises
        ``MissingConfigSourceError`` if ``source`` does not exist; there is
        no fallback document.
        """
        source = Path(source)
        if not source.is_file():
            raise MissingConfigSourceError(environment, str(source))

        slot = self.slot_path
        slot.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, slot)
        logger.info("Configuration slot %s <- %s", self.config_slot, source)
        return self.config_digest()
