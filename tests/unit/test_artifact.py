"""Unit tests for BuildArtifact and the hashing helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from envship.core.artifact import BuildArtifact
from envship.core.errors import BuildFailedError, MissingConfigSourceError
from envship.core.hasher import canonical_json_bytes, tree_digest


class TestBuildArtifact:
    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(BuildFailedError):
            BuildArtifact(tmp_path / "nope")

    def test_files_sorted_posix(self, artifact_root: Path):
        files = BuildArtifact(artifact_root).files()
        assert files == sorted(files)
        assert "assets/config/environment.json" in files
        assert "index.html" in files

    def test_with_config_replaces_slot(self, artifact_root: Path, project_dir: Path):
        artifact = BuildArtifact(artifact_root)
        source = project_dir / "src/assets/config/environment.qa.json"

        digest = artifact.with_config(source, environment="qa")

        assert artifact.slot_path.read_bytes() == source.read_bytes()
        assert digest == artifact.config_digest()
        assert digest.startswith("sha256:")

    def test_with_config_keeps_rest_of_tree(self, artifact_root: Path, project_dir: Path):
        artifact = BuildArtifact(artifact_root)
        before = artifact.build_digest
        for name in ("development", "production"):
            artifact.with_config(
                project_dir / f"src/assets/config/environment.{name}.json", environment=name
            )
            assert artifact.verify_unchanged()
            assert artifact.digest(exclude_slot=True) == before

    def test_tampering_detected(self, artifact_root: Path):
        artifact = BuildArtifact(artifact_root)
        (artifact_root / "main.js").write_text("console.log('patched')")
        assert artifact.verify_unchanged() is False

    def test_missing_source(self, artifact_root: Path, tmp_path: Path):
        artifact = BuildArtifact(artifact_root)
        original = artifact.slot_path.read_bytes()
        with pytest.raises(MissingConfigSourceError) as excinfo:
            artifact.with_config(tmp_path / "environment.staging.json", environment="staging")
        assert excinfo.value.environment == "staging"
        assert excinfo.value.step == "configure"
        assert artifact.slot_path.read_bytes() == original

    def test_stats(self, artifact_root: Path):
        stats = BuildArtifact(artifact_root).stats()
        assert stats.file_count == 4
        assert stats.total_bytes == sum(stats.file_sizes.values())
        assert stats.file_sizes["main.js"] == len("console.log('main');" * 50)


class TestHasher:
    def test_canonical_json_is_order_independent(self):
        assert canonical_json_bytes({"b": 1, "a": 2}) == canonical_json_bytes({"a": 2, "b": 1})

    def test_tree_digest_location_independent(self, tmp_path: Path):
        for name in ("one", "two"):
            (tmp_path / name / "sub").mkdir(parents=True)
            (tmp_path / name / "sub" / "f.txt").write_text("same")
        assert tree_digest(tmp_path / "one", ["sub/f.txt"]) == tree_digest(
            tmp_path / "two", ["sub/f.txt"]
        )
