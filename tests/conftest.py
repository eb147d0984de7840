"""Shared test fixtures for envship."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from envship.config import DeploySettings
from envship.core.artifact import BuildArtifact
from envship.core.errors import BuildFailedError, FetchFailedError, InvalidationFailedError
from envship.core.publisher import LocalMirrorPublisher
from envship.models.deployment import PublishReport
from envship.models.environment import EnvironmentName

CONFIG_SLOT = "assets/config/environment.json"


# ---------------------------------------------------------------------------
# Configuration documents
# ---------------------------------------------------------------------------


def document_for(env: EnvironmentName) -> dict[str, Any]:
    """A valid configuration document for ``env``."""
    short = env.short_name
    return {
        "name": env.value,
        "isProduction": env == EnvironmentName.PRODUCTION,
        "apiBaseUrl": f"https://api-{short}.example.com",
        "authBaseUrl": f"https://auth-{short}.example.com",
        "features": {
            "analytics": env == EnvironmentName.PRODUCTION,
            "logging": True,
            "debugMode": env == EnvironmentName.DEVELOPMENT,
        },
    }


@pytest.fixture
def qa_document() -> dict[str, Any]:
    """The QA document used in the loader scenario."""
    return {
        "name": "qa",
        "isProduction": False,
        "apiBaseUrl": "https://api-qa.example.com",
        "authBaseUrl": "https://auth-qa.example.com",
        "features": {
            "analytics": False,
            "logging": True,
            "debugMode": False,
        },
    }


class StaticFetcher:
    """In-memory ConfigFetcher returning a fixed body (or raising)."""

    def __init__(self, body: bytes | None = None, error: Exception | None = None) -> None:
        self.body = body
        self.error = error
        self.paths: list[str] = []

    def fetch(self, path: str) -> bytes:
        self.paths.append(path)
        if self.error is not None:
            raise self.error
        assert self.body is not None
        return self.body

    @classmethod
    def for_document(cls, document: Any) -> StaticFetcher:
        return cls(json.dumps(document).encode("utf-8"))


@pytest.fixture
def make_fetcher() -> Callable[[Any], StaticFetcher]:
    """Factory fixture: a StaticFetcher serving a JSON-encoded document."""
    return StaticFetcher.for_document


@pytest.fixture
def make_raw_fetcher() -> Callable[[bytes], StaticFetcher]:
    """Factory fixture: a StaticFetcher serving raw bytes."""
    return StaticFetcher


@pytest.fixture
def failing_fetcher() -> StaticFetcher:
    return StaticFetcher(error=FetchFailedError("connection refused"))


# ---------------------------------------------------------------------------
# Project tree and settings
# ---------------------------------------------------------------------------


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project with a built artifact and one source document per environment."""
    project = tmp_path / "project"
    dist = project / "dist" / "browser"
    (dist / "assets" / "config").mkdir(parents=True)
    (dist / "index.html").write_text("<!doctype html><app-root></app-root>")
    (dist / "main.js").write_text("console.log('main');" * 50)
    (dist / "styles.css").write_text("body{margin:0}")
    (dist / CONFIG_SLOT).write_text("{}")

    source = project / "src" / "assets" / "config"
    source.mkdir(parents=True)
    for env in EnvironmentName:
        (source / f"environment.{env.value}.json").write_text(
            json.dumps(document_for(env), indent=2)
        )
    return project


@pytest.fixture
def artifact_root(project_dir: Path) -> Path:
    return project_dir / "dist" / "browser"


@pytest.fixture
def settings(project_dir: Path) -> DeploySettings:
    """Settings resolving every environment, with production edge cached."""
    return DeploySettings(
        _env_file=None,
        unique_id="abc123",
        bucket_prefix="app-deploy",
        project_dir=project_dir,
        source_config_dir=Path("src/assets/config"),
        artifact_dir=Path("dist/browser"),
        cloudfront_distribution_id="EDFDVBD6EXAMPLE",
        cloudfront_domain="d111111abcdef8.cloudfront.net",
    )


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeBuilder:
    """Builder returning an existing tree; counts calls."""

    def __init__(self, root: Path, error: Exception | None = None) -> None:
        self.root = root
        self.error = error
        self.calls = 0

    def build(self) -> BuildArtifact:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return BuildArtifact(self.root, config_slot=CONFIG_SLOT)


class RecordingPublisher:
    """LocalMirrorPublisher that records calls and can be made to fail."""

    def __init__(self, root: Path, error: Exception | None = None) -> None:
        self.inner = LocalMirrorPublisher(root)
        self.error = error
        self.calls: list[str] = []

    def publish(self, source_root: Path, destination: str) -> PublishReport:
        self.calls.append(destination)
        if self.error is not None:
            raise self.error
        return self.inner.publish(source_root, destination)

    def destination_path(self, destination: str) -> Path:
        return self.inner.destination_path(destination)


class FakeInvalidator:
    """CacheInvalidator that records requests and can be made to fail."""

    def __init__(self, fail: bool = False, error: Exception | None = None) -> None:
        self.fail = fail
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    def invalidate(self, distribution_id: str, paths: Sequence[str]) -> str:
        self.calls.append((distribution_id, list(paths)))
        if self.error is not None:
            raise self.error
        if self.fail:
            raise InvalidationFailedError("AccessDenied: not authorized")
        return f"I{len(self.calls):04d}"


@pytest.fixture
def builder(artifact_root: Path) -> FakeBuilder:
    return FakeBuilder(artifact_root)


@pytest.fixture
def failing_builder(artifact_root: Path) -> FakeBuilder:
    return FakeBuilder(artifact_root, error=BuildFailedError("Build failed with exit code 1"))


@pytest.fixture
def publish_root(tmp_path: Path) -> Path:
    return tmp_path / "published"


@pytest.fixture
def publisher(publish_root: Path) -> RecordingPublisher:
    return RecordingPublisher(publish_root)


@pytest.fixture
def invalidator() -> FakeInvalidator:
    return FakeInvalidator()
