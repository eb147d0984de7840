"""Deploy orchestrator — one build, many configurations.

The orchestrator wires together the TargetResolver, Builder, Publisher,
CacheInvalidator and DeployMachine into the deploy procedure:

1. BUILDING      build the artifact once (the builder never sees the environment)
2. CONFIGURING   copy the environment's document into the artifact's config slot,
                 then check nothing else in the tree changed since the build
3. PUBLISHING    mirror the tree to the environment's storage destination
4. INVALIDATING  edge-cached target only; failure is a warning, not fatal
5. DONE

Any failure in steps 1-3 moves the deploy to FAILED and re-raises. There is
no rollback: a publish that fails part-way leaves the destination mixed.
Deploys of the same environment must be serialized by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from envship.config import DeploySettings
from envship.core.artifact import BuildArtifact
from envship.core.builder import Builder
from envship.core.deploy_machine import DeployMachine
from envship.core.errors import ArtifactChangedError, DeploymentError
from envship.core.invalidator import CacheInvalidator
from envship.core.publisher import Publisher
from envship.core.targets import EDGE_CACHED_ENVIRONMENT, TargetResolver, live_urls
from envship.models.deployment import (
    DeploymentTarget,
    DeployResult,
    DeployState,
)
from envship.models.environment import EnvironmentName

logger = logging.getLogger(__name__)


class DeployOrchestrator:
    """Central deploy coordinator.

    Parameters
    ----------
    settings:
        Operator settings. Uses defaults (plus environment) if not provided.
    builder:
        Produces the artifact.
    publisher:
        Mirrors the artifact to a storage destination.
    invalidator:
        CDN invalidation backend. Without one, edge-cached targets skip
        invalidation with a warning.
    resolver:
        Target resolver. Built from ``settings`` if not provided.
    url_builder:
        Returns the public URLs serving a target, for the report.
    """

    def __init__(
        self,
        settings: DeploySettings | None = None,
        *,
        builder: Builder,
        publisher: Publisher,
        invalidator: CacheInvalidator | None = None,
        resolver: TargetResolver | None = None,
        url_builder: Callable[[DeploymentTarget], list[str]] | None = None,
    ) -> None:
        self.settings = settings or DeploySettings()
        self.builder = builder
        self.publisher = publisher
        self.invalidator = invalidator
        self.resolver = resolver or TargetResolver(self.settings)
        self._url_builder = url_builder or (
            lambda target: live_urls(target, self.settings.aws_region)
        )
        self.last_result: DeployResult | None = None
        # Results of the most recent deploy_many() run only.
        self.results: list[DeployResult] = []

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def deploy(self, environment_name: str | EnvironmentName) -> DeployResult:
        """Build, configure and publish one environment.

        Raises ``InvalidEnvironmentError`` or ``TargetResolutionError``
        before any side effect, and the step's ``DeploymentError`` if the
        build, configuration or publish fails.
        """
        return self.deploy_many([environment_name])[0]

    def deploy_many(
        self, environment_names: Iterable[str | EnvironmentName]
    ) -> list[DeployResult]:
        """Build once and publish the same artifact to several environments.

        Every name is validated and every target resolved before the
        build starts. A failure aborts the environments not yet deployed.
        """
        environments = [EnvironmentName.parse(name) for name in environment_names]
        targets = [self.resolver.resolve(env) for env in environments]
        self.results = []

        results: list[DeployResult] = []
        artifact: BuildArtifact | None = None
        for target in targets:
            machine = DeployMachine(target.environment_name.value)
            if artifact is None:
                artifact = self._build(machine, target)
            else:
                machine.transition(
                    DeployState.CONFIGURING, f"reusing artifact {artifact.build_digest}"
                )
            results.append(self._configure_and_publish(machine, artifact, target))
        return results

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _build(self, machine: DeployMachine, target: DeploymentTarget) -> BuildArtifact:
        logger.info("[build] Building artifact")
        machine.transition(DeployState.BUILDING)
        try:
            artifact = self.builder.build()
        except Exception as exc:
            self._record_failure(machine, target, exc)
            raise
        machine.transition(DeployState.CONFIGURING, f"artifact {artifact.build_digest}")
        return artifact

    def _configure_and_publish(
        self,
        machine: DeployMachine,
        artifact: BuildArtifact,
        target: DeploymentTarget,
    ) -> DeployResult:
        environment = target.environment_name
        try:
            logger.info(
                "[configure] %s <- %s", environment.value, target.config_source_path
            )
            config_digest = artifact.with_config(
                self._source_path(target), environment=environment.value
            )
            if not artifact.verify_unchanged():
                raise ArtifactChangedError(
                    f"Artifact at {artifact.root} changed outside the configuration slot "
                    f"since build {artifact.build_digest}",
                    environment=environment.value,
                )

            machine.transition(DeployState.PUBLISHING, target.storage_destination)
            logger.info("[publish] %s -> %s", environment.value, target.storage_destination)
            report = self.publisher.publish(artifact.root, target.storage_destination)
        except Exception as exc:
            self._record_failure(machine, target, exc)
            raise

        invalidation = self._invalidate(machine, target)

        machine.transition(DeployState.DONE)
        result = DeployResult(
            environment=environment,
            storage_destination=target.storage_destination,
            state=machine.state,
            transitions=machine.history,
            objects_uploaded=len(report.uploaded),
            objects_deleted=len(report.deleted),
            artifact_digest=artifact.build_digest,
            config_digest=config_digest,
            edge_cached=target.is_edge_cached,
            live_urls=self._url_builder(target),
            **invalidation,
        )
        self._record(result)
        logger.info(
            "Deployment of %s to %s complete", environment.value, target.storage_destination
        )
        return result

    def _invalidate(self, machine: DeployMachine, target: DeploymentTarget) -> dict:
        """Run the best-effort invalidation step; return the result fields."""
        if not target.is_edge_cached:
            if target.environment_name == EDGE_CACHED_ENVIRONMENT:
                logger.warning(
                    "CloudFront distribution ID not configured; skipping cache invalidation"
                )
            return {}

        if self.invalidator is None:
            logger.warning(
                "No cache invalidator configured for %s; skipping cache invalidation",
                target.edge_cache_id,
            )
            return {
                "invalidation_attempted": False,
                "invalidation_succeeded": False,
                "invalidation_error": "no invalidator configured",
            }

        machine.transition(DeployState.INVALIDATING, target.edge_cache_id or "")
        paths = self.invalidation_paths()
        try:
            invalidation_id = self.invalidator.invalidate(target.edge_cache_id, paths)
        except Exception as exc:
            # Objects are already published; nothing here may fail the deploy.
            logger.warning("Cache invalidation failed (not critical): %s", exc)
            return {
                "invalidation_attempted": True,
                "invalidation_succeeded": False,
                "invalidation_error": str(exc),
            }
        return {
            "invalidation_attempted": True,
            "invalidation_succeeded": True,
            "invalidation_id": invalidation_id,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def invalidation_paths(self) -> list[str]:
        """Paths purged from the CDN: the config document and the entry page."""
        return [
            "/" + self.settings.config_document_path.lstrip("/"),
            "/" + self.settings.entry_document.lstrip("/"),
            "/",
        ]

    def _source_path(self, target: DeploymentTarget) -> Path:
        source = Path(target.config_source_path)
        if source.is_absolute():
            return source
        return self.settings.project_dir / source

    def _record_failure(
        self, machine: DeployMachine, target: DeploymentTarget, exc: Exception
    ) -> None:
        failed_step = machine.state.value
        machine.fail(str(exc))
        if isinstance(exc, DeploymentError) and exc.environment is None:
            exc.environment = target.environment_name.value
        logger.error(
            "Deployment of %s failed during %s: %s",
            target.environment_name.value,
            failed_step,
            exc,
        )
        failed = DeployResult(
            environment=target.environment_name,
            storage_destination=target.storage_destination,
            state=machine.state,
            transitions=machine.history,
            edge_cached=target.is_edge_cached,
            failed_step=failed_step,
            error=str(exc),
        )
        self._record(failed)

    def _record(self, result: DeployResult) -> None:
        self.results.append(result)
        self.last_result = result
