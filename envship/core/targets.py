"""Target resolution — environment name to storage destination and config source.

Naming follows the deployment scripts this tool replaces:

- bucket:  ``{bucket_prefix}-{short name}-{unique_id}`` (``app-deploy-prod-a1b2c3``)
- config:  ``{source_config_dir}/environment.{name}.json``
- CDN:     only production is edge-cached
"""

from __future__ import annotations

from collections.abc import Mapping

from envship.config import DeploySettings
from envship.core.errors import TargetResolutionError
from envship.models.deployment import DeploymentTarget
from envship.models.environment import EnvironmentName

EDGE_CACHED_ENVIRONMENT = EnvironmentName.PRODUCTION


class TargetResolver:
    """Resolves ``DeploymentTarget`` records from operator settings.

    Parameters
    ----------
    settings:
        Operator settings.
    targets:
        Explicit per-environment targets. When given, these take precedence
        over the naming convention.
    """

    def __init__(
        self,
        settings: DeploySettings,
        targets: Mapping[EnvironmentName, DeploymentTarget] | None = None,
    ) -> None:
        self._settings = settings
        self._targets = dict(targets or {})

    def resolve(self, environment: EnvironmentName) -> DeploymentTarget:
        """Return the target for ``environment``.

        Raises ``TargetResolutionError`` if no destination can be derived.
        """
        if environment in self._targets:
            return self._targets[environment]

        unique_id = self._settings.unique_id.strip()
        if not unique_id:
            raise TargetResolutionError(
                f"Cannot resolve storage destination for '{environment.value}': "
                "ENVSHIP_UNIQUE_ID is not configured",
                environment=environment.value,
            )

        is_edge = environment == EDGE_CACHED_ENVIRONMENT
        source = self._settings.source_config_dir / f"environment.{environment.value}.json"
        return DeploymentTarget(
            environment_name=environment,
            config_source_path=source.as_posix(),
            storage_destination=(
                f"{self._settings.bucket_prefix}-{environment.short_name}-{unique_id}"
            ),
            edge_cache_id=(self._settings.cloudfront_distribution_id or None) if is_edge else None,
            edge_domain=(self._settings.cloudfront_domain or None) if is_edge else None,
        )

    def resolve_all(self) -> dict[EnvironmentName, DeploymentTarget]:
        """Resolve every environment, in declaration order."""
        return {env: self.resolve(env) for env in EnvironmentName}


def live_urls(target: DeploymentTarget, region: str) -> list[str]:
    """Public URLs serving ``target``, CDN first when edge cached."""
    urls: list[str] = []
    if target.is_edge_cached and target.edge_domain:
        urls.append(f"https://{target.edge_domain}")
    urls.append(f"http://{target.storage_destination}.s3-website-{region}.amazonaws.com")
    return urls
