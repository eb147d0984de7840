"""Error taxonomy for the configuration loader and the deploy orchestrator.

Configuration errors are fatal to whoever hosts the loader; there is no
degraded mode. Deployment errors raised before publishing leave no side
effects; errors during publishing leave the destination in whatever state
the mirror reached.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Configuration loader
# ---------------------------------------------------------------------------


class ConfigurationError(RuntimeError):
    """Base class for every configuration load failure.

    Must not be caught and ignored by the hosting application; the
    host should refuse to start.
    """


class FetchFailedError(ConfigurationError):
    """The configuration document could not be fetched."""


class FetchTimeoutError(FetchFailedError):
    """The configuration fetch did not complete within the bounded wait."""


class ParseFailedError(ConfigurationError):
    """The fetched body is not a JSON object."""


class MissingFieldError(ConfigurationError):
    """A required field is absent or null."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required configuration field: {field}")
        self.field = field


class InvalidFieldTypeError(ConfigurationError):
    """A field is present but has the wrong type or value (no coercion)."""

    def __init__(self, field: str, detail: str, value: object) -> None:
        super().__init__(
            f"Invalid configuration field '{field}': {detail} (got {value!r})"
        )
        self.field = field
        self.value = value


class MalformedUrlError(ConfigurationError):
    """A URL field does not parse as an absolute URL."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Invalid URL in configuration field '{field}': {value!r}")
        self.field = field
        self.value = value


class InconsistentEnvironmentError(ConfigurationError):
    """``isProduction`` disagrees with ``name``."""


class NotYetLoadedError(ConfigurationError):
    """An accessor was used before a successful ``load()``."""


# ---------------------------------------------------------------------------
# Deployment orchestrator
# ---------------------------------------------------------------------------


class DeploymentError(RuntimeError):
    """Base class for deployment failures.

    ``step`` names the deploy step that failed (``validate``, ``resolve``,
    ``build``, ``configure``, ``publish``, ``invalidate``).
    """

    step: str = "deploy"

    def __init__(self, message: str, *, environment: str | None = None) -> None:
        super().__init__(message)
        self.environment = environment


class InvalidEnvironmentError(DeploymentError):
    """The requested environment is not in the closed set."""

    step = "validate"

    def __init__(self, value: str, allowed: list[str]) -> None:
        super().__init__(
            f"Invalid environment '{value}'. Must be one of: {', '.join(allowed)}",
        )
        self.value = value


class TargetResolutionError(DeploymentError):
    """Operator configuration does not resolve a target for the environment."""

    step = "resolve"


class BuildFailedError(DeploymentError):
    """The external build tool failed or produced no artifact tree."""

    step = "build"


class MissingConfigSourceError(DeploymentError):
    """The environment's source configuration document does not exist."""

    step = "configure"

    def __init__(self, environment: str, expected_path: str) -> None:
        super().__init__(
            f"Missing environment configuration for '{environment}': "
            f"expected {expected_path}",
            environment=environment,
        )
        self.expected_path = expected_path


class ArtifactChangedError(DeploymentError):
    """The artifact tree changed outside its configuration slot after the build."""

    step = "configure"


class PublishFailedError(DeploymentError):
    """The mirror publish failed, possibly after some objects were written."""

    step = "publish"


class InvalidationFailedError(DeploymentError):
    """The CDN rejected or failed the invalidation request.

    Raised by invalidators only; the orchestrator reports it as a warning.
    """

    step = "invalidate"


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


class InvalidTransitionError(RuntimeError):
    """Raised when a requested deploy state transition is not valid."""
