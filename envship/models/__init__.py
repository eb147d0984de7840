"""envship data models — all Pydantic v2, all frozen (immutable)."""

from envship.models.deployment import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    DeploymentTarget,
    DeployResult,
    DeployState,
    PublishReport,
    StateTransition,
)
from envship.models.environment import (
    REQUIRED_FIELDS,
    URL_FIELDS,
    EnvironmentConfig,
    EnvironmentName,
    FeatureFlags,
)

__all__ = [
    # environment
    "EnvironmentName",
    "EnvironmentConfig",
    "FeatureFlags",
    "REQUIRED_FIELDS",
    "URL_FIELDS",
    # deployment
    "DeploymentTarget",
    "DeployState",
    "DeployResult",
    "PublishReport",
    "StateTransition",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
]
