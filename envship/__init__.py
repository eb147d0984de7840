"""envship: build once, configure at runtime, deploy to N environments.

Two cooperating pieces:
  - ConfigLoader: fetches the runtime configuration document at startup,
    validates it fail-fast and exposes read-only accessors
  - DeployOrchestrator: builds one environment-agnostic artifact, swaps in
    each environment's configuration, mirror-publishes it and invalidates
    the CDN for the edge-cached environment
"""

__version__ = "0.1.0"
__description__ = "Runtime environment configuration loader and multi-environment deployer"

from envship.core.config_loader import ConfigLoader
from envship.core.orchestrator import DeployOrchestrator
from envship.models.environment import EnvironmentConfig, EnvironmentName

__all__ = [
    "ConfigLoader",
    "DeployOrchestrator",
    "EnvironmentConfig",
    "EnvironmentName",
    "__version__",
]
