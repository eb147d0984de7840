"""Application startup gate.

The hosting application does no work until its configuration is loaded.
``bootstrap`` is the single suspension point: it blocks on ``load()`` and
only then constructs the application, injecting the configuration.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from envship.core.config_loader import ConfigLoader
from envship.models.environment import EnvironmentConfig

T = TypeVar("T")


def bootstrap(loader: ConfigLoader, app_factory: Callable[[EnvironmentConfig], T]) -> T:
    """Load configuration, then build the application from it.

    If the load fails the factory is never called and the
    ``ConfigurationError`` propagates to whoever launched the host.
    """
    config = loader.load()
    return app_factory(config)
