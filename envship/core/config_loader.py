"""Runtime configuration loader — fetch once, validate fail-fast, read-only after.

The hosting application constructs one ``ConfigLoader``, calls ``load()``
before doing anything else, and hands the resulting ``EnvironmentConfig``
(or the loader itself) to whatever needs it. There is no module-level
instance: tests build their own loaders with fixture fetchers.

Validation rules
----------------
1. Every required field is present and non-null.
2. No type coercion: ``"true"`` is not a boolean.
3. ``name`` is one of the closed set of environments.
4. ``apiBaseUrl`` and ``authBaseUrl`` parse as absolute URLs.
5. ``isProduction`` agrees with ``name`` (unless ``strict_environment=False``).

Unknown fields are accepted and ignored.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlparse

from pydantic import ValidationError

from envship.core.errors import (
    ConfigurationError,
    InconsistentEnvironmentError,
    InvalidFieldTypeError,
    MalformedUrlError,
    MissingFieldError,
    NotYetLoadedError,
    ParseFailedError,
)
from envship.core.fetchers import ConfigFetcher
from envship.models.environment import (
    REQUIRED_FIELDS,
    URL_FIELDS,
    EnvironmentConfig,
    EnvironmentName,
    FeatureFlags,
)

logger = logging.getLogger(__name__)

# Well-known location of the document inside every deployed artifact.
CONFIG_PATH = "/assets/config/environment.json"


def is_absolute_url(value: str) -> bool:
    """Return True if ``value`` has both a scheme and a host."""
    try:
        parsed = urlparse(value)
        host = parsed.hostname
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(host) and " " not in value


def parse_document(raw: bytes | str) -> dict[str, Any]:
    """Decode a configuration document body into a JSON object."""
    try:
        document = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ParseFailedError(f"Configuration document is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ParseFailedError(
            f"Configuration document must be a JSON object, got {type(document).__name__}"
        )
    return document


def validate_document(
    document: dict[str, Any], *, strict_environment: bool = True
) -> EnvironmentConfig:
    """Validate a decoded document and return the immutable config.

    Raises the specific ``ConfigurationError`` subclass for the first
    violation found.
    """
    for field in REQUIRED_FIELDS:
        if document.get(field) is None:
            raise MissingFieldError(field)

    try:
        config = EnvironmentConfig.model_validate(document)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise InvalidFieldTypeError(field, first["msg"], first.get("input")) from exc

    for field in URL_FIELDS:
        value = document[field]
        if not is_absolute_url(value):
            raise MalformedUrlError(field, value)

    if strict_environment:
        expected = config.name == EnvironmentName.PRODUCTION
        if config.is_production != expected:
            raise InconsistentEnvironmentError(
                f"Configuration for '{config.name.value}' declares "
                f"isProduction={str(config.is_production).lower()}"
            )

    return config


class ConfigLoader:
    """Loads exactly one ``EnvironmentConfig`` per application instance.

    Parameters
    ----------
    fetcher:
        Transport for the configuration document.
    path:
        Location of the document relative to the artifact root.
    strict_environment:
        Reject documents whose ``isProduction`` disagrees with ``name``.
    """

    def __init__(
        self,
        fetcher: ConfigFetcher,
        path: str = CONFIG_PATH,
        *,
        strict_environment: bool = True,
    ) -> None:
        self._fetcher = fetcher
        self._path = path
        self._strict_environment = strict_environment
        self._config: EnvironmentConfig | None = None

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> EnvironmentConfig:
        """Fetch, parse and validate the configuration document.

        Any failure is fatal: it is logged, re-raised, and the loader stays
        unloaded. There is no retry and no default configuration.
        """
        if self._config is not None:
            raise RuntimeError(
                "Configuration already loaded; a new configuration requires a new application load."
            )

        try:
            raw = self._fetcher.fetch(self._path)
            document = parse_document(raw)
            config = validate_document(
                document, strict_environment=self._strict_environment
            )
        except ConfigurationError as exc:
            logger.critical("Failed to load application configuration: %s", exc)
            raise

        self._config = config
        logger.info("Configuration loaded for environment: %s", config.name.value)
        return config

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._config is not None

    def get(self) -> EnvironmentConfig:
        """Return the loaded configuration.

        Raises ``NotYetLoadedError`` if ``load()`` has not succeeded.
        """
        if self._config is None:
            raise NotYetLoadedError(
                "Configuration not loaded. load() must complete before use."
            )
        return self._config

    @property
    def api_base_url(self) -> str:
        return self.get().api_base_url

    @property
    def auth_base_url(self) -> str:
        return self.get().auth_base_url

    @property
    def is_production(self) -> bool:
        return self.get().is_production

    @property
    def environment_name(self) -> EnvironmentName:
        return self.get().name

    @property
    def features(self) -> FeatureFlags:
        return self.get().features
