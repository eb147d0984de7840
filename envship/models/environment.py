"""Runtime environment configuration models (the configuration document contract).

The document is a JSON object served from a fixed path inside every
deployed artifact. Keys are camelCase on the wire; the models expose
snake_case attributes and accept either form on input.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from envship.core.errors import InvalidEnvironmentError


class EnvironmentName(str, Enum):
    """The closed set of deployable environments."""

    DEVELOPMENT = "development"
    QA = "qa"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def short_name(self) -> str:
        """Name used in bucket names and on the CLI (``dev``, ``prod``, ...)."""
        return _SHORT_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> EnvironmentName:
        """Resolve a full name or short alias; raise InvalidEnvironmentError otherwise."""
        key = value.strip().lower() if isinstance(value, str) else value
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            raise InvalidEnvironmentError(
                str(value), [e.value for e in cls]
            ) from None


_SHORT_NAMES: dict[EnvironmentName, str] = {
    EnvironmentName.DEVELOPMENT: "dev",
    EnvironmentName.QA: "qa",
    EnvironmentName.STAGING: "staging",
    EnvironmentName.PRODUCTION: "prod",
}

_ALIASES: dict[str, EnvironmentName] = {
    "dev": EnvironmentName.DEVELOPMENT,
    "prod": EnvironmentName.PRODUCTION,
}


# Required top-level keys, in the order they are checked.
REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "isProduction",
    "apiBaseUrl",
    "authBaseUrl",
    "features",
)

# Top-level keys whose values must parse as absolute URLs.
URL_FIELDS: tuple[str, ...] = ("apiBaseUrl", "authBaseUrl")


class FeatureFlags(BaseModel):
    """Recognized feature flags. Unknown flags are ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    analytics: StrictBool = False
    logging: StrictBool = False
    debug_mode: StrictBool = Field(default=False, alias="debugMode")
    new_checkout: StrictBool = Field(default=False, alias="newCheckout")


class EnvironmentConfig(BaseModel):
    """A fully validated runtime configuration document.

    Immutable once constructed. Extra top-level fields are ignored so that
    newer documents still load in older deployments.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: EnvironmentName
    is_production: StrictBool = Field(alias="isProduction")
    api_base_url: StrictStr = Field(alias="apiBaseUrl")
    auth_base_url: StrictStr = Field(alias="authBaseUrl")
    features: FeatureFlags

    analytics_id: StrictStr | None = Field(default=None, alias="analyticsId")
    cache_timeout_seconds: StrictInt = Field(default=300, alias="cacheTimeoutSeconds", ge=0)
    retry_attempts: StrictInt = Field(default=3, alias="retryAttempts", ge=0)
    api_timeout_ms: StrictInt = Field(default=30000, alias="apiTimeoutMs", gt=0)
    auth_token_key: StrictStr = Field(default="auth_token", alias="authTokenKey")

    def to_document(self) -> dict:
        """Return the wire (camelCase) form of this configuration."""
        return self.model_dump(mode="json", by_alias=True)
